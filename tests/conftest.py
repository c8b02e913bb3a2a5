"""Shared fixtures for treecopy tests."""

import asyncio
from types import SimpleNamespace

import pytest
from click.testing import CliRunner

from treecopy import MemoryClient, Tree, load_tree


# Source layout used by most tests.  Loaded (sorted folders-first), it reads:
#
#   /Archive/            /Archive/old.txt
#   /Empty/
#   /Reports/            /Reports/2023/  /Reports/2023/q1.pdf  /Reports/2023/q2.pdf
#                        /Reports/summary.txt
#   /readme.txt
LAYOUT = {
    "readme.txt": None,
    "Reports": {
        "summary.txt": None,
        "2023": {"q2.pdf": None, "q1.pdf": None},
    },
    "Empty": {},
    "Archive": {"old.txt": None},
}


@pytest.fixture
def drive():
    """A MemoryClient holding a 'source' folder (LAYOUT) and an empty 'dest'.

    Attributes: ``client``, ``source`` (id), ``dest`` (id), ``ids``
    (``{path: id}`` for everything under source).
    """
    client = MemoryClient(page_size=2)
    source = client.add_folder("source")
    dest = client.add_folder("dest")
    ids = client.add_tree(LAYOUT, source)
    return SimpleNamespace(client=client, source=source, dest=dest, ids=ids)


@pytest.fixture
def tree(drive):
    """The loaded Tree of the 'source' folder."""
    return asyncio.run(load_tree(drive.client, drive.source))


@pytest.fixture
def small_tree():
    """root/{A(folder, child: a1(file))}."""
    return Tree.from_dicts([
        {"id": "A", "name": "A", "children": [{"id": "a1", "name": "a1"}]},
    ])


@pytest.fixture
def runner():
    return CliRunner()
