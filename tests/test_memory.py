"""Tests for the in-memory storage client."""

import asyncio

import pytest

from treecopy import FOLDER_MIME_TYPE, MemoryClient, RemoteOperationError, StorageClient


def run(coro):
    return asyncio.run(coro)


class TestMemoryClient:
    def test_is_storage_client(self):
        assert isinstance(MemoryClient(), StorageClient)

    def test_add_tree_returns_paths(self):
        client = MemoryClient()
        ids = client.add_tree({"A": {"a1": None}, "b": None})
        assert set(ids) == {"/A", "/A/a1", "/b"}
        assert client.name_of(ids["/A/a1"]) == "a1"

    def test_paths_in_creation_order(self):
        client = MemoryClient()
        client.add_tree({"z": None, "A": {"a1": None}})
        assert client.paths() == ["/z", "/A", "/A/a1"]

    def test_pagination(self):
        client = MemoryClient(page_size=2)
        for name in "abcde":
            client.add_file(name)
        first = run(client.list_children("root"))
        assert [e.name for e in first.entries] == ["a", "b"]
        second = run(client.list_children("root", first.next_page_token))
        third = run(client.list_children("root", second.next_page_token))
        assert [e.name for e in third.entries] == ["e"]
        assert third.next_page_token is None

    def test_entries_carry_kind(self):
        client = MemoryClient()
        client.add_folder("d")
        (entry,) = run(client.list_children("root")).entries
        assert entry.mime_type == FOLDER_MIME_TYPE
        assert client.is_folder_kind(entry.mime_type)
        assert not client.is_folder_kind("text/plain")

    def test_list_missing_folder(self):
        with pytest.raises(RemoteOperationError, match="not found"):
            run(MemoryClient().list_children("nope"))

    def test_list_file_is_error(self):
        client = MemoryClient()
        f = client.add_file("f")
        with pytest.raises(RemoteOperationError, match="Not a folder"):
            run(client.list_children(f))

    def test_create_folder_not_idempotent(self):
        client = MemoryClient()
        a = run(client.create_folder("x", "root"))
        b = run(client.create_folder("x", "root"))
        assert a != b
        assert client.paths() == ["/x", "/x"]

    def test_copy_default_name(self):
        client = MemoryClient()
        f = client.add_file("f.txt")
        new = run(client.copy_file(f, "root"))
        assert client.name_of(new) == "Copy of f.txt"
        assert client.source_of(new) == f

    def test_copy_with_name(self):
        client = MemoryClient()
        f = client.add_file("f.txt")
        d = client.add_folder("d")
        new = run(client.copy_file(f, d, "g.txt"))
        assert client.paths(d) == ["/g.txt"]
        assert client.name_of(new) == "g.txt"

    def test_copy_folder_rejected(self):
        client = MemoryClient()
        d = client.add_folder("d")
        with pytest.raises(RemoteOperationError, match="Cannot copy a folder"):
            run(client.copy_file(d, "root"))

    def test_calls_logged(self):
        client = MemoryClient()
        f = client.add_file("f")
        run(client.copy_file(f, "root", "g"))
        run(client.create_folder("d", "root"))
        assert client.calls == [
            ("copy_file", f, "root", "g"),
            ("create_folder", "d", "root"),
        ]

    def test_bad_page_size(self):
        with pytest.raises(ValueError):
            MemoryClient(page_size=0)
