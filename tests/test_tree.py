"""Tests for the Tree model and load_tree."""

import asyncio

import pytest

from treecopy import MemoryClient, NodeKind, RemoteOperationError, Tree, UnknownNodeError, load_tree
from treecopy.tree import Node, parent_path


def paths(tree):
    return [n.path for n in tree]


class TestTreeModel:
    def test_from_dicts_paths_and_kinds(self, small_tree):
        a = small_tree["A"]
        a1 = small_tree["a1"]
        assert a.kind == NodeKind.FOLDER
        assert a1.kind == NodeKind.FILE
        assert a.path == "/A"
        assert a1.path == "/A/a1"
        assert a.children == (a1,)

    def test_len_and_contains(self, small_tree):
        assert len(small_tree) == 2
        assert "a1" in small_tree
        assert "nope" not in small_tree

    def test_getitem_unknown(self, small_tree):
        with pytest.raises(UnknownNodeError):
            small_tree["nope"]
        with pytest.raises(LookupError):
            small_tree["nope"]

    def test_get_unknown_returns_default(self, small_tree):
        assert small_tree.get("nope") is None

    def test_parent(self, small_tree):
        assert small_tree.parent(small_tree["a1"]) is small_tree["A"]
        assert small_tree.parent(small_tree["A"]) is None

    def test_find_path(self, small_tree):
        assert small_tree.find_path("/A/a1") is small_tree["a1"]
        assert small_tree.find_path("/B") is None

    def test_empty_folder_declared_by_type(self):
        t = Tree.from_dicts([{"id": "e", "name": "E", "type": "folder"}])
        assert t["e"].is_folder
        assert t["e"].children == ()

    def test_subtree_size(self, tree):
        assert tree.subtree_size(tree.find_path("/Reports")) == 5
        assert tree.subtree_size(tree.find_path("/readme.txt")) == 1

    def test_duplicate_id_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Tree.from_dicts([{"id": "x", "name": "a"}, {"id": "x", "name": "b"}])

    def test_bad_path_rejected(self):
        n = Node("x", "x", NodeKind.FILE, "/elsewhere/x")
        with pytest.raises(ValueError, match="ancestry"):
            Tree([n])

    def test_file_with_children_rejected(self):
        child = Node("c", "c", NodeKind.FILE, "/f/c")
        f = Node("f", "f", NodeKind.FILE, "/f", (child,))
        with pytest.raises(ValueError, match="has children"):
            Tree([f])

    def test_to_dicts_round_trip_keeps_shape(self, tree):
        again = Tree.from_dicts(tree.to_dicts())
        assert paths(again) == paths(tree)
        assert [n.id for n in again] == [n.id for n in tree]

    def test_deep_tree_does_not_recurse(self):
        depth = 2000
        d = {"id": "n0", "name": "n0", "children": []}
        top = d
        for i in range(1, depth):
            child = {"id": f"n{i}", "name": "d", "children": []}
            d["children"].append(child)
            d = child
        t = Tree.from_dicts([top])
        assert len(t) == depth
        assert t.subtree_size(t["n0"]) == depth
        assert t.to_dicts()[0]["id"] == "n0"


class TestParentPath:
    def test_top_level(self):
        assert parent_path("/A") == ""

    def test_nested(self):
        assert parent_path("/A/B/c") == "/A/B"

    def test_empty(self):
        assert parent_path("") == ""


class TestLoadTree:
    def test_preorder_folders_first_sorted(self, tree):
        assert paths(tree) == [
            "/Archive", "/Archive/old.txt",
            "/Empty",
            "/Reports", "/Reports/2023", "/Reports/2023/q1.pdf",
            "/Reports/2023/q2.pdf", "/Reports/summary.txt",
            "/readme.txt",
        ]

    def test_ids_come_from_service(self, drive, tree):
        for path, item_id in drive.ids.items():
            assert tree.find_path(path).id == item_id

    def test_pagination_concatenates_pages(self, drive, tree):
        # page_size=2: the source folder has 4 children → 2 pages
        source_calls = [c for c in drive.client.calls
                        if c[0] == "list_children" and c[1] == drive.source]
        assert [c[2] for c in source_calls] == [None, "2"]
        assert len(tree.roots) == 4

    def test_files_are_not_listed(self, drive, tree):
        listed = {c[1] for c in drive.client.calls if c[0] == "list_children"}
        assert drive.ids["/readme.txt"] not in listed
        assert drive.ids["/Empty"] in listed

    def test_empty_source(self):
        client = MemoryClient()
        src = client.add_folder("src")
        t = asyncio.run(load_tree(client, src))
        assert len(t) == 0
        assert t.roots == ()

    def test_top_level_failure_raises(self):
        client = MemoryClient()
        with pytest.raises(RemoteOperationError, match="not found"):
            asyncio.run(load_tree(client, "missing"))

    def test_nested_failure_keeps_folder_empty(self, drive):
        client = drive.client
        bad = drive.ids["/Reports"]
        original = client.list_children

        async def list_children(folder_id, page_token=None):
            if folder_id == bad:
                raise RuntimeError("rate limited")
            return await original(folder_id, page_token)

        client.list_children = list_children
        t = asyncio.run(load_tree(client, drive.source))
        reports = t.find_path("/Reports")
        assert reports.is_folder
        assert reports.children == ()
        assert len(t.warnings) == 1
        assert "/Reports" in t.warnings[0]
        assert "rate limited" in t.warnings[0]
        assert t.find_path("/Archive/old.txt") is not None
