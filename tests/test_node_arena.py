"""
Unit tests cho NodeArena va TreeNode.

Test các chức năng:
- Lazy directory co dung 1 placeholder
- Xoa node / replace children xoa ca subtree
- Walk pre-order, find_by_path
"""

import pytest

from core.errors import NodeNotFoundError
from core.file_tree.node import (
    PLACEHOLDER_TEXT,
    NodeArena,
    NodeKind,
    display_name_for,
)


class TestDisplayName:
    def test_basename(self):
        assert display_name_for("/root/a/file.txt") == "file.txt"

    def test_trailing_separator(self):
        assert display_name_for("/root/a/") == "a"

    def test_filesystem_root_uses_path(self):
        assert display_name_for("/") == "/"


class TestNodeArena:
    """Test suite cho NodeArena"""

    def test_add_root_has_single_placeholder(self):
        """Root moi chua materialize va co dung 1 placeholder"""
        arena = NodeArena()
        root = arena.add_root("/data")

        assert root.kind is NodeKind.ROOT
        assert root.materialized is False
        children = arena.children_of(root.node_id)
        assert len(children) == 1
        assert children[0].is_placeholder
        assert children[0].display_name == PLACEHOLDER_TEXT
        assert children[0].path is None

    def test_placeholder_cannot_have_children(self):
        arena = NodeArena()
        root = arena.add_root("/data")
        placeholder = arena.children_of(root.node_id)[0]

        with pytest.raises(ValueError):
            arena.add_file("/data/x", placeholder.node_id)

    def test_add_to_missing_parent_raises(self):
        arena = NodeArena()
        with pytest.raises(NodeNotFoundError) as exc_info:
            arena.add_file("/x", 999)
        assert exc_info.value.node_id == 999

    def test_remove_drops_subtree(self):
        """Xoa node xoa ca descendants khoi arena"""
        arena = NodeArena()
        root = arena.add_root("/data")
        arena.replace_children(root.node_id)
        sub = arena.add_directory("/data/sub", root.node_id)
        f = arena.add_file("/data/f.txt", root.node_id)

        removed = arena.remove(sub.node_id)

        # sub + placeholder cua no
        assert len(removed) == 2
        assert sub.node_id not in arena
        assert [c.node_id for c in arena.children_of(root.node_id)] == [f.node_id]

    def test_remove_root(self):
        arena = NodeArena()
        a = arena.add_root("/a")
        b = arena.add_root("/b")

        arena.remove(a.node_id)

        assert [r.node_id for r in arena.roots()] == [b.node_id]
        assert len(arena) == 2  # b + placeholder

    def test_replace_children_keeps_node(self):
        arena = NodeArena()
        root = arena.add_root("/data")

        removed = arena.replace_children(root.node_id)

        assert len(removed) == 1
        assert root.node_id in arena
        assert arena.children_of(root.node_id) == []

    def test_walk_preorder(self):
        """Walk tra ve parent truoc children, dung thu tu"""
        arena = NodeArena()
        root = arena.add_node("root", "/r", NodeKind.ROOT)
        a = arena.add_node("a", "/r/a", NodeKind.DIRECTORY, root.node_id)
        a1 = arena.add_node("a1", "/r/a/a1", NodeKind.FILE, a.node_id)
        b = arena.add_node("b", "/r/b", NodeKind.FILE, root.node_id)

        names = [n.display_name for n in arena.walk()]
        assert names == ["root", "a", "a1", "b"]
        assert [n.node_id for n in arena.walk(a.node_id)] == [a.node_id, a1.node_id]
        assert b.node_id in arena

    def test_find_by_path(self):
        arena = NodeArena()
        root = arena.add_root("/data")
        assert arena.find_by_path("/data") == [root]
        assert arena.find_by_path("/missing") == []

    def test_parent_of(self):
        arena = NodeArena()
        root = arena.add_root("/data")
        placeholder = arena.children_of(root.node_id)[0]
        assert arena.parent_of(placeholder.node_id) is root
        assert arena.parent_of(root.node_id) is None

    def test_ids_never_reused(self):
        arena = NodeArena()
        first = arena.add_root("/a")
        arena.remove(first.node_id)
        second = arena.add_root("/a")
        assert second.node_id != first.node_id
