"""
Node Model - Arena chua toan bo cay thu muc trong bo nho.

Moi node duoc dia chi hoa bang node_id (int, on dinh suot vong doi node).
Quan he cha/con la index references (parent_id, children ids), khong gan
voi bat ky widget UI nao.

Lifecycle cua mot directory node:
    Unmaterialized (1 Placeholder child)
        -> expand -> Materialized (children that + watch)
        -> reload bat ky luc nao (watch event, refresh, sau paste/delete)
        -> Removed (path bien mat hoac tree bi huy)

Arena KHONG biet gi ve watches. Cac ham remove/replace_children tra ve
danh sach nodes bi xoa de TreeController tu release watches.
"""

import itertools
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from core.errors import NodeNotFoundError

# Text cua placeholder node (giu nguyen nhu ban goc)
PLACEHOLDER_TEXT = "..."


class NodeKind(str, Enum):
    """Loai node trong tree."""

    ROOT = "root"
    DIRECTORY = "directory"
    FILE = "file"
    PLACEHOLDER = "placeholder"


@dataclass
class TreeNode:
    """
    Mot node trong tree (file, folder, drive root hoac placeholder).

    Attributes:
        node_id: Id on dinh trong arena
        display_name: Ten hien thi (base name, hoac root path voi drive root)
        path: Duong dan tuyet doi; None voi placeholder / label node
        kind: NodeKind
        parent_id: Id cua node cha (None voi top-level roots)
        children: Danh sach child ids theo thu tu enumerate
        materialized: False = children chi co dung 1 Placeholder
        expanded: Host UI dang mo node nay
        watched: Node dang so huu watch cho path cua no
    """

    node_id: int
    display_name: str
    path: Optional[str]
    kind: NodeKind
    parent_id: Optional[int] = None
    children: list[int] = field(default_factory=list)
    materialized: bool = True
    expanded: bool = False
    watched: bool = False

    @property
    def is_directory(self) -> bool:
        """True voi ROOT va DIRECTORY (co the expand)."""
        return self.kind in (NodeKind.ROOT, NodeKind.DIRECTORY)

    @property
    def is_placeholder(self) -> bool:
        return self.kind is NodeKind.PLACEHOLDER


def display_name_for(path: str) -> str:
    """
    Tinh display name tu path.

    Lay segment cuoi cung sau khi bo separator o cuoi. Voi drive root
    ("/", "C:\\") segment cuoi rong -> dung chinh path lam ten.
    """
    trimmed = path.rstrip("/\\") if len(path) > 1 else path
    name = os.path.basename(trimmed)
    return name or path


class NodeArena:
    """
    So huu toan bo TreeNode cua mot document.

    Top-level roots thuoc ve arena (danh sach _roots), cac node con
    thuoc ve node cha. Xoa mot node = xoa ca subtree.

    KHONG thread-safe: chi tree owner duoc goi cac method nay.
    """

    def __init__(self) -> None:
        self._nodes: dict[int, TreeNode] = {}
        self._roots: list[int] = []
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # ------------------------------------------------------------------
    # Tao node
    # ------------------------------------------------------------------

    def add_node(
        self,
        display_name: str,
        path: Optional[str],
        kind: NodeKind,
        parent_id: Optional[int] = None,
        materialized: bool = True,
    ) -> TreeNode:
        """
        Tao node moi va gan vao cuoi children cua parent (hoac cuoi roots).

        Raises:
            NodeNotFoundError: parent_id khong ton tai
        """
        if parent_id is not None:
            parent = self.require(parent_id)
            if parent.is_placeholder:
                raise ValueError("Placeholder nodes cannot have children")

        node = TreeNode(
            node_id=next(self._ids),
            display_name=display_name,
            path=path,
            kind=kind,
            parent_id=parent_id,
            materialized=materialized,
        )
        self._nodes[node.node_id] = node

        if parent_id is None:
            self._roots.append(node.node_id)
        else:
            self._nodes[parent_id].children.append(node.node_id)
        return node

    def add_root(self, path: str) -> TreeNode:
        """Them drive root chua materialize (co 1 placeholder)."""
        return self._add_lazy_directory(path, NodeKind.ROOT, None)

    def add_directory(self, path: str, parent_id: Optional[int]) -> TreeNode:
        """Them directory chua materialize (co 1 placeholder)."""
        return self._add_lazy_directory(path, NodeKind.DIRECTORY, parent_id)

    def add_file(self, path: str, parent_id: Optional[int]) -> TreeNode:
        """Them file node (leaf)."""
        return self.add_node(display_name_for(path), path, NodeKind.FILE, parent_id)

    def _add_lazy_directory(
        self, path: str, kind: NodeKind, parent_id: Optional[int]
    ) -> TreeNode:
        node = self.add_node(
            display_name_for(path), path, kind, parent_id, materialized=False
        )
        self.add_node(PLACEHOLDER_TEXT, None, NodeKind.PLACEHOLDER, node.node_id)
        return node

    # ------------------------------------------------------------------
    # Truy van
    # ------------------------------------------------------------------

    def get(self, node_id: int) -> Optional[TreeNode]:
        """Lay node theo id, None neu khong ton tai."""
        return self._nodes.get(node_id)

    def require(self, node_id: int) -> TreeNode:
        """
        Lay node theo id.

        Raises:
            NodeNotFoundError: node_id khong ton tai
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def roots(self) -> list[TreeNode]:
        """Danh sach top-level roots theo thu tu them vao."""
        return [self._nodes[i] for i in self._roots]

    def children_of(self, node_id: int) -> list[TreeNode]:
        """Danh sach children (theo thu tu) cua mot node."""
        return [self._nodes[i] for i in self.require(node_id).children]

    def parent_of(self, node_id: int) -> Optional[TreeNode]:
        parent_id = self.require(node_id).parent_id
        return None if parent_id is None else self._nodes.get(parent_id)

    def walk(self, node_id: Optional[int] = None) -> Iterator[TreeNode]:
        """
        Duyet pre-order (iterative) tu node_id, hoac tu tat ca roots.

        Children duoc duyet dung thu tu luu trong arena.
        """
        start = self._roots if node_id is None else [self.require(node_id).node_id]
        stack = list(reversed(start))
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def find_by_path(self, path: str) -> list[TreeNode]:
        """Tat ca nodes co path trung voi path (thuong la 0 hoac 1)."""
        return [node for node in self._nodes.values() if node.path == path]

    # ------------------------------------------------------------------
    # Mutate
    # ------------------------------------------------------------------

    def replace_children(self, node_id: int) -> list[TreeNode]:
        """
        Xoa toan bo children (ca subtree) cua node, giu lai chinh node.

        Returns:
            Danh sach nodes da bi xoa (de caller release watches)
        """
        node = self.require(node_id)
        removed: list[TreeNode] = []
        for child_id in node.children:
            removed.extend(self._drop_subtree(child_id))
        node.children = []
        return removed

    def remove(self, node_id: int) -> list[TreeNode]:
        """
        Detach node khoi parent (hoac roots) va xoa ca subtree.

        Returns:
            Danh sach nodes da bi xoa, bao gom chinh node
        """
        node = self.require(node_id)
        if node.parent_id is None:
            self._roots.remove(node_id)
        else:
            parent = self._nodes.get(node.parent_id)
            if parent is not None:
                parent.children.remove(node_id)
        return self._drop_subtree(node_id)

    def clear(self) -> list[TreeNode]:
        """Xoa toan bo tree. Tra ve tat ca nodes da bi xoa."""
        removed = list(self._nodes.values())
        self._nodes.clear()
        self._roots.clear()
        return removed

    def _drop_subtree(self, node_id: int) -> list[TreeNode]:
        removed: list[TreeNode] = []
        stack = [node_id]
        while stack:
            node = self._nodes.pop(stack.pop())
            removed.append(node)
            stack.extend(node.children)
        return removed
