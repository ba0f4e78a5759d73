"""
Tree Document Codec - Luu/doc NodeArena ra file .treexml

Output format:
    <?xml version="1.0" encoding="utf-8"?>
    <Tree>
      <Node Text="C:\\" Path="C:\\">
        <Node Text="Users" Path="C:\\Users" />
      </Node>
    </Tree>

- Text: bat buoc (display name)
- Path: optional (khong co voi node khong co filesystem backing)
- Children nam long trong parent, giu dung thu tu trong arena
- Placeholder KHONG bao gio duoc ghi ra

Khi decode, moi directory duoc xem nhu da materialized (khong tao
placeholder) va chua co watch. Document hong -> MalformedDocumentError,
khong tra ve tree mot phan.
"""

import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Union

from core.errors import DocumentIOError, MalformedDocumentError
from core.file_tree.node import NodeArena, NodeKind, TreeNode
from core.logging_config import log_debug, log_info

TREE_TAG = "Tree"
NODE_TAG = "Node"
TEXT_ATTR = "Text"
PATH_ATTR = "Path"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'


# ============================================================
# Encode
# ============================================================


def _encode_node(arena: NodeArena, node: TreeNode) -> ET.Element:
    """Tao <Node> cho node va toan bo children (depth-first)."""
    element = ET.Element(NODE_TAG)
    element.set(TEXT_ATTR, node.display_name)
    if node.path is not None:
        element.set(PATH_ATTR, node.path)

    for child in arena.children_of(node.node_id):
        if child.is_placeholder:
            continue
        element.append(_encode_node(arena, child))
    return element


def encode_tree(arena: NodeArena) -> ET.Element:
    """
    Chuyen NodeArena thanh <Tree> element.

    Args:
        arena: Arena can encode (chi doc, khong mutate)

    Returns:
        Root element <Tree>
    """
    root = ET.Element(TREE_TAG)
    for node in arena.roots():
        if node.is_placeholder:
            continue
        root.append(_encode_node(arena, node))
    return root


def encode_document(arena: NodeArena) -> str:
    """Encode arena thanh XML string (co XML declaration, indent 2 spaces)."""
    root = encode_tree(arena)
    ET.indent(root, space="  ")
    # Tu ghi declaration: ET voi encoding="unicode" lay encoding theo locale
    return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def write_document(arena: NodeArena, file_path: Union[str, Path]) -> None:
    """
    Ghi arena ra file.

    Raises:
        DocumentIOError: Khong ghi duoc file
    """
    text = encode_document(arena)
    try:
        Path(file_path).write_text(text, encoding="utf-8")
    except OSError as e:
        raise DocumentIOError(f"Cannot write {file_path}: {e}") from e
    log_info(f"[TreeDocument] Saved {len(arena)} node(s) to {file_path}")


# ============================================================
# Decode
# ============================================================


def _infer_kind(element: ET.Element, path: Optional[str], top_level: bool) -> NodeKind:
    """
    Doan NodeKind vi format khong luu kind.

    - Co children -> directory
    - Khong children: directory neu Path tro toi folder ton tai, nguoc lai file
    - Directory o top-level la ROOT
    """
    has_children = len(element) > 0
    is_dir = has_children or (path is not None and os.path.isdir(path))
    if not is_dir:
        return NodeKind.FILE
    return NodeKind.ROOT if top_level else NodeKind.DIRECTORY


def _read_text_attr(element: ET.Element, depth: int) -> str:
    if element.tag != NODE_TAG:
        raise MalformedDocumentError(
            f"Unexpected element <{element.tag}> at depth {depth}, expected <{NODE_TAG}>"
        )
    text = element.get(TEXT_ATTR)
    if text is None:
        raise MalformedDocumentError(
            f"<{NODE_TAG}> at depth {depth} is missing required attribute '{TEXT_ATTR}'"
        )
    return text


def decode_tree(root: ET.Element) -> NodeArena:
    """
    Dung NodeArena tu <Tree> element.

    Duyet bang explicit stack (khong de quy) nen document sau bao nhieu
    cap cung khong gay RecursionError.

    Raises:
        MalformedDocumentError: Root khong phai <Tree>, element la, thieu Text
    """
    if root.tag != TREE_TAG:
        raise MalformedDocumentError(
            f"Root element must be <{TREE_TAG}>, got <{root.tag}>"
        )

    arena = NodeArena()
    # (element, parent_id, depth) - dao nguoc de giu dung thu tu document
    stack: list[tuple[ET.Element, Optional[int], int]] = [
        (child, None, 1) for child in reversed(list(root))
    ]
    while stack:
        element, parent_id, depth = stack.pop()
        text = _read_text_attr(element, depth)
        path = element.get(PATH_ATTR)
        kind = _infer_kind(element, path, top_level=parent_id is None)

        node = arena.add_node(text, path, kind, parent_id, materialized=True)
        stack.extend((child, node.node_id, depth + 1) for child in reversed(list(element)))

    return arena


def decode_document(text: str) -> NodeArena:
    """
    Parse XML string thanh NodeArena.

    Raises:
        MalformedDocumentError: XML khong parse duoc hoac sai cau truc
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedDocumentError(f"Cannot parse tree document: {e}") from e
    return decode_tree(root)


def read_document(file_path: Union[str, Path]) -> NodeArena:
    """
    Doc va decode file .treexml.

    Raises:
        DocumentIOError: Khong doc duoc file
        MalformedDocumentError: Noi dung khong hop le
    """
    try:
        data = Path(file_path).read_bytes()
    except OSError as e:
        raise DocumentIOError(f"Cannot read {file_path}: {e}") from e

    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise MalformedDocumentError(f"Cannot parse {file_path}: {e}") from e

    arena = decode_tree(root)
    log_debug(f"[TreeDocument] Decoded {len(arena)} node(s) from {file_path}")
    return arena
