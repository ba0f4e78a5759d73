"""
File Tree Package - Lazy directory tree core (khong phu thuoc UI).

Bao gom:
- node: NodeArena / TreeNode / NodeKind
- loader: list_directory(), list_drive_roots()
- document: encode/decode tree document (.treexml)
- operations: paste / delete / run tren filesystem
"""

from core.file_tree.node import (
    PLACEHOLDER_TEXT,
    NodeArena,
    NodeKind,
    TreeNode,
    display_name_for,
)
from core.file_tree.loader import (
    DirectoryEntry,
    DirectoryListing,
    ListingStatus,
    list_directory,
    list_drive_roots,
)
from core.file_tree.document import (
    decode_document,
    encode_document,
    read_document,
    write_document,
)
from core.file_tree.operations import (
    OperationFailure,
    OperationResult,
    copy_to_clipboard,
    delete_path,
    paste_paths,
    run_path,
)

__all__ = [
    "PLACEHOLDER_TEXT",
    "NodeArena",
    "NodeKind",
    "TreeNode",
    "display_name_for",
    "DirectoryEntry",
    "DirectoryListing",
    "ListingStatus",
    "list_directory",
    "list_drive_roots",
    "decode_document",
    "encode_document",
    "read_document",
    "write_document",
    "OperationFailure",
    "OperationResult",
    "copy_to_clipboard",
    "delete_path",
    "paste_paths",
    "run_path",
]
