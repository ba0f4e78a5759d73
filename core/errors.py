"""
Errors - Exception hierarchy cho File Tree Editor.

Chi cac loi ma caller PHAI xu ly moi duoc raise:
- Document hong / khong doc duoc -> load bi huy, tree cu giu nguyen
- Node id khong ton tai
- Mutate tree tu thread khong phai tree owner

Loi listing thu muc va loi tao watch KHONG raise, ma duoc tra ve
qua result values (DirectoryListing.status, subscribe() -> False).
Loi tung item trong copy/delete/paste nam trong OperationResult.failures.
"""


class TreeEditorError(Exception):
    """Base class cho tat ca loi cua File Tree Editor."""


class MalformedDocumentError(TreeEditorError):
    """Tree document khong hop le (XML hong, thieu attribute Text, ...)."""


class DocumentIOError(TreeEditorError):
    """Khong doc/ghi duoc tree document."""


class NodeNotFoundError(TreeEditorError, KeyError):
    """Node id khong con trong arena (da bi xoa hoac chua bao gio ton tai)."""

    def __init__(self, node_id: int):
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Node {self.node_id} does not exist"


class TreeOwnershipError(TreeEditorError, RuntimeError):
    """Tree bi mutate tu thread khong phai tree owner."""
