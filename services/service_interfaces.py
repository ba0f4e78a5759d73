"""
Service Interfaces cho TreeController.

Dinh nghia cac Protocol interfaces de TreeController khong phu thuoc vao
implementation cu the (system clipboard, Qt clipboard, in-memory cho tests).

Interfaces:
- IFileClipboard: File reference list tren clipboard
"""

from typing import List, Protocol, Sequence, runtime_checkable


@runtime_checkable
class IFileClipboard(Protocol):
    """
    Interface cho "file reference list" tren clipboard.

    Core xem day la external service: chi set/get/has, khong quan tam
    clipboard duoc luu the nao.
    """

    def set_file_list(self, paths: Sequence[str]) -> bool:
        """
        Thay file list tren clipboard.

        Args:
            paths: Danh sach absolute paths

        Returns:
            True neu clipboard duoc cap nhat
        """
        ...

    def get_file_list(self) -> List[str]:
        """
        Lay file list tu clipboard.

        Returns:
            Danh sach paths (rong neu clipboard khong chua file list)
        """
        ...

    def has_file_list(self) -> bool:
        """Clipboard co dang chua file list khong."""
        ...
