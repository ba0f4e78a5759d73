"""
Qt Utilities - Thread-safe UI helpers cho PySide6 host.

Sử dụng signal/slot pattern de dua callbacks tu background threads
ve main (GUI) thread, va QClipboard cho file reference list.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence

from PySide6.QtCore import QMimeData, QObject, Qt, QUrl, Signal, Slot
from PySide6.QtGui import QGuiApplication

logger = logging.getLogger(__name__)


class SignalBridge(QObject):
    """
    Bridge để emit signals từ background threads tới main thread.

    Dùng signal/slot mechanism của Qt (QueuedConnection).

    Usage:
        bridge = SignalBridge()

        # Từ watcher / worker thread:
        bridge.run_on_main(view.process_pending_tasks)
    """

    callback_signal = Signal(object)  # Emit callable object

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.callback_signal.connect(
            self._execute_callback, Qt.ConnectionType.QueuedConnection
        )

    @Slot(object)
    def _execute_callback(self, callback: Callable[[], Any]) -> None:
        """Execute callback trên main thread."""
        try:
            callback()
        except Exception as e:
            logger.error(f"Error in main-thread callback: {e}")

    def run_on_main(self, callback: Callable[[], Any]) -> None:
        """
        Schedule callback để chạy trên main (GUI) thread.

        Thread-safe: có thể gọi từ bất kỳ thread nào.

        Args:
            callback: Function không nhận argument
        """
        self.callback_signal.emit(callback)


# Global signal bridge instance
_global_bridge: Optional[SignalBridge] = None


def get_signal_bridge() -> SignalBridge:
    """
    Lấy global SignalBridge instance.

    PHAI duoc goi lan dau tren main thread (QObject thuoc thread tao ra no).
    """
    global _global_bridge
    if _global_bridge is None:
        _global_bridge = SignalBridge()
    return _global_bridge


def run_on_main_thread(callback: Callable[[], Any]) -> None:
    """
    Chạy callback trên main thread.
    Thread-safe: có thể gọi từ bất kỳ thread nào.
    """
    get_signal_bridge().run_on_main(callback)


class QtFileClipboard:
    """
    File reference list tren QClipboard (text/uri-list).

    File manager cua he dieu hanh doc/ghi duoc cung format nay.
    Chi goi tu main thread.
    """

    def set_file_list(self, paths: Sequence[str]) -> bool:
        clipboard = QGuiApplication.clipboard()
        if clipboard is None:
            return False
        mime = QMimeData()
        mime.setUrls([QUrl.fromLocalFile(p) for p in paths])
        clipboard.setMimeData(mime)
        return True

    def get_file_list(self) -> List[str]:
        clipboard = QGuiApplication.clipboard()
        mime = clipboard.mimeData() if clipboard is not None else None
        if mime is None or not mime.hasUrls():
            return []
        return [url.toLocalFile() for url in mime.urls() if url.isLocalFile()]

    def has_file_list(self) -> bool:
        return bool(self.get_file_list())
