"""
ServiceContainer - Composition root cho mot tree editor document.

Tap trung viec khoi tao va quan ly lifecycle cua cac services
tai mot diem duy nhat, thay vi trai rac o nhieu files.

Su dung:
    container = ServiceContainer(clipboard=QtFileClipboard())
    view = TreeEditorView(container)
    ...
    container.shutdown()

Design decisions:
- Moi document (MDI child) co container rieng: watch manager, task queue
  va controller KHONG duoc chia se giua cac documents
- Settings duoc load 1 lan tu settings_manager; thay doi show_hidden
  duoc persist qua update_app_setting()
"""

import logging
from typing import Optional

from config.app_settings import AppSettings
from core.utils.task_queue import TreeTaskQueue
from services.clipboard_utils import SystemFileClipboard
from services.file_watcher_pkg.service import DirectoryWatchManager
from services.interfaces.file_watcher_service import IDirectoryWatchService
from services.service_interfaces import IFileClipboard
from services.settings_manager import load_app_settings, update_app_setting
from services.tree_controller import TreeController

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Composition root - single point of control cho service lifecycle.

    So huu: DirectoryWatchManager, TreeTaskQueue, TreeController
    Tham chieu: clipboard (co the dung chung giua cac documents)

    Thread Safety: Khoi tao PHAI thuc hien tren thread se so huu tree
    (main thread voi Qt host).
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        clipboard: Optional[IFileClipboard] = None,
        watch_service: Optional[IDirectoryWatchService] = None,
    ) -> None:
        """Khoi tao tat ca services tai composition root."""
        self.settings: AppSettings = settings or load_app_settings()
        self.clipboard: IFileClipboard = clipboard or SystemFileClipboard()
        self.task_queue = TreeTaskQueue()
        self.watch_service: IDirectoryWatchService = watch_service or DirectoryWatchManager(
            debounce_seconds=self.settings.watch_debounce_seconds
        )
        self.controller = TreeController(
            settings=self.settings,
            watch_service=self.watch_service,
            clipboard=self.clipboard,
            task_queue=self.task_queue,
        )
        self._is_shutdown = False

        logger.info("ServiceContainer initialized")

    def set_show_hidden(self, value: bool, persist: bool = True) -> None:
        """Doi show_hidden tren controller va (tuy chon) luu vao settings file."""
        self.controller.set_show_hidden(value)
        if persist:
            update_app_setting(show_hidden=value)

    def remember_document(self, file_path: str) -> None:
        """Luu duong dan document vua mo/luu de mo lai lan sau."""
        self.settings.last_document = file_path
        update_app_setting(last_document=file_path)

    def shutdown(self) -> None:
        """Release watches va dung background workers. Idempotent."""
        if self._is_shutdown:
            return
        self._is_shutdown = True
        self.controller.shutdown()
        logger.info("ServiceContainer shut down")
