"""
Directory Event Handler cho Watch Manager.

Nhan events tu watchdog cho MOT thu muc dang watch, loc ra cac thay doi
ve cau truc (create / delete / rename) va chuyen tiep cho debouncer.

Modified events bi bo qua: noi dung file thay doi khong anh huong tree.
"""

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)

from core.logging_config import log_debug
from services.interfaces.file_watcher_service import (
    FileChangeEvent,
    IEventDebouncer,
)


def _to_str(path: object) -> str:
    """watchdog co the tra ve bytes path tren mot so platform."""
    if isinstance(path, bytes):
        return path.decode(errors="surrogateescape")
    return str(path)


class DirectoryEventHandler(FileSystemEventHandler):
    """
    Event handler cho mot watched directory.

    Trach nhiem duy nhat:
    - Nhan watchdog events (on_created, on_deleted, on_moved)
    - Gan watched_path va gui FileChangeEvent cho debouncer

    Attributes:
        watched_path: Thu muc dang duoc watch
        _debouncer: Debouncer gom nhom events truoc khi dispatch
    """

    def __init__(self, watched_path: str, debouncer: IEventDebouncer):
        """
        Khoi tao handler.

        Args:
            watched_path: Thu muc ma watch nay thuoc ve
            debouncer: Debouncer de gom nhom events
        """
        super().__init__()
        self.watched_path = watched_path
        self._debouncer = debouncer

    def _handle_event(self, event: object, event_type: str) -> None:
        src_path = _to_str(getattr(event, "src_path", ""))
        is_directory: bool = getattr(event, "is_directory", False)

        change_event = FileChangeEvent(
            event_type=event_type,
            path=src_path,
            is_directory=is_directory,
            watched_path=self.watched_path,
        )

        log_debug(f"[WatchManager] Event: {event_type} - {src_path}")
        self._debouncer.add_event(change_event)

    # Override watchdog event handlers
    def on_created(self, event: object) -> None:
        """Xu ly khi file/folder duoc tao."""
        if isinstance(event, (FileCreatedEvent, DirCreatedEvent)):
            self._handle_event(event, "created")

    def on_deleted(self, event: object) -> None:
        """Xu ly khi file/folder bi xoa (ke ca chinh watched folder)."""
        if isinstance(event, (FileDeletedEvent, DirDeletedEvent)):
            self._handle_event(event, "deleted")

    def on_moved(self, event: object) -> None:
        """Xu ly khi file/folder bi doi ten / di chuyen."""
        if isinstance(event, (FileMovedEvent, DirMovedEvent)):
            self._handle_event(event, "moved")
