"""
Event Debouncer cho Directory Watch Manager.

Gom nhom cac file system events theo watched path va dispatch mot lan
cho moi path sau debounce. Tranh reload lien tuc khi co nhieu thay doi
lien tiep (vd: giai nen archive, IDE auto-save).
"""

import threading
from threading import Timer
from typing import Callable, Dict, List

from core.logging_config import log_debug, log_error
from services.interfaces.file_watcher_service import (
    FileChangeEvent,
    IEventDebouncer,
)


class TimerEventDebouncer(IEventDebouncer):
    """
    Debouncer su dung threading.Timer, mot timer cho moi watched path.

    Doi mot khoang thoi gian (debounce_seconds) sau event cuoi cung cua
    MOT watched path truoc khi dispatch path do. Event moi chi reset timer
    cua chinh path do, nen mot thu muc thay doi lien tuc khong giu lai
    reload cua cac thu muc khac. Moi lan dispatch, path chi duoc goi 1 lan
    du co bao nhieu events.

    debounce_seconds <= 0: dispatch ngay tren thread cua watchdog.

    Attributes:
        _dispatch: Ham nhan (watched_path, events) sau debounce
        _debounce_seconds: Thoi gian cho truoc khi dispatch
        _timers: watched_path -> Timer dang cho
        _pending: watched_path -> events dang cho xu ly
    """

    def __init__(
        self,
        dispatch: Callable[[str, List[FileChangeEvent]], None],
        debounce_seconds: float = 0.1,
    ):
        """
        Khoi tao debouncer.

        Args:
            dispatch: Callback nhan (watched_path, events)
            debounce_seconds: Thoi gian cho truoc khi dispatch
        """
        self._dispatch = dispatch
        self._debounce_seconds = debounce_seconds
        self._lock = threading.Lock()
        self._timers: Dict[str, Timer] = {}
        self._pending: Dict[str, List[FileChangeEvent]] = {}

    def add_event(self, event: FileChangeEvent) -> None:
        """
        Them event vao hang doi va reset timer cua watched path cua no.

        Args:
            event: Su kien file change can xu ly
        """
        if self._debounce_seconds <= 0:
            self._safe_dispatch(event.watched_path, [event])
            return

        watched_path = event.watched_path
        with self._lock:
            self._pending.setdefault(watched_path, []).append(event)

            old_timer = self._timers.get(watched_path)
            if old_timer is not None:
                old_timer.cancel()

            timer = Timer(
                self._debounce_seconds, self._trigger_callback, args=(watched_path,)
            )
            timer.daemon = True
            self._timers[watched_path] = timer
            timer.start()

    def discard(self, watched_path: str) -> None:
        """Bo timer va events dang pending cua watched_path (khi unsubscribe)."""
        with self._lock:
            timer = self._timers.pop(watched_path, None)
            self._pending.pop(watched_path, None)
        if timer is not None:
            timer.cancel()

    def cleanup(self) -> None:
        """Don dep tat ca timers va pending events khi shutdown."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
            self._pending.clear()
        for timer in timers:
            timer.cancel()

    def _trigger_callback(self, watched_path: str) -> None:
        """Dispatch mot lan cho watched_path neu con pending."""
        with self._lock:
            timer = self._timers.get(watched_path)
            # Timer da bi thay the (event moi) hoac da bi discard
            if timer is None or timer is not threading.current_thread():
                return
            del self._timers[watched_path]
            events = self._pending.pop(watched_path, [])

        if not events:
            return

        log_debug(
            f"[WatchManager] Dispatching {len(events)} change(s) for {watched_path}"
        )
        self._safe_dispatch(watched_path, events)

    def _safe_dispatch(self, watched_path: str, events: List[FileChangeEvent]) -> None:
        try:
            self._dispatch(watched_path, events)
        except Exception as e:
            log_error(f"[WatchManager] Error in change callback for {watched_path}", e)
