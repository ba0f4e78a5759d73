"""
DirectoryWatchManager - Quan ly watch table (1 watch / path) tren watchdog.

Class nay chi lam 1 viec: giu bang path -> watch, schedule/unschedule
watch tren mot watchdog Observer dung chung, va chuyen tiep thay doi
(da debounce) cho callback cua tung path.

Thread model:
- subscribe/unsubscribe/shutdown_all: goi tu tree owner thread
- Events: watchdog observer thread -> debouncer timer thread -> on_change
- on_change chi duoc phep post task vao TreeTaskQueue

Lock ordering: KHONG bao gio giu _lock trong luc goi vao Observer
(observer giu lock cua no trong luc dispatch events toi handler).
"""

import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from watchdog.observers import Observer

from core.logging_config import log_debug, log_error, log_info
from services.file_watcher_pkg.debouncer import TimerEventDebouncer
from services.file_watcher_pkg.handler import DirectoryEventHandler
from services.interfaces.file_watcher_service import (
    DirectoryChangedCallback,
    FileChangeEvent,
    IDirectoryWatchService,
    IEventDebouncer,
)


@dataclass
class _WatchEntry:
    """Mot dong trong watch table."""

    watch: Any  # watchdog ObservedWatch
    handler: DirectoryEventHandler
    on_change: DirectoryChangedCallback


class DirectoryWatchManager(IDirectoryWatchService):
    """
    Watch tung thu muc dang expand, khong de quy.

    Wiring dependencies:
    - IEventDebouncer -> TimerEventDebouncer (dung chung cho moi path)
    - DirectoryEventHandler: 1 handler / watched path
    - watchdog Observer: tao lazily o lan subscribe dau tien

    Usage:
        manager = DirectoryWatchManager(debounce_seconds=0.1)
        manager.subscribe("/home/user", on_change=queue.post_reload)
        # ... later
        manager.shutdown_all()
    """

    def __init__(
        self,
        debounce_seconds: float = 0.1,
        debouncer: Optional[IEventDebouncer] = None,
    ):
        """
        Khoi tao manager.

        Args:
            debounce_seconds: Thoi gian gom nhom events (0 = dispatch ngay)
            debouncer: Custom debouncer (mac dinh TimerEventDebouncer)
        """
        # Su dung Any de tranh false positive voi Observer type
        self._observer: Optional[Any] = None
        self._watches: Dict[str, _WatchEntry] = {}
        self._lock = threading.Lock()
        self._observer_lock = threading.RLock()
        self._debouncer: IEventDebouncer = debouncer or TimerEventDebouncer(
            dispatch=self._on_debounced,
            debounce_seconds=debounce_seconds,
        )

    # ------------------------------------------------------------------
    # IDirectoryWatchService
    # ------------------------------------------------------------------

    def subscribe(self, path: str, on_change: DirectoryChangedCallback) -> bool:
        """
        Watch path neu chua watch. Loi tao watch -> False, khong raise.

        Args:
            path: Thu muc can watch
            on_change: Callback (chay tren background thread)

        Returns:
            True neu path dang duoc watch sau loi goi nay
        """
        with self._observer_lock:
            with self._lock:
                if path in self._watches:
                    return True

            if not os.path.isdir(path):
                log_debug(f"[WatchManager] Not a directory, skip watch: {path}")
                return False

            handler = DirectoryEventHandler(path, self._debouncer)
            try:
                observer = self._ensure_observer()
                watch = observer.schedule(handler, path, recursive=False)
            except Exception as e:
                # Path vua bi xoa, het inotify watches, ... -> khong watch
                log_debug(f"[WatchManager] Cannot watch {path}: {e}")
                return False

            with self._lock:
                self._watches[path] = _WatchEntry(watch, handler, on_change)

        log_debug(f"[WatchManager] Watching: {path}")
        return True

    def unsubscribe(self, path: str) -> bool:
        """Release watch cua path. Goi nhieu lan khong sao."""
        with self._observer_lock:
            with self._lock:
                entry = self._watches.pop(path, None)
            if entry is None:
                return False

            self._debouncer.discard(path)
            observer = self._observer
            if observer is not None:
                try:
                    observer.unschedule(entry.watch)
                except (KeyError, OSError) as e:
                    # Emitter da tu dung (vd: folder bi xoa)
                    log_debug(f"[WatchManager] Unschedule {path}: {e}")

        log_debug(f"[WatchManager] Stopped watching: {path}")
        return True

    def is_subscribed(self, path: str) -> bool:
        with self._lock:
            return path in self._watches

    def watched_paths(self) -> List[str]:
        with self._lock:
            return list(self._watches)

    def shutdown_all(self) -> None:
        """Release tat ca watches va dung observer thread."""
        with self._observer_lock:
            with self._lock:
                count = len(self._watches)
                self._watches.clear()

            self._debouncer.cleanup()

            observer = self._observer
            self._observer = None
            if observer is not None:
                try:
                    observer.unschedule_all()
                    observer.stop()
                    observer.join(timeout=2.0)
                except RuntimeError as e:
                    log_error("[WatchManager] Error stopping observer", e)

        if count:
            log_info(f"[WatchManager] Released {count} watch(es)")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ensure_observer(self) -> Any:
        """Tao va start Observer neu chua co (goi trong _observer_lock)."""
        if self._observer is None:
            observer = Observer()
            observer.daemon = True
            observer.start()
            self._observer = observer
        return self._observer

    def _on_debounced(self, watched_path: str, events: List[FileChangeEvent]) -> None:
        """Goi on_change mot lan cho path, neu path van con duoc watch."""
        with self._lock:
            entry = self._watches.get(watched_path)

        if entry is None:
            log_debug(f"[WatchManager] Dropped events for unwatched {watched_path}")
            return

        log_debug(
            f"[WatchManager] {watched_path} changed ({len(events)} event(s))"
        )
        entry.on_change(watched_path)
