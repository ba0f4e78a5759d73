"""
Unit tests cho Directory Watch package.

Test các chức năng:
- Debouncer gom events, dispatch 1 lan / path
- Handler chi chuyen tiep create / delete / move
- Manager: subscribe idempotent, subscribe loi -> False, unsubscribe bo events
"""

import time
from unittest.mock import MagicMock, Mock, patch

from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from services.file_watcher_pkg.debouncer import TimerEventDebouncer
from services.file_watcher_pkg.handler import DirectoryEventHandler
from services.file_watcher_pkg.service import DirectoryWatchManager
from services.interfaces.file_watcher_service import FileChangeEvent


def _event(watched_path: str, name: str = "f.txt") -> FileChangeEvent:
    return FileChangeEvent(
        event_type="created",
        path=f"{watched_path}/{name}",
        is_directory=False,
        watched_path=watched_path,
    )


class TestTimerEventDebouncer:
    """Test suite cho TimerEventDebouncer"""

    def test_events_coalesced_per_path(self):
        dispatch = Mock()
        debouncer = TimerEventDebouncer(dispatch, debounce_seconds=0.05)

        for i in range(5):
            debouncer.add_event(_event("/a", f"{i}.txt"))
        debouncer.add_event(_event("/b"))

        time.sleep(0.3)

        assert dispatch.call_count == 2
        calls = {c.args[0]: c.args[1] for c in dispatch.call_args_list}
        assert len(calls["/a"]) == 5
        assert len(calls["/b"]) == 1

    def test_busy_path_does_not_delay_other_paths(self):
        """/b thay doi lien tuc khong giu lai reload cua /a."""
        dispatched = []
        debouncer = TimerEventDebouncer(
            lambda path, events: dispatched.append(path), debounce_seconds=0.1
        )

        debouncer.add_event(_event("/a"))
        deadline = time.monotonic() + 1.0
        while time.monotonic() < deadline:
            debouncer.add_event(_event("/b"))
            time.sleep(0.05)

        assert dispatched.count("/a") == 1
        debouncer.cleanup()

    def test_zero_debounce_dispatches_immediately(self):
        dispatch = Mock()
        debouncer = TimerEventDebouncer(dispatch, debounce_seconds=0)

        debouncer.add_event(_event("/a"))

        dispatch.assert_called_once()

    def test_discard_drops_pending_events(self):
        dispatch = Mock()
        debouncer = TimerEventDebouncer(dispatch, debounce_seconds=0.05)

        debouncer.add_event(_event("/a"))
        debouncer.add_event(_event("/b"))
        debouncer.discard("/a")
        time.sleep(0.3)

        assert [c.args[0] for c in dispatch.call_args_list] == ["/b"]

    def test_cleanup_cancels_timer(self):
        dispatch = Mock()
        debouncer = TimerEventDebouncer(dispatch, debounce_seconds=0.05)

        debouncer.add_event(_event("/a"))
        debouncer.cleanup()
        time.sleep(0.2)

        dispatch.assert_not_called()

    def test_dispatch_error_is_contained(self):
        debouncer = TimerEventDebouncer(Mock(side_effect=RuntimeError("boom")), 0)
        # Khong raise ra watchdog thread
        debouncer.add_event(_event("/a"))


class TestDirectoryEventHandler:
    def test_structural_events_forwarded(self):
        debouncer = Mock()
        handler = DirectoryEventHandler("/w", debouncer)

        handler.on_created(FileCreatedEvent("/w/a"))
        handler.on_created(DirCreatedEvent("/w/d"))
        handler.on_deleted(FileDeletedEvent("/w/a"))
        handler.on_moved(FileMovedEvent("/w/b", "/w/c"))

        events = [c.args[0] for c in debouncer.add_event.call_args_list]
        assert [e.event_type for e in events] == ["created", "created", "deleted", "moved"]
        assert all(e.watched_path == "/w" for e in events)
        assert events[1].is_directory is True

    def test_modified_ignored(self):
        debouncer = Mock()
        handler = DirectoryEventHandler("/w", debouncer)

        handler.dispatch(FileModifiedEvent("/w/a"))

        debouncer.add_event.assert_not_called()


class TestDirectoryWatchManager:
    """Manager voi Observer gia (khong cham OS)."""

    def _manager(self):
        observer = MagicMock()
        manager = DirectoryWatchManager(debounce_seconds=0)
        return manager, observer

    def test_subscribe_is_idempotent(self, tmp_path):
        manager, observer = self._manager()
        with patch("services.file_watcher_pkg.service.Observer", return_value=observer):
            assert manager.subscribe(str(tmp_path), Mock())
            assert manager.subscribe(str(tmp_path), Mock())

        observer.schedule.assert_called_once()
        _, kwargs = observer.schedule.call_args
        assert kwargs["recursive"] is False
        assert manager.watched_paths() == [str(tmp_path)]

    def test_subscribe_missing_path_returns_false(self, tmp_path):
        manager, observer = self._manager()
        with patch("services.file_watcher_pkg.service.Observer", return_value=observer):
            assert manager.subscribe(str(tmp_path / "gone"), Mock()) is False
        assert not manager.is_subscribed(str(tmp_path / "gone"))

    def test_subscribe_failure_returns_false(self, tmp_path):
        """Loi tao watch (vd: het inotify watches) -> False, khong raise"""
        manager, observer = self._manager()
        observer.schedule.side_effect = OSError(28, "inotify watch limit reached")
        with patch("services.file_watcher_pkg.service.Observer", return_value=observer):
            assert manager.subscribe(str(tmp_path), Mock()) is False
        assert not manager.is_subscribed(str(tmp_path))

    def test_unsubscribe(self, tmp_path):
        manager, observer = self._manager()
        with patch("services.file_watcher_pkg.service.Observer", return_value=observer):
            manager.subscribe(str(tmp_path), Mock())

        assert manager.unsubscribe(str(tmp_path)) is True
        assert manager.unsubscribe(str(tmp_path)) is False
        observer.unschedule.assert_called_once()
        assert not manager.is_subscribed(str(tmp_path))

    def test_events_for_unsubscribed_path_dropped(self, tmp_path):
        manager, observer = self._manager()
        on_change = Mock()
        with patch("services.file_watcher_pkg.service.Observer", return_value=observer):
            manager.subscribe(str(tmp_path), on_change)
        handler = observer.schedule.call_args.args[0]

        handler.on_created(FileCreatedEvent(str(tmp_path / "a")))
        on_change.assert_called_once_with(str(tmp_path))

        manager.unsubscribe(str(tmp_path))
        handler.on_created(FileCreatedEvent(str(tmp_path / "b")))
        on_change.assert_called_once()

    def test_shutdown_all_stops_observer(self, tmp_path):
        manager, observer = self._manager()
        with patch("services.file_watcher_pkg.service.Observer", return_value=observer):
            manager.subscribe(str(tmp_path), Mock())

        manager.shutdown_all()
        manager.shutdown_all()

        observer.stop.assert_called_once()
        assert manager.watched_paths() == []
