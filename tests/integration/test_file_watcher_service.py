"""
Integration tests cho DirectoryWatchManager.

Test tich hop that giua watchdog Observer, Handler, Debouncer va
TreeTaskQueue (khong mock OS).
"""

import time

from core.utils.task_queue import TreeTaskQueue
from services.file_watcher_pkg.service import DirectoryWatchManager


def _collect(queue: TreeTaskQueue, timeout: float = 2.0, settle: float = 0.4) -> list:
    """Doi task dau tien, cho them 'settle' giay, roi drain."""
    handled: list = []
    if queue.wait(timeout):
        time.sleep(settle)
        queue.drain(handled.append)
    return handled


class TestDirectoryWatchIntegration:
    """Test tich hop voi watchdog that."""

    def test_new_file_triggers_single_reload(self, tmp_path):
        """Tao file trong thu muc dang watch -> dung 1 reload task"""
        queue = TreeTaskQueue()
        manager = DirectoryWatchManager(debounce_seconds=0.1)

        try:
            assert manager.subscribe(str(tmp_path), queue.post_reload)
            time.sleep(0.1)

            (tmp_path / "new_file.txt").write_text("hello")

            assert _collect(queue) == [str(tmp_path)]
        finally:
            manager.shutdown_all()

    def test_burst_of_changes_coalesced(self, tmp_path):
        queue = TreeTaskQueue()
        manager = DirectoryWatchManager(debounce_seconds=0.1)

        try:
            manager.subscribe(str(tmp_path), queue.post_reload)
            time.sleep(0.1)

            for i in range(20):
                (tmp_path / f"f{i}.txt").write_text("x")

            assert _collect(queue) == [str(tmp_path)]
        finally:
            manager.shutdown_all()

    def test_not_recursive(self, tmp_path):
        """Thay doi trong thu muc con KHONG bao cho thu muc cha"""
        sub = tmp_path / "sub"
        sub.mkdir()
        queue = TreeTaskQueue()
        manager = DirectoryWatchManager(debounce_seconds=0.1)

        try:
            manager.subscribe(str(tmp_path), queue.post_reload)
            time.sleep(0.1)

            (sub / "deep.txt").write_text("x")

            assert _collect(queue, timeout=0.6) == []
        finally:
            manager.shutdown_all()

    def test_unsubscribed_path_produces_no_tasks(self, tmp_path):
        queue = TreeTaskQueue()
        manager = DirectoryWatchManager(debounce_seconds=0.1)

        try:
            manager.subscribe(str(tmp_path), queue.post_reload)
            manager.unsubscribe(str(tmp_path))

            (tmp_path / "ignored.txt").write_text("x")

            assert _collect(queue, timeout=0.6) == []
        finally:
            manager.shutdown_all()

    def test_two_paths_reported_separately(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.mkdir()
        b.mkdir()
        queue = TreeTaskQueue()
        manager = DirectoryWatchManager(debounce_seconds=0.1)

        try:
            manager.subscribe(str(a), queue.post_reload)
            manager.subscribe(str(b), queue.post_reload)
            time.sleep(0.1)

            (a / "x.txt").write_text("x")
            (b / "y.txt").write_text("y")

            assert sorted(_collect(queue)) == sorted([str(a), str(b)])
        finally:
            manager.shutdown_all()
