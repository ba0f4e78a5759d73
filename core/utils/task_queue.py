"""
Tree Task Queue - Hang doi task cho tree owner (single consumer).

Watch callbacks va background workers chay tren thread khac, KHONG duoc
mutate tree. Chung chi post task vao queue nay; tree owner drain queue
tren chinh thread cua no -> moi mutation cua tree co thu tu tuyet doi.

Features:
- Reload task duoc coalesce theo path (path dang pending khong bi queue lai)
- Generic callback task (dung de marshal buoc refresh cuoi cua paste/delete)
- Wakeup hook: host (Qt) duoc bao khi co task moi de schedule drain
- wait(): cho headless consumer / tests

Usage:
    queue = TreeTaskQueue()
    queue.post_reload("/home/user/docs")      # tu watcher thread
    queue.drain(controller.reload_path)       # tren owner thread
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional, Union

from core.logging_config import log_debug, log_error


@dataclass(frozen=True)
class ReloadTask:
    """Yeu cau reload node dang so huu path."""

    path: str


@dataclass(frozen=True)
class CallbackTask:
    """Callback bat ky can chay tren owner thread."""

    callback: Callable[[], None]
    description: str = ""


Task = Union[ReloadTask, CallbackTask]


class TreeTaskQueue:
    """
    Multi-producer / single-consumer task queue.

    Thread Safety: post_* goi duoc tu bat ky thread nao.
    drain() chi duoc goi tu tree owner thread.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._tasks: Deque[Task] = deque()
        self._pending_paths: set[str] = set()
        self._wakeup: Optional[Callable[[], None]] = None

    @property
    def pending_count(self) -> int:
        with self._cond:
            return len(self._tasks)

    def set_wakeup(self, callback: Optional[Callable[[], None]]) -> None:
        """
        Dang ky hook duoc goi (tren thread cua producer) moi khi co task moi.

        Hook phai thread-safe, vd: SignalBridge.run_on_main(...).
        """
        with self._cond:
            self._wakeup = callback

    def post_reload(self, path: str) -> bool:
        """
        Queue reload cho path. Coalesce neu path da dang pending.

        Returns:
            True neu task moi duoc them, False neu da co task cho path nay
        """
        with self._cond:
            if path in self._pending_paths:
                log_debug(f"[TaskQueue] Coalesced reload: {path}")
                return False
            self._pending_paths.add(path)
            self._tasks.append(ReloadTask(path))
            self._cond.notify_all()
            wakeup = self._wakeup

        self._notify(wakeup)
        return True

    def post(self, callback: Callable[[], None], description: str = "") -> None:
        """Queue callback de chay tren owner thread."""
        with self._cond:
            self._tasks.append(CallbackTask(callback, description))
            self._cond.notify_all()
            wakeup = self._wakeup

        self._notify(wakeup)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block cho den khi co it nhat 1 task (hoac het timeout).

        Returns:
            True neu co task dang pending
        """
        with self._cond:
            return self._cond.wait_for(lambda: bool(self._tasks), timeout=timeout)

    def drain(self, reload_handler: Callable[[str], None]) -> int:
        """
        Chay tat ca tasks dang pending theo thu tu FIFO.

        Task duoc post trong luc drain se doi lan drain sau. Exception tu
        mot task duoc log va KHONG dung viec drain cac task con lai.

        Args:
            reload_handler: Ham xu ly ReloadTask (nhan path)

        Returns:
            So task da chay
        """
        with self._cond:
            batch = list(self._tasks)
            self._tasks.clear()
            self._pending_paths.clear()

        for task in batch:
            try:
                if isinstance(task, ReloadTask):
                    reload_handler(task.path)
                else:
                    task.callback()
            except Exception as e:
                log_error(f"[TaskQueue] Task failed ({task})", e)

        return len(batch)

    def clear(self) -> int:
        """Bo tat ca tasks dang pending. Tra ve so task bi bo."""
        with self._cond:
            count = len(self._tasks)
            self._tasks.clear()
            self._pending_paths.clear()
            return count

    @staticmethod
    def _notify(wakeup: Optional[Callable[[], None]]) -> None:
        if wakeup is None:
            return
        try:
            wakeup()
        except Exception as e:
            log_error("[TaskQueue] Wakeup hook failed", e)
