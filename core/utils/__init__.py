"""
Core Utilities Package

Chứa các utility modules:
- task_queue: Hang doi task cho tree owner thread
- subprocess_utils: Launch program (Windows-safe)
- qt_utils: Cau noi background thread -> Qt main thread (chi dung trong host UI)
"""

from core.utils.task_queue import CallbackTask, ReloadTask, TreeTaskQueue

__all__ = [
    "CallbackTask",
    "ReloadTask",
    "TreeTaskQueue",
]
