"""
Directory Watch Package.

Export cac symbols chinh:
- DirectoryWatchManager (class chinh)
- TimerEventDebouncer, DirectoryEventHandler
- FileChangeEvent (data class)
"""

from services.file_watcher_pkg.debouncer import TimerEventDebouncer
from services.file_watcher_pkg.handler import DirectoryEventHandler
from services.file_watcher_pkg.service import DirectoryWatchManager
from services.interfaces.file_watcher_service import FileChangeEvent

__all__ = [
    "DirectoryWatchManager",
    "DirectoryEventHandler",
    "TimerEventDebouncer",
    "FileChangeEvent",
]
