"""
Interfaces cho Directory Watch Service.

Dinh nghia contracts cho:
- IDirectoryWatchService: Subscribe/unsubscribe watch cho tung thu muc
- IEventDebouncer: Gom nhom events theo path va dispatch sau debounce
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List


# Callback nhan path cua thu muc dang duoc watch vua thay doi
DirectoryChangedCallback = Callable[[str], None]


@dataclass
class FileChangeEvent:
    """
    Dai dien cho mot su kien thay doi trong thu muc dang watch.

    Attributes:
        event_type: Loai su kien ('created', 'deleted', 'moved')
        path: Duong dan tuyet doi cua file/folder bi thay doi
        is_directory: True neu la thu muc
        watched_path: Thu muc dang duoc watch (key cua watch table)
    """

    event_type: str
    path: str
    is_directory: bool
    watched_path: str


class IEventDebouncer(ABC):
    """
    Interface gom nhom events va dispatch sau debounce.

    Nhan events lien tuc, chi dispatch MOT lan cho moi watched path
    sau khi khong co event moi trong khoang thoi gian debounce.
    """

    @abstractmethod
    def add_event(self, event: FileChangeEvent) -> None:
        """
        Them mot event vao hang doi va reset debounce timer.

        Args:
            event: Su kien file change can xu ly
        """
        ...

    @abstractmethod
    def discard(self, watched_path: str) -> None:
        """Bo cac events dang pending cua mot watched path."""
        ...

    @abstractmethod
    def cleanup(self) -> None:
        """Don dep timer va pending events khi shutdown."""
        ...


class IDirectoryWatchService(ABC):
    """
    Interface cho dich vu watch tung thu muc (khong de quy).

    Moi implementation phai dam bao:
    - Toi da 1 watch cho moi path (subscribe lap lai la no-op)
    - Loi tao watch khong raise (thu muc chi don gian la khong duoc watch)
    - Callback chay tren background thread -> chi duoc post task, khong
      duoc mutate tree truc tiep
    """

    @abstractmethod
    def subscribe(self, path: str, on_change: DirectoryChangedCallback) -> bool:
        """
        Bat dau watch path (chi create/delete/rename cua children truc tiep).

        Args:
            path: Thu muc can watch
            on_change: Callback nhan path khi co thay doi

        Returns:
            True neu path dang duoc watch (ke ca truoc do da watch),
            False neu khong tao duoc watch
        """
        ...

    @abstractmethod
    def unsubscribe(self, path: str) -> bool:
        """
        Release watch cua path. Idempotent.

        Returns:
            True neu co watch bi release
        """
        ...

    @abstractmethod
    def is_subscribed(self, path: str) -> bool:
        """Kiem tra path co dang duoc watch khong."""
        ...

    @abstractmethod
    def watched_paths(self) -> List[str]:
        """Danh sach cac path dang duoc watch."""
        ...

    @abstractmethod
    def shutdown_all(self) -> None:
        """Release tat ca watches va dung observer."""
        ...
