"""
Directory Loader - Liet ke children truc tiep cua mot thu muc (lazy loading).

Khong bao gio raise khi listing:
- Thu muc khong ton tai -> DirectoryListing(status=NOT_FOUND), caller xoa node
- Permission / I/O error -> entries rong + status ACCESS_DENIED / ERROR
  (duoc log warning, khong am tham bo qua)

Thu tu: directories truoc, files sau; trong moi nhom giu nguyen thu tu
enumerate cua filesystem (os.scandir), KHONG sort alphabet.
"""

import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import psutil

from core.file_tree.node import NodeKind
from core.logging_config import log_debug, log_warning


class ListingStatus(str, Enum):
    """Ket qua cua mot lan listing."""

    OK = "ok"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    ERROR = "error"


@dataclass(frozen=True)
class DirectoryEntry:
    """Mot child truc tiep cua thu muc."""

    name: str
    path: str
    kind: NodeKind  # DIRECTORY hoac FILE


@dataclass
class DirectoryListing:
    """
    Ket qua list_directory().

    Attributes:
        path: Thu muc da duoc list
        status: ListingStatus
        entries: Directories truoc, files sau
        error: Message loi (None neu OK / NOT_FOUND)
    """

    path: str
    status: ListingStatus
    entries: list[DirectoryEntry] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        """False khi thu muc da bien mat (node tuong ung can bi xoa)."""
        return self.status is not ListingStatus.NOT_FOUND

    @property
    def ok(self) -> bool:
        return self.status is ListingStatus.OK


def is_hidden(entry: os.DirEntry) -> bool:
    """
    Kiem tra entry co phai file/folder an khong.

    - Dotfiles (POSIX convention)
    - FILE_ATTRIBUTE_HIDDEN tren Windows
    """
    if entry.name.startswith("."):
        return True

    try:
        attributes = getattr(entry.stat(follow_symlinks=False), "st_file_attributes", 0)
    except OSError:
        return False
    return bool(attributes & getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0))


def _is_dir(entry: os.DirEntry) -> bool:
    """Symlink toi folder duoc xem nhu folder; broken symlink la file."""
    try:
        return entry.is_dir()
    except OSError:
        return False


def list_directory(path: str, include_hidden: bool = False) -> DirectoryListing:
    """
    Liet ke cac children truc tiep cua path.

    Args:
        path: Thu muc can list
        include_hidden: Co lay ca file/folder an khong

    Returns:
        DirectoryListing (khong bao gio raise)
    """
    if not path or not os.path.isdir(path):
        return DirectoryListing(path=path, status=ListingStatus.NOT_FOUND)

    directories: list[DirectoryEntry] = []
    files: list[DirectoryEntry] = []

    try:
        with os.scandir(path) as it:
            for entry in it:
                if not include_hidden and is_hidden(entry):
                    continue
                if _is_dir(entry):
                    directories.append(
                        DirectoryEntry(entry.name, entry.path, NodeKind.DIRECTORY)
                    )
                else:
                    files.append(DirectoryEntry(entry.name, entry.path, NodeKind.FILE))
    except FileNotFoundError:
        # Bi xoa giua isdir() va scandir()
        return DirectoryListing(path=path, status=ListingStatus.NOT_FOUND)
    except PermissionError as e:
        log_warning(f"[DirectoryLoader] Access denied: {path} ({e})")
        return DirectoryListing(
            path=path, status=ListingStatus.ACCESS_DENIED, error=str(e)
        )
    except OSError as e:
        log_warning(f"[DirectoryLoader] Cannot list {path}: {e}")
        return DirectoryListing(path=path, status=ListingStatus.ERROR, error=str(e))

    log_debug(
        f"[DirectoryLoader] {path}: {len(directories)} dirs, {len(files)} files"
    )
    return DirectoryListing(
        path=path, status=ListingStatus.OK, entries=directories + files
    )


def list_drive_roots() -> list[str]:
    """
    Lay danh sach drive roots dang san sang (mount points ton tai).

    Windows: "C:\\", "D:\\", ... ; POSIX: "/" va cac mount point khac.
    Fallback ve filesystem root neu psutil khong tra ve gi.

    Returns:
        List root paths, khong trung lap, giu thu tu tu psutil
    """
    roots: list[str] = []
    try:
        partitions = psutil.disk_partitions(all=False)
    except (OSError, RuntimeError) as e:
        log_warning(f"[DirectoryLoader] Cannot enumerate drives: {e}")
        partitions = []

    for partition in partitions:
        mountpoint = partition.mountpoint
        if mountpoint in roots:
            continue
        # Drive chua "ready" (CD-ROM trong, ...) -> bo qua
        if os.path.isdir(mountpoint):
            roots.append(mountpoint)

    if not roots:
        roots.append(os.path.abspath(os.sep))
    return roots
