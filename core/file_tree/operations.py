"""
File Operations - Copy / Paste / Delete / Run tren filesystem.

Cac operations:
- copy: Dat path vao file reference list tren clipboard
- paste: Copy files/folders (de quy) vao thu muc dich, ghi de neu trung ten
- delete: Xoa file, hoac xoa folder kem toan bo noi dung
- run: Chay file neu duoi file nam trong danh sach executable

Quy tac loi: mot item loi KHONG lam dung ca batch. Moi loi duoc ghi vao
OperationResult.failures de caller hien thi cho user.

De quy duoc thay bang explicit worklist (stack cac thu muc dang cho xu ly)
de khong bi gioi han boi recursion depth cua Python.
"""

import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from core.logging_config import log_debug, log_error, log_info
from core.utils.subprocess_utils import popen_subprocess


@dataclass
class OperationFailure:
    """Mot item bi loi trong operation."""

    path: str
    message: str


@dataclass
class OperationResult:
    """
    Ket qua thuc thi mot file operation.

    Attributes:
        operation: "paste" hoac "delete"
        target: Thu muc dich (paste) hoac path bi xoa (delete)
        processed: Cac path da xu ly thanh cong (file da copy / entry da xoa)
        failures: Cac item bi loi
    """

    operation: str
    target: str
    processed: list[str] = field(default_factory=list)
    failures: list[OperationFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    def add_failure(self, path: str, error: BaseException) -> None:
        message = get_friendly_error(error)
        self.failures.append(OperationFailure(path=path, message=message))
        log_error(f"[FileOperations] {self.operation} failed for {path}", error)

    def summary(self) -> str:
        """Mo ta ngan gon cho status bar."""
        if self.success:
            return f"{self.operation}: {len(self.processed)} item(s) done"
        return (
            f"{self.operation}: {len(self.processed)} item(s) done, "
            f"{len(self.failures)} failed"
        )


def get_friendly_error(error: BaseException) -> str:
    """Chuyen OSError thanh message de hieu"""
    msg = str(error)

    if isinstance(error, PermissionError) or "permission" in msg.lower():
        return "Permission denied: Cannot access this location"
    if isinstance(error, FileNotFoundError):
        return f"Not found: {getattr(error, 'filename', None) or msg}"
    if "ENOSPC" in msg or "no space" in msg.lower():
        return "Disk full: Not enough space to copy file"
    if "EBUSY" in msg or "locked" in msg.lower():
        return "File is locked by another process"
    if "EROFS" in msg or "read-only" in msg.lower():
        return "Read-only file system"

    return msg


def _is_same_or_inside(path: str, ancestor: str) -> bool:
    """True neu path == ancestor hoac nam ben trong ancestor."""
    path = os.path.normcase(os.path.realpath(path))
    ancestor = os.path.normcase(os.path.realpath(ancestor))
    try:
        return os.path.commonpath([path, ancestor]) == ancestor
    except ValueError:
        # Khac drive tren Windows
        return False


# ============================================================
# Paste (copy vao thu muc dich)
# ============================================================


def _copy_file(src: str, dst: str, result: OperationResult) -> None:
    """Copy mot file, ghi de file cung ten o dich."""
    try:
        if os.path.isdir(dst) and not os.path.islink(dst):
            raise IsADirectoryError(f"Destination is a directory: {dst}")
        shutil.copy2(src, dst)
        result.processed.append(dst)
    except (OSError, shutil.Error) as e:
        result.add_failure(src, e)


def _copy_dir_symlink(src: str, dst: str, result: OperationResult) -> None:
    """Tao lai symlink toi thu muc o dich, khong di vao ben trong link."""
    try:
        if os.path.islink(dst) or os.path.isfile(dst):
            os.remove(dst)
        elif os.path.isdir(dst):
            raise IsADirectoryError(f"Destination is a directory: {dst}")
        os.symlink(os.readlink(src), dst, target_is_directory=True)
        result.processed.append(dst)
    except OSError as e:
        result.add_failure(src, e)


def copy_directory(src: str, dst: str, result: OperationResult) -> None:
    """
    Copy de quy thu muc src thanh dst.

    Voi moi thu muc: tao thu muc dich, copy tat ca files, roi moi di vao
    cac thu muc con. Dung worklist thay vi de quy.
    """
    pending: list[tuple[str, str]] = [(src, dst)]
    while pending:
        current_src, current_dst = pending.pop()
        try:
            os.makedirs(current_dst, exist_ok=True)
            with os.scandir(current_src) as it:
                entries = list(it)
        except OSError as e:
            result.add_failure(current_src, e)
            continue

        subdirs: list[tuple[str, str]] = []
        for entry in entries:
            target = os.path.join(current_dst, entry.name)
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            if is_dir and entry.is_symlink():
                # Link toi thu muc (co the tro nguoc len cha) -> copy link
                _copy_dir_symlink(entry.path, target, result)
            elif is_dir:
                subdirs.append((entry.path, target))
            else:
                _copy_file(entry.path, target, result)

        # Dao nguoc de thu muc con dau tien duoc xu ly truoc
        pending.extend(reversed(subdirs))


def copy_path_into(src: str, target_dir: str, result: OperationResult) -> None:
    """
    Copy mot file/folder vao target_dir (giu nguyen ten).

    Args:
        src: File hoac folder nguon
        target_dir: Thu muc dich (phai ton tai)
        result: OperationResult de ghi nhan ket qua
    """
    name = os.path.basename(src.rstrip("/\\"))
    dst = os.path.join(target_dir, name)

    if os.path.isdir(src):
        if _is_same_or_inside(dst, src):
            result.failures.append(
                OperationFailure(
                    path=src,
                    message="Cannot copy a folder into itself or one of its subfolders",
                )
            )
            log_error(f"[FileOperations] Refused to copy {src} into {target_dir}")
            return
        copy_directory(src, dst, result)
    elif os.path.exists(src):
        _copy_file(src, dst, result)
    else:
        result.add_failure(src, FileNotFoundError(2, "No such file or directory", src))


def paste_paths(sources: Iterable[str], target_dir: str) -> OperationResult:
    """
    Paste danh sach paths (tu file reference list) vao target_dir.

    Overwrite policy: file trung ten o dich bi ghi de, khong hoi.

    Args:
        sources: Danh sach file/folder nguon
        target_dir: Thu muc dich

    Returns:
        OperationResult voi processed/failures
    """
    result = OperationResult(operation="paste", target=target_dir)

    if not os.path.isdir(target_dir):
        result.add_failure(
            target_dir, FileNotFoundError(2, "Target folder does not exist", target_dir)
        )
        return result

    sources = list(sources)
    log_info(f"[FileOperations] Pasting {len(sources)} item(s) into {target_dir}")
    for src in sources:
        copy_path_into(src, target_dir, result)

    log_info(f"[FileOperations] {result.summary()}")
    return result


# ============================================================
# Delete
# ============================================================


def _remove_entry(path: str, result: OperationResult) -> bool:
    try:
        os.remove(path)
        result.processed.append(path)
        return True
    except FileNotFoundError:
        return True  # Da bi xoa boi process khac
    except OSError as e:
        result.add_failure(path, e)
        return False


def _delete_tree(root: str, result: OperationResult) -> None:
    """
    Xoa thu muc va toan bo noi dung (best effort).

    Pass 1: duyet worklist, xoa files/symlinks, ghi lai thu tu cac folder.
    Pass 2: rmdir cac folder theo thu tu nguoc (sau nhat truoc).
    Symlink KHONG bao gio duoc follow.
    """
    directories: list[str] = []
    pending = [root]
    while pending:
        current = pending.pop()
        directories.append(current)
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except FileNotFoundError:
            continue
        except OSError as e:
            result.add_failure(current, e)
            continue

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            if is_dir:
                pending.append(entry.path)
            else:
                _remove_entry(entry.path, result)

    for directory in reversed(directories):
        try:
            os.rmdir(directory)
            result.processed.append(directory)
        except FileNotFoundError:
            continue
        except OSError as e:
            # Folder con loi -> folder cha cung khong rong, chi bao loi cho
            # folder dau tien that bai
            if not any(_is_same_or_inside(f.path, directory) for f in result.failures):
                result.add_failure(directory, e)


def delete_path(path: str) -> OperationResult:
    """
    Xoa file hoac folder (de quy). Khong co trash/recycle bin.

    Args:
        path: Path can xoa

    Returns:
        OperationResult (processed rong neu path khong ton tai)
    """
    result = OperationResult(operation="delete", target=path)

    if os.path.isdir(path) and not os.path.islink(path):
        _delete_tree(path, result)
    elif os.path.lexists(path):
        _remove_entry(path, result)
    else:
        log_debug(f"[FileOperations] Nothing to delete at {path}")
        return result

    log_info(f"[FileOperations] Deleted {path}: {result.summary()}")
    return result


# ============================================================
# Run
# ============================================================


def is_executable(path: str, executable_extensions: set[str]) -> bool:
    """File ton tai va co duoi nam trong executable_extensions."""
    return os.path.isfile(path) and Path(path).suffix.lower() in executable_extensions


def run_path(path: str, executable_extensions: set[str]) -> bool:
    """
    Chay file bang OS neu no la executable, nguoc lai khong lam gi.

    Returns:
        True neu da launch process
    """
    if not is_executable(path, executable_extensions):
        log_debug(f"[FileOperations] Not executable, skip run: {path}")
        return False

    try:
        if sys.platform == "win32":
            os.startfile(path)  # type: ignore[attr-defined]
        else:
            popen_subprocess([path], cwd=os.path.dirname(path) or None)
    except OSError as e:
        log_error(f"[FileOperations] Failed to run {path}", e)
        return False

    log_info(f"[FileOperations] Launched {path}")
    return True


def path_exists(path: Optional[str]) -> bool:
    """Path ton tai (file, folder, hoac symlink)."""
    return bool(path) and os.path.lexists(path)


def copy_to_clipboard(path: Optional[str], clipboard) -> bool:
    """Thay file list tren clipboard bang [path] neu path con ton tai."""
    if not path_exists(path):
        return False
    return clipboard.set_file_list([path])
