"""
Clipboard Utilities - File reference list tren system clipboard.

File list duoc luu duoi dang text theo kieu text/uri-list:
moi dong mot URI file://, de co the paste qua lai voi file manager.
Doc lai chap nhan ca URI file:// lan absolute path thuong.

Xử lý các trường hợp clipboard không hoạt động trên một số systems
(pyperclip -> xclip -> xsel).
"""

import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import List, Sequence, Tuple
from urllib.parse import unquote, urlparse

import pyperclip

from core.logging_config import log_error, log_warning


def encode_file_list(paths: Sequence[str]) -> str:
    """Chuyen danh sach paths thanh text/uri-list (CRLF separated)."""
    return "\r\n".join(Path(os.path.abspath(p)).as_uri() for p in paths)


def decode_file_list(text: str) -> List[str]:
    """
    Parse text tu clipboard thanh danh sach paths.

    Bo qua dong trong, comment (#) va text khong phai path tuyet doi.
    """
    paths: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("file://"):
            parsed = urlparse(line)
            path = unquote(parsed.path)
            # file:///C:/dir -> /C:/dir tren Windows
            if sys.platform == "win32" and path.startswith("/") and path[2:3] == ":":
                path = path[1:]
            if parsed.netloc and parsed.netloc != "localhost":
                path = f"//{parsed.netloc}{path}"
            paths.append(os.path.normpath(path))
        elif os.path.isabs(line):
            paths.append(os.path.normpath(line))
    return paths


def copy_to_clipboard(text: str) -> Tuple[bool, str]:
    """
    Copy text to clipboard với error handling.

    Args:
        text: Text cần copy

    Returns:
        Tuple (success: bool, message: str)
    """
    try:
        pyperclip.copy(text)
        return True, "Copied to clipboard"
    except pyperclip.PyperclipException as e:
        log_warning(f"pyperclip failed: {e}")

    if sys.platform.startswith("linux"):
        for command, label in (
            (["xclip", "-selection", "clipboard"], "xclip"),
            (["xsel", "--clipboard", "--input"], "xsel"),
        ):
            try:
                process = subprocess.Popen(
                    command, stdin=subprocess.PIPE, stderr=subprocess.PIPE
                )
                process.communicate(text.encode("utf-8"))
                if process.returncode == 0:
                    return True, f"Copied to clipboard ({label})"
            except FileNotFoundError:
                continue
            except OSError as e:
                log_warning(f"{label} fallback failed: {e}")

    log_error("All clipboard methods failed")
    return False, "Clipboard not available. Install xclip or xsel on Linux."


def get_clipboard_text() -> Tuple[bool, str]:
    """
    Get text from clipboard với error handling.

    Returns:
        Tuple (success: bool, text_or_error: str)
    """
    try:
        text = pyperclip.paste()
        # pyperclip.paste() có thể trả về None
        if text is None:
            return False, "Clipboard is empty"
        return True, text
    except pyperclip.PyperclipException as e:
        log_error(f"Failed to read clipboard: {e}")
        return False, f"Cannot read clipboard: {e}"


class SystemFileClipboard:
    """File reference list luu tren system clipboard (qua pyperclip)."""

    def set_file_list(self, paths: Sequence[str]) -> bool:
        success, message = copy_to_clipboard(encode_file_list(paths))
        if not success:
            log_warning(f"[Clipboard] {message}")
        return success

    def get_file_list(self) -> List[str]:
        success, text = get_clipboard_text()
        if not success:
            return []
        return decode_file_list(text)

    def has_file_list(self) -> bool:
        return bool(self.get_file_list())


class InMemoryFileClipboard:
    """
    File reference list trong bo nho (headless mode / tests).

    Thread-safe de background workers co the doc.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._paths: List[str] = []

    def set_file_list(self, paths: Sequence[str]) -> bool:
        with self._lock:
            self._paths = list(paths)
        return True

    def get_file_list(self) -> List[str]:
        with self._lock:
            return list(self._paths)

    def has_file_list(self) -> bool:
        with self._lock:
            return bool(self._paths)
