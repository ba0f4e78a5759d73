"""
Subprocess Utilities - launch program tu file tree.

Tren Windows moi lan Popen se mo console window nhap nhay; wrapper nay tu
them CREATE_NO_WINDOW. Process duoc tach khoi app (start_new_session tren
POSIX) de dong editor khong kill program dang chay.

Usage:
    from core.utils.subprocess_utils import popen_subprocess

    popen_subprocess(["/path/to/tool.sh"], cwd="/path/to")
"""

import platform
import subprocess
from typing import Any


_IS_WINDOWS = platform.system() == "Windows"
_NO_WINDOW_FLAGS = subprocess.CREATE_NO_WINDOW if _IS_WINDOWS else 0


def popen_subprocess(*args: Any, **kwargs: Any) -> subprocess.Popen:
    """
    Wrapper quanh subprocess.Popen() cho launched programs.

    - Windows: CREATE_NO_WINDOW neu caller khong tu set creationflags
    - POSIX: start_new_session=True, stdin/stdout/stderr -> DEVNULL

    Returns:
        subprocess.Popen instance.
    """
    if _IS_WINDOWS:
        kwargs.setdefault("creationflags", _NO_WINDOW_FLAGS)
    else:
        kwargs.setdefault("start_new_session", True)

    for stream in ("stdin", "stdout", "stderr"):
        kwargs.setdefault(stream, subprocess.DEVNULL)

    return subprocess.Popen(*args, **kwargs)
