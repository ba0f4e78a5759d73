"""
Logging Configuration - Centralized logging setup

Cung cấp logging nhất quán cho toàn bộ app (core, watcher, controller, UI).
Log file được lưu tại ~/.filetree-editor/logs/

- Log rotation (max 5 files, 2MB each)
- Buffered writes qua MemoryHandler (flush ngay khi co ERROR)
- DEBUG chi bat khi FILETREE_DEBUG duoc set
"""

import logging
import logging.handlers
import sys
from typing import Optional

from config.paths import LOG_DIR, DEBUG_MODE

LOGGER_NAME = "filetree-editor"

# Logger singleton
_logger: Optional[logging.Logger] = None
_debug_enabled: bool = DEBUG_MODE

# Log rotation config
MAX_LOG_SIZE = 2 * 1024 * 1024  # 2MB per file
MAX_LOG_FILES = 5
BUFFER_CAPACITY = 100


def _level() -> int:
    return logging.DEBUG if _debug_enabled else logging.INFO


def get_logger() -> logging.Logger:
    """
    Get hoặc tạo logger singleton.

    Returns:
        Configured logger instance
    """
    global _logger

    if _logger is not None:
        return _logger

    _logger = logging.getLogger(LOGGER_NAME)
    _logger.setLevel(_level())

    # Avoid duplicate handlers (vd: module bi reload trong tests)
    if _logger.handlers:
        return _logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(_level())
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    _logger.addHandler(console_handler)

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            LOG_DIR / "app.log",
            maxBytes=MAX_LOG_SIZE,
            backupCount=MAX_LOG_FILES,
            encoding="utf-8",
        )
        file_handler.setLevel(_level())
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(threadName)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

        # Buffer records, flush ngay khi co ERROR
        memory_handler = logging.handlers.MemoryHandler(
            capacity=BUFFER_CAPACITY,
            flushLevel=logging.ERROR,
            target=file_handler,
        )
        memory_handler.setLevel(_level())
        _logger.addHandler(memory_handler)

    except OSError as e:
        # Khong tao duoc log file -> chi log ra console
        _logger.warning(f"Could not create log file: {e}")

    return _logger


def flush_logs():
    """
    Flush buffered logs to disk.
    Goi truoc khi app exit de dam bao log duoc ghi het.
    """
    if _logger is None:
        return
    for handler in _logger.handlers:
        try:
            handler.flush()
        except (OSError, ValueError):
            pass  # Handler da dong trong luc shutdown


def set_debug_mode(enabled: bool):
    """
    Enable or disable debug mode at runtime.

    Args:
        enabled: True to enable DEBUG level logging
    """
    global _debug_enabled
    _debug_enabled = enabled

    if _logger:
        _logger.setLevel(_level())
        for handler in _logger.handlers:
            handler.setLevel(_level())


def is_debug_mode() -> bool:
    """Kiem tra DEBUG logging co dang bat khong."""
    return _debug_enabled


def log_error(message: str, exc: Optional[BaseException] = None):
    """Log error với optional exception details"""
    logger = get_logger()
    if exc:
        logger.error(f"{message}: {exc}", exc_info=_debug_enabled)
    else:
        logger.error(message)


def log_warning(message: str):
    """Log warning"""
    get_logger().warning(message)


def log_info(message: str):
    """Log info"""
    get_logger().info(message)


def log_debug(message: str):
    """Log debug - only written if debug mode is enabled"""
    if _debug_enabled:
        get_logger().debug(message)
