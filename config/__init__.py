"""
Config Package - Chứa các constants và cấu hình của ứng dụng

Bao gồm:
- paths: Đường dẫn app data, log, settings
- app_settings: Typed AppSettings dataclass
"""

from config.app_settings import AppSettings
from config.paths import (
    APP_DIR,
    DOCUMENT_EXTENSION,
    LOG_DIR,
    SETTINGS_FILE,
)

__all__ = [
    "AppSettings",
    "APP_DIR",
    "DOCUMENT_EXTENSION",
    "LOG_DIR",
    "SETTINGS_FILE",
]
