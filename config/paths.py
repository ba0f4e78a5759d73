"""
Application Paths - Centralized path definitions cho File Tree Editor

Module này định nghĩa tất cả các đường dẫn sử dụng trong ứng dụng.
Tập trung ở một nơi để tránh hardcode rải rác và đảm bảo consistency.

App data được lưu tại: ~/.filetree-editor/
- logs/          : Log files
- settings.json  : AppSettings
"""

import os
from pathlib import Path


# =============================================================================
# Tên ứng dụng - Single source of truth cho naming
# =============================================================================
APP_NAME = "filetree-editor"

# =============================================================================
# Thư mục gốc của ứng dụng
# =============================================================================
APP_DIR = Path.home() / f".{APP_NAME}"

# =============================================================================
# Các thư mục con
# =============================================================================
LOG_DIR = APP_DIR / "logs"

# =============================================================================
# Các file cấu hình và dữ liệu
# =============================================================================
SETTINGS_FILE = APP_DIR / "settings.json"

# Duoi file va filter cho dialog Open/Save tree document
DOCUMENT_EXTENSION = ".treexml"
DOCUMENT_FILE_FILTER = f"Tree files (*{DOCUMENT_EXTENSION})"

# =============================================================================
# Environment Variables - Tên biến môi trường cho debug mode
# =============================================================================
DEBUG_ENV_VAR = "FILETREE_DEBUG"

# Kiểm tra debug mode từ environment variable
DEBUG_MODE = os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes")


def ensure_app_directories() -> None:
    """
    Tạo các thư mục cần thiết nếu chưa tồn tại.
    Gọi hàm này khi khởi động ứng dụng.
    """
    APP_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)
