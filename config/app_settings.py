"""
AppSettings - Typed settings dataclass cho File Tree Editor.

Thay the Dict[str, Any] bang dataclass co type hints, validation va default values.
Tat ca settings duoc truy cap qua typed fields thay vi string keys.

Modules:
- AppSettings: Dataclass chua toan bo application settings
- from_dict(): Tao AppSettings tu dict (doc tu settings.json)
- to_dict(): Chuyen doi AppSettings thanh dict de luu xuong file

Su dung:
    settings = load_app_settings()
    if settings.show_hidden:
        ...
"""

import os
import typing
from dataclasses import dataclass, field
from typing import Any, Optional


# === Default values cho settings ===
_DEFAULT_EXECUTABLE_EXTENSIONS = ".exe\n.bat\n.cmd\n.com"


@dataclass
class AppSettings:
    """
    Typed settings cho File Tree Editor.

    Moi field tuong ung voi mot key trong settings.json.
    Default values duoc su dung khi settings.json chua co key tuong ung.
    """

    # --- File Tree Settings ---
    # Co hien thi file/folder an hay khong
    show_hidden: bool = False

    # --- Watcher Settings ---
    # Thoi gian gom nhom events truoc khi reload node (giay)
    watch_debounce_seconds: float = 0.1

    # --- File Operation Settings ---
    # Cac duoi file duoc phep "Run" (separated by newline)
    executable_extensions: str = field(default=_DEFAULT_EXECUTABLE_EXTENSIONS)
    # Chay copy/delete tren worker thread thay vi tree owner thread
    background_file_operations: bool = True

    # --- Document Settings ---
    # Document mo gan nhat (rong neu chua co)
    last_document: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppSettings":
        """
        Tao AppSettings tu dict, chi lay cac keys trung voi field names.

        Bao gom type validation: neu value co type khong khop voi
        field declaration, se bo qua va dung default thay the.

        Args:
            data: Dict settings (thuong tu settings.json)

        Returns:
            AppSettings instance voi values tu dict, fallback ve defaults
        """
        # Map field name -> expected type tu dataclass definition
        field_types: dict[str, Any] = {
            f.name: f.type for f in cls.__dataclass_fields__.values()
        }

        filtered: dict[str, Any] = {}
        for key, value in data.items():
            if key not in field_types:
                continue

            expected_type = field_types[key]

            # Xu ly truong hop type annotation la string (forward ref)
            if isinstance(expected_type, str):
                type_map = {"str": str, "bool": bool, "int": int, "float": float}
                expected_type = type_map.get(expected_type, str)

            # bool la subclass cua int -> khong chap nhan bool cho so
            if expected_type in (int, float) and isinstance(value, bool):
                continue

            # JSON khong phan biet 1 va 1.0
            if expected_type is float and isinstance(value, int):
                filtered[key] = float(value)
                continue

            origin = typing.get_origin(expected_type)
            check_type = origin if origin is not None else expected_type

            # Validate type cua value
            if isinstance(value, check_type):
                filtered[key] = value
            # Khong raise loi, chi bo qua value sai type -> dung default

        return cls(**filtered)

    def to_dict(self) -> dict[str, Any]:
        """
        Chuyen doi AppSettings thanh dict de luu xuong file.

        Returns:
            Dict voi toan bo settings
        """
        return {
            "show_hidden": self.show_hidden,
            "watch_debounce_seconds": self.watch_debounce_seconds,
            "executable_extensions": self.executable_extensions,
            "background_file_operations": self.background_file_operations,
            "last_document": self.last_document,
        }

    def get_executable_extensions(self) -> set[str]:
        """
        Parse executable_extensions string thanh set cac duoi file (lowercase).

        Loai bo dong trong va comments (bat dau bang #). Tu them dau cham
        neu user quen.

        Returns:
            Set duoi file da normalize, vd {".exe", ".bat"}
        """
        extensions: set[str] = set()
        for line in self.executable_extensions.splitlines():
            ext = line.strip().lower()
            if not ext or ext.startswith("#"):
                continue
            if not ext.startswith("."):
                ext = "." + ext
            extensions.add(ext)
        return extensions

    def get_last_document(self) -> Optional[str]:
        """Document mo lan truoc, None neu chua co hoac file khong con."""
        if self.last_document and os.path.isfile(self.last_document):
            return self.last_document
        return None
