"""
FileTree Editor - Main Application Entry Point

Usage:
    python main.py            # Mo PySide6 MDI window
    python main.py --debug    # Bat DEBUG logging (tuong duong FILETREE_DEBUG=1)
"""

import sys

from core.logging_config import set_debug_mode


def run() -> None:
    if "--debug" in sys.argv[1:]:
        set_debug_mode(True)
        sys.argv.remove("--debug")

    from main_window import main

    main()


if __name__ == "__main__":
    run()
