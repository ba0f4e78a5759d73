"""
FileTree Editor - PySide6 Main Window (MDI host)

Moi MDI child la mot TreeEditorView voi ServiceContainer rieng.
Menu File: New / Open / Save / Save As / Exit.
"""

import sys
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Slot
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMdiArea,
    QMdiSubWindow,
    QMessageBox,
)

from config.paths import DOCUMENT_EXTENSION, DOCUMENT_FILE_FILTER
from core.errors import TreeEditorError
from core.logging_config import log_error, log_info
from core.utils.qt_utils import QtFileClipboard, get_signal_bridge
from services.service_container import ServiceContainer
from services.settings_manager import load_app_settings
from views.tree_editor_qt import TreeEditorView


class TreeEditorMainWindow(QMainWindow):
    """Main application window: MDI area chua cac tree documents."""

    APP_TITLE = "FileTree Editor"

    def __init__(self) -> None:
        super().__init__()
        self._clipboard = QtFileClipboard()

        self._mdi = QMdiArea(self)
        self._mdi.setViewMode(QMdiArea.ViewMode.TabbedView)
        self._mdi.setTabsClosable(True)
        self.setCentralWidget(self._mdi)

        self._build_menu()
        self.setWindowTitle(self.APP_TITLE)
        self.resize(1000, 720)
        self.statusBar()

    # ── Menu ──────────────────────────────────────────────────────
    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        for label, shortcut, handler in (
            ("&New", QKeySequence.StandardKey.New, self.new_document),
            ("&Open...", QKeySequence.StandardKey.Open, self.open_document),
            ("&Save", QKeySequence.StandardKey.Save, self.save_document),
            ("Save &As...", QKeySequence.StandardKey.SaveAs, self.save_document_as),
        ):
            action = QAction(label, self)
            action.setShortcut(shortcut)
            action.triggered.connect(handler)
            file_menu.addAction(action)

        file_menu.addSeparator()
        exit_action = QAction("E&xit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

    # ── Documents ─────────────────────────────────────────────────
    def _create_view(self) -> TreeEditorView:
        container = ServiceContainer(clipboard=self._clipboard)
        view = TreeEditorView(container)
        sub = self._mdi.addSubWindow(view)
        sub.destroyed.connect(lambda _obj=None, v=view: v.shutdown())
        return view

    def _active_view(self) -> Optional[TreeEditorView]:
        sub: Optional[QMdiSubWindow] = self._mdi.activeSubWindow()
        if sub is None:
            return None
        widget = sub.widget()
        return widget if isinstance(widget, TreeEditorView) else None

    def _update_title(self, view: TreeEditorView) -> None:
        sub = self._mdi.activeSubWindow()
        if sub is not None:
            sub.setWindowTitle(view.controller.document_title)

    @Slot()
    def new_document(self) -> None:
        view = self._create_view()
        view.controller.new_document()
        view.parentWidget().setWindowTitle(view.controller.document_title)
        view.show()

    @Slot()
    def open_document(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open Tree", "", DOCUMENT_FILE_FILTER
        )
        if file_path:
            self.open_path(file_path)

    def open_path(self, file_path: str, show_errors: bool = True) -> bool:
        """Mo tree document trong sub-window moi. Tra ve False neu load loi."""
        view = self._create_view()
        try:
            view.controller.load_document(file_path)
        except TreeEditorError as e:
            log_error(f"[MainWindow] Cannot open {file_path}", e)
            view.parentWidget().close()
            if show_errors:
                QMessageBox.critical(self, "Open", f"Cannot open {file_path}:\n{e}")
            return False

        view.parentWidget().setWindowTitle(view.controller.document_title)
        view.show()
        view.container.remember_document(file_path)
        return True

    def restore_last_document(self) -> None:
        """Mo lai document lan truoc, neu khong duoc thi tao document moi."""
        last_document = load_app_settings().get_last_document()
        if last_document and self.open_path(last_document, show_errors=False):
            return
        self.new_document()

    @Slot()
    def save_document(self) -> None:
        view = self._active_view()
        if view is None:
            return
        if view.controller.document_path is None:
            self.save_document_as()
            return
        self._write(view, view.controller.document_path)

    @Slot()
    def save_document_as(self) -> None:
        view = self._active_view()
        if view is None:
            return
        file_path, _ = QFileDialog.getSaveFileName(
            self, "Save Tree", "", DOCUMENT_FILE_FILTER
        )
        if not file_path:
            return
        if not Path(file_path).suffix:
            file_path += DOCUMENT_EXTENSION
        self._write(view, file_path)

    def _write(self, view: TreeEditorView, file_path: str) -> None:
        try:
            view.controller.save_document(file_path)
        except TreeEditorError as e:
            QMessageBox.critical(self, "Save", f"Cannot save {file_path}:\n{e}")
            return
        view.container.remember_document(file_path)
        self._update_title(view)
        self.statusBar().showMessage(f"Saved {file_path}", 3000)

    def closeEvent(self, event) -> None:
        for sub in self._mdi.subWindowList():
            widget = sub.widget()
            if isinstance(widget, TreeEditorView):
                widget.shutdown()

        from core.logging_config import flush_logs

        flush_logs()
        event.accept()


def main() -> None:
    """Entry point for FileTree Editor."""
    from config.paths import ensure_app_directories

    ensure_app_directories()

    app = QApplication(sys.argv)
    app.setApplicationName("FileTree Editor")

    # Initialize global signal bridge on main thread
    get_signal_bridge()

    window = TreeEditorMainWindow()
    window.show()
    window.restore_last_document()
    log_info("[MainWindow] Started")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
