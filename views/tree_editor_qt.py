"""
Tree Editor View (PySide6) - Hien thi NodeArena cua mot TreeController.

View chi render va chuyen user actions sang controller. Moi thay doi tree
den qua TreeChange listener; watch events duoc drain tren main thread
nho TreeTaskQueue wakeup + SignalBridge.
"""

from typing import Dict, Optional

from PySide6.QtCore import QPoint, Qt, Slot
from PySide6.QtWidgets import (
    QCheckBox,
    QFileDialog,
    QHBoxLayout,
    QMenu,
    QMessageBox,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from core.errors import TreeEditorError
from core.file_tree.node import NodeKind
from core.file_tree.operations import OperationResult
from core.logging_config import log_info
from core.utils.qt_utils import get_signal_bridge, run_on_main_thread
from services.service_container import ServiceContainer
from services.tree_controller import ChangeKind, ContextAction, TreeChange

_NODE_ID_ROLE = Qt.ItemDataRole.UserRole

_ACTION_LABELS = {
    ContextAction.REFRESH: "Refresh",
    ContextAction.RUN: "Run",
    ContextAction.COPY: "Copy",
    ContextAction.PASTE: "Paste",
    ContextAction.DELETE: "Delete",
}


class TreeEditorView(QWidget):
    """Mot tree editor document (dung lam MDI child)."""

    def __init__(self, container: ServiceContainer, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._container = container
        self._controller = container.controller
        self._items: Dict[int, QTreeWidgetItem] = {}
        self._syncing = False

        self._build_ui()

        # Bridge phai thuoc main thread truoc khi watcher threads goi wakeup
        get_signal_bridge()
        self._controller.add_change_listener(self._on_tree_changed)
        self._controller.task_queue.set_wakeup(
            lambda: run_on_main_thread(self._process_pending_tasks)
        )
        self.rebuild()

    @property
    def container(self) -> ServiceContainer:
        return self._container

    @property
    def controller(self):
        return self._controller

    # ── UI ────────────────────────────────────────────────────────
    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        toolbar = QHBoxLayout()
        add_btn = QPushButton("Add Folder...")
        add_btn.clicked.connect(self._add_folder)
        toolbar.addWidget(add_btn)

        self._hidden_toggle = QCheckBox("Show hidden files")
        self._hidden_toggle.setChecked(self._controller.show_hidden)
        self._hidden_toggle.toggled.connect(self._on_hidden_toggled)
        toolbar.addWidget(self._hidden_toggle)
        toolbar.addStretch()
        layout.addLayout(toolbar)

        self._tree = QTreeWidget()
        self._tree.setHeaderHidden(True)
        self._tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self._tree.customContextMenuRequested.connect(self._show_context_menu)
        self._tree.itemExpanded.connect(self._on_item_expanded)
        self._tree.itemCollapsed.connect(self._on_item_collapsed)
        self._tree.itemDoubleClicked.connect(self._on_item_double_clicked)
        layout.addWidget(self._tree)

    # ── Rendering ─────────────────────────────────────────────────
    def rebuild(self) -> None:
        """Render lai toan bo tree tu arena."""
        self._syncing = True
        try:
            self._tree.clear()
            self._items.clear()
            for root in self._controller.arena.roots():
                item = self._make_item(root.node_id)
                self._tree.addTopLevelItem(item)
                self._fill_children(item, root.node_id)
        finally:
            self._syncing = False

    def _make_item(self, node_id: int) -> QTreeWidgetItem:
        node = self._controller.arena.require(node_id)
        item = QTreeWidgetItem([node.display_name])
        item.setData(0, _NODE_ID_ROLE, node_id)
        if node.path:
            item.setToolTip(0, node.path)
        self._items[node_id] = item
        return item

    def _fill_children(self, item: QTreeWidgetItem, node_id: int) -> None:
        arena = self._controller.arena
        for child in arena.children_of(node_id):
            child_item = self._make_item(child.node_id)
            item.addChild(child_item)
            if child.kind is not NodeKind.PLACEHOLDER:
                self._fill_children(child_item, child.node_id)
        item.setExpanded(arena.require(node_id).expanded)

    def _forget_subtree(self, item: QTreeWidgetItem) -> None:
        stack = [item]
        while stack:
            current = stack.pop()
            self._items.pop(current.data(0, _NODE_ID_ROLE), None)
            stack.extend(current.child(i) for i in range(current.childCount()))

    def _on_tree_changed(self, change: TreeChange) -> None:
        if change.kind is ChangeKind.RESET:
            self.rebuild()
            return

        item = self._items.get(change.node_id)
        if item is None:
            return

        self._syncing = True
        try:
            if change.kind is ChangeKind.REMOVED:
                self._forget_subtree(item)
                parent = item.parent()
                if parent is not None:
                    parent.removeChild(item)
                else:
                    self._tree.takeTopLevelItem(self._tree.indexOfTopLevelItem(item))
            else:
                for child in item.takeChildren():
                    self._forget_subtree(child)
                self._fill_children(item, change.node_id)
        finally:
            self._syncing = False

    # ── Events ────────────────────────────────────────────────────
    @Slot(QTreeWidgetItem)
    def _on_item_expanded(self, item: QTreeWidgetItem) -> None:
        if self._syncing:
            return
        self._controller.expand(item.data(0, _NODE_ID_ROLE))

    @Slot(QTreeWidgetItem)
    def _on_item_collapsed(self, item: QTreeWidgetItem) -> None:
        if self._syncing:
            return
        self._controller.collapse(item.data(0, _NODE_ID_ROLE))

    @Slot(QTreeWidgetItem, int)
    def _on_item_double_clicked(self, item: QTreeWidgetItem, _column: int) -> None:
        node = self._controller.arena.get(item.data(0, _NODE_ID_ROLE))
        if node is not None and node.kind is NodeKind.FILE:
            self._controller.run(node.node_id)

    @Slot(bool)
    def _on_hidden_toggled(self, checked: bool) -> None:
        self._container.set_show_hidden(checked)

    @Slot()
    def _add_folder(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Add Folder")
        if folder:
            self._controller.add_root(folder)

    def _process_pending_tasks(self) -> None:
        self._controller.process_pending_tasks()

    # ── Context menu ──────────────────────────────────────────────
    @Slot(QPoint)
    def _show_context_menu(self, pos: QPoint) -> None:
        item = self._tree.itemAt(pos)
        if item is None:
            return
        node_id = item.data(0, _NODE_ID_ROLE)
        node = self._controller.arena.get(node_id)
        if node is None or node.kind is NodeKind.PLACEHOLDER:
            return

        menu = QMenu(self)
        for action in self._controller.context_actions(node_id):
            qaction = menu.addAction(_ACTION_LABELS[action])
            qaction.triggered.connect(
                lambda _checked=False, a=action: self._perform(node_id, a)
            )
        menu.exec(self._tree.viewport().mapToGlobal(pos))

    def _perform(self, node_id: int, action: ContextAction) -> None:
        if action is ContextAction.DELETE and not self._confirm_delete(node_id):
            return
        try:
            self._controller.perform_action(node_id, action, on_done=self._report_result)
        except TreeEditorError as e:
            QMessageBox.critical(self, "Error", str(e))

    def _confirm_delete(self, node_id: int) -> bool:
        node = self._controller.arena.require(node_id)
        reply = QMessageBox.question(
            self,
            "Delete",
            f"Delete '{node.path or node.display_name}'?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes

    def _report_result(self, result: OperationResult) -> None:
        log_info(f"[TreeEditorView] {result.summary()}")
        if not result.success:
            details = "\n".join(f"{f.path}: {f.message}" for f in result.failures[:10])
            QMessageBox.warning(self, result.operation.title(), f"{result.summary()}\n\n{details}")

    def shutdown(self) -> None:
        self._controller.task_queue.set_wakeup(None)
        self._controller.remove_change_listener(self._on_tree_changed)
        self._container.shutdown()
