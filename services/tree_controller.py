"""
Tree Controller - Tree owner duy nhat cua NodeArena.

Dieu phoi Directory Loader, Watch Manager, Tree Document Codec va File
Operations theo yeu cau tu host UI (expand / collapse / refresh / copy /
paste / delete / run / save / load).

=== THREAD MODEL (DOC TRUOC KHI SUA) ===

1. Moi method mutate tree PHAI chay tren owner thread (thread tao ra
   controller). Goi tu thread khac -> TreeOwnershipError.

2. Watch events den tu watchdog/timer threads. Callback duy nhat ma
   controller dua cho Watch Manager la TreeTaskQueue.post_reload ->
   background threads KHONG BAO GIO cham vao arena.

3. Owner drain queue qua process_pending_tasks(). Reload cho path khong
   con duoc watch (node da collapse / da xoa) bi bo qua.

4. submit_paste / submit_delete chay file I/O tren ThreadPoolExecutor,
   chi buoc cap nhat tree cuoi cung duoc post lai queue.
"""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from config.app_settings import AppSettings
from core.errors import TreeOwnershipError
from core.file_tree.document import read_document, write_document
from core.file_tree.loader import (
    DirectoryListing,
    list_directory,
    list_drive_roots,
)
from core.file_tree.node import NodeArena, NodeKind, TreeNode
from core.file_tree.operations import (
    OperationResult,
    copy_to_clipboard,
    delete_path,
    paste_paths,
    path_exists,
    run_path,
)
from core.logging_config import log_debug, log_error, log_info, log_warning
from core.utils.task_queue import TreeTaskQueue
from services.clipboard_utils import InMemoryFileClipboard
from services.file_watcher_pkg.service import DirectoryWatchManager
from services.interfaces.file_watcher_service import IDirectoryWatchService
from services.service_interfaces import IFileClipboard

UNTITLED_DOCUMENT = "New document"


class RefreshOutcome(str, Enum):
    """Ket qua cua refresh()."""

    RELOADED = "reloaded"
    REMOVED = "removed"
    SKIPPED = "skipped"


class ContextAction(str, Enum):
    """Cac action trong context menu cua mot node."""

    REFRESH = "refresh"
    RUN = "run"
    COPY = "copy"
    PASTE = "paste"
    DELETE = "delete"


class ChangeKind(str, Enum):
    RELOADED = "reloaded"
    REMOVED = "removed"
    RESET = "reset"


@dataclass(frozen=True)
class TreeChange:
    """
    Thong bao cho host UI sau moi mutation.

    Attributes:
        kind: RELOADED (children cua node_id thay doi), REMOVED (node_id bi
              xoa khoi parent_id), RESET (toan bo tree thay doi)
        node_id: Node bi anh huong (None voi RESET)
        parent_id: Parent cua node bi xoa (None neu la top-level root)
    """

    kind: ChangeKind
    node_id: Optional[int] = None
    parent_id: Optional[int] = None


TreeChangeListener = Callable[[TreeChange], None]


class TreeController:
    """
    Tree owner: mutation duy nhat cua NodeArena di qua day.

    Usage:
        controller = TreeController(settings=load_app_settings())
        controller.load_drives()
        controller.expand(root.node_id)
        ...
        controller.process_pending_tasks()   # tren owner thread, dinh ky
        controller.shutdown()
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        watch_service: Optional[IDirectoryWatchService] = None,
        clipboard: Optional[IFileClipboard] = None,
        task_queue: Optional[TreeTaskQueue] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self._settings = settings or AppSettings()
        self._queue = task_queue or TreeTaskQueue()
        self._watcher: IDirectoryWatchService = watch_service or DirectoryWatchManager(
            debounce_seconds=self._settings.watch_debounce_seconds
        )
        self._clipboard: IFileClipboard = clipboard or InMemoryFileClipboard()
        self._executor = executor
        self._owns_executor = executor is None

        self._arena = NodeArena()
        self._owner_thread = threading.get_ident()
        self._show_hidden = self._settings.show_hidden
        self._document_path: Optional[str] = None

        # path -> node_id dang so huu watch cua path do
        self._watched: dict[str, int] = {}
        # Nodes da collapse (watch het hieu luc) -> expand lai phai reload
        self._stale: set[int] = set()
        self._listeners: List[TreeChangeListener] = []
        self.last_listing: Optional[DirectoryListing] = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def arena(self) -> NodeArena:
        """Arena hien tai (chi doc tu ben ngoai)."""
        return self._arena

    @property
    def task_queue(self) -> TreeTaskQueue:
        return self._queue

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def show_hidden(self) -> bool:
        return self._show_hidden

    @property
    def document_path(self) -> Optional[str]:
        return self._document_path

    @property
    def document_title(self) -> str:
        """Ten hien thi cua document (ten file, hoac 'New document')."""
        if self._document_path is None:
            return UNTITLED_DOCUMENT
        return os.path.basename(self._document_path)

    def add_change_listener(self, listener: TreeChangeListener) -> None:
        self._listeners.append(listener)

    def remove_change_listener(self, listener: TreeChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Roots
    # ------------------------------------------------------------------

    def load_drives(self) -> List[TreeNode]:
        """Them mot ROOT node (chua materialize) cho moi drive dang san sang."""
        self._ensure_owner()
        roots = [self._arena.add_root(path) for path in list_drive_roots()]
        log_info(f"[TreeController] Loaded {len(roots)} drive root(s)")
        self._notify(TreeChange(ChangeKind.RESET))
        return roots

    def add_root(self, path: Union[str, Path]) -> TreeNode:
        """Them mot thu muc bat ky lam top-level root."""
        self._ensure_owner()
        root = self._arena.add_root(os.path.abspath(str(path)))
        self._notify(TreeChange(ChangeKind.RESET))
        return root

    # ------------------------------------------------------------------
    # Expand / collapse / refresh
    # ------------------------------------------------------------------

    def expand(self, node_id: int) -> RefreshOutcome:
        """
        Expand node: materialize (neu can) va subscribe watch.

        Node chua materialize, hoac da collapse truoc do (watch da het
        hieu luc nen children co the da cu), se duoc reload.

        Returns:
            RELOADED / REMOVED (path da bien mat) / SKIPPED (khong reload)
        """
        self._ensure_owner()
        node = self._arena.require(node_id)
        if not node.is_directory:
            return RefreshOutcome.SKIPPED

        node.expanded = True
        outcome = RefreshOutcome.SKIPPED
        if not node.materialized or node_id in self._stale:
            outcome = self.refresh(node_id)
            if outcome is RefreshOutcome.REMOVED:
                return outcome

        self._watch(node)
        if node.watched:
            self._stale.discard(node_id)
        return outcome

    def collapse(self, node_id: int) -> None:
        """Collapse node va release watch ngay lap tuc (children giu nguyen)."""
        self._ensure_owner()
        node = self._arena.require(node_id)
        node.expanded = False
        if node.watched:
            self._release_watch(node)
            self._stale.add(node_id)

    def refresh(self, node_id: int) -> RefreshOutcome:
        """
        Chay lai Directory Loader va thay toan bo children cua node.

        Giu nguyen materialized/watch state cua chinh node. Watches cua
        cac descendants bi bo deu duoc release. Path khong con -> xoa node.
        """
        self._ensure_owner()
        node = self._arena.get(node_id)
        if node is None or not node.is_directory or node.path is None:
            return RefreshOutcome.SKIPPED

        listing = list_directory(node.path, include_hidden=self._show_hidden)
        self.last_listing = listing
        if not listing.found:
            log_info(f"[TreeController] {node.path} no longer exists, removing node")
            self._remove_node(node_id)
            return RefreshOutcome.REMOVED

        self._release_nodes(self._arena.replace_children(node_id))
        for entry in listing.entries:
            if entry.kind is NodeKind.DIRECTORY:
                self._arena.add_directory(entry.path, node_id)
            else:
                self._arena.add_file(entry.path, node_id)

        node.materialized = True
        # Khong co watch thi thay doi sau luc nay se bi bo lo -> expand sau phai reload
        if node.watched:
            self._stale.discard(node_id)
        else:
            self._stale.add(node_id)
        if listing.error:
            log_warning(f"[TreeController] {node.path} shown empty: {listing.error}")

        self._notify(TreeChange(ChangeKind.RELOADED, node_id))
        return RefreshOutcome.RELOADED

    def set_show_hidden(self, value: bool) -> None:
        """Bat/tat hien thi file an va reload tat ca expanded roots."""
        self._ensure_owner()
        if value == self._show_hidden:
            return
        self._show_hidden = value
        self._settings.show_hidden = value
        for root in self._arena.roots():
            if root.expanded:
                self.refresh(root.node_id)

    # ------------------------------------------------------------------
    # Task queue
    # ------------------------------------------------------------------

    def reload_path(self, path: str) -> RefreshOutcome:
        """
        Handler cho reload task tu watcher.

        Task cho path khong con duoc watch (collapse / delete da release
        watch) duoc bo qua nhu no-op.
        """
        self._ensure_owner()
        node_id = self._watched.get(path)
        node = self._arena.get(node_id) if node_id is not None else None
        if node is None or not node.watched:
            log_debug(f"[TreeController] Discarded reload for unwatched {path}")
            return RefreshOutcome.SKIPPED
        return self.refresh(node.node_id)

    def process_pending_tasks(self) -> int:
        """Drain task queue tren owner thread. Tra ve so task da chay."""
        self._ensure_owner()
        return self._queue.drain(self.reload_path)

    def wait_and_process(self, timeout: float) -> int:
        """Doi task (toi da timeout giay) roi drain. Dung cho headless/tests."""
        if self._queue.wait(timeout):
            return self.process_pending_tasks()
        return 0

    # ------------------------------------------------------------------
    # Context actions
    # ------------------------------------------------------------------

    def context_actions(self, node_id: int) -> List[ContextAction]:
        """Refresh chi hien voi node la thu muc ton tai tren disk."""
        node = self._arena.require(node_id)
        actions = list(ContextAction)
        if not (node.path and os.path.isdir(node.path)):
            actions.remove(ContextAction.REFRESH)
        return actions

    def perform_action(
        self,
        node_id: int,
        action: ContextAction,
        on_done: Optional[Callable[[OperationResult], None]] = None,
    ) -> object:
        """
        Dispatch mot context action.

        Paste/Delete chay background neu settings.background_file_operations.
        """
        if action is ContextAction.REFRESH:
            return self.refresh(node_id)
        if action is ContextAction.RUN:
            return self.run(node_id)
        if action is ContextAction.COPY:
            return self.copy(node_id)

        background = self._settings.background_file_operations
        if action is ContextAction.PASTE:
            if background:
                return self.submit_paste(node_id, on_done=on_done)
            result = self.paste(node_id)
        else:
            if background:
                return self.submit_delete(node_id, on_done=on_done)
            result = self.delete(node_id)

        if on_done is not None and result is not None:
            on_done(result)
        return result

    def run(self, node_id: int) -> bool:
        """Chay file node neu duoi file la executable."""
        node = self._arena.require(node_id)
        if node.path is None or node.is_directory:
            return False
        return run_path(node.path, self._settings.get_executable_extensions())

    def copy(self, node_id: int) -> bool:
        """Dat path cua node vao file reference list tren clipboard."""
        node = self._arena.require(node_id)
        return copy_to_clipboard(node.path, self._clipboard)

    def paste(
        self, node_id: int, sources: Optional[Sequence[str]] = None
    ) -> Optional[OperationResult]:
        """
        Paste file list (mac dinh lay tu clipboard) vao thu muc cua node.

        Returns:
            OperationResult, hoac None neu node khong phai thu muc / khong
            co gi de paste
        """
        self._ensure_owner()
        target, sources = self._prepare_paste(node_id, sources)
        if target is None:
            return None

        result = paste_paths(sources, target)
        self.refresh(node_id)
        return result

    def submit_paste(
        self,
        node_id: int,
        sources: Optional[Sequence[str]] = None,
        on_done: Optional[Callable[[OperationResult], None]] = None,
    ) -> Optional["Future[OperationResult]"]:
        """
        Nhu paste() nhung copy chay tren worker thread.

        Refresh node + on_done chay tren owner thread o lan drain ke tiep.
        """
        self._ensure_owner()
        target, sources = self._prepare_paste(node_id, sources)
        if target is None:
            return None

        future = self._get_executor().submit(paste_paths, list(sources), target)
        future.add_done_callback(
            lambda fut: self._queue.post(
                lambda: self._complete_paste(node_id, fut, on_done),
                description=f"paste into {target}",
            )
        )
        return future

    def delete(self, node_id: int) -> OperationResult:
        """
        Xoa entry tren disk (de quy) va xoa node khoi tree.

        Watches trong subtree duoc release TRUOC khi xoa.
        """
        self._ensure_owner()
        node = self._arena.require(node_id)
        path = self._begin_delete(node)
        result = delete_path(path) if path else OperationResult("delete", "")
        self._finish_delete(node_id, path, result)
        return result

    def submit_delete(
        self,
        node_id: int,
        on_done: Optional[Callable[[OperationResult], None]] = None,
    ) -> "Future[OperationResult]":
        """Nhu delete() nhung file I/O chay tren worker thread."""
        self._ensure_owner()
        node = self._arena.require(node_id)
        path = self._begin_delete(node)

        if path:
            future = self._get_executor().submit(delete_path, path)
        else:
            future = Future()
            future.set_result(OperationResult("delete", ""))

        def _on_future_done(fut: "Future[OperationResult]") -> None:
            self._queue.post(
                lambda: self._complete_delete(node_id, path, fut, on_done),
                description=f"delete {path}",
            )

        future.add_done_callback(_on_future_done)
        return future

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def new_document(self, load_drives: bool = True) -> None:
        """Bat dau document moi (tree rong, hoac drive roots)."""
        self._ensure_owner()
        self._install_arena(NodeArena())
        self._document_path = None
        if load_drives:
            self.load_drives()

    def load_document(self, file_path: Union[str, Path]) -> None:
        """
        Load tree document. Loi decode -> raise, tree hien tai giu nguyen.

        Raises:
            MalformedDocumentError, DocumentIOError
        """
        self._ensure_owner()
        arena = read_document(file_path)
        self._install_arena(arena)
        self._document_path = str(file_path)
        log_info(f"[TreeController] Loaded document {file_path} ({len(arena)} nodes)")

    def save_document(self, file_path: Optional[Union[str, Path]] = None) -> str:
        """
        Luu tree ra file (mac dinh vao document_path hien tai).

        Raises:
            ValueError: Chua co document_path va khong truyen file_path
            DocumentIOError: Khong ghi duoc file
        """
        self._ensure_owner()
        target = str(file_path) if file_path is not None else self._document_path
        if target is None:
            raise ValueError("No document path: choose a file to save to")
        write_document(self._arena, target)
        self._document_path = target
        return target

    def shutdown(self) -> None:
        """Release tat ca watches, dung executor, bo tasks dang pending."""
        self._watcher.shutdown_all()
        for node in self._arena.walk():
            node.watched = False
        self._watched.clear()

        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
        dropped = self._queue.clear()
        log_debug(f"[TreeController] Shutdown, dropped {dropped} pending task(s)")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ensure_owner(self) -> None:
        if threading.get_ident() != self._owner_thread:
            raise TreeOwnershipError(
                "Tree can only be mutated from the thread that owns it"
            )

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=2, thread_name_prefix="file-ops"
            )
        return self._executor

    def _notify(self, change: TreeChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                log_error(f"[TreeController] Change listener failed for {change}", e)

    def _watch(self, node: TreeNode) -> None:
        """Subscribe watch cho node (no-op neu path da co node khac watch)."""
        if node.path is None or node.watched:
            return
        owner_id = self._watched.get(node.path)
        if owner_id is not None and owner_id in self._arena:
            return
        if self._watcher.subscribe(node.path, self._queue.post_reload):
            self._watched[node.path] = node.node_id
            node.watched = True

    def _release_watch(self, node: TreeNode) -> None:
        node.watched = False
        if node.path is not None and self._watched.get(node.path) == node.node_id:
            del self._watched[node.path]
            self._watcher.unsubscribe(node.path)

    def _release_nodes(self, nodes: Iterable[TreeNode]) -> None:
        for node in nodes:
            if node.watched:
                self._release_watch(node)
            self._stale.discard(node.node_id)

    def _remove_node(self, node_id: int) -> None:
        parent_id = self._arena.require(node_id).parent_id
        self._release_nodes(self._arena.remove(node_id))
        self._notify(TreeChange(ChangeKind.REMOVED, node_id, parent_id))

    def _install_arena(self, arena: NodeArena) -> None:
        """Thay arena hien tai; release tat ca watches cua arena cu."""
        self._release_nodes(self._arena.walk())
        self._watcher.shutdown_all()
        self._watched.clear()
        self._stale.clear()
        self._queue.clear()
        self._arena = arena
        self._notify(TreeChange(ChangeKind.RESET))

    def _prepare_paste(
        self, node_id: int, sources: Optional[Sequence[str]]
    ) -> "tuple[Optional[str], List[str]]":
        node = self._arena.require(node_id)
        target = node.path
        if not node.is_directory or target is None or not os.path.isdir(target):
            log_debug(f"[TreeController] Paste target is not a folder: {target}")
            return None, []

        items = list(sources) if sources is not None else self._clipboard.get_file_list()
        if not items:
            log_debug("[TreeController] Nothing to paste")
            return None, []
        return target, items

    def _complete_paste(
        self,
        node_id: int,
        future: "Future[OperationResult]",
        on_done: Optional[Callable[[OperationResult], None]],
    ) -> None:
        try:
            result = future.result()
        except Exception as e:
            log_error("[TreeController] Background paste crashed", e)
            return
        finally:
            self.refresh(node_id)

        if on_done is not None:
            on_done(result)

    def _begin_delete(self, node: TreeNode) -> Optional[str]:
        """Release watches trong subtree de khong con reload nao cho no."""
        self._release_nodes(self._arena.walk(node.node_id))
        return node.path

    def _finish_delete(
        self, node_id: int, path: Optional[str], result: OperationResult
    ) -> None:
        node = self._arena.get(node_id)
        if node is None:
            return

        if not path_exists(path):
            self._remove_node(node_id)
            return

        # Xoa khong het -> hien thi phan con lai
        log_warning(f"[TreeController] {path} only partially deleted")
        if node.is_directory:
            self.refresh(node_id)
            if node.expanded:
                self._watch(node)

    def _complete_delete(
        self,
        node_id: int,
        path: Optional[str],
        future: "Future[OperationResult]",
        on_done: Optional[Callable[[OperationResult], None]],
    ) -> None:
        try:
            result = future.result()
        except Exception as e:
            log_error(f"[TreeController] Background delete crashed for {path}", e)
            result = OperationResult("delete", path or "")
        self._finish_delete(node_id, path, result)
        if on_done is not None:
            on_done(result)
