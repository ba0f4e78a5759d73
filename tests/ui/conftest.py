"""Cau hinh pytest-qt cho UI tests.

Chay Qt o che do offscreen va thay watch service bang fake de tests
khong phu thuoc vao watchdog thread.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402

from config.app_settings import AppSettings  # noqa: E402
from services.clipboard_utils import InMemoryFileClipboard  # noqa: E402
from services.service_container import ServiceContainer  # noqa: E402
from tests.fake_services import FakeWatchService  # noqa: E402


@pytest.fixture(autouse=True)
def _no_qt_exception_capture(request):
    """Tat Qt exception capture cho tat ca UI tests.

    Signal bridge la global QObject, callbacks queued tu test truoc
    co the fire sau khi widget cua test do da bi destroy.
    """
    if hasattr(request, "node"):
        request.node.add_marker(pytest.mark.qt_no_exception_capture)


@pytest.fixture
def fake_watcher():
    return FakeWatchService()


@pytest.fixture
def container(fake_watcher):
    c = ServiceContainer(
        settings=AppSettings(background_file_operations=False),
        clipboard=InMemoryFileClipboard(),
        watch_service=fake_watcher,
    )
    yield c
    c.shutdown()


@pytest.fixture
def tree_view(qtbot, container):
    """Fixture tao TreeEditorView voi fake watch service."""
    from views.tree_editor_qt import TreeEditorView

    view = TreeEditorView(container)
    qtbot.addWidget(view)
    yield view
    view.shutdown()
