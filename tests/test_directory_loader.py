"""
Unit tests cho Directory Loader.

Test các chức năng:
- Directories truoc files
- Loc file an theo include_hidden
- Thu muc khong ton tai -> NOT_FOUND (khong raise)
- Permission error -> ACCESS_DENIED, entries rong
- Drive roots tu psutil
"""

import os
from collections import namedtuple
from unittest.mock import patch

from core.file_tree.loader import ListingStatus, list_directory, list_drive_roots
from core.file_tree.node import NodeKind

_Partition = namedtuple("_Partition", "device mountpoint fstype opts")


class TestListDirectory:
    """Test suite cho list_directory"""

    def test_directories_before_files(self, tmp_path):
        (tmp_path / "b.txt").write_text("b")
        (tmp_path / "a_dir").mkdir()
        (tmp_path / "c.txt").write_text("c")
        (tmp_path / "z_dir").mkdir()

        listing = list_directory(str(tmp_path))

        assert listing.status is ListingStatus.OK
        kinds = [e.kind for e in listing.entries]
        assert kinds == [NodeKind.DIRECTORY, NodeKind.DIRECTORY, NodeKind.FILE, NodeKind.FILE]
        assert {e.name for e in listing.entries[:2]} == {"a_dir", "z_dir"}
        assert {e.name for e in listing.entries[2:]} == {"b.txt", "c.txt"}

    def test_entries_have_full_paths(self, tmp_path):
        (tmp_path / "f.txt").write_text("x")
        listing = list_directory(str(tmp_path))
        assert listing.entries[0].path == os.path.join(str(tmp_path), "f.txt")

    def test_listing_is_stable_as_set(self, tmp_path):
        """Hai lan list lien tiep cho cung tap children"""
        for name in ("x", "y", "z"):
            (tmp_path / name).write_text(name)
        first = list_directory(str(tmp_path))
        second = list_directory(str(tmp_path))
        assert {e.path for e in first.entries} == {e.path for e in second.entries}

    def test_hidden_filtered_by_default(self, tmp_path):
        (tmp_path / ".secret").write_text("x")
        (tmp_path / ".git").mkdir()
        (tmp_path / "visible.txt").write_text("x")

        hidden_off = list_directory(str(tmp_path))
        hidden_on = list_directory(str(tmp_path), include_hidden=True)

        assert [e.name for e in hidden_off.entries] == ["visible.txt"]
        assert {e.name for e in hidden_on.entries} == {".secret", ".git", "visible.txt"}

    def test_empty_directory(self, tmp_path):
        listing = list_directory(str(tmp_path))
        assert listing.ok
        assert listing.entries == []

    def test_missing_directory_not_found(self, tmp_path):
        listing = list_directory(str(tmp_path / "gone"))
        assert listing.status is ListingStatus.NOT_FOUND
        assert not listing.found
        assert listing.entries == []

    def test_file_path_is_not_found(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        assert list_directory(str(f)).status is ListingStatus.NOT_FOUND

    def test_permission_error_access_denied(self, tmp_path):
        """PermissionError -> entries rong, status ACCESS_DENIED"""
        with patch("core.file_tree.loader.os.scandir", side_effect=PermissionError("denied")):
            listing = list_directory(str(tmp_path))

        assert listing.status is ListingStatus.ACCESS_DENIED
        assert listing.found
        assert listing.entries == []
        assert "denied" in listing.error

    def test_os_error_reported(self, tmp_path):
        with patch("core.file_tree.loader.os.scandir", side_effect=OSError("io")):
            listing = list_directory(str(tmp_path))
        assert listing.status is ListingStatus.ERROR
        assert listing.found


class TestListDriveRoots:
    def test_uses_existing_mountpoints(self, tmp_path):
        partitions = [
            _Partition("d1", str(tmp_path), "ext4", "rw"),
            _Partition("d2", str(tmp_path / "not-ready"), "iso9660", "ro"),
            _Partition("d3", str(tmp_path), "ext4", "rw"),
        ]
        with patch("core.file_tree.loader.psutil.disk_partitions", return_value=partitions):
            assert list_drive_roots() == [str(tmp_path)]

    def test_fallback_to_filesystem_root(self):
        with patch("core.file_tree.loader.psutil.disk_partitions", return_value=[]):
            assert list_drive_roots() == [os.path.abspath(os.sep)]
