"""
Unit tests cho File Operations (paste / delete / run).

Test các chức năng:
- Copy folder de quy vao thu muc dich (copy, khong move)
- Ghi de file trung ten
- Tu choi copy folder vao chinh no
- Loi tung item khong lam dung ca batch
- Xoa de quy
- Run chi voi executable extension
"""

import os
import shutil
import sys
from unittest.mock import patch

import pytest

from core.file_tree.operations import (
    copy_to_clipboard,
    delete_path,
    get_friendly_error,
    is_executable,
    paste_paths,
    path_exists,
    run_path,
)
from services.clipboard_utils import InMemoryFileClipboard


class TestPaste:
    def test_copy_folder_into_folder(self, tmp_path):
        """Copy /root/a vao /root/b -> /root/b/a/file.txt, /root/a/file.txt con nguyen"""
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.mkdir()
        b.mkdir()
        (a / "file.txt").write_text("hello")

        result = paste_paths([str(a)], str(b))

        assert result.success
        assert (b / "a" / "file.txt").read_text() == "hello"
        assert (a / "file.txt").exists()

    def test_copy_nested_folders(self, tmp_path):
        src = tmp_path / "src"
        (src / "x" / "y").mkdir(parents=True)
        (src / "x" / "y" / "deep.txt").write_text("deep")
        (src / "top.txt").write_text("top")
        dst = tmp_path / "dst"
        dst.mkdir()

        result = paste_paths([str(src)], str(dst))

        assert result.success
        assert (dst / "src" / "x" / "y" / "deep.txt").read_text() == "deep"
        assert (dst / "src" / "top.txt").read_text() == "top"
        assert len(result.processed) == 2

    def test_copy_single_file(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        dst = tmp_path / "dst"
        dst.mkdir()

        result = paste_paths([str(f)], str(dst))

        assert result.success
        assert (dst / "f.txt").read_text() == "x"

    def test_overwrite_existing_file(self, tmp_path):
        """File trung ten bi ghi de, khong hoi"""
        src = tmp_path / "src"
        src.mkdir()
        (src / "f.txt").write_text("new")
        dst = tmp_path / "dst"
        (dst / "src").mkdir(parents=True)
        (dst / "src" / "f.txt").write_text("old")
        (dst / "src" / "keep.txt").write_text("keep")

        result = paste_paths([str(src)], str(dst))

        assert result.success
        assert (dst / "src" / "f.txt").read_text() == "new"
        assert (dst / "src" / "keep.txt").read_text() == "keep"

    def test_refuse_copy_into_itself(self, tmp_path):
        src = tmp_path / "src"
        (src / "child").mkdir(parents=True)

        result = paste_paths([str(src)], str(src / "child"))

        assert not result.success
        assert result.failures[0].path == str(src)
        assert not (src / "child" / "src").exists()

    def test_missing_source_does_not_abort_batch(self, tmp_path):
        good = tmp_path / "good.txt"
        good.write_text("ok")
        dst = tmp_path / "dst"
        dst.mkdir()

        result = paste_paths([str(tmp_path / "missing.txt"), str(good)], str(dst))

        assert len(result.failures) == 1
        assert (dst / "good.txt").exists()
        assert "1 failed" in result.summary()

    def test_failed_file_does_not_abort_folder_copy(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "a.txt").write_text("a")
        (src / "b.txt").write_text("b")
        dst = tmp_path / "dst"
        dst.mkdir()

        real_copy2 = shutil.copy2

        def flaky_copy(s, d, *args, **kwargs):
            if s.endswith("a.txt"):
                raise PermissionError(13, "Permission denied", s)
            return real_copy2(s, d, *args, **kwargs)

        with patch("core.file_tree.operations.shutil.copy2", side_effect=flaky_copy):
            result = paste_paths([str(src)], str(dst))

        assert [f.path for f in result.failures] == [str(src / "a.txt")]
        assert result.failures[0].message.startswith("Permission denied")
        assert (dst / "src" / "b.txt").exists()

    def test_target_missing(self, tmp_path):
        result = paste_paths([str(tmp_path)], str(tmp_path / "nope"))
        assert not result.success
        assert result.processed == []


class TestDelete:
    def test_delete_folder_recursive(self, tmp_path):
        target = tmp_path / "target"
        (target / "sub" / "deeper").mkdir(parents=True)
        (target / "sub" / "deeper" / "f.txt").write_text("x")
        (target / "g.txt").write_text("y")

        result = delete_path(str(target))

        assert result.success
        assert not target.exists()
        assert "target" not in os.listdir(tmp_path)

    def test_delete_file(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")

        result = delete_path(str(f))

        assert result.success
        assert result.processed == [str(f)]
        assert not f.exists()

    def test_delete_missing_path_is_noop(self, tmp_path):
        result = delete_path(str(tmp_path / "missing"))
        assert result.success
        assert result.processed == []

    @pytest.mark.skipif(sys.platform == "win32", reason="symlink can quyen admin")
    def test_delete_does_not_follow_symlinks(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")
        target = tmp_path / "target"
        target.mkdir()
        os.symlink(outside, target / "link")

        result = delete_path(str(target))

        assert result.success
        assert not target.exists()
        assert (outside / "keep.txt").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="symlink can quyen admin")
    def test_paste_copies_directory_symlink_as_link(self, tmp_path):
        """Link tro nguoc len thu muc cha khong bi copy lap vo han."""
        src = tmp_path / "a"
        src.mkdir()
        (src / "file.txt").write_text("hello")
        os.symlink(src, src / "loop")
        dest = tmp_path / "b"
        dest.mkdir()

        result = paste_paths([str(src)], str(dest))

        assert result.success
        copied_link = dest / "a" / "loop"
        assert copied_link.is_symlink()
        assert os.readlink(copied_link) == str(src)
        assert (dest / "a" / "file.txt").read_text() == "hello"
        assert set(result.processed) == {str(dest / "a" / "file.txt"), str(copied_link)}

    def test_partial_failure_reported(self, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        (target / "locked.txt").write_text("x")
        (target / "free.txt").write_text("y")

        real_remove = os.remove

        def flaky_remove(path):
            if str(path).endswith("locked.txt"):
                raise PermissionError(13, "Permission denied", path)
            real_remove(path)

        with patch("core.file_tree.operations.os.remove", side_effect=flaky_remove):
            result = delete_path(str(target))

        assert not result.success
        assert [f.path for f in result.failures] == [str(target / "locked.txt")]
        assert not (target / "free.txt").exists()
        assert (target / "locked.txt").exists()

    def test_failure_in_sibling_with_common_prefix_does_not_hide_rmdir_error(self, tmp_path):
        """Loi trong x/dd khong che loi rmdir cua x/d."""
        target = tmp_path / "x"
        (target / "d").mkdir(parents=True)
        (target / "dd").mkdir()
        (target / "dd" / "locked.txt").write_text("x")

        real_remove = os.remove
        real_rmdir = os.rmdir

        def flaky_remove(path):
            if str(path).endswith("locked.txt"):
                raise PermissionError(13, "Permission denied", path)
            real_remove(path)

        def flaky_rmdir(path):
            if str(path) == str(target / "d"):
                raise PermissionError(13, "Permission denied", path)
            real_rmdir(path)

        with patch("core.file_tree.operations.os.remove", side_effect=flaky_remove), patch(
            "core.file_tree.operations.os.rmdir", side_effect=flaky_rmdir
        ):
            result = delete_path(str(target))

        failed = {f.path for f in result.failures}
        assert str(target / "dd" / "locked.txt") in failed
        assert str(target / "d") in failed


class TestRun:
    def test_is_executable(self, tmp_path):
        exe = tmp_path / "tool.EXE"
        exe.write_text("")
        txt = tmp_path / "notes.txt"
        txt.write_text("")

        assert is_executable(str(exe), {".exe"})
        assert not is_executable(str(txt), {".exe"})
        assert not is_executable(str(tmp_path / "missing.exe"), {".exe"})

    def test_run_non_executable_is_noop(self, tmp_path):
        txt = tmp_path / "notes.txt"
        txt.write_text("")
        with patch("core.file_tree.operations.popen_subprocess") as mock_popen:
            assert run_path(str(txt), {".exe"}) is False
        mock_popen.assert_not_called()

    @pytest.mark.skipif(sys.platform == "win32", reason="Windows dung os.startfile")
    def test_run_executable_launches_process(self, tmp_path):
        script = tmp_path / "tool.sh"
        script.write_text("")
        with patch("core.file_tree.operations.popen_subprocess") as mock_popen:
            assert run_path(str(script), {".sh"}) is True
        mock_popen.assert_called_once_with([str(script)], cwd=str(tmp_path))

    @pytest.mark.skipif(sys.platform == "win32", reason="Windows dung os.startfile")
    def test_run_failure_returns_false(self, tmp_path):
        script = tmp_path / "tool.sh"
        script.write_text("")
        with patch(
            "core.file_tree.operations.popen_subprocess",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            assert run_path(str(script), {".sh"}) is False


class TestCopy:
    def test_copy_replaces_file_list(self, tmp_path):
        clipboard = InMemoryFileClipboard()
        clipboard.set_file_list(["/old"])

        assert copy_to_clipboard(str(tmp_path), clipboard) is True
        assert clipboard.get_file_list() == [str(tmp_path)]

    def test_copy_missing_path_keeps_clipboard(self, tmp_path):
        clipboard = InMemoryFileClipboard()
        clipboard.set_file_list(["/old"])

        assert copy_to_clipboard(str(tmp_path / "missing"), clipboard) is False
        assert clipboard.get_file_list() == ["/old"]


class TestHelpers:
    def test_path_exists(self, tmp_path):
        assert path_exists(str(tmp_path))
        assert not path_exists(str(tmp_path / "missing"))
        assert not path_exists(None)
        assert not path_exists("")

    def test_friendly_errors(self):
        assert get_friendly_error(PermissionError("x")).startswith("Permission denied")
        assert get_friendly_error(OSError("No space left on device")).startswith(
            "Disk full"
        )
        assert get_friendly_error(OSError("weird")) == "weird"
