import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from zipbackup.core.copier import copy_tree
from zipbackup.core.walker import count_files
from zipbackup.errors import FileCopyError


class TestCopier(unittest.TestCase):
    def test_copy_tree_mirrors_files(self):
        with tempfile.TemporaryDirectory() as tin, tempfile.TemporaryDirectory() as tout:
            src = Path(tin)
            dst = Path(tout) / "staging"

            (src / "geo").mkdir()
            (src / "empty").mkdir()
            (src / "top.txt").write_text("top")
            (src / "geo" / "mesh.bin").write_bytes(bytes(range(256)) * 700)  # bigger than one buffer

            calls = []
            copied = copy_tree(str(src), str(dst), progress_cb=lambda n, t: calls.append((n, t)))

            self.assertEqual(copied, 2)
            self.assertEqual((dst / "top.txt").read_text(), "top")
            self.assertEqual((dst / "geo" / "mesh.bin").read_bytes(), (src / "geo" / "mesh.bin").read_bytes())
            self.assertTrue((dst / "empty").is_dir())
            self.assertEqual(count_files(str(dst)), count_files(str(src)))
            self.assertEqual(calls, [(1, 2), (2, 2)])

    def test_existing_destination_is_overwritten(self):
        with tempfile.TemporaryDirectory() as tin, tempfile.TemporaryDirectory() as tout:
            src = Path(tin)
            dst = Path(tout)

            (src / "A.txt").write_text("new")
            (dst / "A.txt").write_text("existing and longer")

            copy_tree(str(src), str(dst))
            self.assertEqual((dst / "A.txt").read_text(), "new")

    def test_failure_aborts_remaining_files(self):
        with tempfile.TemporaryDirectory() as tin, tempfile.TemporaryDirectory() as tout:
            src = Path(tin)
            dst = Path(tout)
            for name in ("a.txt", "b.txt", "c.txt"):
                (src / name).write_text(name)

            from zipbackup.core import copier

            real_copy = copier._copy_file

            def failing_copy(s, d, *args, **kwargs):
                if Path(s).name == "b.txt":
                    raise PermissionError(13, "Permission denied", str(s))
                return real_copy(s, d, *args, **kwargs)

            calls = []
            with mock.patch("zipbackup.core.copier._copy_file", side_effect=failing_copy):
                with self.assertRaises(FileCopyError) as ctx:
                    copy_tree(str(src), str(dst), progress_cb=lambda n, t: calls.append((n, t)))

            self.assertEqual(ctx.exception.code, "FILE_IO_ERROR")
            self.assertEqual(ctx.exception.relpath, "b.txt")
            self.assertEqual(ctx.exception.reason, "Permission denied")
            self.assertTrue((dst / "a.txt").exists())
            self.assertFalse((dst / "c.txt").exists())
            self.assertEqual(calls, [(1, 3)])

    @unittest.skipUnless(hasattr(os, "symlink") and os.name != "nt", "needs POSIX symlinks")
    def test_symlinked_directory_is_staged(self):
        with tempfile.TemporaryDirectory() as tin, tempfile.TemporaryDirectory() as outside, \
                tempfile.TemporaryDirectory() as tout:
            src = Path(tin)
            (src / "a.txt").write_text("a")
            (Path(outside) / "photo.jpg").write_bytes(b"jpg-bytes")
            os.symlink(outside, str(src / "linked"))

            dst = Path(tout) / "staging"
            copied = copy_tree(str(src), str(dst))

            self.assertEqual(copied, 2)
            self.assertEqual((dst / "linked" / "photo.jpg").read_bytes(), b"jpg-bytes")
            self.assertFalse((dst / "linked").is_symlink())

    def test_unreadable_directory_is_skipped(self):
        with tempfile.TemporaryDirectory() as tin, tempfile.TemporaryDirectory() as tout:
            src = Path(tin)
            (src / "locked").mkdir()
            (src / "locked" / "secret.txt").write_text("s")
            (src / "ok.txt").write_text("ok")

            locked = str(src / "locked")
            real_scandir = os.scandir

            def scandir(path="."):
                if os.fspath(path) == locked:
                    raise PermissionError(13, "Permission denied", locked)
                return real_scandir(path)

            with mock.patch("os.scandir", side_effect=scandir):
                copied = copy_tree(str(src), tout)

            self.assertEqual(copied, 1)
            self.assertTrue((Path(tout) / "ok.txt").exists())
            self.assertFalse((Path(tout) / "locked" / "secret.txt").exists())


if __name__ == "__main__":
    unittest.main()
