import tempfile
import threading
import unittest
import zipfile
from pathlib import Path

from zipbackup.core.backup import next_action, run_copy, run_package
from zipbackup.core.backup_log import read_log
from zipbackup.core.progress import ProgressCounter
from zipbackup.core.staging import cleanup, is_packaging_ready, staging_root
from zipbackup.errors import MissingStagingDirectory, SourceNotFound, SourceOrDestinationUnset


class TestStaging(unittest.TestCase):
    def test_readiness_follows_disk(self):
        with tempfile.TemporaryDirectory() as td:
            self.assertFalse(is_packaging_ready(td))
            self.assertFalse(is_packaging_ready(""))

            staging = staging_root(td)
            staging.mkdir()
            self.assertFalse(is_packaging_ready(td))  # empty

            (staging / "x.txt").write_text("x")
            self.assertTrue(is_packaging_ready(td))
            self.assertTrue(is_packaging_ready(td))  # no caching surprises
            self.assertEqual(next_action(td), "package")

            (staging / "x.txt").unlink()
            self.assertFalse(is_packaging_ready(td))
            self.assertEqual(next_action(td), "copy")

    def test_staging_file_is_not_a_directory(self):
        with tempfile.TemporaryDirectory() as td:
            staging_root(td).write_text("not a folder")
            self.assertFalse(is_packaging_ready(td))

    def test_cleanup_removes_tree(self):
        with tempfile.TemporaryDirectory() as td:
            staging = staging_root(td)
            (staging / "a" / "b").mkdir(parents=True)
            (staging / "a" / "b" / "f.txt").write_text("f")
            (staging / "g.txt").write_text("g")

            cleanup(str(staging))
            self.assertFalse(staging.exists())

            # already gone: still fine
            cleanup(str(staging))


class TestProgressCounter(unittest.TestCase):
    def test_advance_notifies_sink(self):
        calls = []
        counter = ProgressCounter(3, lambda n, t: calls.append((n, t)))
        for _ in range(3):
            counter.advance()
        self.assertEqual(calls, [(1, 3), (2, 3), (3, 3)])
        self.assertEqual(counter.value, 3)

    def test_concurrent_advances_are_unique(self):
        seen = []
        counter = ProgressCounter(1000, lambda n, t: seen.append(n))

        def work():
            for _ in range(250):
                counter.advance()

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sorted(seen), list(range(1, 1001)))


class TestBackupRuns(unittest.TestCase):
    def test_copy_then_package_round_trip(self):
        with tempfile.TemporaryDirectory() as tin, tempfile.TemporaryDirectory() as tout:
            src = Path(tin)
            (src / "sub").mkdir()
            (src / "a.txt").write_bytes(b"12345")
            (src / "sub" / "b.txt").write_bytes(b"67890")

            copy_summary = run_copy(str(src), tout)
            self.assertEqual(copy_summary.copied, 2)
            self.assertTrue(is_packaging_ready(tout))
            self.assertEqual((Path(tout) / "staging" / "sub" / "b.txt").read_bytes(), b"67890")

            calls = []
            summary = run_package(tout, 8, progress_cb=lambda n, t: calls.append((n, t)))

            self.assertEqual(summary.total, 2)
            self.assertEqual(summary.archived, 2)
            self.assertEqual(len(summary.archives), 2)
            self.assertEqual(calls, [(1, 2), (2, 2)])

            with zipfile.ZipFile(Path(tout) / "backup_1.zip") as zf:
                self.assertEqual(zf.read("staging/a.txt"), b"12345")
            with zipfile.ZipFile(Path(tout) / "backup_2.zip") as zf:
                self.assertEqual(zf.read("staging/sub/b.txt"), b"67890")

            # staging removed: back to "ready to copy"
            self.assertFalse((Path(tout) / "staging").exists())
            self.assertFalse(is_packaging_ready(tout))

            lines = read_log(tout)
            self.assertEqual(sum(1 for l in lines if l.startswith("Arquivo ZIP: ")), 2)
            self.assertEqual(sum(1 for l in lines if l.startswith(" - ")), 2)

    def test_log_is_appended_across_runs(self):
        with tempfile.TemporaryDirectory() as tin, tempfile.TemporaryDirectory() as tout:
            (Path(tin) / "a.txt").write_text("a")

            run_copy(tin, tout)
            run_package(tout, 1024)
            run_copy(tin, tout)
            run_package(tout, 1024)

            lines = read_log(tout)
            self.assertEqual(sum(1 for l in lines if l.startswith("Backup realizado em: ")), 2)
            self.assertEqual(lines.count(" - staging/a.txt"), 2)

    def test_package_without_staging(self):
        with tempfile.TemporaryDirectory() as tout:
            with self.assertRaises(MissingStagingDirectory) as ctx:
                run_package(tout, 1024)

            self.assertEqual(ctx.exception.code, "STAGING_MISSING")
            self.assertEqual(list(Path(tout).glob("backup_*.zip")), [])
            self.assertFalse(is_packaging_ready(tout))

    def test_unset_paths(self):
        with self.assertRaises(SourceOrDestinationUnset):
            run_copy("", "/tmp")
        with self.assertRaises(SourceOrDestinationUnset):
            run_copy("/tmp", "  ")
        with self.assertRaises(SourceOrDestinationUnset):
            run_package("", 1024)

    def test_missing_source(self):
        with tempfile.TemporaryDirectory() as tout:
            with self.assertRaises(SourceNotFound):
                run_copy(str(Path(tout) / "nope"), tout)
            self.assertFalse((Path(tout) / "staging").exists())


if __name__ == "__main__":
    unittest.main()
