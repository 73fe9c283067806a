import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from music_organizer.fs_utils import file_checksum, path_exists, transfer_file


class TestFsUtils(unittest.TestCase):
    def test_path_exists_true_false(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            p = Path(tmpdir) / "file.txt"
            self.assertEqual(path_exists(p), False)
            p.write_text("x", encoding="utf-8")
            self.assertEqual(path_exists(p), True)

    def test_path_exists_when_parent_missing(self) -> None:
        self.assertEqual(path_exists(Path("/this/path/does/not/exist/file.txt")), False)

    def test_copy_creates_parents_and_verifies(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            source = tmp / "a.flac"
            source.write_bytes(b"audio")
            target = tmp / "out" / "deep" / "a.flac"
            result = transfer_file(source, target, mode="copy", verify=True)
            self.assertTrue(result.success)
            self.assertEqual(result.checksum, file_checksum(source))
            self.assertTrue(source.exists())
            self.assertEqual(target.read_bytes(), b"audio")

    def test_never_overwrites_existing_target(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            source = tmp / "a.flac"
            source.write_bytes(b"new")
            target = tmp / "b.flac"
            target.write_bytes(b"old")
            with self.assertLogs("music_organizer.fs_utils", level="WARNING"):
                result = transfer_file(source, target, mode="move")
            self.assertFalse(result.success)
            self.assertIn("already exists", result.error)
            self.assertEqual(target.read_bytes(), b"old")
            self.assertTrue(source.exists())

    def test_checksum_mismatch_removes_copy(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            source = tmp / "a.flac"
            source.write_bytes(b"audio")
            target = tmp / "b.flac"
            with patch("music_organizer.fs_utils.file_checksum", side_effect=["aaa", "bbb"]):
                with self.assertLogs("music_organizer.fs_utils", level="WARNING"):
                    result = transfer_file(source, target, mode="copy", verify=True)
            self.assertFalse(result.success)
            self.assertIn("Checksum mismatch", result.error)
            self.assertFalse(target.exists())

    def test_missing_source_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            with self.assertLogs("music_organizer.fs_utils", level="WARNING"):
                result = transfer_file(tmp / "nope.flac", tmp / "out.flac", verify=False)
            self.assertFalse(result.success)


if __name__ == "__main__":
    unittest.main()
