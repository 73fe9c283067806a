import tempfile
import unittest
from pathlib import Path

from music_organizer.config import LibrarySettings
from music_organizer.models import TrackMetadata
from music_organizer.scanner import AlbumBatch, LibraryScanner


class _FakeTagReader:
    def __init__(self, tags) -> None:
        self.tags = tags

    def read(self, path: Path) -> TrackMetadata:
        values = self.tags.get(path.name)
        if values is None:
            raise ValueError("unreadable")
        return TrackMetadata(path=path, **values)


class TestLibraryScanner(unittest.TestCase):
    def test_scan_groups_tracks_by_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            album = root / "Artist" / "Album"
            album.mkdir(parents=True)
            for name in ("02.flac", "01.flac", "cover.jpg", "broken.flac"):
                (album / name).write_bytes(b"")
            (root / "skip").mkdir()
            (root / "skip" / "x.flac").write_bytes(b"")

            reader = _FakeTagReader(
                {
                    "01.flac": {"artist": "Artist", "album": "Album", "title": "One", "track_number": 1, "year": 2001},
                    "02.flac": {"artist": "Artist", "album": "Album", "title": "Two", "track_number": 2},
                }
            )
            settings = LibrarySettings(exclude_patterns=["*/skip/*"])
            with self.assertLogs("music_organizer.scanner", level="WARNING"):
                result = LibraryScanner(settings, reader).scan(root)

            self.assertEqual(result.total_files, 5)
            self.assertEqual(len(result.tracks), 2)
            self.assertEqual(len(result.errors), 1)
            self.assertEqual(result.errors[0].path.name, "broken.flac")

            albums = result.albums()
            self.assertEqual(len(albums), 1)
            self.assertEqual([t.title for t in albums[0].tracks], ["One", "Two"])
            info = albums[0].to_album_info()
            self.assertEqual(info.key, "Artist||Album")
            self.assertEqual(info.year, 2001)
            self.assertEqual(info.tracks, ["One", "Two"])

    def test_non_recursive_scan_without_tags(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "top.flac").write_bytes(b"")
            (root / "Album").mkdir()
            (root / "Album" / "01.flac").write_bytes(b"")
            result = LibraryScanner(LibrarySettings(), _FakeTagReader({})).scan(root, recursive=False, read_tags=False)
            self.assertEqual(result.total_files, 1)
            self.assertEqual(result.errors, [])
            self.assertEqual([track.path.name for track in result.tracks], ["top.flac"])
            self.assertIsNone(result.tracks[0].artist)

    def test_missing_root_is_an_error(self) -> None:
        result = LibraryScanner(LibrarySettings(), _FakeTagReader({})).scan(Path("/no/such/library"))
        self.assertEqual(result.tracks, [])
        self.assertEqual(result.errors[0].error, "Path does not exist")

    def test_album_without_tags_has_no_info(self) -> None:
        batch = AlbumBatch(directory=Path("/x"), tracks=[TrackMetadata(path=Path("/x/01.flac"), artist="A")])
        self.assertIsNone(batch.to_album_info())


if __name__ == "__main__":
    unittest.main()
