import hashlib
import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from music_organizer.app import OrganizerApp
from music_organizer.commands import analyze, classify, organize, plan
from music_organizer.config import OrganizerSettings, Settings, StageSettings, StorageSettings
from music_organizer.models import TrackMetadata
from music_organizer.scanner import LibraryScanner


class _FakeTagReader:
    def read(self, path: Path) -> TrackMetadata:
        number = int(path.stem)
        return TrackMetadata(
            path=path,
            title=f"Take {number}",
            artist="Miles Davis",
            album="Kind of Blue",
            genre="Jazz",
            year=1959,
            track_number=number,
        )


class TestLibraryWorkflow(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name).resolve()
        self.library = self.tmp / "library"
        album = self.library / "Miles Davis" / "Kind of Blue"
        album.mkdir(parents=True)
        for name in ("01.flac", "02.flac"):
            (album / name).write_bytes(name.encode("ascii"))
        settings = Settings(
            storage=StorageSettings(cache_path=self.tmp / "cache.json", dictionary_path=self.tmp / "dictionary.json"),
            organizer=OrganizerSettings(target_root=self.tmp / "organized", dry_run_delay_seconds=0),
        )
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": ""}):
            self.app = OrganizerApp.create(settings)
        self.app.scanner = LibraryScanner(settings.library, _FakeTagReader())
        self.app.open()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_classify_plan_organize(self) -> None:
        stages = StageSettings(metadata=True, dictionary=False, musicbrainz=False)
        with redirect_stdout(io.StringIO()) as out:
            report = classify.run(self.app, self.library, output=self.tmp / "report.json", stages=stages)
            reorganization = plan.run(self.app, self.library, output=self.tmp / "plan.json")
            summary = organize.run(self.app, self.tmp / "plan.json", mode="copy")
        self.app.close()

        self.assertEqual(report.statistics()["classified"], 1)
        self.assertIn("=== Classification Summary ===", out.getvalue())
        self.assertEqual(reorganization.summary.total_moves, 2)
        self.assertEqual(summary.success, 2)
        for move in reorganization.file_moves:
            self.assertTrue(move.target_path.exists())
            self.assertEqual(move.target_path.relative_to(self.tmp / "organized").parts[0], "Jazz")
            self.assertTrue(move.source_path.exists())
        self.assertTrue((self.tmp / "cache.json").exists())

    def test_plan_requires_classifications(self) -> None:
        with self.assertLogs("music_organizer.commands.plan", level="ERROR"):
            with self.assertRaises(SystemExit):
                plan.run(self.app, self.library, output=self.tmp / "plan.json")

    def test_dry_run_leaves_library_untouched(self) -> None:
        stages = StageSettings(metadata=True, dictionary=False, musicbrainz=False)
        with redirect_stdout(io.StringIO()) as out:
            classify.run(self.app, self.library, output=self.tmp / "report.json", stages=stages)
            plan.run(self.app, self.library, output=self.tmp / "plan.json")
            summary = organize.run(self.app, self.tmp / "plan.json", mode="move", dry_run=True)
        self.assertEqual(summary.success, 2)
        self.assertIn("DRY RUN completed", out.getvalue())
        self.assertFalse((self.tmp / "organized").exists())


    def test_backup_manifest_records_sources_before_moving(self) -> None:
        stages = StageSettings(metadata=True, dictionary=False, musicbrainz=False)
        with redirect_stdout(io.StringIO()) as out:
            classify.run(self.app, self.library, output=self.tmp / "report.json", stages=stages)
            reorganization = plan.run(self.app, self.library, output=self.tmp / "plan.json")
            organize.run(self.app, self.tmp / "plan.json", mode="move", backup=self.tmp / "backups")
        manifests = list((self.tmp / "backups").glob("backup-*/backup-manifest.json"))
        self.assertEqual(len(manifests), 1)
        self.assertIn("Backup manifest created", out.getvalue())
        manifest = json.loads(manifests[0].read_text(encoding="utf-8"))
        self.assertEqual(manifest["sourceLibrary"], str(self.library))
        self.assertEqual(manifest["targetLibrary"], str(self.tmp / "organized"))
        self.assertEqual(len(manifest["files"]), 2)
        for entry, move in zip(manifest["files"], reorganization.file_moves):
            self.assertEqual(entry["sourcePath"], str(move.source_path))
            self.assertEqual(entry["targetPath"], str(move.target_path))
            self.assertFalse(move.source_path.exists())
            expected = hashlib.md5(move.source_path.name.encode("ascii")).hexdigest()
            self.assertEqual(entry["checksum"], expected)

    def test_dry_run_writes_no_backup_manifest(self) -> None:
        stages = StageSettings(metadata=True, dictionary=False, musicbrainz=False)
        with redirect_stdout(io.StringIO()):
            classify.run(self.app, self.library, output=self.tmp / "report.json", stages=stages)
            plan.run(self.app, self.library, output=self.tmp / "plan.json")
            organize.run(self.app, self.tmp / "plan.json", dry_run=True, backup=self.tmp / "backups")
        self.assertFalse((self.tmp / "backups").exists())


class TestAnalyze(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name).resolve()
        self.library = self.tmp / "library"
        for album, names in (("Kind of Blue", ("01.flac", "02.flac")), ("Bitches Brew", ("03.flac",))):
            directory = self.library / "Miles Davis" / album
            directory.mkdir(parents=True)
            for name in names:
                (directory / name).write_bytes(b"")
        (self.library / "notes.txt").write_text("liner notes", encoding="utf-8")
        self.scanner = LibraryScanner(Settings().library, _FakeTagReader())
        self.output = self.tmp / "analysis-report.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_report_counts_albums_by_genre_artist_and_year(self) -> None:
        with redirect_stdout(io.StringIO()) as out:
            analyze.run(self.scanner, self.library, output=self.output)
        report = json.loads(self.output.read_text(encoding="utf-8"))
        self.assertEqual(report["libraryPath"], str(self.library))
        self.assertEqual(report["summary"], {"totalFiles": 4, "flacFiles": 3, "albums": 2, "errors": 0})
        self.assertEqual(report["statistics"]["byGenre"], {"Jazz": 2})
        self.assertEqual(report["statistics"]["byArtist"], {"Miles Davis": 2})
        self.assertEqual(report["statistics"]["byYear"], {"1959": 2})
        self.assertIn("=== Top Artists (by album count) ===", out.getvalue())
        self.assertIn("  Jazz: 2 albums", out.getvalue())

    def test_without_metadata_only_structure_is_counted(self) -> None:
        with redirect_stdout(io.StringIO()):
            report = analyze.run(self.scanner, self.library, output=self.output, read_tags=False)
        self.assertEqual(report["summary"]["albums"], 2)
        self.assertEqual(report["statistics"], {"byGenre": {}, "byArtist": {}, "byYear": {}})

    def test_non_recursive_scan_stays_at_the_top_level(self) -> None:
        with redirect_stdout(io.StringIO()):
            report = analyze.run(self.scanner, self.library, output=self.output, recursive=False)
        self.assertEqual(report["summary"], {"totalFiles": 1, "flacFiles": 0, "albums": 0, "errors": 0})

    def test_file_path_is_rejected(self) -> None:
        with self.assertRaises(SystemExit):
            analyze.run(self.scanner, self.library / "notes.txt", output=self.output)


if __name__ == "__main__":
    unittest.main()
