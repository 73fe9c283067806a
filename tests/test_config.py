import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from music_organizer.config import ProviderSettings, Settings, StageSettings, find_config, load_settings


class TestStageSettings(unittest.TestCase):
    def test_from_names(self) -> None:
        stages = StageSettings.from_names("metadata, musicbrainz", use_cache=False)
        self.assertEqual(stages.enabled(), ["metadata", "musicbrainz"])
        self.assertFalse(stages.use_cache)

    def test_all_enables_every_stage(self) -> None:
        self.assertEqual(
            StageSettings.from_names("all").enabled(),
            ["metadata", "dictionary", "musicbrainz", "discogs", "ai"],
        )

    def test_unknown_stage_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            StageSettings.from_names("metadata,lastfm")


class TestProviderSettings(unittest.TestCase):
    def test_discogs_budget(self) -> None:
        self.assertEqual(ProviderSettings().discogs_budget, 30)
        self.assertEqual(ProviderSettings(discogs_token="t").discogs_budget, 60)
        self.assertEqual(ProviderSettings(discogs_key="k").discogs_budget, 30)
        self.assertEqual(ProviderSettings(discogs_key="k", discogs_secret="s").discogs_budget, 60)

    def test_api_key_from_environment(self) -> None:
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}):
            self.assertEqual(ProviderSettings().anthropic_api_key, "sk-test")
            self.assertEqual(ProviderSettings(anthropic_api_key="own").anthropic_api_key, "own")


class TestLoading(unittest.TestCase):
    def test_yaml_sections(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text(
                "classification:\n"
                "  discogs: true\n"
                "organizer:\n"
                f"  target_root: {tmp}/organized\n"
                "  mode: move\n"
                "storage:\n"
                f"  cache_path: {tmp}/cache.json\n",
                encoding="utf-8",
            )
            settings = Settings.load(path)
            self.assertTrue(settings.classification.discogs)
            self.assertEqual(settings.organizer.mode, "move")
            self.assertEqual(settings.organizer.target_root, (Path(tmp) / "organized").resolve())
            self.assertEqual(settings.storage.cache_path, (Path(tmp) / "cache.json").resolve())

    def test_empty_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("", encoding="utf-8")
            settings = load_settings(path)
        self.assertTrue(settings.classification.metadata)
        self.assertFalse(settings.classification.ai)
        self.assertEqual(settings.organizer.mode, "copy")

    def test_missing_explicit_config(self) -> None:
        with self.assertRaises(FileNotFoundError):
            find_config(Path("/does/not/exist.yaml"))


if __name__ == "__main__":
    unittest.main()
