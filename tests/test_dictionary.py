import json
import tempfile
import unittest
from pathlib import Path

from music_organizer.dictionary import (
    GenreDictionary,
    extract_composer_from_album,
    normalize_artist_name,
)
from music_organizer.models import ClassificationSource, Confidence, MainGenre


class TestDictionaryHelpers(unittest.TestCase):
    def test_normalize_artist_keeps_two_segments_for_short_names(self) -> None:
        self.assertEqual(normalize_artist_name("I Musici, Membri, Others"), "I Musici, Membri")
        self.assertEqual(
            normalize_artist_name("English Baroque Soloists, John Eliot Gardiner"),
            "English Baroque Soloists",
        )
        self.assertEqual(normalize_artist_name("Portishead"), "Portishead")

    def test_extract_composer_from_album(self) -> None:
        self.assertEqual(extract_composer_from_album("Bach: Brandenburg Concertos"), "Bach")
        self.assertIsNone(extract_composer_from_album("No colon here"))
        self.assertIsNone(extract_composer_from_album("Ab: too short"))
        self.assertIsNone(extract_composer_from_album("Deluxe Edition: Bonus"))
        self.assertIsNone(extract_composer_from_album("lowercase: start"))


class TestGenreDictionary(unittest.TestCase):
    def _write(self, tmp: str) -> Path:
        path = Path(tmp) / "genre-dictionary.json"
        path.write_text(
            json.dumps(
                {
                    "artists": {"Dead Can Dance": "World & Folk", "I Musici, Membri": "Classical"},
                    "composers": {"Mozart": "Classical"},
                    "metadata": {"version": "1.0.0"},
                }
            ),
            encoding="utf-8",
        )
        return path

    def test_artist_hit(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dictionary = GenreDictionary(self._write(tmp))
            result = dictionary.lookup("dead can dance", "Into the Labyrinth")
            self.assertIsNotNone(result)
            self.assertEqual(result.main_genre, MainGenre.WORLD_FOLK)
            self.assertEqual(result.source, ClassificationSource.DICTIONARY)
            self.assertEqual(result.confidence, Confidence.HIGH)
            self.assertIsNone(result.subgenre)

    def test_short_ensemble_name_keeps_second_segment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dictionary = GenreDictionary(self._write(tmp))
            result = dictionary.lookup("I Musici, Membri, Felix Ayo", "Le Quattro Stagioni")
            self.assertEqual(result.main_genre, MainGenre.CLASSICAL)

    def test_composer_fallback_and_miss(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dictionary = GenreDictionary(self._write(tmp))
            result = dictionary.lookup("Some Orchestra", "Mozart: Requiem")
            self.assertEqual(result.main_genre, MainGenre.CLASSICAL)
            self.assertIn("Mozart", result.reasoning)
            self.assertIsNone(dictionary.lookup("Unknown Band", "Debut"))
            self.assertTrue(dictionary.is_available())

    def test_missing_file_means_no_hits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dictionary = GenreDictionary(Path(tmp) / "absent.json")
            self.assertIsNone(dictionary.lookup("Anyone", "Anything"))
            self.assertFalse(dictionary.is_available())

    def test_malformed_file_is_logged(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "genre-dictionary.json"
            path.write_text("[]", encoding="utf-8")
            dictionary = GenreDictionary(path)
            with self.assertLogs("music_organizer.dictionary", level="WARNING"):
                self.assertIsNone(dictionary.lookup("Anyone", "Anything"))


if __name__ == "__main__":
    unittest.main()
