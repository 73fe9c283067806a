import unittest

from music_organizer.genre_table import GENRE_MAPPINGS, GenreMapping
from music_organizer.genres import classify_from_metadata, map_genre, normalize_genre_string
from music_organizer.models import ClassificationSource, Confidence, MainGenre


class TestGenreMapper(unittest.TestCase):
    def test_rock_resolves_to_the_same_entry_every_time(self) -> None:
        results = {map_genre("rock") for _ in range(20)}
        self.assertEqual(results, {(MainGenre.ROCK, "")})

    def test_exact_match_beats_earlier_substring_match(self) -> None:
        # "indie rock" contains "rock", but the Alternative entry lists it exactly.
        self.assertEqual(map_genre("Indie Rock"), (MainGenre.ALTERNATIVE, ""))

    def test_separators_and_whitespace_are_normalized(self) -> None:
        self.assertEqual(normalize_genre_string("  Trip_Hop / Down-tempo "), "trip hop down tempo")
        self.assertEqual(map_genre("Trip-Hop"), (MainGenre.ELECTRONIC, ""))

    def test_substring_fallback_goes_both_ways(self) -> None:
        table = (
            GenreMapping(MainGenre.POP, "", ("pop",)),
            GenreMapping(MainGenre.JAZZ, "", ("acid jazz",)),
        )
        self.assertEqual(map_genre("k-pop", table), (MainGenre.POP, ""))
        self.assertEqual(map_genre("jazz", table), (MainGenre.JAZZ, ""))

    def test_table_order_is_the_tie_break(self) -> None:
        first = GenreMapping(MainGenre.BLUES, "", ("soul blues",))
        second = GenreMapping(MainGenre.URBAN, "", ("soul",))
        self.assertEqual(map_genre("soul blues rock", (first, second)), (MainGenre.BLUES, ""))
        self.assertEqual(map_genre("soul blues rock", (second, first)), (MainGenre.URBAN, ""))

    def test_unmappable_input_returns_none(self) -> None:
        self.assertIsNone(map_genre(""))
        self.assertIsNone(map_genre("   "))
        self.assertIsNone(map_genre(None))
        self.assertIsNone(map_genre("zzzz qqqq"))

    def test_classical_and_soundtrack_rows_exist(self) -> None:
        self.assertEqual(map_genre("Classical"), (MainGenre.CLASSICAL, ""))
        self.assertEqual(map_genre("Original Soundtrack"), (MainGenre.SOUNDTRACKS, ""))
        mains = {mapping.main_genre for mapping in GENRE_MAPPINGS}
        self.assertEqual(mains, set(MainGenre))


class TestClassifyFromMetadata(unittest.TestCase):
    def test_mapped_tag_is_high_confidence_metadata_result(self) -> None:
        result = classify_from_metadata("Hard Rock")
        self.assertIsNotNone(result)
        self.assertEqual(result.main_genre, MainGenre.ROCK)
        self.assertEqual(result.source, ClassificationSource.METADATA)
        self.assertEqual(result.confidence, Confidence.HIGH)
        self.assertEqual(result.raw_data, {"originalGenre": "Hard Rock"})

    def test_missing_or_unknown_tag_yields_none(self) -> None:
        self.assertIsNone(classify_from_metadata(None))
        self.assertIsNone(classify_from_metadata("qqqq"))


if __name__ == "__main__":
    unittest.main()
