import tempfile
import unittest
from pathlib import Path

from music_organizer.cache import ClassificationCache
from music_organizer.config import StageSettings
from music_organizer.models import AlbumInfo, Confidence, MainGenre, TrackMetadata
from music_organizer.organizer import PathGenerator
from music_organizer.strategy import ClassificationStrategy


class TestClassicalEndToEnd(unittest.TestCase):
    def test_vivaldi_with_metadata_stage_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp) / "library"
            cache = ClassificationCache(Path(tmp) / "cache.json")
            stages = StageSettings(metadata=True, dictionary=False, musicbrainz=False, discogs=False, ai=False)
            strategy = ClassificationStrategy(cache, stages=stages)

            album = AlbumInfo(artist="Antonio Vivaldi", album="Vivaldi: Four Seasons", genre="Classical")
            result = strategy.classify(album)

            self.assertEqual(result.main_genre, MainGenre.CLASSICAL)
            self.assertEqual(result.confidence, Confidence.HIGH)

            track = TrackMetadata(
                path=Path(tmp) / "in" / "01.flac",
                title="Spring: Allegro",
                artist="Antonio Vivaldi",
                album="Vivaldi: Four Seasons",
                genre="Classical",
                track_number=1,
            )
            generator = PathGenerator(base, use_performer_folders=False)
            generated = generator.generate(track, cache.get("Antonio Vivaldi", "Vivaldi: Four Seasons"))

            parts = generated.relative_path.parts
            self.assertEqual(parts[0], "Classical")
            self.assertEqual(parts[1], "Vivaldi, Antonio")
            self.assertEqual(parts[3], "Four Seasons")
            self.assertEqual(parts[4], "01 - Spring - Allegro.flac")
            self.assertEqual(len(parts), 5)


if __name__ == "__main__":
    unittest.main()
