from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, Optional

from .models import ClassificationResult, ClassificationSource, Confidence, MainGenre

logger = logging.getLogger(__name__)

COMPOSER_PREFIX = re.compile(r"^([A-Z][a-zA-Z\s,\.]+)\s*:")


def normalize_artist_name(artist: str) -> str:
    """Dictionary key for an artist credit.

    Everything after the first comma is usually performers, so it is
    dropped, unless the first segment is too short to stand alone.
    """
    parts = artist.split(",")
    if len(parts[0].strip()) < 10 and len(parts) > 1:
        return ",".join(parts[:2]).strip()
    return parts[0].strip()


def extract_composer_from_album(album: str) -> Optional[str]:
    match = COMPOSER_PREFIX.match(album)
    if not match:
        return None
    composer = match.group(1).strip()
    if len(composer) <= 2 or len(composer) >= 50:
        return None
    if "Remaster" in composer or "Edition" in composer:
        return None
    return composer


class GenreDictionary:
    """Artist and composer genre tables generated from an earlier report.

    Loaded on first lookup and read-only afterwards.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._artists: Dict[str, MainGenre] = {}
        self._composers: Dict[str, MainGenre] = {}
        self._loaded = False

    def load(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self.path.exists():
            logger.debug("Genre dictionary not found at %s, skipping dictionary lookup", self.path)
            return
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            artists = {
                name.lower(): MainGenre.parse(genre)
                for name, genre in (data.get("artists") or {}).items()
            }
            composers = {
                name.lower(): MainGenre.parse(genre)
                for name, genre in (data.get("composers") or {}).items()
            }
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("Failed to load genre dictionary %s: %s", self.path, exc)
            return
        self._artists = artists
        self._composers = composers
        logger.info(
            "Loaded genre dictionary: %d artists, %d composers",
            len(self._artists),
            len(self._composers),
        )

    def lookup(self, artist: str, album: str) -> Optional[ClassificationResult]:
        self.load()
        artist_key = normalize_artist_name(artist).lower()
        genre = self._artists.get(artist_key)
        if genre:
            logger.debug("Dictionary hit (artist): %s -> %s", artist, genre.value)
            return self._result(genre, f"Known artist: {artist_key}")
        composer = extract_composer_from_album(album)
        if composer:
            genre = self._composers.get(composer.lower())
            if genre:
                logger.debug("Dictionary hit (composer): %s -> %s", composer, genre.value)
                return self._result(genre, f"Known composer: {composer}")
        return None

    def is_available(self) -> bool:
        self.load()
        return bool(self._artists or self._composers)

    @staticmethod
    def _result(genre: MainGenre, reasoning: str) -> ClassificationResult:
        return ClassificationResult(
            main_genre=genre,
            source=ClassificationSource.DICTIONARY,
            confidence=Confidence.HIGH,
            reasoning=reasoning,
        )
