from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from .models import ClassificationResult, ClassificationSource, Confidence, MainGenre

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0"
KEY_SEPARATOR = "||"
UNKNOWN_YEAR = "unknown"


def cache_key(artist: str, album: str, year: Optional[int] = None) -> str:
    return KEY_SEPARATOR.join(
        [artist.lower().strip(), album.lower().strip(), str(year) if year else UNKNOWN_YEAR]
    )


@dataclass(slots=True)
class CacheEntry:
    """One classification with the artist, album and year it was stored under."""

    artist: str
    album: str
    year: Optional[int]
    result: ClassificationResult


class ClassificationCache:
    """Album classifications keyed by normalized artist, album and year.

    The whole document is rewritten on ``save``. Concurrent writers are not
    supported; the orchestrator classifies albums one at a time.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._entries: Dict[str, CacheEntry] = {}

    def load(self) -> None:
        if not self.path.exists():
            logger.info("No cache file found at %s, starting with empty cache", self.path)
            return
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            loaded: Dict[str, CacheEntry] = {}
            for entry in data.get("entries", []):
                artist, album, year = entry["artist"], entry["album"], entry.get("year")
                loaded[cache_key(artist, album, year)] = CacheEntry(
                    artist, album, year, ClassificationResult.from_record(entry["result"])
                )
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Failed to load cache %s: %s", self.path, exc)
            return
        self._entries.update(loaded)
        logger.info("Loaded %d cached classifications", len(self._entries))

    def save(self) -> None:
        entries = []
        for stored in self._entries.values():
            entry: Dict[str, Any] = {"artist": stored.artist, "album": stored.album}
            if stored.year:
                entry["year"] = stored.year
            entry["result"] = stored.result.to_record()
            entries.append(entry)
        payload = {"version": CACHE_VERSION, "entries": entries}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)
        logger.info("Saved %d classifications to cache", len(entries))

    def get(self, artist: str, album: str, year: Optional[int] = None) -> Optional[ClassificationResult]:
        stored = self._entries.get(cache_key(artist, album, year))
        return stored.result if stored else None

    def set(
        self,
        artist: str,
        album: str,
        result: ClassificationResult,
        year: Optional[int] = None,
    ) -> None:
        self._entries[cache_key(artist, album, year)] = CacheEntry(artist.strip(), album.strip(), year, result)

    def has(self, artist: str, album: str, year: Optional[int] = None) -> bool:
        return cache_key(artist, album, year) in self._entries

    def override(
        self,
        artist: str,
        album: str,
        main_genre: MainGenre,
        subgenre: Optional[str] = None,
        year: Optional[int] = None,
        reasoning: Optional[str] = None,
    ) -> ClassificationResult:
        """Replace any stored result with a human decision."""
        previous = self.get(artist, album, year)
        result = ClassificationResult(
            main_genre=main_genre,
            subgenre=subgenre or None,
            source=ClassificationSource.MANUAL,
            confidence=Confidence.HIGH,
            reasoning=reasoning or "Manual override",
            raw_data={"previous": previous.to_record()} if previous else None,
        )
        self.set(artist, album, result, year)
        return result

    def items(self) -> Iterator[Tuple[str, ClassificationResult]]:
        return ((key, stored.result) for key, stored in self._entries.items())

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
