from __future__ import annotations

import json
import logging
import re
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .cache import KEY_SEPARATOR
from .composers import known_surnames, remove_diacritics
from .dictionary import extract_composer_from_album, normalize_artist_name
from .models import ClassificationResult, ClassificationSource, Confidence, MainGenre, utcnow
from .strategy import pick_best_result

logger = logging.getLogger(__name__)

DICTIONARY_VERSION = "1.0.0"


@dataclass(slots=True)
class ReportEntry:
    artist: str
    album: str
    result: ClassificationResult

    def to_record(self) -> Dict[str, Any]:
        return {
            "artist": self.artist,
            "album": self.album,
            "mainGenre": self.result.main_genre.value,
            "subgenre": self.result.subgenre,
            "source": self.result.source.value,
            "confidence": self.result.confidence.value,
            "reasoning": self.result.reasoning,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ReportEntry":
        return cls(
            artist=record["artist"],
            album=record["album"],
            result=ClassificationResult.from_record(record),
        )


@dataclass(slots=True)
class ClassificationReport:
    """Per-album outcome of a ``classify`` run, persisted as JSON."""

    library_path: Path
    entries: List[ReportEntry] = field(default_factory=list)
    total_albums: int = 0
    timestamp: datetime = field(default_factory=utcnow)

    @classmethod
    def build(
        cls,
        library_path: Path,
        results: Mapping[str, ClassificationResult],
        total_albums: int,
    ) -> "ClassificationReport":
        """``results`` is keyed by ``AlbumInfo.key`` (``artist||album``)."""
        entries = []
        for key, result in results.items():
            artist, _, album = key.partition(KEY_SEPARATOR)
            entries.append(ReportEntry(artist=artist, album=album, result=result))
        return cls(library_path=library_path, entries=entries, total_albums=total_albums)

    def statistics(self) -> Dict[str, Any]:
        by_source = {source.value: 0 for source in ClassificationSource}
        by_confidence = {confidence.value: 0 for confidence in Confidence}
        by_genre: Counter[str] = Counter()
        for entry in self.entries:
            by_source[entry.result.source.value] += 1
            by_confidence[entry.result.confidence.value] += 1
            by_genre[entry.result.main_genre.value] += 1
        total = max(self.total_albums, len(self.entries))
        return {
            "total": total,
            "classified": len(self.entries),
            "unclassified": total - len(self.entries),
            "bySource": by_source,
            "byConfidence": by_confidence,
            "byMainGenre": dict(by_genre.most_common()),
        }

    def to_record(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "libraryPath": str(self.library_path),
            "statistics": self.statistics(),
            "classifications": [entry.to_record() for entry in self.entries],
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ClassificationReport":
        timestamp = record.get("timestamp")
        stats = record.get("statistics") or {}
        entries = [ReportEntry.from_record(item) for item in record.get("classifications", [])]
        return cls(
            library_path=Path(record.get("libraryPath", "")),
            entries=entries,
            total_albums=int(stats.get("total", len(entries))),
            timestamp=datetime.fromisoformat(timestamp.replace("Z", "+00:00")) if timestamp else utcnow(),
        )

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(self.to_record(), fh, indent=2, ensure_ascii=False)
        logger.info("Report saved to %s", path)

    @classmethod
    def load(cls, path: Path) -> "ClassificationReport":
        with path.open("r", encoding="utf-8") as fh:
            report = cls.from_record(json.load(fh))
        logger.info("Loaded %d classifications from %s", len(report.entries), path)
        return report


def generate_dictionary(report: ClassificationReport, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Artist and composer genre tables for ``GenreDictionary``.

    The first classification seen for an artist wins; composers are only
    collected from Classical albums.
    """
    artists: Dict[str, str] = {}
    composers: Dict[str, str] = {}
    for entry in report.entries:
        artist = normalize_artist_name(entry.artist)
        genre = entry.result.main_genre
        artists.setdefault(artist, genre.value)
        if genre is MainGenre.CLASSICAL:
            composer = extract_composer_from_album(entry.album)
            if composer:
                composers[composer] = MainGenre.CLASSICAL.value
    return {
        "artists": artists,
        "composers": composers,
        "metadata": {
            "generated": (now or utcnow()).isoformat(),
            "totalArtists": len(artists),
            "totalComposers": len(composers),
            "version": DICTIONARY_VERSION,
        },
    }


def write_dictionary(document: Mapping[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(document, fh, indent=2, ensure_ascii=False)
    logger.info("Dictionary written to %s", path)


@dataclass(slots=True)
class ArtistGenres:
    artist: str
    genres: Dict[str, List[ReportEntry]]

    @property
    def total_albums(self) -> int:
        return sum(len(albums) for albums in self.genres.values())

    @property
    def dominant_genre(self) -> str:
        return max(self.genres.items(), key=lambda item: len(item[1]))[0]


def find_inconsistent_artists(report: ClassificationReport) -> List[ArtistGenres]:
    """Artists whose albums were classified into more than one main genre."""
    by_artist: Dict[str, Dict[str, List[ReportEntry]]] = {}
    for entry in report.entries:
        genres = by_artist.setdefault(entry.artist, {})
        genres.setdefault(entry.result.main_genre.value, []).append(entry)
    inconsistent = [
        ArtistGenres(artist=artist, genres=genres)
        for artist, genres in by_artist.items()
        if len(genres) > 1
    ]
    inconsistent.sort(key=lambda item: len(item.genres), reverse=True)
    return inconsistent


def render_consistency_report(inconsistent: Sequence[ArtistGenres]) -> str:
    lines = [
        "# Genre Consistency Report",
        "",
        f"Found {len(inconsistent)} artists with inconsistent genres",
        "",
        "---",
        "",
    ]
    for item in inconsistent:
        lines.append(f"## {item.artist}")
        lines.append("")
        lines.append(f"**Total albums:** {item.total_albums}  ")
        lines.append(f"**Split across {len(item.genres)} genres**")
        lines.append("")
        for index, (genre, entries) in enumerate(item.genres.items(), start=1):
            lines.append(f"### [{index}] {genre} ({len(entries)} albums)")
            lines.append("")
            for entry in entries:
                subgenre = f" → {entry.result.subgenre}" if entry.result.subgenre else ""
                lines.append(f"- **{entry.album}**{subgenre} [{entry.result.source.value}]")
                if entry.result.reasoning:
                    lines.append(f"  > {entry.result.reasoning}")
            lines.append("")
        lines.append(f"**Recommendation:** Most albums ({item.dominant_genre}) should be the correct genre.")
        lines.append("")
        lines.append("---")
        lines.append("")
    return "\n".join(lines)


def _composer_prefix(album: str) -> Optional[str]:
    candidates = {album, remove_diacritics(album)}
    for surname in known_surnames():
        pattern = re.compile(rf"^{re.escape(surname)}\s*:", re.IGNORECASE)
        if any(pattern.match(candidate) for candidate in candidates):
            return surname
    return None


def fix_classical_misclassifications(report: ClassificationReport) -> int:
    """Relabel albums titled ``Composer: Work`` as Classical. Returns the number fixed."""
    fixed = 0
    for entry in report.entries:
        if entry.result.main_genre is MainGenre.CLASSICAL:
            continue
        composer = _composer_prefix(entry.album)
        if composer is None:
            continue
        logger.info(
            "Fixing: %s -> Classical | %s - %s",
            entry.result.main_genre.value,
            entry.artist,
            entry.album,
        )
        entry.result = replace(
            entry.result,
            main_genre=MainGenre.CLASSICAL,
            subgenre=None,
            source=ClassificationSource.MANUAL,
            reasoning=f"Album title starts with composer: {composer.title()}",
        )
        fixed += 1
    return fixed


def consolidate(reports: Iterable[ClassificationReport]) -> ClassificationReport:
    """Merge several reports, keeping the best result per (artist, album)."""
    reports = list(reports)
    if not reports:
        raise ValueError("Nothing to consolidate")
    grouped: Dict[Tuple[str, str], List[ClassificationResult]] = {}
    for report in reports:
        for entry in report.entries:
            grouped.setdefault((entry.artist, entry.album), []).append(entry.result)
    entries = []
    for (artist, album), results in grouped.items():
        best = pick_best_result(results)
        if best is not None:
            entries.append(ReportEntry(artist=artist, album=album, result=best))
    total = max(max(report.total_albums for report in reports), len(entries))
    logger.info("Consolidated %d reports into %d classifications", len(reports), len(entries))
    return ClassificationReport(library_path=reports[0].library_path, entries=entries, total_albums=total)
