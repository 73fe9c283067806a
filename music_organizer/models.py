from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class MainGenre(Enum):
    ROCK = "Rock"
    ALTERNATIVE = "Alternative"
    ELECTRONIC = "Electronic"
    DANCE = "Dance"
    URBAN = "Urban"
    JAZZ = "Jazz"
    BLUES = "Blues"
    WORLD_FOLK = "World & Folk"
    POP = "Pop"
    CLASSICAL = "Classical"
    SOUNDTRACKS = "Soundtracks"

    @classmethod
    def parse(cls, value: str) -> "MainGenre":
        """Resolve a display name (case-insensitive) or an enum member name."""
        if isinstance(value, cls):
            return value
        cleaned = (value or "").strip()
        for member in cls:
            if cleaned.lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown main genre: {value!r}")


class ClassificationSource(Enum):
    METADATA = "flac-metadata"
    DICTIONARY = "dictionary"
    MUSICBRAINZ = "musicbrainz"
    DISCOGS = "discogs"
    AI = "ai"
    MANUAL = "manual"


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class ConflictType(Enum):
    DUPLICATE_PATH = "duplicate-path"
    MISSING_METADATA = "missing-metadata"
    # Reserved for ambiguity checks that are not produced yet.
    AMBIGUOUS_CLASSIFICATION = "ambiguous-classification"
    MULTIPLE_ARTISTS = "multiple-artists"
    UNKNOWN_GENRE = "unknown-genre"
    LOW_CONFIDENCE = "low-confidence"
    MISSING_PERFORMER = "missing-performer"
    DUPLICATE_RECORDING = "duplicate-recording"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """One genre decision for an album.

    For ``MainGenre.CLASSICAL`` the subgenre is a work category (Opera,
    Symphonies, ...) and never a composer name.
    """

    main_genre: MainGenre
    source: ClassificationSource
    confidence: Confidence
    subgenre: Optional[str] = None
    reasoning: Optional[str] = None
    raw_data: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def genre_pair(self) -> tuple[MainGenre, str]:
        return self.main_genre, self.subgenre or ""

    def with_confidence(
        self, confidence: Confidence, reasoning: Optional[str] = None
    ) -> "ClassificationResult":
        return replace(
            self,
            confidence=confidence,
            reasoning=reasoning if reasoning is not None else self.reasoning,
        )

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "mainGenre": self.main_genre.value,
            "subgenre": self.subgenre,
            "source": self.source.value,
            "confidence": self.confidence.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.reasoning is not None:
            record["reasoning"] = self.reasoning
        if self.raw_data is not None:
            record["rawData"] = self.raw_data
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ClassificationResult":
        timestamp = record.get("timestamp")
        parsed_ts = utcnow()
        if isinstance(timestamp, str) and timestamp:
            parsed_ts = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        return cls(
            main_genre=MainGenre.parse(record["mainGenre"]),
            subgenre=record.get("subgenre") or None,
            source=ClassificationSource(record["source"]),
            confidence=Confidence(record["confidence"]),
            reasoning=record.get("reasoning"),
            raw_data=record.get("rawData"),
            timestamp=parsed_ts,
        )


@dataclass(slots=True)
class TrackMetadata:
    path: Path
    title: Optional[str] = None
    artist: Optional[str] = None
    album_artist: Optional[str] = None
    album: Optional[str] = None
    composer: Optional[str] = None
    conductor: Optional[str] = None
    orchestra: Optional[str] = None
    ensemble: Optional[str] = None
    soloist: Optional[str] = None
    genre: Optional[str] = None
    catalog_number: Optional[str] = None
    year: Optional[int] = None
    track_number: Optional[int] = None
    disc_number: Optional[int] = None

    def has_performer_info(self) -> bool:
        return bool(self.conductor or self.orchestra or self.ensemble or self.artist)


@dataclass(slots=True)
class AlbumInfo:
    artist: str
    album: str
    year: Optional[int] = None
    genre: Optional[str] = None
    tracks: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.artist}||{self.album}"


@dataclass(slots=True)
class FileMove:
    source_path: Path
    target_path: Path
    artist: Optional[str] = None
    album: Optional[str] = None
    title: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "sourcePath": str(self.source_path),
            "targetPath": str(self.target_path),
            "artist": self.artist,
            "album": self.album,
            "title": self.title,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "FileMove":
        return cls(
            source_path=Path(record["sourcePath"]),
            target_path=Path(record["targetPath"]),
            artist=record.get("artist"),
            album=record.get("album"),
            title=record.get("title"),
        )


@dataclass(slots=True)
class Conflict:
    type: ConflictType
    files: List[Path]
    suggestion: str = ""

    def to_record(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "files": [str(path) for path in self.files],
            "suggestion": self.suggestion,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Conflict":
        return cls(
            type=ConflictType(record["type"]),
            files=[Path(p) for p in record.get("files", [])],
            suggestion=record.get("suggestion") or "",
        )


def parse_int(value: object) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        if "/" in cleaned:
            cleaned = cleaned.split("/", 1)[0].strip()
        if cleaned.isdigit():
            return int(cleaned)
        return None
    as_str = str(value).strip()
    if as_str.isdigit():
        return int(as_str)
    return None


def parse_year(value: object) -> Optional[int]:
    """Leading four-digit year from DATE-style tags ("1969-09-26" -> 1969)."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if len(text) >= 4 and text[:4].isdigit():
        return int(text[:4])
    return None
