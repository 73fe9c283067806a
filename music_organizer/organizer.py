from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .composers import FAMOUS_COMPOSER_SURNAMES, lookup_composer, normalize_composer_name
from .models import ClassificationResult, MainGenre, TrackMetadata
from .path_utils import format_album, format_artist, format_composer, format_track, sanitize, surname

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"
UNKNOWN_TRACK = "Unknown Track"
UNKNOWN_WORK = "Unknown Work"
UNKNOWN_COMPOSER = "Unknown Composer"
UNKNOWN_GENRE = "Unknown"

# Ordered: the first keyword found in the album (or title) text decides.
WORK_CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("concerto",), "Concertos"),
    (("symphony",), "Symphonies"),
    (("sonata",), "Sonatas"),
    (("quartet",), "Chamber Music"),
    (("opera", "carmen"), "Opera"),
    (("mass", "requiem"), "Sacred Music"),
    (("suite",), "Suites"),
    (("prelude", "fugue"), "Keyboard Works"),
)
DEFAULT_WORK_CATEGORY = "Other Works"

ORCHESTRA_ABBREVIATIONS: Tuple[Tuple[str, str], ...] = (
    ("London Symphony Orchestra", "LSO"),
    ("Berlin Philharmonic", "BPO"),
    ("Vienna Philharmonic", "VPO"),
    ("New York Philharmonic", "NYPO"),
    ("Royal Concertgebouw Orchestra", "RCO"),
    ("Chicago Symphony Orchestra", "CSO"),
    ("Boston Symphony Orchestra", "BSO"),
)

MAX_DASH_PREFIX = 30

_COLON_PREFIX = re.compile(r"^([^:]+):")
_DASH_PREFIX = re.compile(r"^([^-]+)-")
_GENERIC_NAME_PREFIX = re.compile(r"^[A-Z][a-z]+\s+[A-Z][a-z]+\s*:\s*", re.IGNORECASE)


@dataclass(frozen=True)
class GeneratedPath:
    full_path: Path
    directory: Path
    filename: str
    relative_path: Path


def _leading_known_composer(words: Sequence[str], *, two_word_min: int) -> Optional[str]:
    if lookup_composer(words[0]):
        return words[0]
    if len(words) >= two_word_min:
        pair = f"{words[0]} {words[1]}"
        if lookup_composer(pair):
            return pair
    return None


def composer_from_colon_prefix(title: str) -> Optional[str]:
    """``"Six Evolutions - Bach: Cello Suites"`` -> ``"Bach"``."""
    match = _COLON_PREFIX.match(title)
    if not match:
        return None
    composer = match.group(1).strip()
    if " - " in composer:
        composer = composer.split(" - ")[-1].strip()
    words = composer.split()
    if len(words) > 1:
        known = _leading_known_composer(words, two_word_min=2)
        if known:
            return known
    return composer or None


def composer_from_dash_prefix(title: str) -> Optional[str]:
    match = _DASH_PREFIX.match(title)
    if match and len(match.group(1)) < MAX_DASH_PREFIX:
        return match.group(1).strip() or None
    return None


def composer_from_leading_words(title: str) -> Optional[str]:
    """``"Purcell Dido and Aeneas"`` -> ``"Purcell"``."""
    words = title.split()
    if len(words) < 2:
        return None
    return _leading_known_composer(words, two_word_min=3)


COMPOSER_TITLE_RULES: Tuple[Tuple[str, Callable[[str], Optional[str]]], ...] = (
    ("colon-prefix", composer_from_colon_prefix),
    ("dash-prefix", composer_from_dash_prefix),
    ("leading-known-name", composer_from_leading_words),
)


def extract_composer_from_album_title(title: str) -> Optional[str]:
    for name, rule in COMPOSER_TITLE_RULES:
        composer = rule(title)
        if composer:
            logger.debug("Composer %r from album title via %s", composer, name)
            return composer
    return None


def extract_composer_from_artist(artist: str) -> Optional[str]:
    """Pick the credit that names a famous composer, else the first credit."""
    parts = [part.strip() for part in artist.split(",")]
    for part in parts:
        lowered = part.lower()
        if any(name in lowered for name in FAMOUS_COMPOSER_SURNAMES):
            return part
    return parts[0] or None


def canonical_composer(composer: str) -> str:
    return format_composer(normalize_composer_name(composer))


def clean_album_title(album: str, composer: str) -> str:
    """Remove the composer's name from the front of a classical album title."""
    escaped = re.escape(composer)
    cleaned = re.sub(rf"^{escaped}\s*:\s*", "", album, flags=re.IGNORECASE)
    cleaned = re.sub(rf"^.*\s-\s{escaped}\s*:\s*", "", cleaned, flags=re.IGNORECASE)
    parts = [part.strip() for part in composer.split(",")]
    for part in parts:
        cleaned = re.sub(rf"^{re.escape(part)}\s*:\s*", "", cleaned, flags=re.IGNORECASE)
    if len(parts) == 2:
        reversed_name = re.escape(f"{parts[1]} {parts[0]}")
        cleaned = re.sub(rf"^{reversed_name}\s*:\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = _GENERIC_NAME_PREFIX.sub("", cleaned)
    if cleaned == album:
        cleaned = re.sub(rf"^{escaped}\s+", "", cleaned, flags=re.IGNORECASE)
    return cleaned.strip()


def detect_work_category(text: str) -> str:
    lowered = text.lower()
    for keywords, category in WORK_CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_WORK_CATEGORY


def abbreviate_orchestra(orchestra: str) -> str:
    for full_name, abbreviation in ORCHESTRA_ABBREVIATIONS:
        if full_name in orchestra:
            return abbreviation
    return orchestra


def performer_folder(meta: TrackMetadata) -> str:
    """``"Conductor - Ensemble (Year)"`` built from the classical credits.

    Without a conductor the album artist stands in, so opera casts with
    many soloists still share one folder.
    """
    parts: List[str] = []
    if meta.conductor:
        parts.append(surname(meta.conductor))
    if meta.orchestra:
        parts.append(abbreviate_orchestra(meta.orchestra))
    elif meta.ensemble:
        parts.append(meta.ensemble)
    elif not meta.conductor:
        performer = meta.album_artist or meta.artist
        if performer:
            parts.append(surname(performer))
    name = " - ".join(parts)
    if meta.year:
        name += f" ({meta.year})"
    return sanitize(name)


class PathGenerator:
    """Maps a classified track onto its place in the organized library."""

    def __init__(self, base_path: Path, *, use_performer_folders: bool = True) -> None:
        self.base_path = base_path
        self.use_performer_folders = use_performer_folders

    def generate(self, meta: TrackMetadata, classification: ClassificationResult) -> GeneratedPath:
        if classification.main_genre is MainGenre.CLASSICAL:
            components = self._classical_components(meta, classification)
        else:
            components = self._modern_components(meta, classification)
        directory = self.base_path.joinpath(*components)
        extension = meta.path.suffix or ".flac"
        filename = format_track(meta.track_number, meta.title or UNKNOWN_TRACK, extension)
        full_path = directory / filename
        return GeneratedPath(
            full_path=full_path,
            directory=directory,
            filename=filename,
            relative_path=full_path.relative_to(self.base_path),
        )

    def _modern_components(self, meta: TrackMetadata, classification: ClassificationResult) -> List[str]:
        main_genre = classification.main_genre.value if classification.main_genre else UNKNOWN_GENRE
        components = [sanitize(main_genre)]
        subgenre = (classification.subgenre or "").strip()
        if subgenre and subgenre != main_genre:
            components.append(sanitize(subgenre))
        components.append(format_artist(meta.album_artist or meta.artist or UNKNOWN_ARTIST))
        components.append(format_album(meta.album or UNKNOWN_ALBUM, meta.year))
        return components

    def _classical_components(self, meta: TrackMetadata, classification: ClassificationResult) -> List[str]:
        composer = self.resolve_composer(meta)
        components = [MainGenre.CLASSICAL.value, canonical_composer(composer)]
        category = classification.subgenre or detect_work_category(meta.album or meta.title or "")
        components.append(sanitize(category))
        components.append(sanitize(clean_album_title(meta.album or UNKNOWN_WORK, composer)))
        if self.use_performer_folders and meta.has_performer_info():
            folder = performer_folder(meta)
            if folder:
                components.append(folder)
        return components

    @staticmethod
    def resolve_composer(meta: TrackMetadata) -> str:
        if meta.composer and meta.composer.strip():
            return meta.composer.strip()
        composer = extract_composer_from_album_title(meta.album or "")
        if composer:
            return composer
        composer = extract_composer_from_artist(meta.album_artist or meta.artist or "")
        return composer or UNKNOWN_COMPOSER


def generate_target_path(
    meta: TrackMetadata,
    classification: ClassificationResult,
    base_path: Path,
    use_performer_folders: bool = True,
) -> GeneratedPath:
    return PathGenerator(base_path, use_performer_folders=use_performer_folders).generate(
        meta, classification
    )
