from __future__ import annotations

import re
from typing import Optional

VARIOUS_ARTISTS = "Various Artists"

_SANITIZE_RULES = (
    (re.compile(r":"), " -"),
    (re.compile(r'"'), ""),
    (re.compile(r"[<>|?*]"), "_"),
    (re.compile(r"[/\\]"), "-"),
    (re.compile(r"\x00"), ""),
    (re.compile(r"\.+$"), ""),
    (re.compile(r"\s+"), " "),
)


def sanitize(name: str) -> str:
    """Make ``name`` safe as a single path component on common filesystems."""
    cleaned = name
    for pattern, replacement in _SANITIZE_RULES:
        cleaned = pattern.sub(replacement, cleaned)
    cleaned = cleaned.strip()
    # Trimming can expose dots that were followed by whitespace.
    while cleaned.endswith("."):
        cleaned = cleaned[:-1].rstrip()
    return cleaned


def format_artist(artist: str) -> str:
    sanitized = sanitize(artist)
    if "various" in sanitized.lower():
        return VARIOUS_ARTISTS
    return sanitized


def format_album(album: str, year: Optional[int] = None) -> str:
    sanitized = sanitize(album)
    if year:
        return f"{year} - {sanitized}"
    return sanitized


def format_track(track_number: Optional[int], title: str, extension: str = ".flac") -> str:
    sanitized = sanitize(title)
    if track_number is not None:
        return f"{track_number:02d} - {sanitized}{extension}"
    return f"{sanitized}{extension}"


def format_composer(composer: str) -> str:
    """``"Antonio Vivaldi"`` -> ``"Vivaldi, Antonio"``; comma forms and single names pass through."""
    trimmed = composer.strip()
    if "," in trimmed:
        return sanitize(trimmed)
    parts = trimmed.split()
    if len(parts) <= 1:
        return sanitize(trimmed)
    return sanitize(f"{parts[-1]}, {' '.join(parts[:-1])}")


def surname(name: str) -> str:
    parts = name.split()
    return parts[-1] if parts else name
