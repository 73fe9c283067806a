from __future__ import annotations

import re
from typing import Optional, Protocol

from ..models import ClassificationResult

_CLEANUP_PATTERNS = (
    re.compile(r"\[.*?\]"),
    re.compile(r"\(Remastered\)", re.IGNORECASE),
    re.compile(r"\(.*?Remaster.*?\)", re.IGNORECASE),
    re.compile(r"\(Deluxe.*?\)", re.IGNORECASE),
    re.compile(r"\(.*?Edition.*?\)", re.IGNORECASE),
)


def clean_album_title(album: str) -> str:
    """Strip catalogue ids and edition markers before searching a service."""
    cleaned = album
    for pattern in _CLEANUP_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return re.sub(r"\s+", " ", cleaned.strip())


class AlbumClassifier(Protocol):
    name: str

    def classify(
        self, artist: str, album: str, year: Optional[int] = None
    ) -> Optional[ClassificationResult]: ...
