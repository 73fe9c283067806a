from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

from .genre_table import GENRE_MAPPINGS, GenreMapping
from .models import ClassificationResult, ClassificationSource, Confidence, MainGenre

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[/\-_]")
_WHITESPACE = re.compile(r"\s+")


def normalize_genre_string(value: str) -> str:
    lowered = value.lower().strip()
    return _WHITESPACE.sub(" ", _SEPARATORS.sub(" ", lowered))


def map_genre(
    raw: Optional[str],
    mappings: Iterable[GenreMapping] = GENRE_MAPPINGS,
) -> Optional[Tuple[MainGenre, str]]:
    """Map a free-text genre tag onto ``(main_genre, subgenre)``.

    Exact keyword matches are tried across the whole table before any
    substring match. Within each pass the first table entry wins.
    Substring matching goes both ways, so short keywords can catch
    unrelated tags ("pop" inside "k-pop").
    """
    if not raw or not raw.strip():
        return None
    table = tuple(mappings)
    normalized = normalize_genre_string(raw)
    for mapping in table:
        if normalized in mapping.keywords:
            return mapping.main_genre, mapping.subgenre
    for mapping in table:
        for keyword in mapping.keywords:
            if keyword in normalized or normalized in keyword:
                return mapping.main_genre, mapping.subgenre
    return None


def classify_from_metadata(raw_genre: Optional[str]) -> Optional[ClassificationResult]:
    if not raw_genre or not raw_genre.strip():
        return None
    mapped = map_genre(raw_genre)
    if not mapped:
        logger.debug("Unknown genre: %r", raw_genre)
        return None
    main_genre, subgenre = mapped
    return ClassificationResult(
        main_genre=main_genre,
        subgenre=subgenre or None,
        source=ClassificationSource.METADATA,
        confidence=Confidence.HIGH,
        raw_data={"originalGenre": raw_genre},
    )

