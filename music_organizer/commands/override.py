from __future__ import annotations

from typing import Optional

from ..cache import ClassificationCache
from ..models import ClassificationResult, MainGenre


def run(
    cache: ClassificationCache,
    artist: str,
    album: str,
    genre: str,
    *,
    subgenre: Optional[str] = None,
    year: Optional[int] = None,
) -> ClassificationResult:
    try:
        main_genre = MainGenre.parse(genre)
    except ValueError as exc:
        choices = ", ".join(g.value for g in MainGenre)
        raise SystemExit(f"Unknown genre {genre!r}; choose one of: {choices}") from exc
    previous = cache.get(artist, album, year)
    result = cache.override(artist, album, main_genre, subgenre=subgenre, year=year)
    if previous:
        print(f"Previous: {previous.main_genre.value} / {previous.subgenre or '-'} [{previous.source.value}]")
    print(f"Override: {artist} - {album} -> {main_genre.value} / {subgenre or '-'}")
    return result
