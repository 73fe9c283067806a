from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from mutagen import MutagenError
from mutagen.flac import FLAC

from .models import TrackMetadata, parse_int, parse_year

logger = logging.getLogger(__name__)


class TagReader:
    """Reads the Vorbis comments of FLAC files into TrackMetadata."""

    SUPPORTED_EXTS = {".flac"}

    def read(self, path: Path) -> TrackMetadata:
        meta = TrackMetadata(path=path)
        if path.suffix.lower() not in self.SUPPORTED_EXTS:
            logger.debug("Skipping unsupported extension %s", path)
            return meta
        try:
            audio = FLAC(path)
        except (MutagenError, OSError) as exc:
            logger.warning("Failed to read tags from %s: %s", path, exc)
            return meta

        def first(*keys: str) -> Optional[str]:
            for key in keys:
                value = audio.get(key, [None])[0]
                if value is not None and str(value).strip():
                    return str(value).strip()
            return None

        meta.title = first("TITLE")
        meta.artist = first("ARTIST")
        meta.album_artist = first("ALBUMARTIST", "ALBUM ARTIST")
        meta.album = first("ALBUM")
        meta.composer = first("COMPOSER")
        meta.conductor = first("CONDUCTOR")
        meta.orchestra = first("ORCHESTRA")
        meta.ensemble = first("ENSEMBLE")
        meta.soloist = first("SOLOIST")
        meta.genre = first("GENRE")
        meta.catalog_number = first("CATALOGNUMBER")
        meta.year = parse_year(first("DATE", "YEAR", "ORIGINALDATE"))
        meta.track_number = parse_int(first("TRACKNUMBER"))
        meta.disc_number = parse_int(first("DISCNUMBER"))
        return meta
