from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import LibrarySettings
from .models import AlbumInfo, TrackMetadata
from .tagging import TagReader

logger = logging.getLogger(__name__)


@dataclass
class ScanError:
    path: Path
    error: str


@dataclass
class AlbumBatch:
    """Tracks found in one directory, which is treated as one album."""

    directory: Path
    tracks: List[TrackMetadata] = field(default_factory=list)

    def to_album_info(self) -> Optional[AlbumInfo]:
        """Album descriptor for classification; None without artist and album tags."""
        info = album_metadata(self.tracks)
        if info is None or not info.artist or not info.album:
            return None
        return info


@dataclass
class ScanResult:
    total_files: int = 0
    tracks: List[TrackMetadata] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)

    def albums(self) -> List[AlbumBatch]:
        grouped: Dict[Path, AlbumBatch] = {}
        for track in self.tracks:
            directory = track.path.parent
            batch = grouped.get(directory)
            if batch is None:
                batch = grouped[directory] = AlbumBatch(directory=directory)
            batch.tracks.append(track)
        for batch in grouped.values():
            batch.tracks.sort(key=_track_sort_key)
        return list(grouped.values())


def album_metadata(tracks: List[TrackMetadata]) -> Optional[AlbumInfo]:
    """Album-level fields come from the first track."""
    if not tracks:
        return None
    lead = tracks[0]
    return AlbumInfo(
        artist=lead.artist or "",
        album=lead.album or "",
        year=lead.year,
        genre=lead.genre,
        tracks=[track.title for track in tracks if track.title],
    )


def _track_sort_key(track: TrackMetadata) -> tuple:
    return (track.disc_number or 1, track.track_number if track.track_number is not None else 999, track.path.name)


class LibraryScanner:
    """Walks a library root and reads the tags of every matching file."""

    def __init__(self, settings: LibrarySettings, tag_reader: Optional[TagReader] = None) -> None:
        self.settings = settings
        self.tag_reader = tag_reader or TagReader()
        self._exts = {ext.lower() for ext in self.settings.include_extensions}

    def scan(self, root: Path, *, recursive: bool = True, read_tags: bool = True) -> ScanResult:
        """Collect matching files under ``root``; without ``read_tags`` each track carries only its path."""
        result = ScanResult()
        if not root.exists():
            result.errors.append(ScanError(path=root, error="Path does not exist"))
            return result
        for file_path in self.iter_files(root, result, recursive=recursive):
            try:
                result.tracks.append(self.tag_reader.read(file_path) if read_tags else TrackMetadata(path=file_path))
            except Exception as exc:
                logger.warning("Error processing %s: %s", file_path, exc)
                result.errors.append(ScanError(path=file_path, error=str(exc)))
                continue
            if len(result.tracks) % 100 == 0:
                logger.info("Scanned %d audio files...", len(result.tracks))
        logger.info(
            "Scan complete: found %d audio files out of %d total files",
            len(result.tracks),
            result.total_files,
        )
        return result

    def iter_files(
        self, root: Path, result: Optional[ScanResult] = None, *, recursive: bool = True
    ) -> Iterator[Path]:
        def on_error(exc: OSError) -> None:
            logger.warning("Cannot read %s: %s", exc.filename, exc)
            if result is not None:
                result.errors.append(ScanError(path=Path(exc.filename or root), error=str(exc)))

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            if not recursive:
                dirnames.clear()
            dirnames.sort()
            directory = Path(dirpath)
            for name in sorted(filenames):
                file_path = directory / name
                if result is not None:
                    result.total_files += 1
                if self._should_include(file_path):
                    yield file_path

    def _should_include(self, path: Path) -> bool:
        if path.suffix.lower() not in self._exts:
            return False
        rel = str(path)
        for pattern in self.settings.exclude_patterns:
            if fnmatch.fnmatch(rel, pattern):
                return False
        return True
