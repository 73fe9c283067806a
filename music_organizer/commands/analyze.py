from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict

from ..models import utcnow
from ..scanner import LibraryScanner, ScanResult, album_metadata
from .output import count, emit, heading

logger = logging.getLogger(__name__)

TOP_REPORTED_ARTISTS = 50
TOP_SHOWN = 10


def run(
    scanner: LibraryScanner,
    library: Path,
    *,
    output: Path,
    read_tags: bool = True,
    recursive: bool = True,
) -> Dict[str, Any]:
    if not library.exists():
        raise SystemExit(f"Path does not exist: {library}")
    if not library.is_dir():
        raise SystemExit(f"Path is not a directory: {library}")
    logger.info("Starting analysis of: %s", library)
    scan = scanner.scan(library, recursive=recursive, read_tags=read_tags)
    logger.info("Found %d FLAC files", len(scan.tracks))
    if scan.errors:
        logger.warning("Encountered %d errors during scan", len(scan.errors))
    report = build_analysis(library, scan)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2, ensure_ascii=False)
    logger.info("Analysis report saved to: %s", output)
    print_summary(report)
    print(f"\nFull report saved to: {output}")
    return report


def build_analysis(library: Path, scan: ScanResult) -> Dict[str, Any]:
    """Per-album genre, artist and year tallies; each album counts once, from its first track."""
    genres: Counter[str] = Counter()
    artists: Counter[str] = Counter()
    years: Counter[int] = Counter()
    batches = scan.albums()
    for batch in batches:
        info = album_metadata(batch.tracks)
        if info is None:
            continue
        if info.genre:
            genres[info.genre] += 1
        if info.artist:
            artists[info.artist] += 1
        if info.year:
            years[info.year] += 1
    logger.info("Organized into %d albums", len(batches))
    return {
        "timestamp": utcnow().isoformat(),
        "libraryPath": str(library),
        "summary": {
            "totalFiles": scan.total_files,
            "flacFiles": len(scan.tracks),
            "albums": len(batches),
            "errors": len(scan.errors),
        },
        "statistics": {
            "byGenre": dict(genres.most_common()),
            "byArtist": dict(artists.most_common(TOP_REPORTED_ARTISTS)),
            "byYear": {str(year): years[year] for year in sorted(years)},
        },
        "errors": [{"path": str(error.path), "error": error.error} for error in scan.errors],
    }


def print_summary(report: Dict[str, Any]) -> None:
    summary = report["summary"]
    stats = report["statistics"]
    lines = [heading("Analysis Summary")]
    lines.append(count("Total files", summary["totalFiles"]))
    lines.append(count("FLAC files", summary["flacFiles"]))
    lines.append(count("Albums", summary["albums"]))
    lines.append(count("Errors", summary["errors"]))
    if stats["byGenre"]:
        lines.append(heading("Top Genres"))
        lines.extend(_top(stats["byGenre"]))
    if stats["byArtist"]:
        lines.append(heading("Top Artists (by album count)"))
        lines.extend(_top(stats["byArtist"]))
    emit(lines)


def _top(tally: Dict[str, int]) -> list[str]:
    return [f"  {name}: {albums} albums" for name, albums in list(tally.items())[:TOP_SHOWN]]
