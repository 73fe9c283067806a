from __future__ import annotations

import logging
from pathlib import Path

from ..app import OrganizerApp
from ..config import StageSettings
from ..models import AlbumInfo
from ..reports import ClassificationReport
from .output import count, counts, emit, heading

logger = logging.getLogger(__name__)


def run(app: OrganizerApp, library: Path, *, output: Path, stages: StageSettings) -> ClassificationReport:
    if not library.exists():
        raise SystemExit(f"Path does not exist: {library}")
    logger.info("Enabled stages: %s", ", ".join(stages.enabled()))
    scan = app.scanner.scan(library)
    logger.info("Found %d FLAC files", len(scan.tracks))
    albums = [info for batch in scan.albums() if (info := batch.to_album_info()) is not None]
    logger.info("Classifying %d albums...", len(albums))

    def progress(index: int, total: int, album: AlbumInfo) -> None:
        logger.debug("[%d/%d] %s - %s", index, total, album.artist, album.album)

    results = app.strategy(stages).classify_batch(albums, on_progress=progress)
    report = ClassificationReport.build(library, results, total_albums=len(albums))
    report.save(output)
    print_summary(report)
    print(f"\nFull results saved to: {output}")
    return report


def print_summary(report: ClassificationReport) -> None:
    stats = report.statistics()
    lines = [heading("Classification Summary")]
    lines.append(count("Total albums", stats["total"]))
    lines.append(count("Classified", stats["classified"], stats["total"]))
    lines.append(count("Unclassified", stats["unclassified"]))
    lines.append(heading("By Source"))
    lines.extend(counts(stats["bySource"]))
    lines.append(heading("By Confidence"))
    lines.extend(counts(stats["byConfidence"]))
    if stats["byMainGenre"]:
        lines.append(heading("By Main Genre"))
        lines.extend(counts(stats["byMainGenre"]))
    emit(lines)
