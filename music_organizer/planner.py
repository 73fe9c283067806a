from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .cache import ClassificationCache
from .conflicts import detect_conflicts
from .models import Conflict, FileMove, utcnow
from .organizer import PathGenerator
from .scanner import AlbumBatch

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PlanSummary:
    total_files: int = 0
    classified_files: int = 0
    unclassified_files: int = 0
    total_moves: int = 0
    conflicts: int = 0
    conflicting_files: int = 0

    def to_record(self) -> Dict[str, int]:
        return {
            "totalFiles": self.total_files,
            "classifiedFiles": self.classified_files,
            "unclassifiedFiles": self.unclassified_files,
            "totalMoves": self.total_moves,
            "conflicts": self.conflicts,
            "conflictingFiles": self.conflicting_files,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PlanSummary":
        return cls(
            total_files=int(record.get("totalFiles", 0)),
            classified_files=int(record.get("classifiedFiles", 0)),
            unclassified_files=int(record.get("unclassifiedFiles", 0)),
            total_moves=int(record.get("totalMoves", 0)),
            conflicts=int(record.get("conflicts", 0)),
            conflicting_files=int(record.get("conflictingFiles", 0)),
        )


@dataclass(slots=True)
class ReorganizationPlan:
    source_library: Path
    target_library: Path
    summary: PlanSummary = field(default_factory=PlanSummary)
    use_performer_folders: bool = True
    directories: List[Path] = field(default_factory=list)
    file_moves: List[FileMove] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    timestamp: datetime = field(default_factory=utcnow)

    def to_record(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "sourceLibrary": str(self.source_library),
            "targetLibrary": str(self.target_library),
            "summary": self.summary.to_record(),
            "options": {"usePerformerFolders": self.use_performer_folders},
            "directories": [str(path) for path in self.directories],
            "fileMoves": [move.to_record() for move in self.file_moves],
            "conflicts": [conflict.to_record() for conflict in self.conflicts],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ReorganizationPlan":
        timestamp = record.get("timestamp")
        return cls(
            source_library=Path(record["sourceLibrary"]),
            target_library=Path(record["targetLibrary"]),
            summary=PlanSummary.from_record(record.get("summary") or {}),
            use_performer_folders=bool((record.get("options") or {}).get("usePerformerFolders", True)),
            directories=[Path(p) for p in record.get("directories", [])],
            file_moves=[FileMove.from_record(m) for m in record.get("fileMoves", [])],
            conflicts=[Conflict.from_record(c) for c in record.get("conflicts", [])],
            timestamp=datetime.fromisoformat(timestamp.replace("Z", "+00:00")) if timestamp else utcnow(),
        )

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(self.to_record(), fh, indent=2, ensure_ascii=False)
        logger.info("Reorganization plan saved to %s", path)

    @classmethod
    def load(cls, path: Path) -> "ReorganizationPlan":
        with path.open("r", encoding="utf-8") as fh:
            return cls.from_record(json.load(fh))


def build_plan(
    albums: Sequence[AlbumBatch],
    cache: ClassificationCache,
    generator: PathGenerator,
    source_library: Path,
) -> ReorganizationPlan:
    """Target paths for every track whose album has a cached classification."""
    summary = PlanSummary()
    moves: List[FileMove] = []
    for batch in albums:
        summary.total_files += len(batch.tracks)
        info = batch.to_album_info()
        if info is None:
            logger.debug("Skipping album with incomplete metadata in %s", batch.directory)
            summary.unclassified_files += len(batch.tracks)
            continue
        classification = cache.get(info.artist, info.album, info.year)
        if classification is None:
            logger.debug("No classification found for: %s - %s", info.artist, info.album)
            summary.unclassified_files += len(batch.tracks)
            continue
        for track in batch.tracks:
            try:
                generated = generator.generate(track, classification)
            except ValueError as exc:
                logger.warning("Failed to generate path for %s: %s", track.path, exc)
                summary.unclassified_files += 1
                continue
            moves.append(
                FileMove(
                    source_path=track.path,
                    target_path=generated.full_path,
                    artist=track.artist,
                    album=track.album,
                    title=track.title,
                )
            )
            summary.classified_files += 1

    logger.info("Generated paths for %d/%d files", summary.classified_files, summary.total_files)
    report = detect_conflicts(moves)
    summary.total_moves = len(moves)
    summary.conflicts = len(report.conflicts)
    summary.conflicting_files = report.conflicting_files
    directories = sorted({move.target_path.parent for move in moves})
    return ReorganizationPlan(
        source_library=source_library,
        target_library=generator.base_path,
        summary=summary,
        use_performer_folders=generator.use_performer_folders,
        directories=directories,
        file_moves=moves,
        conflicts=report.conflicts,
    )
