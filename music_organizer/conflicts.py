from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List

from .models import Conflict, ConflictType, FileMove


@dataclass(slots=True)
class ConflictReport:
    conflicts: List[Conflict] = field(default_factory=list)
    total_files: int = 0
    conflicting_files: int = 0

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def detect_conflicts(moves: Iterable[FileMove]) -> ConflictReport:
    moves = list(moves)
    conflicts: List[Conflict] = []

    by_target: Dict[Path, List[Path]] = {}
    for move in moves:
        sources = by_target.setdefault(move.target_path, [])
        if move.source_path not in sources:
            sources.append(move.source_path)
    for target, sources in by_target.items():
        if len(sources) > 1:
            conflicts.append(
                Conflict(
                    type=ConflictType.DUPLICATE_PATH,
                    files=list(sources),
                    suggestion=f"Multiple files would be moved to: {target}",
                )
            )

    for move in moves:
        if not (move.artist and move.album and move.title):
            conflicts.append(
                Conflict(
                    type=ConflictType.MISSING_METADATA,
                    files=[move.source_path],
                    suggestion=(
                        "File has incomplete metadata "
                        f"(artist: {move.artist}, album: {move.album}, title: {move.title})"
                    ),
                )
            )

    touched = {path for conflict in conflicts for path in conflict.files}
    return ConflictReport(
        conflicts=conflicts,
        total_files=len(moves),
        conflicting_files=len(touched),
    )
