from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import OrganizerSettings
from .fs_utils import file_checksum, path_exists, transfer_file
from .models import utcnow
from .planner import ReorganizationPlan

logger = logging.getLogger(__name__)

BACKUP_MANIFEST = "backup-manifest.json"


class PlanHasConflictsError(RuntimeError):
    def __init__(self, conflicts: int) -> None:
        super().__init__(f"Plan has {conflicts} conflicts. Please resolve them first.")
        self.conflicts = conflicts


class TooManyFailuresError(RuntimeError):
    def __init__(self, summary: "ExecutionSummary", limit: int) -> None:
        super().__init__(f"Too many errors (>{limit}). Stopping operation.")
        self.summary = summary
        self.limit = limit


@dataclass(slots=True)
class ExecutionSummary:
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


class PlanExecutor:
    """Carries out the file moves of a conflict-free plan, one at a time."""

    def __init__(
        self,
        settings: OrganizerSettings,
        *,
        dry_run: bool = False,
        mode: Optional[str] = None,
        verify: Optional[bool] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.dry_run = dry_run
        self.mode = mode or settings.mode
        self.verify = settings.verify_checksums if verify is None else verify
        self._sleep = sleep

    def execute(self, plan: ReorganizationPlan) -> ExecutionSummary:
        if plan.summary.conflicts > 0:
            raise PlanHasConflictsError(plan.summary.conflicts)
        summary = ExecutionSummary(total=len(plan.file_moves))
        logger.info("Mode: %s, verify integrity: %s, dry run: %s", self.mode, self.verify, self.dry_run)
        for move in plan.file_moves:
            if self.dry_run:
                logger.debug("[DRY RUN] Would %s: %s -> %s", self.mode, move.source_path, move.target_path)
                summary.success += 1
                self._sleep(self.settings.dry_run_delay_seconds)
                continue
            if not path_exists(move.source_path):
                logger.warning("Source file not found: %s", move.source_path)
                summary.skipped += 1
                continue
            result = transfer_file(move.source_path, move.target_path, mode=self.mode, verify=self.verify)
            if result.success:
                summary.success += 1
                continue
            summary.failed += 1
            summary.errors.append((str(move.source_path), result.error or "Unknown error"))
            if summary.failed > self.settings.max_failures:
                logger.error("Too many errors (>%d). Stopping operation.", self.settings.max_failures)
                raise TooManyFailuresError(summary, self.settings.max_failures)
        logger.info(
            "Reorganization finished: %d succeeded, %d failed, %d skipped",
            summary.success,
            summary.failed,
            summary.skipped,
        )
        return summary


def backup_directory(base: Path, now: Optional[datetime] = None) -> Path:
    return base / f"backup-{(now or utcnow()).date().isoformat()}"


def backup_manifest(plan: ReorganizationPlan, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Record of every planned move with the md5 of each source that exists."""
    files = []
    for move in plan.file_moves:
        entry: Dict[str, Any] = {"sourcePath": str(move.source_path), "targetPath": str(move.target_path)}
        if path_exists(move.source_path):
            entry["checksum"] = file_checksum(move.source_path)
        files.append(entry)
    return {
        "timestamp": (now or utcnow()).isoformat(),
        "sourceLibrary": str(plan.source_library),
        "targetLibrary": str(plan.target_library),
        "files": files,
    }


def write_backup_manifest(plan: ReorganizationPlan, base: Path, now: Optional[datetime] = None) -> Path:
    now = now or utcnow()
    directory = backup_directory(base, now)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / BACKUP_MANIFEST
    with path.open("w", encoding="utf-8") as fh:
        json.dump(backup_manifest(plan, now), fh, indent=2, ensure_ascii=False)
    logger.info("Backup manifest created: %s", path)
    return path
