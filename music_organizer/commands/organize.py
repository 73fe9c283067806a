from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..app import OrganizerApp
from ..executor import ExecutionSummary, PlanHasConflictsError, TooManyFailuresError, write_backup_manifest
from ..planner import ReorganizationPlan
from .output import bounded, count, emit, heading

logger = logging.getLogger(__name__)


def run(
    app: OrganizerApp,
    plan_path: Path,
    *,
    mode: Optional[str] = None,
    verify: bool = True,
    dry_run: bool = False,
    backup: Optional[Path] = None,
) -> ExecutionSummary:
    if not plan_path.exists():
        raise SystemExit(f"Plan file does not exist: {plan_path}")
    logger.info("Loading reorganization plan from: %s", plan_path)
    plan = ReorganizationPlan.load(plan_path)
    executor = app.executor(dry_run=dry_run, mode=mode, verify=verify)
    if dry_run:
        print("DRY RUN MODE - No files will be modified\n")
    elif backup is not None and not plan.summary.conflicts:
        manifest = write_backup_manifest(plan, backup)
        print(f"Backup manifest created: {manifest}\n")
    try:
        summary = executor.execute(plan)
    except PlanHasConflictsError as exc:
        logger.error("%s", exc)
        print('\nRun "plan" command again to regenerate conflict-free plan.')
        raise SystemExit(1) from exc
    except TooManyFailuresError as exc:
        print_summary(exc.summary, executor.mode)
        print("\nOperation aborted due to excessive errors.")
        raise SystemExit(1) from exc
    print_summary(summary, executor.mode)
    if dry_run:
        print("\nDRY RUN completed - no files were modified")
    elif summary.ok:
        print("\nReorganization completed successfully!")
    else:
        print("\nReorganization completed with errors")
        raise SystemExit(1)
    return summary


def print_summary(summary: ExecutionSummary, mode: str) -> None:
    lines = [heading("Reorganization Summary")]
    lines.append(f"Mode:             {mode}")
    lines.append(count("Total files", summary.total))
    lines.append(count("Success", summary.success))
    if summary.skipped:
        lines.append(count("Skipped", summary.skipped))
    if summary.failed:
        lines.append(count("Failed", summary.failed))
    if summary.errors:
        lines.append(heading("Errors"))
        described = [
            f"{index}. {source}\n   Error: {error}"
            for index, (source, error) in enumerate(summary.errors, start=1)
        ]
        lines.extend(bounded(described, noun="more errors"))
    emit(lines)
