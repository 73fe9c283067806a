from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..app import OrganizerApp
from ..planner import ReorganizationPlan, build_plan
from .output import bounded, count, emit, heading

logger = logging.getLogger(__name__)

DIRECTORY_PREVIEW = 20
SAMPLE_MOVES = 5


def run(
    app: OrganizerApp,
    library: Path,
    *,
    output: Path,
    target: Optional[Path] = None,
    use_performer_folders: Optional[bool] = None,
) -> ReorganizationPlan:
    if not library.exists():
        raise SystemExit(f"Path does not exist: {library}")
    if app.cache.size() == 0:
        logger.error("No classifications found in cache. Run 'classify' command first.")
        raise SystemExit(1)
    try:
        generator = app.path_generator(target, use_performer_folders=use_performer_folders)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    scan = app.scanner.scan(library)
    plan = build_plan(scan.albums(), app.cache, generator, library)
    plan.save(output)
    print_summary(plan)
    print(f"\nFull plan saved to: {output}")
    if plan.summary.conflicts:
        print('Please resolve conflicts before running "organize" command')
        raise SystemExit(1)
    print('Plan is ready. Run "organize" command to execute.')
    return plan


def print_summary(plan: ReorganizationPlan) -> None:
    summary = plan.summary
    lines = [heading("Reorganization Plan Summary")]
    lines.append(f"Source:          {plan.source_library}")
    lines.append(f"Target:          {plan.target_library}")
    lines.append(count("Total files", summary.total_files))
    lines.append(count("Classified", summary.classified_files, summary.total_files))
    lines.append(count("Unclassified", summary.unclassified_files))
    lines.append(count("File moves", summary.total_moves))
    lines.append(count("Directories", len(plan.directories)))
    if plan.conflicts:
        lines.append(count("Conflicts", summary.conflicts))
        lines.append(count("Conflicting files", summary.conflicting_files))
        lines.append(heading("Conflicts"))
        described = []
        for index, conflict in enumerate(plan.conflicts, start=1):
            files = ", ".join(str(path) for path in conflict.files[:3])
            extra = f" (+{len(conflict.files) - 3} more)" if len(conflict.files) > 3 else ""
            described.append(f"{index}. {conflict.type.value}: {conflict.suggestion}\n   Files: {files}{extra}")
        lines.extend(bounded(described, noun="more conflicts"))
    else:
        lines.append("\nNo conflicts detected")
    lines.append(heading(f"Directory Structure Preview (first {DIRECTORY_PREVIEW})"))
    directories = [f"  {_relative(path, plan.target_library)}" for path in plan.directories]
    lines.extend(bounded(directories, limit=DIRECTORY_PREVIEW, noun="more directories"))
    lines.append(heading(f"Sample File Moves (first {SAMPLE_MOVES})"))
    for move in plan.file_moves[:SAMPLE_MOVES]:
        lines.append(f"  {_relative(move.source_path, plan.source_library)}")
        lines.append(f"  -> {_relative(move.target_path, plan.target_library)}")
    emit(lines)


def _relative(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path
