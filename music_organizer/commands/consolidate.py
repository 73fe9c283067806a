from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..reports import ClassificationReport, consolidate


def run(report_paths: Sequence[Path], *, output: Path) -> ClassificationReport:
    missing = [path for path in report_paths if not path.exists()]
    if missing:
        raise SystemExit(f"File not found: {missing[0]}")
    merged = consolidate(ClassificationReport.load(path) for path in report_paths)
    merged.save(output)
    print(f"Consolidated {len(report_paths)} reports into {len(merged.entries)} classifications")
    print(f"Saved to: {output}")
    return merged
