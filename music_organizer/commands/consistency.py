from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..reports import (
    ClassificationReport,
    find_inconsistent_artists,
    fix_classical_misclassifications,
    render_consistency_report,
)
from .output import bounded, emit

logger = logging.getLogger(__name__)

TOP_ARTISTS = 20


def run(report_path: Path, *, fix_classical: bool = False) -> int:
    """Returns the number of inconsistent artists left in the report."""
    if not report_path.exists():
        raise SystemExit(f"File not found: {report_path}")
    report = ClassificationReport.load(report_path)

    if fix_classical:
        fixed = fix_classical_misclassifications(report)
        print(f"Fixed {fixed} classifications")
        if fixed:
            backup = report_path.with_name(f"{report_path.stem}-backup{report_path.suffix}")
            shutil.copy2(report_path, backup)
            print(f"Backup saved to: {backup}")
            report.save(report_path)

    inconsistent = find_inconsistent_artists(report)
    if not inconsistent:
        print("No inconsistencies found! All artists have consistent genres.")
        return 0

    print(f"Found {len(inconsistent)} artists with inconsistent genres\n")
    lines = []
    for index, item in enumerate(inconsistent, start=1):
        genres = ", ".join(item.genres)
        lines.append(f"{index}. {item.artist}\n   {item.total_albums} albums across {len(item.genres)} genres: {genres}")
    emit(bounded(lines, limit=TOP_ARTISTS))

    markdown_path = report_path.with_name(f"{report_path.stem}-consistency-report.md")
    markdown_path.write_text(render_consistency_report(inconsistent), encoding="utf-8")
    print(f"\nFull report saved to: {markdown_path}")
    return len(inconsistent)
