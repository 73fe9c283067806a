from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from ..reports import ClassificationReport, generate_dictionary, write_dictionary
from .output import bounded, emit, heading


def run(report_path: Path, *, output: Path) -> Dict[str, Any]:
    if not report_path.exists():
        raise SystemExit(f"File not found: {report_path}")
    report = ClassificationReport.load(report_path)
    document = generate_dictionary(report)
    write_dictionary(document, output)
    meta = document["metadata"]
    lines = [heading("Dictionary generated")]
    lines.append(f"  Artists:   {meta['totalArtists']}")
    lines.append(f"  Composers: {meta['totalComposers']}")
    lines.append(f"\nSaved to: {output}")
    lines.append("\nSample artists:")
    lines.extend(bounded([f"  {name} -> {genre}" for name, genre in document["artists"].items()]))
    lines.append("\nSample composers:")
    lines.extend(bounded([f"  {name} -> {genre}" for name, genre in document["composers"].items()]))
    emit(lines)
    return document
