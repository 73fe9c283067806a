from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence

SAMPLE_LIMIT = 10


@dataclass(frozen=True, slots=True)
class CountLine:
    label: str
    value: int
    total: Optional[int] = None

    def render(self) -> str:
        label = f"{self.label}:"
        if self.total:
            share = self.value / self.total * 100
            return f"{label:<16} {self.value} ({share:.1f}%)"
        return f"{label:<16} {self.value}"


def heading(title: str) -> str:
    return f"\n=== {title} ===\n"


def count(label: str, value: int, total: Optional[int] = None) -> str:
    return CountLine(label, value, total).render()


def counts(values: Mapping[str, int]) -> List[str]:
    return [f"  {count(label, value)}" for label, value in values.items()]


def bounded(lines: Sequence[str], *, limit: int = SAMPLE_LIMIT, noun: str = "more") -> List[str]:
    """The first ``limit`` lines followed by an ``... and N more`` marker."""
    shown = list(lines[:limit])
    if len(lines) > limit:
        shown.append(f"... and {len(lines) - limit} {noun}")
    return shown


def emit(lines: Iterable[str]) -> None:
    for line in lines:
        print(line)
