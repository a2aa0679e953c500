"""
Danger-range consolidation — per-day danger flags merged into contiguous ranges.

Instead of: 23 separate red days on the chart
The UI gets: "Mar 3 → Mar 9 (pessimistic), Mar 10 → Mar 14 (both)"

Each day has a danger signature: optimistic-only, pessimistic-only, both, or none.
  - consecutive days with the same signature extend the current range
  - a signature change on a still-dangerous day closes the range and opens a new one
    on that same day (no gap)
  - a safe day closes the current range without opening another
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Literal, Optional, Sequence

from engine.cashflow import DailySnapshot

DangerScenario = Literal["optimistic", "pessimistic", "both"]


@dataclass(frozen=True)
class DangerRange:
    start: date
    end: date  # inclusive
    scenario: DangerScenario

    @property
    def day_count(self) -> int:
        return (self.end - self.start).days + 1


def danger_signature(day: DailySnapshot) -> Optional[DangerScenario]:
    if day.is_optimistic_danger and day.is_pessimistic_danger:
        return "both"
    if day.is_optimistic_danger:
        return "optimistic"
    if day.is_pessimistic_danger:
        return "pessimistic"
    return None


def get_danger_ranges(days: Sequence[DailySnapshot]) -> List[DangerRange]:
    """Consolidate ordered snapshots into sorted, non-overlapping danger ranges."""
    ranges: List[DangerRange] = []
    current: Optional[DangerRange] = None

    for day in days:
        scenario = danger_signature(day)
        if scenario is None:
            if current is not None:
                ranges.append(current)
                current = None
            continue

        if current is None:
            current = DangerRange(day.date, day.date, scenario)
        elif current.scenario == scenario:
            current = DangerRange(current.start, day.date, scenario)
        else:
            ranges.append(current)
            current = DangerRange(day.date, day.date, scenario)

    if current is not None:
        ranges.append(current)
    return ranges
