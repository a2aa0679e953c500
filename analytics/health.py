"""
Health report — at-a-glance status for the dashboard.

Translates summary statistics into something a household can act on:
  danger  → the balance goes negative even if every expected income arrives
  warning → it goes negative only if non-guaranteed income fails to arrive
  good    → no danger days in either scenario
plus a staleness check: balances nobody has updated for a month make the whole
forecast suspect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Literal, Optional

import pandas as pd

from core.config import STALE_THRESHOLD_DAYS, TIME_ZONE
from core.schema import BankAccount, CreditCard
from core.utils import Clock, to_local_date, today_in_time_zone, utc_now

from .metrics import SummaryStats

HealthStatus = Literal["good", "warning", "danger"]


@dataclass(frozen=True)
class StaleEntity:
    id: str
    name: str
    type: Literal["account", "card"]
    days_since_update: Optional[int]  # None when never updated


@dataclass
class HealthReport:
    """Structured dashboard health output."""
    status: HealthStatus
    message: str
    optimistic_danger_days: int
    pessimistic_danger_days: int
    stale_entities: List[StaleEntity] = field(default_factory=list)

    @property
    def is_stale(self) -> bool:
        return len(self.stale_entities) > 0

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {"Metric": "Status", "Value": self.status},
            {"Metric": "Message", "Value": self.message},
            {"Metric": "Danger days (optimistic)", "Value": str(self.optimistic_danger_days)},
            {"Metric": "Danger days (pessimistic)", "Value": str(self.pessimistic_danger_days)},
        ]
        if self.stale_entities:
            rows.append({
                "Metric": "STALE",
                "Value": " | ".join(f"{e.type}:{e.name or e.id}" for e in self.stale_entities),
            })
        return pd.DataFrame(rows)


def health_status(optimistic_danger_days: int, pessimistic_danger_days: int) -> HealthStatus:
    if optimistic_danger_days > 0:
        return "danger"
    if pessimistic_danger_days > 0:
        return "warning"
    return "good"


def health_message(status: HealthStatus, optimistic_danger_days: int, pessimistic_danger_days: int) -> str:
    if status == "danger":
        n = optimistic_danger_days
        return f"{n} danger day{'s' if n != 1 else ''} even in best-case scenario"
    if status == "warning":
        n = pessimistic_danger_days
        return f"{n} danger day{'s' if n != 1 else ''} in worst-case scenario"
    return "No issues detected"


def days_since_update(
    updated_at: Optional[datetime],
    *,
    clock: Clock = utc_now,
    time_zone: str = TIME_ZONE,
) -> Optional[int]:
    if updated_at is None:
        return None
    return (today_in_time_zone(time_zone, clock) - to_local_date(updated_at, time_zone)).days


def find_stale_entities(
    accounts: Iterable[BankAccount],
    credit_cards: Iterable[CreditCard],
    *,
    clock: Clock = utc_now,
    time_zone: str = TIME_ZONE,
    stale_threshold_days: int = STALE_THRESHOLD_DAYS,
) -> List[StaleEntity]:
    """Entities never updated, or last updated more than the threshold ago."""
    stale: List[StaleEntity] = []
    candidates = [(a, "account") for a in accounts] + [(c, "card") for c in credit_cards]
    for entity, kind in candidates:
        age = days_since_update(entity.balance_updated_at, clock=clock, time_zone=time_zone)
        if age is None or age > stale_threshold_days:
            stale.append(StaleEntity(entity.id, entity.name, kind, age))
    return stale


def build_health_report(
    stats: Optional[SummaryStats],
    accounts: Iterable[BankAccount] = (),
    credit_cards: Iterable[CreditCard] = (),
    *,
    clock: Clock = utc_now,
    time_zone: str = TIME_ZONE,
    stale_threshold_days: int = STALE_THRESHOLD_DAYS,
) -> HealthReport:
    """
    Build the dashboard health report.

    Parameters
    ----------
    stats : SummaryStats, optional
        Output of analytics.metrics.compute_summary_stats(); None when nothing was projected
    accounts, credit_cards : iterables
        Checked for stale balances
    """
    stale = find_stale_entities(
        accounts,
        credit_cards,
        clock=clock,
        time_zone=time_zone,
        stale_threshold_days=stale_threshold_days,
    )
    if stats is None:
        return HealthReport("good", "No data available", 0, 0, stale)

    opt = stats.optimistic.danger_day_count
    pess = stats.pessimistic.danger_day_count
    status = health_status(opt, pess)
    return HealthReport(status, health_message(status, opt, pess), opt, pess, stale)
