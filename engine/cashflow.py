"""
Projection simulator — the day-by-day walk over a horizon.

Two running balances advance in lockstep, one per certainty scenario:
  1. Optimistic:  every income occurrence counts, whatever its certainty
  2. Pessimistic: only guaranteed income counts
Expenses hit both balances. A day is a danger day for a scenario when that scenario's
balance is strictly negative after the day's events.

All arithmetic is on integer cents; nothing is rounded anywhere in the walk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from core.config import DEFAULT_PROJECTION_DAYS, TIME_ZONE
from core.errors import CashflowErrorCode, CashflowInputError
from core.schema import BankAccount, CashflowInputs, Certainty
from core.utils import Clock, as_calendar_day, today_in_time_zone, utc_now

from .events import (
    ExpenseEvent,
    IncomeEvent,
    bucket_by_day,
    require_projection_days,
    schedule_events,
)

logger = logging.getLogger(__name__)


class Scenario(str, Enum):
    OPTIMISTIC = "optimistic"
    PESSIMISTIC = "pessimistic"


def income_counts(scenario: Scenario, certainty: Certainty) -> bool:
    """Optimistic takes every income; pessimistic only guaranteed income."""
    if scenario is Scenario.OPTIMISTIC:
        return True
    return certainty == Certainty.GUARANTEED


def scenario_income(events: Iterable[IncomeEvent], scenario: Scenario) -> int:
    return sum(ev.amount for ev in events if income_counts(scenario, ev.certainty))


def total_expenses(events: Iterable[ExpenseEvent]) -> int:
    return sum(ev.amount for ev in events)


# ---------------------------------------------------------------------------
# Output types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DailySnapshot:
    """Both scenario balances at the end of one simulated day."""
    date: date
    day_offset: int  # 0-based from projection start
    optimistic_balance: int
    pessimistic_balance: int
    income_events: Tuple[IncomeEvent, ...]
    expense_events: Tuple[ExpenseEvent, ...]
    is_optimistic_danger: bool
    is_pessimistic_danger: bool

    def balance(self, scenario: Scenario) -> int:
        if scenario is Scenario.OPTIMISTIC:
            return self.optimistic_balance
        return self.pessimistic_balance

    def is_danger(self, scenario: Scenario) -> bool:
        if scenario is Scenario.OPTIMISTIC:
            return self.is_optimistic_danger
        return self.is_pessimistic_danger


@dataclass(frozen=True)
class DangerDay:
    date: date
    day_offset: int
    balance: int  # negative, cents


@dataclass(frozen=True)
class ScenarioSummary:
    starting_balance: int
    total_income: int
    total_expenses: int
    end_balance: int
    danger_days: Tuple[DangerDay, ...]
    danger_day_count: int


@dataclass(frozen=True)
class CashflowProjection:
    """Complete simulator output. Immutable; recomputed on every input change."""
    start_date: date
    end_date: date
    starting_balance: int
    days: Tuple[DailySnapshot, ...]
    optimistic: ScenarioSummary
    pessimistic: ScenarioSummary

    def summary(self, scenario: Scenario) -> ScenarioSummary:
        if scenario is Scenario.OPTIMISTIC:
            return self.optimistic
        return self.pessimistic

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (camelCase keys, ISO dates) for saved snapshots."""
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "startingBalance": self.starting_balance,
            "days": [_snapshot_to_dict(d) for d in self.days],
            "optimistic": _summary_to_dict(self.optimistic),
            "pessimistic": _summary_to_dict(self.pessimistic),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per day, for tabular display and export."""
        rows = [
            {
                "date": pd.Timestamp(d.date),
                "day_offset": d.day_offset,
                "optimistic_balance": d.optimistic_balance,
                "pessimistic_balance": d.pessimistic_balance,
                "optimistic_income": scenario_income(d.income_events, Scenario.OPTIMISTIC),
                "pessimistic_income": scenario_income(d.income_events, Scenario.PESSIMISTIC),
                "expenses": total_expenses(d.expense_events),
                "is_optimistic_danger": d.is_optimistic_danger,
                "is_pessimistic_danger": d.is_pessimistic_danger,
            }
            for d in self.days
        ]
        return pd.DataFrame(rows)


def _snapshot_to_dict(day: DailySnapshot) -> Dict[str, Any]:
    return {
        "date": day.date.isoformat(),
        "dayOffset": day.day_offset,
        "optimisticBalance": day.optimistic_balance,
        "pessimisticBalance": day.pessimistic_balance,
        "incomeEvents": [
            {
                "projectId": ev.source_id,
                "projectName": ev.source_name,
                "amount": ev.amount,
                "certainty": Certainty(ev.certainty).value,
            }
            for ev in day.income_events
        ],
        "expenseEvents": [
            {
                "sourceId": ev.source_id,
                "sourceName": ev.source_name,
                "sourceType": ev.source_type,
                "amount": ev.amount,
            }
            for ev in day.expense_events
        ],
        "isOptimisticDanger": day.is_optimistic_danger,
        "isPessimisticDanger": day.is_pessimistic_danger,
    }


def _summary_to_dict(summary: ScenarioSummary) -> Dict[str, Any]:
    return {
        "startingBalance": summary.starting_balance,
        "totalIncome": summary.total_income,
        "totalExpenses": summary.total_expenses,
        "endBalance": summary.end_balance,
        "dangerDays": [
            {"date": d.date.isoformat(), "dayOffset": d.day_offset, "balance": d.balance}
            for d in summary.danger_days
        ],
        "dangerDayCount": summary.danger_day_count,
    }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def starting_balance_from_accounts(accounts: Iterable[BankAccount]) -> int:
    """Sum of checking balances. Savings/investment never enter the simulation."""
    return sum(a.balance for a in accounts if a.is_checking)


def make_snapshot(
    day: date,
    day_offset: int,
    optimistic_balance: int,
    pessimistic_balance: int,
    income_events: Sequence[IncomeEvent] = (),
    expense_events: Sequence[ExpenseEvent] = (),
) -> DailySnapshot:
    return DailySnapshot(
        date=day,
        day_offset=day_offset,
        optimistic_balance=optimistic_balance,
        pessimistic_balance=pessimistic_balance,
        income_events=tuple(income_events),
        expense_events=tuple(expense_events),
        is_optimistic_danger=optimistic_balance < 0,
        is_pessimistic_danger=pessimistic_balance < 0,
    )


def summarize_scenario(
    days: Sequence[DailySnapshot], scenario: Scenario, starting_balance: int
) -> ScenarioSummary:
    income = 0
    expenses = 0
    danger: List[DangerDay] = []
    for day in days:
        income += scenario_income(day.income_events, scenario)
        expenses += total_expenses(day.expense_events)
        if day.is_danger(scenario):
            danger.append(DangerDay(day.date, day.day_offset, day.balance(scenario)))

    return ScenarioSummary(
        starting_balance=starting_balance,
        total_income=income,
        total_expenses=expenses,
        end_balance=days[-1].balance(scenario) if days else starting_balance,
        danger_days=tuple(danger),
        danger_day_count=len(danger),
    )


def build_projection(
    days: Sequence[DailySnapshot],
    *,
    starting_balance: int,
    optimistic_starting_balance: Optional[int] = None,
) -> CashflowProjection:
    """Assemble a projection (summaries included) from an ordered snapshot list."""
    if not days:
        raise CashflowInputError("A projection needs at least one day.")
    opt_start = starting_balance if optimistic_starting_balance is None else optimistic_starting_balance
    return CashflowProjection(
        start_date=days[0].date,
        end_date=days[-1].date,
        starting_balance=starting_balance,
        days=tuple(days),
        optimistic=summarize_scenario(days, Scenario.OPTIMISTIC, opt_start),
        pessimistic=summarize_scenario(days, Scenario.PESSIMISTIC, starting_balance),
    )


def _require_cents(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CashflowInputError(
            f"{name} must be integer cents, got {value!r}", CashflowErrorCode.INVALID_AMOUNT
        )
    return value


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

def simulate(
    inputs: CashflowInputs,
    *,
    start_date: Union[date, datetime, str],
    projection_days: int,
    starting_balance: int,
    optimistic_starting_balance: Optional[int] = None,
    statement_anchor: Optional[date] = None,
    phase_anchor: Optional[date] = None,
    time_zone: str = TIME_ZONE,
) -> CashflowProjection:
    """
    Walk exactly `projection_days` calendar days from `start_date`.

    Parameters
    ----------
    inputs : CashflowInputs
        Entity collections
    start_date : date
        First simulated day (datetimes are normalised to their local day)
    projection_days : int
        Number of days to simulate (> 0)
    starting_balance : int
        Seed in cents. Seeds the pessimistic balance, and the optimistic one unless
        optimistic_starting_balance is given.
    optimistic_starting_balance : int, optional
        Separate optimistic seed (used when rebasing onto an estimated-today pair)
    statement_anchor, phase_anchor : date, optional
        Forwarded to the scheduler (see engine.events.schedule_events)
    """
    require_projection_days(projection_days)
    start = as_calendar_day(start_date, time_zone)
    pess = _require_cents(starting_balance, "starting_balance")
    opt = pess if optimistic_starting_balance is None else _require_cents(
        optimistic_starting_balance, "optimistic_starting_balance"
    )

    events = schedule_events(
        inputs,
        start_date=start,
        projection_days=projection_days,
        statement_anchor=statement_anchor,
        phase_anchor=phase_anchor,
    )
    buckets = bucket_by_day(events)

    days: List[DailySnapshot] = []
    for offset in range(projection_days):
        current = start + timedelta(days=offset)
        bucket = buckets.get(current)
        income = bucket.income if bucket else []
        expenses = bucket.expenses if bucket else []

        spent = total_expenses(expenses)
        opt = opt + scenario_income(income, Scenario.OPTIMISTIC) - spent
        pess = pess + scenario_income(income, Scenario.PESSIMISTIC) - spent

        days.append(make_snapshot(current, offset, opt, pess, income, expenses))

    logger.debug(
        "Simulated %d days from %s (%d events)", projection_days, start, len(events)
    )
    return build_projection(
        days,
        starting_balance=starting_balance,
        optimistic_starting_balance=optimistic_starting_balance,
    )


def calculate_cashflow(
    inputs: CashflowInputs,
    *,
    projection_days: int = DEFAULT_PROJECTION_DAYS,
    start_date: Optional[Union[date, datetime, str]] = None,
    clock: Clock = utc_now,
    time_zone: str = TIME_ZONE,
) -> CashflowProjection:
    """
    Simple (non-rebased) mode: start at today's local day — today's own events
    included — seeded with the checking-account sum.
    """
    require_projection_days(projection_days)
    start = (
        as_calendar_day(start_date, time_zone)
        if start_date is not None
        else today_in_time_zone(time_zone, clock)
    )
    return simulate(
        inputs,
        start_date=start,
        projection_days=projection_days,
        starting_balance=starting_balance_from_accounts(inputs.accounts),
        time_zone=time_zone,
    )
