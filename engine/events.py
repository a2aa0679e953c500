"""
Event scheduler — expands recurring definitions and one-off entries into dated
income/expense occurrences over a horizon.

The horizon is the closed day range [start_date, start_date + projection_days - 1].
Every recurring definition is anchored to a day of month (or a weekday) and expanded
once per month/week touching the horizon; anchors past a month's end clamp to that
month's last day rather than skipping the month.

Output order is ascending by date. Events on the same day keep insertion order:
  projects → single-shot income → fixed expenses → single-shot expenses → credit cards
each in collection order, so identical inputs always yield identical schedules.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Literal, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from core.errors import CashflowErrorCode, CashflowInputError
from core.schema import (
    CashflowInputs,
    Certainty,
    CreditCard,
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    Frequency,
    Project,
    TwiceMonthlySchedule,
)
from core.utils import anchored_date, month_starts, require_day_of_month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomeEvent:
    """One income occurrence."""
    date: date
    source_id: str
    source_name: str
    amount: int  # cents
    certainty: Certainty


@dataclass(frozen=True)
class ExpenseEvent:
    """One expense occurrence (fixed/single-shot expense or credit-card bill)."""
    date: date
    source_id: str
    source_name: str
    source_type: Literal["expense", "credit_card"]
    amount: int  # cents


ScheduledEvent = Union[IncomeEvent, ExpenseEvent]


@dataclass
class DayEvents:
    income: List[IncomeEvent] = field(default_factory=list)
    expenses: List[ExpenseEvent] = field(default_factory=list)


def require_projection_days(projection_days: int) -> int:
    if isinstance(projection_days, bool) or not isinstance(projection_days, int):
        raise CashflowInputError(
            f"projection_days must be an integer, got {projection_days!r}",
            CashflowErrorCode.INVALID_INPUT,
        )
    if projection_days <= 0:
        raise CashflowInputError(
            f"projection_days must be positive, got {projection_days}",
            CashflowErrorCode.INVALID_INPUT,
        )
    return projection_days


# ---------------------------------------------------------------------------
# Recurring income
# ---------------------------------------------------------------------------

def _monthly_dates(day: int, start: date, end: date) -> List[date]:
    out = []
    for month in month_starts(start, end):
        due = anchored_date(day, month.year, month.month)
        if start <= due <= end:
            out.append(due)
    return out


def _stepped(first: date, start: date, end: date, step_days: int) -> List[date]:
    """Every step_days from first, keeping only days inside [start, end]."""
    d = first
    if d < start:
        behind = (start - d).days
        d += timedelta(days=-(-behind // step_days) * step_days)
    out = []
    while d <= end:
        out.append(d)
        d += timedelta(days=step_days)
    return out


def _weekday_dates(
    schedule: DayOfWeekSchedule, start: date, end: date, step_days: int, phase_start: date
) -> List[date]:
    dow = schedule.day_of_week
    if isinstance(dow, bool) or not isinstance(dow, int) or not 1 <= dow <= 7:
        raise CashflowInputError(
            f"day_of_week must be between 1 and 7, got {dow!r}",
            CashflowErrorCode.INVALID_INPUT,
        )

    if step_days == 14 and schedule.anchor_date is not None:
        anchor = schedule.anchor_date
        if anchor.isoweekday() != dow:
            raise CashflowInputError(
                f"anchor_date {anchor.isoformat()} is not on ISO weekday {dow}",
                CashflowErrorCode.INVALID_DATE,
            )
        offset = (start - anchor).days % 14
        return _stepped(start + timedelta(days=(14 - offset) % 14), start, end, 14)

    # Weekly, or biweekly phased on the first matching weekday of the timeline
    first = phase_start + timedelta(days=(dow - phase_start.isoweekday()) % 7)
    return _stepped(first, start, end, step_days)


def _project_occurrences(
    project: Project, start: date, end: date, phase_start: date
) -> List[Tuple[date, int]]:
    """
    (date, amount) pairs for one recurring project inside [start, end].

    Weekly and biweekly projects without an explicit anchor_date are phased from
    phase_start, which may precede start.
    """
    schedule = project.payment_schedule
    freq = Frequency(project.frequency)

    def _mismatch() -> CashflowInputError:
        return CashflowInputError(
            f"Project {project.id!r}: no usable payment anchor for {freq.value} frequency",
            CashflowErrorCode.INVALID_INPUT,
        )

    if freq is Frequency.MONTHLY:
        if isinstance(schedule, DayOfMonthSchedule):
            day = require_day_of_month(schedule.day_of_month, "day_of_month")
        elif schedule is None and project.payment_day is not None:
            day = require_day_of_month(project.payment_day, "payment_day")
        else:
            raise _mismatch()
        return [(d, project.amount) for d in _monthly_dates(day, start, end)]

    if freq is Frequency.TWICE_MONTHLY:
        if not isinstance(schedule, TwiceMonthlySchedule):
            raise _mismatch()
        first_day = require_day_of_month(schedule.first_day, "first_day")
        second_day = require_day_of_month(schedule.second_day, "second_day")
        variable = schedule.first_amount is not None and schedule.second_amount is not None
        out = []
        for month in month_starts(start, end):
            first = anchored_date(first_day, month.year, month.month)
            second = anchored_date(second_day, month.year, month.month)
            pairs = [(first, schedule.first_amount if variable else project.amount)]
            if second != first:
                pairs.append((second, schedule.second_amount if variable else project.amount))
            out.extend(p for p in sorted(pairs) if start <= p[0] <= end)
        return out

    step = 7 if freq is Frequency.WEEKLY else 14
    if isinstance(schedule, DayOfWeekSchedule):
        dates = _weekday_dates(schedule, start, end, step, phase_start)
    elif schedule is None and project.payment_day is not None:
        # Legacy anchor: first clamped payment_day of the timeline, then every 7/14 days
        day = require_day_of_month(project.payment_day, "payment_day")
        dates = _stepped(next_due_date(day, phase_start), start, end, step)
    else:
        raise _mismatch()
    return [(d, project.amount) for d in dates]


# ---------------------------------------------------------------------------
# Credit cards
# ---------------------------------------------------------------------------

def next_due_date(due_day: int, on_or_after: date) -> date:
    """First (clamped) occurrence of due_day on or after the given day."""
    candidate = anchored_date(due_day, on_or_after.year, on_or_after.month)
    if candidate >= on_or_after:
        return candidate
    nxt = on_or_after.replace(day=1) + relativedelta(months=1)
    return anchored_date(due_day, nxt.year, nxt.month)


def _card_occurrences(
    card: CreditCard,
    start: date,
    end: date,
    future_amounts: Dict[Tuple[str, int, int], int],
    statement_anchor: date,
) -> List[Tuple[date, int]]:
    due_day = require_day_of_month(card.due_day, "due_day")
    known_bill_due = next_due_date(due_day, statement_anchor)
    out = []
    for due in _monthly_dates(due_day, start, end):
        if due <= known_bill_due:
            amount = card.statement_balance
        else:
            amount = future_amounts.get((card.id, due.year, due.month), card.statement_balance)
        out.append((due, amount))
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def schedule_events(
    inputs: CashflowInputs,
    *,
    start_date: date,
    projection_days: int,
    statement_anchor: Optional[date] = None,
    phase_anchor: Optional[date] = None,
) -> List[ScheduledEvent]:
    """
    Materialise every income/expense occurrence inside the horizon.

    Parameters
    ----------
    inputs : CashflowInputs
        Entity collections
    start_date : date
        First calendar day of the horizon
    projection_days : int
        Number of days in the horizon (> 0)
    statement_anchor : date, optional
        Day from which a card's next due date carries its known statement_balance.
        Defaults to start_date. Callers that split one timeline into several windows
        pass the first window's start so the known bill is charged only once.
    phase_anchor : date, optional
        Day weekly/biweekly income without an anchor_date is phased from. Defaults to
        start_date; split timelines pass the first window's start, like statement_anchor.

    Returns
    -------
    List of IncomeEvent / ExpenseEvent sorted by date (stable).
    """
    require_projection_days(projection_days)
    end_date = start_date + timedelta(days=projection_days - 1)
    anchor = statement_anchor or start_date
    phase_start = min(phase_anchor or start_date, start_date)

    events: List[ScheduledEvent] = []

    for project in inputs.projects:
        if not project.is_active:
            continue
        for d, amount in _project_occurrences(project, start_date, end_date, phase_start):
            events.append(IncomeEvent(d, project.id, project.name, amount, Certainty(project.certainty)))

    for item in inputs.single_shot_income:
        if start_date <= item.date <= end_date:
            events.append(
                IncomeEvent(item.date, item.id, item.name, item.amount, Certainty(item.certainty))
            )

    for expense in inputs.fixed_expenses:
        due_day = require_day_of_month(expense.due_day, "due_day")
        if not expense.is_active:
            continue
        for d in _monthly_dates(due_day, start_date, end_date):
            events.append(ExpenseEvent(d, expense.id, expense.name, "expense", expense.amount))

    for expense in inputs.single_shot_expenses:
        if start_date <= expense.date <= end_date:
            events.append(
                ExpenseEvent(expense.date, expense.id, expense.name, "expense", expense.amount)
            )

    future_amounts: Dict[Tuple[str, int, int], int] = {}
    for statement in inputs.future_statements:
        key = (statement.credit_card_id, statement.target_year, statement.target_month)
        future_amounts.setdefault(key, statement.amount)

    for card in inputs.credit_cards:
        for d, amount in _card_occurrences(card, start_date, end_date, future_amounts, anchor):
            events.append(ExpenseEvent(d, card.id, card.name, "credit_card", amount))

    events.sort(key=lambda ev: ev.date)
    logger.debug(
        "Scheduled %d events between %s and %s", len(events), start_date, end_date
    )
    return events


def bucket_by_day(events: List[ScheduledEvent]) -> Dict[date, DayEvents]:
    """Group events by calendar day, preserving order within each day."""
    buckets: Dict[date, DayEvents] = defaultdict(DayEvents)
    for ev in events:
        if isinstance(ev, IncomeEvent):
            buckets[ev.date].income.append(ev)
        else:
            buckets[ev.date].expenses.append(ev)
    return dict(buckets)
