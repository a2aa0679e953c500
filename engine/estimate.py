"""
Estimated-today balance — catches the last synced checking balances up to today.

The last persisted balance is usually days old. Everything scheduled after the day of
that sync, up to and including today, is replayed on top of it so the forecast starts
from a realistic present value:

    base day (sync)  ──(base, today]──▶  today
    checking sum          catch-up           estimate (one value per scenario)

The catch-up window excludes the base day itself (its events are assumed to be in the
synced balance already) and includes today. `today` is computed once, at calendar-day
resolution in the configured time zone, and shared by every account.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal, Optional, Sequence

from core.config import TIME_ZONE
from core.schema import BankAccount, CashflowInputs, Certainty
from core.utils import Clock, to_local_date, today_in_time_zone, utc_now

from .cashflow import simulate, starting_balance_from_accounts

logger = logging.getLogger(__name__)

BaseFailureReason = Literal["no_checking_accounts", "missing_timestamps"]


@dataclass(frozen=True)
class BalanceUpdateBase:
    """Local day(s) the checking balances were last synced. `range` when accounts disagree."""
    kind: Literal["single", "range"]
    start: date
    end: date


@dataclass(frozen=True)
class BaseResult:
    base: Optional[BalanceUpdateBase]
    failure_reason: Optional[BaseFailureReason] = None

    @property
    def success(self) -> bool:
        return self.base is not None


@dataclass(frozen=True)
class EstimateFlags:
    optimistic: bool
    pessimistic: bool

    @property
    def any(self) -> bool:
        return self.optimistic or self.pessimistic


@dataclass(frozen=True)
class EstimatedTodayBalance:
    today: date
    has_base: bool
    optimistic_cents: int
    pessimistic_cents: int
    base: Optional[BalanceUpdateBase] = None
    base_failure_reason: Optional[BaseFailureReason] = None
    is_estimated: EstimateFlags = EstimateFlags(False, False)


def get_checking_balance_update_base(
    accounts: Sequence[BankAccount], time_zone: str = TIME_ZONE
) -> BaseResult:
    """
    Base day for the catch-up. Checking accounts without a timestamp are carried at
    their balance as-is; only timestamped ones define the base, whose computation day
    is the earliest of them.
    """
    checking = [a for a in accounts if a.is_checking]
    if not checking:
        return BaseResult(None, "no_checking_accounts")

    days = sorted(
        to_local_date(a.balance_updated_at, time_zone)
        for a in checking
        if a.balance_updated_at is not None
    )
    if not days:
        return BaseResult(None, "missing_timestamps")

    earliest, latest = days[0], days[-1]
    kind = "single" if earliest == latest else "range"
    return BaseResult(BalanceUpdateBase(kind, earliest, latest))


def calculate_estimated_today(
    inputs: CashflowInputs,
    *,
    clock: Clock = utc_now,
    time_zone: str = TIME_ZONE,
) -> EstimatedTodayBalance:
    """
    Estimate today's balance per scenario.

    Without a usable base (has_base=False) both values are the plain checking sum and
    callers must fall back to a non-rebased projection starting today.
    """
    today = today_in_time_zone(time_zone, clock)
    checking_sum = starting_balance_from_accounts(inputs.accounts)

    base_result = get_checking_balance_update_base(inputs.accounts, time_zone)
    if not base_result.success:
        logger.debug("No balance base (%s); estimate is the checking sum", base_result.failure_reason)
        return EstimatedTodayBalance(
            today=today,
            has_base=False,
            optimistic_cents=checking_sum,
            pessimistic_cents=checking_sum,
            base_failure_reason=base_result.failure_reason,
        )

    base = base_result.base
    window_start = base.start + timedelta(days=1)

    # Synced today (or a clock skew put the sync in the future): nothing to replay
    if window_start > today:
        return EstimatedTodayBalance(
            today=today,
            has_base=True,
            optimistic_cents=checking_sum,
            pessimistic_cents=checking_sum,
            base=base,
        )

    window = simulate(
        inputs,
        start_date=window_start,
        projection_days=(today - window_start).days + 1,
        starting_balance=checking_sum,
        time_zone=time_zone,
    )
    last = window.days[-1]

    any_expense = any(d.expense_events for d in window.days)
    any_income = any(d.income_events for d in window.days)
    any_guaranteed = any(
        ev.certainty == Certainty.GUARANTEED for d in window.days for ev in d.income_events
    )
    logger.debug(
        "Caught up %d day(s) since %s: optimistic=%d pessimistic=%d",
        len(window.days), base.start, last.optimistic_balance, last.pessimistic_balance,
    )

    return EstimatedTodayBalance(
        today=today,
        has_base=True,
        optimistic_cents=last.optimistic_balance,
        pessimistic_cents=last.pessimistic_balance,
        base=base,
        is_estimated=EstimateFlags(
            optimistic=any_expense or any_income,
            pessimistic=any_expense or any_guaranteed,
        ),
    )
