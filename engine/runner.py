"""
Projection runner — estimated-today rebasing on top of the day-by-day simulator.

Two modes of operation:
  1. Rebased: a checking account has a usable balance timestamp. Day 0 is a synthetic
     snapshot holding the estimated-today pair; the simulator runs from tomorrow for
     the remaining days, seeded per scenario from that pair.
  2. Simple:  no usable base (or an explicit start_date). The simulator starts on the
     start day itself, today's events included, seeded with the checking sum.

Today's events are applied exactly once in both modes: in rebased mode they belong to
the estimate's catch-up window and the forward walk only begins tomorrow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import List, Union

from core.config import DEFAULT_PROJECTION_DAYS, TIME_ZONE, ProjectionConfig
from core.errors import (
    CashflowComputationError,
    CashflowError,
    CashflowErrorCode,
    CashflowInputError,
)
from core.schema import CashflowInputs
from core.utils import Clock, utc_now

from .cashflow import (
    CashflowProjection,
    DailySnapshot,
    build_projection,
    calculate_cashflow,
    make_snapshot,
    simulate,
)
from .estimate import EstimatedTodayBalance, calculate_estimated_today
from .events import require_projection_days

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionResult:
    projection: CashflowProjection
    estimated_today: EstimatedTodayBalance
    rebased: bool


def rebase_projection(
    inputs: CashflowInputs,
    estimated_today: EstimatedTodayBalance,
    *,
    projection_days: int,
    time_zone: str = TIME_ZONE,
) -> CashflowProjection:
    """
    Stitch the estimated-today pair onto a forward simulation starting tomorrow.

    Returns exactly `projection_days` snapshots: the synthetic day 0 (no events) followed
    by `projection_days - 1` simulated days, renumbered 0..N-1.
    """
    require_projection_days(projection_days)
    if not estimated_today.has_base or estimated_today.base is None:
        raise CashflowInputError(
            "Cannot rebase without a balance base; use the simple projection instead.",
            CashflowErrorCode.INVALID_INPUT,
        )

    today = estimated_today.today
    tomorrow = today + timedelta(days=1)
    opt0 = estimated_today.optimistic_cents
    pess0 = estimated_today.pessimistic_cents

    days: List[DailySnapshot] = [make_snapshot(today, 0, opt0, pess0)]

    forward_days = projection_days - 1
    if forward_days > 0:
        # Card bills and weekly paydays stay anchored to the catch-up window start
        timeline_start = min(estimated_today.base.start + timedelta(days=1), tomorrow)
        forward = simulate(
            inputs,
            start_date=tomorrow,
            projection_days=forward_days,
            starting_balance=pess0,
            optimistic_starting_balance=opt0,
            statement_anchor=timeline_start,
            phase_anchor=timeline_start,
            time_zone=time_zone,
        )
        days.extend(replace(d, day_offset=i + 1) for i, d in enumerate(forward.days))

    return build_projection(days, starting_balance=pess0, optimistic_starting_balance=opt0)


def run_projection(
    inputs: CashflowInputs,
    config: Union[ProjectionConfig, int] = DEFAULT_PROJECTION_DAYS,
    *,
    clock: Clock = utc_now,
) -> ProjectionResult:
    """
    Run a full projection — rebased when possible, simple otherwise.

    Parameters
    ----------
    inputs : CashflowInputs
        Entity collections snapshot
    config : ProjectionConfig or int
        Projection settings, or a bare positive number of days
    clock : callable
        Source of the current instant (frozen in tests)

    Raises
    ------
    CashflowInputError
        On any precondition violation (checked before simulating)
    CashflowComputationError
        On any unexpected failure during the run (original exception chained)
    """
    if isinstance(config, ProjectionConfig):
        projection_days = config.projection_days
        time_zone = config.time_zone
        start_date = config.start_date
    else:
        projection_days = config
        time_zone = TIME_ZONE
        start_date = None
    require_projection_days(projection_days)

    try:
        estimate = calculate_estimated_today(inputs, clock=clock, time_zone=time_zone)

        if estimate.has_base and start_date is None:
            logger.info(
                "Rebasing %d-day projection on estimated balance for %s",
                projection_days, estimate.today,
            )
            projection = rebase_projection(
                inputs, estimate, projection_days=projection_days, time_zone=time_zone
            )
            return ProjectionResult(projection, estimate, rebased=True)

        logger.info(
            "Simple %d-day projection (%s)",
            projection_days,
            "explicit start date" if start_date is not None else estimate.base_failure_reason,
        )
        projection = calculate_cashflow(
            inputs,
            projection_days=projection_days,
            start_date=start_date,
            clock=clock,
            time_zone=time_zone,
        )
        return ProjectionResult(projection, estimate, rebased=False)
    except CashflowError:
        raise
    except Exception as exc:
        raise CashflowComputationError(f"Cashflow projection failed: {exc}") from exc
