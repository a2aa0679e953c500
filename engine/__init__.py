"""
Cashflow projection engine — event scheduling, day-by-day simulation, today estimate
and rebasing.
"""

from .cashflow import (
    CashflowProjection,
    DailySnapshot,
    DangerDay,
    Scenario,
    ScenarioSummary,
    calculate_cashflow,
    simulate,
)
from .estimate import EstimatedTodayBalance, calculate_estimated_today
from .events import ExpenseEvent, IncomeEvent, schedule_events
from .runner import ProjectionResult, rebase_projection, run_projection

__all__ = [
    "CashflowProjection",
    "DailySnapshot",
    "DangerDay",
    "Scenario",
    "ScenarioSummary",
    "calculate_cashflow",
    "simulate",
    "EstimatedTodayBalance",
    "calculate_estimated_today",
    "ExpenseEvent",
    "IncomeEvent",
    "schedule_events",
    "ProjectionResult",
    "rebase_projection",
    "run_projection",
]
