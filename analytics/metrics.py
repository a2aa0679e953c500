"""
Summary statistics per scenario — the numbers behind the dashboard summary cards.

Computed from the snapshot array alone (a pure linear scan):
  totals, end balance and danger-day count  (already carried by the projection)
  minimum balance and the first day it is reached
  surplus = end balance - scenario starting balance
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List

import numpy as np
import pandas as pd

from core.schema import AccountType, BankAccount
from engine.cashflow import CashflowProjection, Scenario


@dataclass(frozen=True)
class ScenarioStats:
    total_income: int
    total_expenses: int
    end_balance: int
    danger_day_count: int
    min_balance: int
    min_balance_date: date
    surplus: int  # negative = deficit


@dataclass(frozen=True)
class SummaryStats:
    starting_balance: int
    optimistic: ScenarioStats
    pessimistic: ScenarioStats

    def to_dataframe(self) -> pd.DataFrame:
        """One row per scenario, cents kept as integers."""
        rows = []
        for label, stats in (("optimistic", self.optimistic), ("pessimistic", self.pessimistic)):
            rows.append({
                "scenario": label,
                "total_income": stats.total_income,
                "total_expenses": stats.total_expenses,
                "end_balance": stats.end_balance,
                "surplus": stats.surplus,
                "min_balance": stats.min_balance,
                "min_balance_date": stats.min_balance_date.isoformat(),
                "danger_days": stats.danger_day_count,
            })
        return pd.DataFrame(rows)


def compute_scenario_stats(projection: CashflowProjection, scenario: Scenario) -> ScenarioStats:
    summary = projection.summary(scenario)
    balances = np.fromiter(
        (d.balance(scenario) for d in projection.days), dtype=np.int64, count=len(projection.days)
    )
    # argmin returns the first index on ties, i.e. the earliest date
    idx = int(np.argmin(balances))

    return ScenarioStats(
        total_income=summary.total_income,
        total_expenses=summary.total_expenses,
        end_balance=summary.end_balance,
        danger_day_count=summary.danger_day_count,
        min_balance=int(balances[idx]),
        min_balance_date=projection.days[idx].date,
        surplus=summary.end_balance - summary.starting_balance,
    )


def compute_summary_stats(projection: CashflowProjection) -> SummaryStats:
    return SummaryStats(
        starting_balance=projection.starting_balance,
        optimistic=compute_scenario_stats(projection, Scenario.OPTIMISTIC),
        pessimistic=compute_scenario_stats(projection, Scenario.PESSIMISTIC),
    )


def investment_buffer(accounts: Iterable[BankAccount]) -> int:
    """Total investment balance. Never simulated forward, only layered on top."""
    return sum(a.balance for a in accounts if a.type == AccountType.INVESTMENT)


def investment_inclusive_balances(
    projection: CashflowProjection, accounts: Iterable[BankAccount]
) -> List[int]:
    """Optimistic balance per day plus the investment buffer (chart's extra line)."""
    buffer = investment_buffer(accounts)
    return [d.optimistic_balance + buffer for d in projection.days]
