"""Rebased projections: day 0 estimate, forward walk, no double counting."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

import engine.runner as runner
from core.config import ProjectionConfig
from core.errors import CashflowComputationError, CashflowInputError
from core.schema import (
    BankAccount,
    CashflowInputs,
    CreditCard,
    FixedExpense,
    FutureStatement,
    Project,
)
from engine.cashflow import simulate
from engine.estimate import calculate_estimated_today
from engine.runner import rebase_projection, run_projection


@pytest.fixture
def today_clock(clock_at):
    # Noon in São Paulo on 2025-03-12, ten days after the balance sync
    return clock_at("2025-03-12T15:00:00")


def worked_example(**extra) -> CashflowInputs:
    return CashflowInputs(
        accounts=[
            BankAccount(
                id="chk",
                name="Checking",
                balance=100000,
                balance_updated_at=datetime(2025, 3, 2, 15, 0, tzinfo=timezone.utc),
            )
        ],
        projects=[Project(id="salary", name="Salary", amount=500000, payment_day=15)],
        fixed_expenses=[FixedExpense(id="rent", name="Rent", amount=200000, due_day=10)],
        **extra,
    )


def test_worked_example(today_clock):
    result = run_projection(worked_example(), 30, clock=today_clock)
    assert result.rebased
    assert result.estimated_today.has_base
    assert result.estimated_today.pessimistic_cents == -100000
    assert result.estimated_today.optimistic_cents == -100000

    projection = result.projection
    day_0 = projection.days[0]
    assert day_0.date == date(2025, 3, 12)
    assert day_0.pessimistic_balance == day_0.optimistic_balance == -100000
    assert day_0.is_pessimistic_danger and day_0.is_optimistic_danger
    assert day_0.income_events == () and day_0.expense_events == ()

    assert len(projection.days) == 30
    assert projection.end_date == date(2025, 4, 10)
    assert projection.pessimistic.end_balance == 200000
    assert projection.optimistic.end_balance == 200000
    assert projection.starting_balance == -100000

    by_date = {d.date: d for d in projection.days}
    assert by_date[date(2025, 3, 15)].pessimistic_balance == 400000
    assert by_date[date(2025, 4, 9)].pessimistic_balance == 400000
    assert by_date[date(2025, 4, 10)].pessimistic_balance == 200000


def test_rebased_offsets_are_contiguous(today_clock):
    projection = run_projection(worked_example(), 7, clock=today_clock).projection
    assert [d.day_offset for d in projection.days] == list(range(7))
    assert [d.date for d in projection.days] == [date(2025, 3, 12) + timedelta(days=i) for i in range(7)]


def test_single_day_projection_is_just_the_estimate(today_clock):
    projection = run_projection(worked_example(), 1, clock=today_clock).projection
    assert len(projection.days) == 1
    assert projection.pessimistic.end_balance == -100000


def test_no_double_counting_against_single_walk(today_clock):
    inputs = worked_example(
        credit_cards=[CreditCard(id="visa", statement_balance=30000, due_day=12)],
        future_statements=[
            FutureStatement(id="fs", credit_card_id="visa", target_month=4, target_year=2025, amount=50000)
        ],
    )
    rebased = run_projection(inputs, 60, clock=today_clock).projection

    # Base day is the 2nd, so the single walk starts on the 3rd
    single = simulate(
        inputs,
        start_date=date(2025, 3, 3),
        projection_days=(rebased.end_date - date(2025, 3, 3)).days + 1,
        starting_balance=100000,
    )
    assert single.end_date == rebased.end_date
    assert rebased.pessimistic.end_balance == single.pessimistic.end_balance
    assert rebased.optimistic.end_balance == single.optimistic.end_balance

    card_bills = [
        ev.amount for d in rebased.days for ev in d.expense_events if ev.source_type == "credit_card"
    ]
    assert card_bills == [50000]

    single_by_date = {d.date: d for d in single.days}
    for day in rebased.days:
        assert day.pessimistic_balance == single_by_date[day.date].pessimistic_balance


def test_simple_mode_without_timestamps(march_20_clock):
    inputs = CashflowInputs(
        accounts=[BankAccount(id="chk", balance=1000)],
        fixed_expenses=[FixedExpense(id="e", amount=400, due_day=20)],
    )
    result = run_projection(inputs, 7, clock=march_20_clock)
    assert not result.rebased
    assert result.estimated_today.base_failure_reason == "missing_timestamps"
    assert result.projection.days[0].date == date(2025, 3, 20)
    assert result.projection.days[0].pessimistic_balance == 600


def test_explicit_start_date_forces_simple_mode(march_20_clock):
    config = ProjectionConfig(projection_days=14, start_date=date(2025, 4, 1))
    result = run_projection(worked_example(), config, clock=march_20_clock)
    assert not result.rebased
    assert result.projection.start_date == date(2025, 4, 1)
    assert result.projection.starting_balance == 100000


@pytest.mark.parametrize("days", [0, -1])
def test_invalid_days_rejected(march_20_clock, days):
    with pytest.raises(CashflowInputError):
        run_projection(worked_example(), days, clock=march_20_clock)


def test_config_only_allows_offered_horizons():
    with pytest.raises(CashflowInputError):
        ProjectionConfig(projection_days=45)
    assert ProjectionConfig(projection_days=90).projection_days == 90


def test_rebase_requires_a_base(march_20_clock):
    inputs = CashflowInputs(accounts=[BankAccount(id="chk", balance=1)])
    estimate = calculate_estimated_today(inputs, clock=march_20_clock)
    with pytest.raises(CashflowInputError):
        rebase_projection(inputs, estimate, projection_days=7)


def test_unexpected_failures_are_wrapped(monkeypatch, march_20_clock):
    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(runner, "calculate_estimated_today", boom)
    with pytest.raises(CashflowComputationError) as exc_info:
        run_projection(worked_example(), 7, clock=march_20_clock)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


WEEKLY_LEGACY = Project(id="shift", name="Shift", amount=1000, frequency="weekly", payment_day=15)
BIWEEKLY_FRIDAY = Project.model_validate({
    "id": "pay",
    "name": "Payroll",
    "amount": 2500,
    "frequency": "biweekly",
    "paymentSchedule": {"type": "dayOfWeek", "dayOfWeek": 5},
})


@pytest.mark.parametrize(
    "project,now",
    [
        (WEEKLY_LEGACY, "2025-03-20T15:00:00"),
        (BIWEEKLY_FRIDAY, "2025-03-17T15:00:00"),
        (BIWEEKLY_FRIDAY, "2025-03-20T15:00:00"),
    ],
)
def test_stepped_income_keeps_its_phase_across_the_rebase(clock_at, project, now):
    inputs = CashflowInputs(
        accounts=[
            BankAccount(
                id="chk", balance=0, balance_updated_at=datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)
            )
        ],
        projects=[project],
    )
    rebased = run_projection(inputs, 30, clock=clock_at(now)).projection

    # Base day is the 10th, so the single walk starts on the 11th
    single = simulate(
        inputs,
        start_date=date(2025, 3, 11),
        projection_days=(rebased.end_date - date(2025, 3, 11)).days + 1,
        starting_balance=0,
    )
    single_by_date = {d.date: d for d in single.days}
    for day in rebased.days:
        assert day.optimistic_balance == single_by_date[day.date].optimistic_balance
    assert rebased.optimistic.end_balance == single.optimistic.end_balance

    forward_paydays = [d.date for d in rebased.days[1:] if d.income_events]
    single_paydays = [d.date for d in single.days if d.income_events and d.date > rebased.start_date]
    assert forward_paydays == single_paydays


def test_biweekly_paydays_after_rebase(clock_at):
    inputs = CashflowInputs(
        accounts=[
            BankAccount(
                id="chk", balance=0, balance_updated_at=datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)
            )
        ],
        projects=[BIWEEKLY_FRIDAY],
    )
    result = run_projection(inputs, 30, clock=clock_at("2025-03-17T15:00:00"))
    # Mar 14 was paid inside the catch-up window
    assert result.estimated_today.optimistic_cents == 2500
    paydays = [d.date for d in result.projection.days if d.income_events]
    assert paydays == [date(2025, 3, 28), date(2025, 4, 11)]
