"""Danger ranges, summary statistics, health report."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from analytics.health import build_health_report, days_since_update, health_message
from analytics.metrics import compute_summary_stats, investment_inclusive_balances
from analytics.ranges import DangerRange, get_danger_ranges
from core.schema import BankAccount, CashflowInputs, CreditCard, FixedExpense, SingleShotIncome
from engine.cashflow import build_projection, make_snapshot, simulate

START = date(2025, 3, 1)


def snapshots(pairs):
    return [
        make_snapshot(START + timedelta(days=i), i, opt, pess) for i, (opt, pess) in enumerate(pairs)
    ]


def test_ranges_split_on_signature_change():
    days = snapshots([(10, -5), (10, -5), (-1, -5), (5, 5), (-1, -1), (3, 3)])
    assert get_danger_ranges(days) == [
        DangerRange(date(2025, 3, 1), date(2025, 3, 2), "pessimistic"),
        DangerRange(date(2025, 3, 3), date(2025, 3, 3), "both"),
        DangerRange(date(2025, 3, 5), date(2025, 3, 5), "both"),
    ]


def test_range_open_at_the_end_is_closed():
    days = snapshots([(1, 1), (-1, -1), (-2, -2)])
    (only,) = get_danger_ranges(days)
    assert only.start == date(2025, 3, 2)
    assert only.end == date(2025, 3, 3)
    assert only.day_count == 2


def test_ranges_cover_exactly_the_danger_days():
    days = snapshots([(3, -1), (-2, -3), (-2, -3), (0, 0), (4, -4), (-1, -1), (2, 2), (1, -9)])
    ranges = get_danger_ranges(days)

    covered = []
    for r in ranges:
        covered.extend(r.start + timedelta(days=i) for i in range(r.day_count))
    flagged = [d.date for d in days if d.is_optimistic_danger or d.is_pessimistic_danger]
    assert covered == flagged
    assert all(a.end < b.start for a, b in zip(ranges, ranges[1:]))


def test_no_danger_no_ranges():
    assert get_danger_ranges(snapshots([(1, 1), (0, 0)])) == []
    assert get_danger_ranges([]) == []


def test_summary_stats_min_balance_tie_takes_earliest():
    projection = build_projection(snapshots([(5, 5), (-3, -3), (-3, -3), (2, 1)]), starting_balance=10)
    stats = compute_summary_stats(projection)
    assert stats.pessimistic.min_balance == -3
    assert stats.pessimistic.min_balance_date == date(2025, 3, 2)
    assert stats.pessimistic.surplus == 1 - 10
    assert stats.optimistic.surplus == 2 - 10
    assert stats.pessimistic.danger_day_count == 2


def test_surplus_uses_each_scenarios_own_seed():
    projection = build_projection(
        snapshots([(120, 80)]), starting_balance=100, optimistic_starting_balance=150
    )
    stats = compute_summary_stats(projection)
    assert stats.optimistic.surplus == -30
    assert stats.pessimistic.surplus == -20
    frame = stats.to_dataframe()
    assert list(frame["scenario"]) == ["optimistic", "pessimistic"]
    assert list(frame["surplus"]) == [-30, -20]


def test_investment_line_sits_above_optimistic():
    accounts = [
        BankAccount(id="chk", balance=100),
        BankAccount(id="inv", type="investment", balance=1000),
        BankAccount(id="sav", type="savings", balance=50),
    ]
    projection = build_projection(snapshots([(100, 90), (-20, -40)]), starting_balance=100)
    assert investment_inclusive_balances(projection, accounts) == [1100, 980]


def _projection_with(certainty: str):
    inputs = CashflowInputs(
        fixed_expenses=[FixedExpense(id="e", amount=1000, due_day=2)],
        single_shot_income=[SingleShotIncome(id="i", amount=1000, date=date(2025, 3, 2), certainty=certainty)],
    )
    return simulate(inputs, start_date=START, projection_days=3, starting_balance=0)


def test_health_warning_when_only_worst_case_dips(march_20_clock):
    stats = compute_summary_stats(_projection_with("probable"))
    report = build_health_report(stats, clock=march_20_clock)
    assert report.status == "warning"
    assert report.message == "2 danger days in worst-case scenario"


def test_health_good_and_danger(march_20_clock):
    good = build_health_report(compute_summary_stats(_projection_with("guaranteed")), clock=march_20_clock)
    assert good.status == "good"
    assert good.message == "No issues detected"

    broke = build_projection(snapshots([(-1, -1), (5, 5)]), starting_balance=0)
    danger = build_health_report(compute_summary_stats(broke), clock=march_20_clock)
    assert danger.status == "danger"
    assert danger.message == "1 danger day even in best-case scenario"


def test_health_message_pluralisation():
    assert health_message("danger", 3, 5) == "3 danger days even in best-case scenario"
    assert health_message("warning", 0, 1) == "1 danger day in worst-case scenario"


def test_staleness(march_20_clock):
    def at(day):
        return day.replace(tzinfo=timezone.utc)

    accounts = [
        BankAccount(id="fresh", balance=0, balance_updated_at=at(datetime(2025, 2, 18, 15))),
        BankAccount(id="never", name="Old wallet", balance=0),
    ]
    cards = [CreditCard(id="visa", statement_balance=0, due_day=5, balance_updated_at=at(datetime(2025, 2, 17, 15)))]
    report = build_health_report(None, accounts, cards, clock=march_20_clock)

    assert report.status == "good"
    assert report.is_stale
    assert [(e.id, e.type, e.days_since_update) for e in report.stale_entities] == [
        ("never", "account", None),
        ("visa", "card", 31),
    ]
    assert "STALE" in set(report.to_dataframe()["Metric"])


def test_days_since_update_is_local(march_20_clock):
    # 2025-03-20 01:00Z is still the 19th in São Paulo
    assert days_since_update(datetime(2025, 3, 20, 1, 0, tzinfo=timezone.utc), clock=march_20_clock) == 1
    assert days_since_update(None, clock=march_20_clock) is None


@pytest.mark.parametrize("threshold,expected", [(30, 0), (10, 1)])
def test_stale_threshold_is_configurable(march_20_clock, threshold, expected):
    accounts = [BankAccount(id="a", balance=0, balance_updated_at=datetime(2025, 3, 1, 15, tzinfo=timezone.utc))]
    report = build_health_report(None, accounts, clock=march_20_clock, stale_threshold_days=threshold)
    assert len(report.stale_entities) == expected
