"""
cashflow-engine — run a projection over a saved input snapshot.

Run: cashflow-engine project snapshot.json --days 30
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import click
import pandas as pd

from analytics import build_health_report, compute_summary_stats, get_danger_ranges
from core.config import DEFAULT_PROJECTION_DAYS, ProjectionConfig
from core.errors import CashflowError
from core.logging import setup_logging
from core.utils import Clock, format_cents, utc_now
from data_prep import load_snapshot, validate_inputs
from engine import run_projection

logger = logging.getLogger(__name__)


def _clock_from(now: Optional[str]) -> Clock:
    if now is None:
        return utc_now
    try:
        instant = datetime.fromisoformat(now.replace("Z", "+00:00"))
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO-8601 instant: {now!r}", param_hint="--now") from exc
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return lambda: instant


@click.group()
def main():
    """Household cashflow projection engine"""
    pass


@main.command("project")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--days", "days", type=int, default=None,
              help="Projection length (7, 14, 30, 60 or 90); defaults to the snapshot's or 30")
@click.option("--now", "now", type=str, default=None,
              help="Override the current instant (ISO-8601; naive means UTC)")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the projection as JSON")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging")
def project(snapshot, days, now, as_json, verbose):
    """Project daily balances for SNAPSHOT (a saved input JSON)."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING, stream=sys.stderr)
    clock = _clock_from(now)

    try:
        inputs, saved_days = load_snapshot(snapshot)
        if days is None:
            days = saved_days if saved_days is not None else DEFAULT_PROJECTION_DAYS
        config = ProjectionConfig(projection_days=days)
    except CashflowError as exc:
        raise click.ClickException(str(exc)) from exc

    validation = validate_inputs(inputs, clock=clock, time_zone=config.time_zone)
    for warning in validation.warnings:
        logger.warning(warning)
    if not validation.is_valid:
        raise click.ClickException(validation.summary())

    try:
        result = run_projection(inputs, config, clock=clock)
    except CashflowError as exc:
        raise click.ClickException(str(exc)) from exc

    projection = result.projection
    if as_json:
        click.echo(json.dumps(projection.to_dict(), indent=2))
        return

    mode = "rebased on estimated balance" if result.rebased else "from checking balance"
    click.echo(
        f"{config.projection_days}-day projection {projection.start_date} → "
        f"{projection.end_date} ({mode})"
    )
    click.echo(
        f"Starting balance: optimistic {format_cents(projection.optimistic.starting_balance)}, "
        f"pessimistic {format_cents(projection.pessimistic.starting_balance)}"
    )

    stats = compute_summary_stats(projection)
    click.echo("")
    click.echo(stats.to_dataframe().to_string(index=False))

    ranges = get_danger_ranges(projection.days)
    click.echo("")
    if ranges:
        table = pd.DataFrame(
            [
                {"start": r.start.isoformat(), "end": r.end.isoformat(),
                 "days": r.day_count, "scenario": r.scenario}
                for r in ranges
            ]
        )
        click.echo("Danger ranges:")
        click.echo(table.to_string(index=False))
    else:
        click.echo("No danger ranges.")

    report = build_health_report(
        stats,
        inputs.accounts,
        inputs.credit_cards,
        clock=clock,
        time_zone=config.time_zone,
        stale_threshold_days=config.stale_threshold_days,
    )
    click.echo("")
    click.echo(report.to_dataframe().to_string(index=False))


if __name__ == "__main__":
    main()
