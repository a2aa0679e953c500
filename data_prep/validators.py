"""
Data quality validation for input snapshots before they enter the engine.

Catches problems the entity models cannot see on their own:
- Duplicate ids inside a collection
- Future statements pointing at unknown cards or at months already gone
- No checking account to seed the projection
- Checking balances nobody ever timestamped (no rebasing possible)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List

from core.config import TIME_ZONE
from core.schema import CashflowInputs
from core.utils import Clock, today_in_time_zone, utc_now


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a snapshot."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def _duplicate_ids(items: Iterable) -> List[str]:
    counts = Counter(item.id for item in items)
    return sorted(i for i, n in counts.items() if n > 1)


def validate_inputs(
    inputs: CashflowInputs,
    *,
    clock: Clock = utc_now,
    time_zone: str = TIME_ZONE,
) -> ValidationResult:
    """
    Run all validation checks on an input snapshot.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Ids ---
    collections = {
        "accounts": inputs.accounts,
        "projects": inputs.projects,
        "single-shot income": inputs.single_shot_income,
        "fixed expenses": inputs.fixed_expenses,
        "single-shot expenses": inputs.single_shot_expenses,
        "credit cards": inputs.credit_cards,
        "future statements": inputs.future_statements,
    }
    for label, items in collections.items():
        dups = _duplicate_ids(items)
        if dups:
            result.errors.append(f"Duplicate ids in {label}: {dups}")

    # --- Accounts ---
    checking = inputs.checking_accounts
    if not checking:
        result.warnings.append("No checking accounts; projection starts from 0.")
    untimed = [a.id for a in checking if a.balance_updated_at is None]
    if untimed:
        result.warnings.append(
            f"{len(untimed)} checking account(s) without a balance timestamp: {untimed}"
        )

    # --- Future statements ---
    card_ids = {c.id for c in inputs.credit_cards}
    today = today_in_time_zone(time_zone, clock)
    current = (today.year, today.month)
    for st in inputs.future_statements:
        if st.credit_card_id not in card_ids:
            result.warnings.append(
                f"Future statement {st.id!r} references unknown card {st.credit_card_id!r}."
            )
        if (st.target_year, st.target_month) < current:
            result.warnings.append(
                f"Future statement {st.id!r} targets past month "
                f"{st.target_year}-{st.target_month:02d}."
            )

    return result
