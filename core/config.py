"""
Projection configuration.
The surrounding app stores projection_days as a user preference; the engine only
ever receives it as an explicit value.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from .errors import CashflowErrorCode, CashflowInputError

TIME_ZONE: str = "America/Sao_Paulo"

# Horizon lengths offered by the preferences screen
ALLOWED_PROJECTION_DAYS: Tuple[int, ...] = (7, 14, 30, 60, 90)
DEFAULT_PROJECTION_DAYS: int = 30

# Balances older than this are flagged as stale by the health report
STALE_THRESHOLD_DAYS: int = 30


@dataclass(frozen=True)
class ProjectionConfig:
    projection_days: int = DEFAULT_PROJECTION_DAYS
    start_date: Optional[date] = None  # override for the simple (non-rebased) mode
    time_zone: str = TIME_ZONE

    # health report
    stale_threshold_days: int = STALE_THRESHOLD_DAYS

    def __post_init__(self) -> None:
        if self.projection_days not in ALLOWED_PROJECTION_DAYS:
            raise CashflowInputError(
                f"projection_days must be one of {ALLOWED_PROJECTION_DAYS}, "
                f"got {self.projection_days!r}",
                CashflowErrorCode.INVALID_INPUT,
            )
        if self.stale_threshold_days <= 0:
            raise CashflowInputError(
                f"stale_threshold_days must be positive, got {self.stale_threshold_days!r}",
                CashflowErrorCode.INVALID_INPUT,
            )
