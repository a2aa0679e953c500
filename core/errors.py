"""
Error taxonomy for the cashflow engine.

  CashflowInputError       — precondition violations (bad anchors, horizon, dates).
                             Raised synchronously, never coerced.
  CashflowComputationError — anything unexpected during a run, wrapped once by the
                             runner so callers get a single failure type.

A missing balance base is NOT an error: see engine.estimate (has_base=False).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class CashflowErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DATE = "INVALID_DATE"


class CashflowError(Exception):
    """Base class for every error raised by the engine."""


class CashflowInputError(CashflowError, ValueError):
    """Input rejected before simulating."""

    def __init__(
        self,
        message: str,
        code: CashflowErrorCode = CashflowErrorCode.INVALID_INPUT,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class CashflowComputationError(CashflowError):
    """Unexpected failure during the day walk; the original exception is chained."""
