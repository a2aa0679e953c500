"""
Core package — entity schema, configuration, errors, and money/date primitives.
No business logic lives here.
"""

from .config import ALLOWED_PROJECTION_DAYS, TIME_ZONE, ProjectionConfig
from .errors import (
    CashflowComputationError,
    CashflowError,
    CashflowErrorCode,
    CashflowInputError,
)
from .schema import (
    AccountType,
    BankAccount,
    CashflowInputs,
    Certainty,
    CreditCard,
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    FixedExpense,
    Frequency,
    FutureStatement,
    Project,
    SingleShotExpense,
    SingleShotIncome,
    TwiceMonthlySchedule,
)
from .utils import to_cents, utc_now

__all__ = [
    "ALLOWED_PROJECTION_DAYS",
    "TIME_ZONE",
    "ProjectionConfig",
    "CashflowComputationError",
    "CashflowError",
    "CashflowErrorCode",
    "CashflowInputError",
    "AccountType",
    "BankAccount",
    "CashflowInputs",
    "Certainty",
    "CreditCard",
    "DayOfMonthSchedule",
    "DayOfWeekSchedule",
    "FixedExpense",
    "Frequency",
    "FutureStatement",
    "Project",
    "SingleShotExpense",
    "SingleShotIncome",
    "TwiceMonthlySchedule",
    "to_cents",
    "utc_now",
]
