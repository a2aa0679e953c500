"""
Input entities consumed by the engine.

Entities arrive already persisted and deduplicated by the surrounding app; the models
here only enforce the shape and numeric bounds the engine relies on. All amounts are
integer cents; a string amount ("1234.56") is read in currency units. Field names are
snake_case; the camelCase names used in saved snapshots are accepted as aliases.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .utils import to_cents


def _cents(value: Any) -> Any:
    # Form input arrives as a decimal string in currency units
    if isinstance(value, str):
        return to_cents(value)
    return value


Cents = Annotated[int, BeforeValidator(_cents)]


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"


class Certainty(str, Enum):
    GUARANTEED = "guaranteed"
    PROBABLE = "probable"
    UNCERTAIN = "uncertain"


class Frequency(str, Enum):
    MONTHLY = "monthly"
    TWICE_MONTHLY = "twice-monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"


class _Entity(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# === Accounts ===

class BankAccount(_Entity):
    id: str
    name: str = ""
    type: AccountType = AccountType.CHECKING
    balance: Cents
    balance_updated_at: Optional[dt.datetime] = None
    owner_id: Optional[str] = None

    @property
    def is_checking(self) -> bool:
        return self.type == AccountType.CHECKING


# === Income ===

class DayOfMonthSchedule(_Entity):
    type: Literal["dayOfMonth"] = "dayOfMonth"
    day_of_month: int = Field(ge=1, le=31)


class TwiceMonthlySchedule(_Entity):
    type: Literal["twiceMonthly"] = "twiceMonthly"
    first_day: int = Field(ge=1, le=31)
    second_day: int = Field(ge=1, le=31)
    # Only used when both are set
    first_amount: Optional[Cents] = Field(default=None, gt=0)
    second_amount: Optional[Cents] = Field(default=None, gt=0)


class DayOfWeekSchedule(_Entity):
    type: Literal["dayOfWeek"] = "dayOfWeek"
    day_of_week: int = Field(ge=1, le=7)  # ISO: Monday=1 .. Sunday=7
    anchor_date: Optional[dt.date] = None  # a known payday, fixes the biweekly phase


PaymentSchedule = Annotated[
    Union[DayOfMonthSchedule, TwiceMonthlySchedule, DayOfWeekSchedule],
    Field(discriminator="type"),
]


class Project(_Entity):
    """Recurring income source."""

    id: str
    name: str = ""
    amount: Cents = Field(gt=0)
    frequency: Frequency = Frequency.MONTHLY
    certainty: Certainty = Certainty.GUARANTEED
    payment_day: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        validation_alias=AliasChoices("payment_day", "paymentDay", "day_of_month", "dayOfMonth"),
    )
    payment_schedule: Optional[PaymentSchedule] = None
    is_active: bool = True


class SingleShotIncome(_Entity):
    id: str
    name: str = ""
    amount: Cents = Field(gt=0)
    date: dt.date
    certainty: Certainty = Certainty.GUARANTEED


# === Expenses ===

class FixedExpense(_Entity):
    id: str
    name: str = ""
    amount: Cents = Field(gt=0)
    due_day: int = Field(ge=1, le=31)
    is_active: bool = True


class SingleShotExpense(_Entity):
    id: str
    name: str = ""
    amount: Cents = Field(gt=0)
    date: dt.date


class CreditCard(_Entity):
    id: str
    name: str = ""
    statement_balance: Cents = Field(ge=0)
    due_day: int = Field(ge=1, le=31)
    balance_updated_at: Optional[dt.datetime] = None


class FutureStatement(_Entity):
    """Forecasted, not-yet-billed statement of a card for one month."""

    id: str
    credit_card_id: str
    target_month: int = Field(ge=1, le=12)
    target_year: int = Field(ge=2000)
    amount: Cents = Field(ge=0)


# === Bundle ===

class CashflowInputs(_Entity):
    """Snapshot of every collection the engine reads. Order inside each collection matters
    only for tie-breaking events that fall on the same day."""

    accounts: Tuple[BankAccount, ...] = ()
    projects: Tuple[Project, ...] = ()
    single_shot_income: Tuple[SingleShotIncome, ...] = ()
    fixed_expenses: Tuple[FixedExpense, ...] = ()
    single_shot_expenses: Tuple[SingleShotExpense, ...] = ()
    credit_cards: Tuple[CreditCard, ...] = ()
    future_statements: Tuple[FutureStatement, ...] = ()

    @property
    def checking_accounts(self) -> Tuple[BankAccount, ...]:
        return tuple(a for a in self.accounts if a.is_checking)
