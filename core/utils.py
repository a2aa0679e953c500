"""
Money and calendar-day primitives shared by every engine layer.

Money is always integer cents. Dates are calendar days (datetime.date) in a single
IANA time zone; instants (datetime) are only ever converted to a local day, never
compared directly.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, List, Union
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from .errors import CashflowErrorCode, CashflowInputError

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Money
# ---------------------------------------------------------------------------

def to_cents(value: Union[int, str, Decimal, float]) -> int:
    """
    Convert an amount in currency units (e.g. "1234.56") to integer cents.

    Rounds half away from zero. ints are taken as whole currency units.
    """
    if isinstance(value, bool):
        raise CashflowInputError(f"Not an amount: {value!r}", CashflowErrorCode.INVALID_AMOUNT)
    try:
        # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise CashflowInputError(
            f"Not an amount: {value!r}", CashflowErrorCode.INVALID_AMOUNT
        ) from exc
    if not cents.is_finite():
        raise CashflowInputError(f"Not an amount: {value!r}", CashflowErrorCode.INVALID_AMOUNT)
    return int(cents)


def format_cents(cents: int, symbol: str = "R$") -> str:
    """Display helper for the CLI: 123456 -> 'R$ 1,234.56'."""
    sign = "-" if cents < 0 else ""
    units, rest = divmod(abs(int(cents)), 100)
    return f"{sign}{symbol} {units:,}.{rest:02d}"


# ---------------------------------------------------------------------------
# Calendar days
# ---------------------------------------------------------------------------

def require_day_of_month(value: int, field: str = "day") -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 31:
        raise CashflowInputError(
            f"{field} must be an integer between 1 and 31, got {value!r}",
            CashflowErrorCode.INVALID_INPUT,
        )
    return value


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def effective_day(day: int, year: int, month: int) -> int:
    """Anchor day clamped to the month's last day (31 in February -> 28/29)."""
    return min(day, days_in_month(year, month))


def anchored_date(day: int, year: int, month: int) -> date:
    return date(year, month, effective_day(day, year, month))


def month_starts(start: date, end: date) -> List[date]:
    """First day of every month touched by the closed range [start, end]."""
    first = start.replace(day=1)
    months = []
    while first <= end:
        months.append(first)
        first = first + relativedelta(months=1)
    return months


def as_calendar_day(value: Union[date, datetime, str], time_zone: str) -> date:
    """
    Normalise a start-date override to a calendar day.

    Datetimes are instants and become their local day (naive means UTC). Strings must
    be a whole ISO-8601 date or instant.
    """
    if isinstance(value, datetime):
        return to_local_date(value, time_zone)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        try:
            instant = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise CashflowInputError(
                f"Unparseable date: {value!r}", CashflowErrorCode.INVALID_DATE
            ) from exc
        return to_local_date(instant, time_zone)
    raise CashflowInputError(f"Unparseable date: {value!r}", CashflowErrorCode.INVALID_DATE)


def to_local_date(instant: datetime, time_zone: str) -> date:
    """Calendar day of an instant in the given zone. Naive instants are read as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(ZoneInfo(time_zone)).date()


def today_in_time_zone(time_zone: str, clock: Clock = utc_now) -> date:
    return to_local_date(clock(), time_zone)
