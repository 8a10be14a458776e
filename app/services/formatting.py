# app/services/formatting.py
#
# Display Formatting Helpers
# Turns canonical transaction values into the strings shown in the
# transactions table: currency amounts, date/time labels, cleaned names,
# and the coarse Processed / Pending status derived from the date.

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo


# ---- Constants ----

# Transactions older than this many days show as "Processed"
PENDING_THRESHOLD_DAYS = 2

# All dates are compared and rendered in this timezone
REFERENCE_TIMEZONE = "UTC"

DEFAULT_CURRENCY = "USD"

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "EUR": "€",
    "GBP": "£",
    "UAH": "₴",
}

_CENTS = Decimal("0.01")
_SPECIAL_CHARS_RE = re.compile(r"[^\w\s]|_")
_WHITESPACE_RE = re.compile(r"\s+")


TzLike = Union[str, tzinfo, None]


class TransactionStatus(str, Enum):
    PROCESSED = "Processed"
    PENDING = "Pending"


@dataclass(frozen=True)
class FormattedDateTime:
    timestamp: datetime
    date_time: str   # "Wed, Oct 25, 8:00 AM"
    date_day: str    # "Wednesday, October 25, 2023"
    date_only: str   # "Oct 25, 2023"
    time_only: str   # "8:00 AM"


# ---- Timestamps ----

def resolve_timezone(tz: TzLike = None) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    name = (tz or REFERENCE_TIMEZONE).strip()
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def parse_timestamp(value: Any, tz: TzLike = None) -> datetime:
    """
    Parse a provider date/datetime into an aware datetime in the reference timezone.

    Accepts date and datetime objects, "YYYY-MM-DD" strings, and ISO-8601
    datetimes (with "Z", an offset, or naive). Naive values are taken to be
    in the reference timezone already. Anything else raises ValueError.
    """
    zone = resolve_timezone(tz)

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("empty timestamp")
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            if len(s) == 10:
                d = date.fromisoformat(s)
                parsed = datetime(d.year, d.month, d.day)
            else:
                parsed = datetime.fromisoformat(s)
        except ValueError as e:
            raise ValueError(f"unparseable timestamp: {value!r}") from e
    else:
        raise ValueError(f"unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


def _clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_date_time(value: Any, tz: TzLike = None) -> FormattedDateTime:
    """
    Build every date/time label for one timestamp.

    The value is parsed once and all four strings derive from that single
    datetime, so they can never disagree with each other.
    """
    dt = parse_timestamp(value, tz)

    return FormattedDateTime(
        timestamp=dt,
        date_time=f"{dt:%a}, {dt:%b} {dt.day}, {_clock(dt)}",
        date_day=f"{dt:%A}, {dt:%B} {dt.day}, {dt.year}",
        date_only=f"{dt:%b} {dt.day}, {dt.year}",
        time_only=_clock(dt),
    )


# ---- Status ----

def get_transaction_status(
    value: Any,
    now: Optional[datetime] = None,
    threshold_days: int = PENDING_THRESHOLD_DAYS,
    tz: TzLike = None,
) -> TransactionStatus:
    """
    Processed if the transaction is strictly older than the threshold, else Pending.

    A timestamp exactly threshold_days before now is still Pending.
    """
    zone = resolve_timezone(tz)
    when = parse_timestamp(value, zone)

    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=zone)

    cutoff = now - timedelta(days=threshold_days)
    if when < cutoff:
        return TransactionStatus.PROCESSED
    return TransactionStatus.PENDING


# ---- Amounts & names ----

def to_decimal(value: Any) -> Decimal:
    """
    Parse an amount. NaN, infinities and non-numeric values raise ValueError.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not an amount: {value!r}")
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"not an amount: {value!r}") from e
    if not d.is_finite():
        raise ValueError(f"not a finite amount: {value!r}")
    return d


def format_amount(amount: Any, currency: Optional[str] = None) -> str:
    """
    Format an amount as en-US style currency: "$1,234.50", "-$42.50".

    Negative amounts always start with "-", which the table uses to pick
    debit colouring.
    """
    code = (currency or DEFAULT_CURRENCY).upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")

    d = to_decimal(amount)
    with localcontext() as ctx:
        # room for every integer digit plus the cents
        ctx.prec = max(ctx.prec, d.adjusted() + 4)
        value = d.quantize(_CENTS, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        return f"{sign}{symbol}{abs(value):,.2f}"


def remove_special_characters(value: Optional[str]) -> str:
    """
    Keep only letters, digits, and whitespace; collapse runs of spaces.

    "Coffee Shop!!" -> "Coffee Shop"
    """
    if not value:
        return ""
    cleaned = _SPECIAL_CHARS_RE.sub("", str(value))
    return _WHITESPACE_RE.sub(" ", cleaned).strip()
