"""
Timestamp formatting/parsing and aggregation period boundaries.

All datetimes are naive and interpreted in the server's local time zone, the
same way timestamps are written to the sheet.
"""
import enum
from datetime import datetime, timedelta
from typing import Optional

from expensebot.core.config import settings
from expensebot.core.exceptions import InvalidPeriod

# Python weekday(): Monday == 0 ... Sunday == 6
WEEK_START_WEEKDAY = {"monday": 0, "sunday": 6}


class Period(str, enum.Enum):
    """Aggregation window."""
    WEEK = "week"
    MONTH = "month"

    @property
    def label(self) -> str:
        return "This Week" if self is Period.WEEK else "This Month"


def parse_period(value) -> Period:
    """Resolve a period argument, raising InvalidPeriod outside {week, month}."""
    if isinstance(value, Period):
        return value
    try:
        return Period(str(value).strip().lower())
    except ValueError:
        raise InvalidPeriod(f'Invalid period {value!r}. Use "week" or "month".')


def format_timestamp(value: datetime) -> str:
    """Format a datetime using the configured date format."""
    return value.strftime(settings.DATE_FORMAT)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse a stored timestamp cell.

    Accepts the configured format first, then ISO 8601. Returns None when the
    value cannot be parsed.
    """
    if isinstance(value, datetime):
        return to_local_naive(value)
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, settings.DATE_FORMAT)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return to_local_naive(parsed)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; stored timestamps are local wall-clock time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def period_start(period: Period, now: Optional[datetime] = None, week_start: Optional[str] = None) -> datetime:
    """Return midnight at the start of the current week or month."""
    now = now or datetime.now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is Period.MONTH:
        return midnight.replace(day=1)

    first_weekday = WEEK_START_WEEKDAY[(week_start or settings.WEEK_START).lower()]
    days_back = (midnight.weekday() - first_weekday) % 7
    return midnight - timedelta(days=days_back)


def readable_date_range(period: Period, now: Optional[datetime] = None) -> str:
    """Human readable range, e.g. 'Oct 11 - Oct 18, 2026' or 'October 2026'."""
    now = now or datetime.now()
    if period is Period.WEEK:
        start = period_start(period, now)
        return f"{start:%b} {start.day} - {now:%b} {now.day}, {now.year}"
    return f"{now:%B %Y}"
