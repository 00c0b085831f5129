# utils/dates.py
from datetime import date, datetime, timezone

from dateutil import parser


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, the way rows are stored."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were written as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(x):
    if not x:
        return None
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    try:
        return parser.parse(str(x)).date()
    except (ValueError, OverflowError):
        return None


def parse_datetime(x):
    """Lenient parse to an aware UTC datetime; None when unparseable."""
    if not x:
        return None
    if isinstance(x, datetime):
        return as_utc(x)
    if isinstance(x, date):
        return datetime(x.year, x.month, x.day, tzinfo=timezone.utc)
    try:
        return as_utc(parser.parse(str(x)))
    except (ValueError, OverflowError):
        return None
