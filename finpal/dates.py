import calendar
from datetime import date, datetime, time, timezone
from typing import Any, Optional, Tuple

Interval = Tuple[date, date]


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(value: Any) -> Optional[date]:
    """Return the calendar date of ``value`` or None when it cannot be read.

    Accepts ``date``/``datetime`` objects and ISO 8601 strings, either plain
    dates ("2024-06-01") or full timestamps ("2024-06-01T10:00:00Z").
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def parse_moment(date_value: Any, time_value: Any = None) -> Optional[datetime]:
    """Combine a transaction's date and optional clock time into one instant."""
    if isinstance(date_value, datetime):
        return _naive_utc(date_value)
    if isinstance(date_value, str) and "T" in date_value:
        try:
            return _naive_utc(datetime.fromisoformat(date_value.strip()))
        except ValueError:
            return None

    day = parse_date(date_value)
    if day is None:
        return None
    if time_value is None or (isinstance(time_value, str) and not time_value.strip()):
        return datetime.combine(day, time())
    if isinstance(time_value, time):
        return _naive_utc(datetime.combine(day, time_value))
    try:
        clock = time.fromisoformat(str(time_value).strip())
    except ValueError:
        return None
    return _naive_utc(datetime.combine(day, clock))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Read a record's creation timestamp.

    Stored records carry it as a datetime, an ISO string, epoch milliseconds,
    or a ``{"seconds": ..., "nanoseconds": ...}`` mapping.
    """
    try:
        if isinstance(value, datetime):
            return _naive_utc(value)
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return _naive_utc(datetime.fromtimestamp(value / 1000, tz=timezone.utc))
        if isinstance(value, dict) and "seconds" in value:
            seconds = value["seconds"] + value.get("nanoseconds", 0) / 1e9
            return _naive_utc(datetime.fromtimestamp(seconds, tz=timezone.utc))
        if isinstance(value, str) and value.strip():
            return _naive_utc(datetime.fromisoformat(value.strip()))
    except (TypeError, ValueError, OverflowError, OSError):
        return None
    return None


def month_interval(now: date) -> Interval:
    day = parse_date(now)
    if day is None:
        raise ValueError(f"invalid reference date: {now!r}")
    first = day.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    return first, last


def in_interval(value: Any, interval: Interval) -> bool:
    day = parse_date(value)
    if day is None:
        return False
    start, end = interval
    return start <= day <= end


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def month_label(key: str) -> str:
    return datetime.strptime(key, "%Y-%m").strftime("%b %Y")
