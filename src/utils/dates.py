"""UTC date helpers shared by the generator, filters and chart builder."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

DAY = timedelta(days=1)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def from_epoch_ms(ms: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=ms)


def to_epoch_ms(moment: datetime) -> int:
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def day_start(moment: datetime | date) -> datetime:
    """Midnight UTC of the day containing `moment`."""
    return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)


def parse_date_input(value: str | date | datetime | None) -> datetime | None:
    """Parse a `YYYY-MM-DD` string or a date to midnight UTC.

    Datetimes are kept as given (naive ones are taken as UTC). Returns None
    for empty or malformed input so callers can fall back to a default window.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return day_start(value)
    try:
        year, month, day = (int(part) for part in value.strip().split("-"))
        return datetime(year, month, day, tzinfo=timezone.utc)
    except (ValueError, AttributeError):
        return None


def normalize_range(start: datetime | None, end: datetime | None) -> tuple[datetime | None, datetime | None]:
    """Swap reversed bounds. Open bounds pass through untouched."""
    if start is None or end is None or start <= end:
        return start, end
    return end, start


def format_day_key(moment: datetime | date) -> str:
    return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
