"""Timestamp and day helpers shared by the local store and the wire format."""

from datetime import UTC, date, datetime, timedelta


def format_timestamp(value: datetime) -> str:
    """Return an ISO-8601 UTC string with millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string, treating naive values and a Z suffix as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_day(value: str | date) -> date:
    """Return a date from a YYYY-MM-DD string or a date."""
    if isinstance(value, datetime):
        return value.astimezone(UTC).date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the UTC start of a day and of the following day."""
    start = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return start, start + timedelta(days=1)


def utc_today() -> date:
    """Return today's date in UTC."""
    return datetime.now(tz=UTC).date()
