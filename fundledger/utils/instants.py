"""Helpers for the canonical instant representation (timezone-aware UTC)."""

from datetime import date, datetime, time, timezone

UTC = timezone.utc

# The year is padded separately; %Y is not zero-padded on every platform.
_STORAGE_FORMAT = "%m-%dT%H:%M:%S.%f+00:00"


def utc_now() -> datetime:
    """Return the current instant in UTC."""
    return datetime.now(UTC)


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC.

    Naive datetimes are taken to already be expressed in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_instant(value) -> datetime | None:
    """Convert an instant, a date, or an ISO-8601 string to a UTC datetime.

    Args:
        value: Raw value to convert. ``None`` and blank strings yield None.

    Returns:
        datetime | None: The normalized instant.

    Raises:
        ValueError: If the value cannot be interpreted as an instant.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        try:
            return to_utc(value)
        except OverflowError as exc:
            raise ValueError(f"Instant out of range: {value!r}") from exc
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(raw))
        except (ValueError, OverflowError) as exc:
            raise ValueError(f"Unparseable instant: {value!r}") from exc
    raise ValueError(f"Unsupported instant value: {value!r}")


def format_instant(value: datetime) -> str:
    """Render an instant as a fixed-width UTC string.

    The fixed width keeps lexicographic order equal to chronological order,
    which the store relies on for range queries.
    """
    utc = to_utc(value)
    return f"{utc.year:04d}-{utc.strftime(_STORAGE_FORMAT)}"


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Return the first and last instants (inclusive) of a calendar year."""
    start = datetime(year, 1, 1, tzinfo=UTC)
    end = datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)
    return start, end


__all__ = [
    "UTC",
    "utc_now",
    "to_utc",
    "parse_instant",
    "format_instant",
    "year_bounds",
]
