from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def get_utc_now() -> datetime:
    """
    Get the current date and time in UTC.

    Returns:
        datetime: The current date and time in UTC with tzinfo set to ZoneInfo("UTC").
    """
    return datetime.now(ZoneInfo("UTC"))


def ensure_datetime(d: datetime | date) -> datetime:
    if isinstance(d, datetime):
        return d
    return datetime.combine(d, datetime.min.time(), tzinfo=timezone.utc)


def to_epoch_seconds(value: datetime | date) -> int:
    """
    Convert a time value to integer epoch seconds.

    Naive datetimes are taken to be UTC, matching how JWT numeric dates are read.
    """
    dt = ensure_datetime(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def from_epoch_seconds(value: int | float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def now_epoch_seconds() -> int:
    return int(get_utc_now().timestamp())
