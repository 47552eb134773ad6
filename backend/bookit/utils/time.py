from datetime import date, datetime, timezone


def utc_now_naive() -> datetime:
    """Current UTC time without tzinfo, the form timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
