"""UTC-everywhere time handling for lead timestamps and duplicate windows."""

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def minutes_before(moment: datetime, minutes: int) -> datetime:
    """
    Start of a look-back window ending at `moment`.

    Raises ValueError if `moment` is naive.
    """
    if moment.tzinfo is None:
        raise ValueError(
            "Cannot compute window from naive datetime. Datetime must be timezone-aware."
        )
    return moment - timedelta(minutes=minutes)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    A trailing 'Z' is accepted. Raises ValueError if string has no timezone info.
    """
    if iso_string.endswith("Z"):
        iso_string = iso_string[:-1] + "+00:00"
    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return dt.astimezone(timezone.utc)


def note_stamp(dt: datetime) -> str:
    """Format a timestamp the way appended lead notes show it: 'YYYY-MM-DD HH:MM:SS'."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
