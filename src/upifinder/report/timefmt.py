"""
Timestamp and duration rendering.

Timestamps are rendered as RFC 3339 strings or as seconds elapsed since
one of the named epochs.
"""

from datetime import datetime, timedelta, timezone

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
GPS_EPOCH = datetime(1980, 1, 6, tzinfo=timezone.utc)

EPOCHS = {
    "unix": UNIX_EPOCH,
    "gps": GPS_EPOCH,
}

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
NO_TIME = "-"


def format_time(value: datetime | None, time_format: str = "rfc3339", epoch: datetime | None = None) -> str:
    """
    Render a timestamp.

    Args:
        value: Timestamp (naive values are taken as UTC)
        time_format: rfc3339, unix or gps
        epoch: Explicit epoch, overrides the one named by time_format

    Raises:
        ValueError: If time_format is unknown
    """
    if value is None:
        return NO_TIME
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    if epoch is None and time_format == "rfc3339":
        return value.astimezone(timezone.utc).strftime(RFC3339_FORMAT)
    if epoch is None:
        try:
            epoch = EPOCHS[time_format]
        except KeyError:
            raise ValueError(f"Unsupported time format: {time_format}") from None
    return str(int((value - epoch).total_seconds()))


def format_duration(value: timedelta) -> str:
    """
    Render a duration as hours, minutes and seconds.

    Examples:
        >>> format_duration(timedelta(minutes=90))
        '1h30m0s'
        >>> format_duration(timedelta(seconds=45))
        '45s'
    """
    seconds = int(value.total_seconds())
    sign = "-" if seconds < 0 else ""
    hours, rest = divmod(abs(seconds), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"
