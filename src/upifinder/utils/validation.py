"""
Input validation utilities for upifinder.

Every caller-supplied option (dates, periods, durations, group-by selector,
output format, UPI filter) is checked here before any scanning begins.
"""

import re
from datetime import date, datetime, timedelta, timezone

from upifinder.core.stats.partition import PARTITIONERS

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
)

DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
DURATION_UNITS = {
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}

WALK_FORMATS = ("column", "summary", "csv", "json")
CHECK_FORMATS = ("column", "summary", "csv", "json")
TIME_FORMATS = ("rfc3339", "unix", "gps")


class ConfigurationError(ValueError):
    """Raised when a caller-supplied option is invalid."""
    pass


def parse_date(value: str | date | datetime | None, field_name: str = "date") -> datetime | None:
    """
    Parse a date option into an aware UTC datetime.

    Args:
        value: Date string (YYYY-MM-DD, optionally with a time), date or datetime
        field_name: Name of the option (for error messages)

    Returns:
        The parsed datetime, or None when no value was supplied

    Raises:
        ConfigurationError: If the string matches none of the accepted formats

    Examples:
        >>> parse_date("2018-06-04")
        datetime.datetime(2018, 6, 4, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise ConfigurationError(f"{field_name}: no suitable format found for {value!r}")


def validate_period(period: int | None, field_name: str = "period") -> int:
    """Number of days of a window; 0 means no window."""
    if period is None:
        return 0
    if not isinstance(period, int) or isinstance(period, bool):
        raise ConfigurationError(f"{field_name} must be an integer")
    if period < 0:
        raise ConfigurationError(f"{field_name} must not be negative")
    return period


def validate_window(start: datetime | None, end: datetime | None, period: int) -> None:
    """
    Reject incompatible window options.

    Raises:
        ConfigurationError: If start, end and period are all set, or end precedes start
    """
    if period > 0 and start is not None and end is not None:
        raise ConfigurationError("period can't be set if start and end dates are provided")
    if start is not None and end is not None and end < start:
        raise ConfigurationError("end date must not precede start date")


def parse_duration(value: str | int | float | timedelta | None, field_name: str = "duration") -> timedelta:
    """
    Parse a duration option.

    Accepts a number of seconds or a sequence of `<number><unit>` terms
    with units h, m, s and ms.

    Examples:
        >>> parse_duration("1h30m")
        datetime.timedelta(seconds=5400)
        >>> parse_duration("90")
        datetime.timedelta(seconds=90)
    """
    if value is None or value == "":
        return timedelta(0)
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, int | float):
        delta = timedelta(seconds=value)
    else:
        text = value.strip()
        try:
            delta = timedelta(seconds=float(text))
        except (ValueError, OverflowError):
            if not text or DURATION_PATTERN.sub("", text):
                raise ConfigurationError(f"{field_name}: invalid duration {value!r}") from None
            delta = sum(
                (float(amount) * DURATION_UNITS[unit] for amount, unit in DURATION_PATTERN.findall(text)),
                timedelta(0),
            )
    if delta < timedelta(0):
        raise ConfigurationError(f"{field_name} must not be negative")
    return delta


def validate_group_by(group_by: str, field_name: str = "group_by") -> str:
    """Check a group-by selector against the known partition functions."""
    if not group_by or not isinstance(group_by, str):
        raise ConfigurationError(f"{field_name} must be a non-empty string")
    name = group_by.strip().lower()
    if name not in PARTITIONERS:
        raise ConfigurationError(
            f"Unsupported {field_name} {group_by!r}. Supported: {sorted(PARTITIONERS)}"
        )
    return name


def validate_format(output_format: str | None, supported: tuple[str, ...], field_name: str = "format") -> str:
    """Check an output format; an empty value selects the first supported one."""
    if not output_format:
        return supported[0]
    name = output_format.strip().lower()
    if name not in supported:
        raise ConfigurationError(
            f"Unsupported {field_name}: {output_format!r}. Supported: {list(supported)}"
        )
    return name


def validate_upi(upi: str | None, field_name: str = "upi") -> str | None:
    """
    Validate a UPI filter.

    The filter is matched against base names, so it must use the archive
    character set and cannot contain a path separator.
    """
    if upi is None:
        return None
    upi = upi.strip()
    if not upi:
        return None
    if not re.fullmatch(r"[A-Za-z0-9._-]+", upi):
        raise ConfigurationError(
            f"{field_name} contains invalid characters. "
            "Only alphanumeric, hyphens, underscores, and dots are allowed."
        )
    return upi


def validate_workers(workers: int, field_name: str = "workers") -> int:
    if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
        raise ConfigurationError(f"{field_name} must be a positive integer")
    return workers
