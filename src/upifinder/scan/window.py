"""
Date-window expansion of archive roots.

Archives are laid out as `<root>/<YYYY>/<DDD>` (year, day-of-year). When a
window is given, every root is expanded into one directory per day.
"""

import os
from datetime import datetime, timedelta, timezone

from upifinder.utils.validation import validate_window

DAY = timedelta(days=1)


def day_path(root: str, day: datetime) -> str:
    """Directory of one day under a root."""
    return os.path.join(root, f"{day.year:04d}", f"{day.timetuple().tm_yday:03d}")


def resolve_window(
    period: int = 0,
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> tuple[datetime, datetime] | None:
    """
    Resolve window options into a (start, end) pair.

    - start and end: used as given
    - start and period: end = start + period days
    - end and period: start = end - period days
    - period alone: the trailing period days up to now

    Returns:
        The window, or None when the options select no window

    Raises:
        ConfigurationError: If start, end and period are all set
    """
    validate_window(start, end, period)

    if start is not None and end is not None:
        return start, end
    if period <= 0:
        return None
    if start is not None:
        return start, start + DAY * period
    if end is not None:
        return end - DAY * period, end
    end = now or datetime.now(timezone.utc)
    return end - DAY * period, end


def list_paths(
    paths: list[str],
    period: int = 0,
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> list[str]:
    """
    Expand roots over a date window.

    Days are the outer loop so that the roots of one day are scanned
    together. Without a window the roots are returned unchanged.

    Examples:
        >>> list_paths(["/archive"], start=datetime(2018, 1, 1), end=datetime(2018, 1, 3))
        ['/archive/2018/001', '/archive/2018/002']
    """
    window = resolve_window(period, start, end, now)
    if window is None:
        return list(paths)

    day, end = window
    expanded = []
    while day < end:
        expanded.extend(day_path(root, day) for root in paths)
        day += DAY
    return expanded
