"""
Human-readable sizes and partition names.
"""

import re

KILO = 1024
MEGA = KILO * KILO
GIGA = MEGA * KILO
TERA = GIGA * KILO

SIZE_UNITS = (
    (TERA, "TB"),
    (GIGA, "GB"),
    (MEGA, "MB"),
    (KILO, "KB"),
)

UNPRINTABLE = re.compile(r"[^\w/-]")


def pretty_size(size: int) -> str:
    """
    Format a byte count with a binary unit.

    Whole multiples print without decimals.

    Examples:
        >>> pretty_size(512)
        '   512B'
        >>> pretty_size(3 * 1024 * 1024)
        '     3MB'
        >>> pretty_size(1536)
        '  1.50KB'
    """
    for factor, unit in SIZE_UNITS:
        if size / factor > 1.0:
            value, remainder = size / factor, size % factor
            break
    else:
        value, remainder, unit = float(size), 0, "B"
    if remainder:
        return f"{value:6.2f}{unit}"
    return f"{value:6.0f}{unit}"


def transform_upi(upi: str) -> str:
    """Replace anything but letters, digits, `-`, `_` and `/` by `*`."""
    return UNPRINTABLE.sub("*", upi)
