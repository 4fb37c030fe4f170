"""
Rendering of walk, check and inspect reports.
"""

from .formatters import CHECK_COLUMNS, WALK_COLUMNS, render_check, render_inspect, render_walk
from .pretty import pretty_size, transform_upi
from .timefmt import GPS_EPOCH, UNIX_EPOCH, format_duration, format_time

__all__ = [
    "render_walk",
    "render_check",
    "render_inspect",
    "WALK_COLUMNS",
    "CHECK_COLUMNS",
    "pretty_size",
    "transform_upi",
    "format_time",
    "format_duration",
    "UNIX_EPOCH",
    "GPS_EPOCH",
]
