"""
Sequence-number range tracking.
"""

from .range import Range
from .range_set import RangeSet

__all__ = ["Range", "RangeSet"]
