"""
Aggregate and gap computation over decoded records.
"""

from .aggregator import Aggregator
from .gap_detector import GapDetector
from .partition import (
    PARTITIONERS,
    PartitionFunc,
    by_merged_upi,
    by_source,
    by_upi,
    get_partitioner,
)

__all__ = [
    "Aggregator",
    "GapDetector",
    "PartitionFunc",
    "PARTITIONERS",
    "by_upi",
    "by_source",
    "by_merged_upi",
    "get_partitioner",
]
