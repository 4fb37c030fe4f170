"""
Partition key functions.

Every aggregate and gap computation is grouped by one of these keys. They
are pure functions of a FileRecord.
"""

from collections.abc import Callable

from upifinder.core.models.file_record import FileRecord

PartitionFunc = Callable[[FileRecord], str]


def by_upi(record: FileRecord) -> str:
    """source/UPI: one partition per product and source."""
    return record.key


def by_source(record: FileRecord) -> str:
    return record.source


def by_merged_upi(record: FileRecord) -> str:
    """UPI alone: all sources of a product merged."""
    return record.upi


PARTITIONERS: dict[str, PartitionFunc] = {
    "upi": by_upi,
    "source": by_source,
    "merged": by_merged_upi,
}


def get_partitioner(name: str) -> PartitionFunc:
    """
    Resolve a group-by selector.

    Raises:
        ValueError: If the selector is unknown
    """
    try:
        return PARTITIONERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported group-by {name!r}. Supported: {sorted(PARTITIONERS)}"
        ) from None
