"""
Per-partition counting of archive records (the "walk" report).
"""

from collections.abc import Iterable

from upifinder.core.models import Coze, FileRecord
from upifinder.core.stats.partition import PartitionFunc, by_upi
from upifinder.observability.logger import get_logger

logger = get_logger(__name__)


class Aggregator:
    """
    Builds one Coze per partition out of a record stream.

    The partition map is owned by the single consuming thread and is never
    shared with the scanner workers.
    """

    def __init__(self, partition: PartitionFunc = by_upi):
        """
        Initialize aggregator.

        Args:
            partition: Function mapping a record to its partition key
        """
        self.partition = partition
        self._cozes: dict[str, Coze] = {}

    def update(self, record: FileRecord) -> Coze:
        """Account for one record and return its partition's Coze."""
        key = self.partition(record)
        coze = self._cozes.get(key)
        if coze is None:
            coze = Coze(upi=key)
            self._cozes[key] = coze
        coze.update(record)
        return coze

    def update_all(self, records: Iterable[FileRecord]) -> int:
        """
        Drain a record stream.

        Errors raised by the stream propagate once every record already
        delivered has been accounted for.

        Returns:
            Number of records consumed
        """
        consumed = 0
        for record in records:
            self.update(record)
            consumed += 1
        logger.debug(f"Aggregated {consumed} records into {len(self._cozes)} partitions")
        return consumed

    def results(self) -> dict[str, Coze]:
        """Cozes keyed by partition, sorted by key."""
        return {key: self._cozes[key] for key in sorted(self._cozes)}

    def summary(self) -> Coze:
        return Coze.merge_summary(list(self._cozes.values()))

    def __len__(self) -> int:
        return len(self._cozes)
