"""
Incremental gap detection over a record stream (the "check" report).

Records are grouped by a partition key. For every partition the detector
keeps the chronologically newest record, the currently open gaps sorted by
their upper bound, and the set of sequence numbers already integrated.

Two reporting modes are supported:

- default: gaps are narrowed, split or closed when a later record refills
  them, so the result lists the gaps still outstanding;
- all_gaps: every gap ever observed is kept as first reported.
"""

from bisect import bisect_left, insort
from collections.abc import Iterable
from datetime import timedelta

from upifinder.core.models import FileRecord, Gap
from upifinder.core.ranges import RangeSet
from upifinder.core.stats.partition import PartitionFunc, by_upi
from upifinder.observability.logger import get_logger

logger = get_logger(__name__)


def _gap_after(gap: Gap) -> int:
    return gap.after


class _PartitionState:
    """Mutable detector state of one partition."""

    __slots__ = ("last", "gaps", "seen")

    def __init__(self):
        self.last: FileRecord | None = None
        self.gaps: list[Gap] = []
        self.seen = RangeSet()


class GapDetector:
    """
    Detects holes in the sequence counter of every partition.

    Usage:
        detector = GapDetector(partition=by_upi, min_duration=timedelta(minutes=5))
        detector.update_all(scanner.scan(paths))
        for gap in detector.gaps():
            ...
    """

    def __init__(
        self,
        partition: PartitionFunc = by_upi,
        keep_invalid: bool = False,
        all_gaps: bool = False,
        min_duration: timedelta | None = None,
    ):
        """
        Initialize gap detector.

        Args:
            partition: Function mapping a record to its partition key
            keep_invalid: Include `.bad` records in the gap computation
            all_gaps: Report every gap ever observed, refills never shrink them
            min_duration: Discard gaps shorter than this (None or 0 disables)
        """
        self.partition = partition
        self.keep_invalid = keep_invalid
        self.all_gaps = all_gaps
        self.min_duration = min_duration or timedelta(0)
        self._states: dict[str, _PartitionState] = {}

    def update(self, record: FileRecord) -> None:
        """Integrate one record into its partition."""
        if not record.valid and not self.keep_invalid:
            return

        key = self.partition(record)
        state = self._states.get(key)
        if state is None:
            state = _PartitionState()
            self._states[key] = state

        if state.seen.insert(record.sequence):
            self._remember(state, record)
            return

        handled = False
        if not self.all_gaps:
            handled = self._refill(state, record)

        previous = state.last
        if not handled and previous is not None and record.sequence > previous.sequence:
            # bounds follow sequence order, times are kept ascending
            starts, ends = sorted((previous.acq_time, record.acq_time))
            gap = Gap(
                upi=key,
                before=previous.sequence,
                after=record.sequence,
                starts=starts,
                ends=ends,
            )
            if gap.count > 0 and self._long_enough(gap):
                insort(state.gaps, gap, key=_gap_after)

        self._remember(state, record)

    def update_all(self, records: Iterable[FileRecord]) -> int:
        """
        Drain a record stream.

        Errors raised by the stream propagate once every record already
        delivered has been integrated.

        Returns:
            Number of records consumed
        """
        consumed = 0
        for record in records:
            self.update(record)
            consumed += 1
        logger.debug(f"Checked {consumed} records across {len(self._states)} partitions")
        return consumed

    def gaps(self) -> list[Gap]:
        """Open gaps of every partition, sorted by partition then lower bound."""
        return [gap for gaps in self.partitions().values() for gap in gaps]

    def partitions(self) -> dict[str, list[Gap]]:
        """Open gaps keyed by partition (partitions without gaps omitted)."""
        return {
            key: sorted(self._states[key].gaps, key=lambda g: (g.before, g.after))
            for key in sorted(self._states)
            if self._states[key].gaps
        }

    def missing(self) -> int:
        return sum(gap.count for gap in self.gaps())

    def _refill(self, state: _PartitionState, record: FileRecord) -> bool:
        """
        Narrow, split or close the open gap a refill falls into.

        A refill narrows its gap from below when no integrated value sits
        between the gap's lower bound and the refill. Otherwise the gap is
        split at the refill. Pieces left without missing values are dropped.

        Returns:
            True if the record fell inside an open gap
        """
        gaps = state.gaps
        sequence = record.sequence
        ix = bisect_left(gaps, sequence, key=_gap_after)
        if ix >= len(gaps):
            return False
        gap = gaps[ix]
        if not gap.before < sequence < gap.after:
            return False

        below = state.seen.floor(sequence - 1)
        if below is None or below <= gap.before:
            gap.before = sequence
            gap.starts = record.acq_time
            if gap.count <= 0:
                del gaps[ix]
            return True

        lower = Gap(
            upi=gap.upi,
            before=gap.before,
            after=sequence,
            starts=gap.starts,
            ends=record.acq_time,
        )
        upper = Gap(
            upi=gap.upi,
            before=sequence,
            after=gap.after,
            starts=record.acq_time,
            ends=gap.ends,
        )
        gaps[ix:ix + 1] = [piece for piece in (lower, upper) if piece.count > 0]
        return True

    def _long_enough(self, gap: Gap) -> bool:
        return not self.min_duration or gap.duration >= self.min_duration

    @staticmethod
    def _remember(state: _PartitionState, record: FileRecord) -> None:
        """Keep the chronologically newest record, ties go to the latest arrival."""
        if state.last is None or record.acq_time >= state.last.acq_time:
            state.last = record

    def __len__(self) -> int:
        return len(self._states)
