"""
Incremental set of disjoint sequence-number ranges.

A RangeSet tracks, for one partition, which sequence numbers have been
observed so far. Values may arrive in any order; the set always holds a
sorted list of closed intervals where no two intervals overlap or touch.
"""

from bisect import bisect_left
from collections.abc import Iterator

from .range import Range


class RangeSet:
    """
    Sorted, non-adjacent closed intervals of observed sequence numbers.

    The bounds are kept in two parallel lists so that the search for the
    first interval whose upper bound is >= v is a plain bisection. Inserting
    touches at most two neighbouring intervals.

    Usage:
        seen = RangeSet()
        seen.insert(1)      # False, new value
        seen.insert(1)      # True, already present
    """

    __slots__ = ("_firsts", "_lasts")

    def __init__(self, values: list[int] | None = None):
        """
        Initialize range set.

        Args:
            values: Optional sequence numbers to insert right away
        """
        self._firsts: list[int] = []
        self._lasts: list[int] = []
        for value in values or ():
            self.insert(value)

    def insert(self, value: int) -> bool:
        """
        Record a sequence number.

        Args:
            value: Sequence number to record

        Returns:
            True if the value was already present, False otherwise
        """
        firsts, lasts = self._firsts, self._lasts
        ix = bisect_left(lasts, value)
        size = len(lasts)

        if ix < size and firsts[ix] <= value:
            return True

        joins_prev = ix > 0 and lasts[ix - 1] == value - 1
        joins_next = ix < size and firsts[ix] == value + 1

        if joins_prev and joins_next:
            lasts[ix - 1] = lasts[ix]
            del firsts[ix]
            del lasts[ix]
        elif joins_prev:
            lasts[ix - 1] = value
        elif joins_next:
            firsts[ix] = value
        else:
            firsts.insert(ix, value)
            lasts.insert(ix, value)
        return False

    def floor(self, value: int) -> int | None:
        """Largest present sequence number <= value, or None."""
        ix = bisect_left(self._lasts, value)
        if ix < len(self._lasts) and self._firsts[ix] <= value:
            return value
        if ix == 0:
            return None
        return self._lasts[ix - 1]

    def total(self) -> int:
        """Full expected span, unseen holes included (0 when empty)."""
        if not self._lasts:
            return 0
        return self._lasts[-1] - self._firsts[0] + 1

    def missing(self) -> int:
        """Count of sequence numbers missing between the first and last run."""
        return sum(
            self._firsts[ix] - self._lasts[ix - 1] - 1
            for ix in range(1, len(self._firsts))
        )

    def missing_ranges(self) -> list[Range]:
        """
        Holes between consecutive runs.

        Each hole is reported as [prev.last, next.first]: both bounds are
        present, only the interior is missing.
        """
        return [
            Range(first=self._lasts[ix - 1], last=self._firsts[ix])
            for ix in range(1, len(self._firsts))
        ]

    def range(self) -> tuple[int, int]:
        """(lowest, highest) present sequence number, (0, 0) when empty."""
        if not self._lasts:
            return 0, 0
        return self._firsts[0], self._lasts[-1]

    def ranges(self) -> list[Range]:
        return [Range(first=f, last=l) for f, l in zip(self._firsts, self._lasts)]

    def __contains__(self, value: int) -> bool:
        ix = bisect_left(self._lasts, value)
        return ix < len(self._lasts) and self._firsts[ix] <= value

    def __iter__(self) -> Iterator[Range]:
        return iter(self.ranges())

    def __len__(self) -> int:
        return len(self._firsts)

    def __bool__(self) -> bool:
        return bool(self._firsts)

    def __repr__(self) -> str:
        return f"RangeSet({', '.join(str(r) for r in self.ranges())})"
