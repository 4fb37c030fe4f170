"""
Coze model: running statistics of one partition.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field, PrivateAttr

from upifinder.core.models.file_record import FileRecord
from upifinder.core.ranges import Range, RangeSet


class Coze(BaseModel):
    """
    Aggregate counters for one partition.

    Created on the first record of a partition, mutated by every following
    record and discarded at the end of the run. The seen sequence numbers
    are tracked in a private RangeSet fed only by valid records.

    Attributes:
        upi: Partition key
        count: Records seen (valid or not)
        uniq: Distinct valid sequence numbers seen
        invalid: Records flagged as corrupted (`.bad`)
        size: Total bytes
        starts: Earliest acquisition time
        ends: Latest acquisition time
        first: Sequence number of the earliest record
        last: Sequence number of the latest record
    """

    upi: str
    count: int = Field(0, ge=0, serialization_alias="total")
    uniq: int = Field(0, ge=0)
    invalid: int = Field(0, ge=0)
    size: int = Field(0, ge=0)
    starts: datetime | None = Field(None, serialization_alias="dtstart")
    ends: datetime | None = Field(None, serialization_alias="dtend")
    first: int = 0
    last: int = 0

    _seen: RangeSet = PrivateAttr(default_factory=RangeSet)

    def update(self, record: FileRecord) -> None:
        """
        Account for one record of this partition.

        Time ties go to the most recently inserted record.

        Args:
            record: Decoded record belonging to this partition
        """
        self.count += 1
        self.size += record.size
        if self.starts is None or record.acq_time <= self.starts:
            self.starts = record.acq_time
            self.first = record.sequence
        if self.ends is None or record.acq_time >= self.ends:
            self.ends = record.acq_time
            self.last = record.sequence

        if record.valid:
            if not self._seen.insert(record.sequence):
                self.uniq += 1
        else:
            self.invalid += 1

    def ranges(self) -> list[Range]:
        return self._seen.ranges()

    def missing_ranges(self) -> list[Range]:
        return self._seen.missing_ranges()

    def missing(self) -> int:
        return self._seen.missing()

    def total(self) -> int:
        return self._seen.total()

    def range(self) -> tuple[int, int]:
        return self._seen.range()

    def corrupted(self) -> float:
        """Ratio of invalid records, 0 when nothing is invalid."""
        if self.count == 0 or self.invalid == 0:
            return 0.0
        return self.invalid / self.count

    def duration(self) -> timedelta:
        if self.starts is None or self.ends is None:
            return timedelta(0)
        return self.ends - self.starts

    @classmethod
    def merge_summary(cls, cozes: list["Coze"], upi: str = "total") -> "Coze":
        """
        Build a summary row out of several partitions.

        Counters are summed and the time bounds widened. Sequence bounds and
        ranges are left empty since they are meaningless across partitions.
        """
        summary = cls(upi=upi)
        for coze in cozes:
            summary.count += coze.count
            summary.uniq += coze.uniq
            summary.invalid += coze.invalid
            summary.size += coze.size
            if coze.starts is not None and (summary.starts is None or coze.starts < summary.starts):
                summary.starts = coze.starts
            if coze.ends is not None and (summary.ends is None or coze.ends > summary.ends):
                summary.ends = coze.ends
        return summary

    class Config:
        json_schema_extra = {
            "example": {
                "upi": "38/XYZ",
                "total": 3,
                "uniq": 3,
                "size": 12288,
                "invalid": 0,
                "dtstart": "2018-06-24T10:15:00Z",
                "dtend": "2018-06-24T10:17:00Z",
                "first": 10,
                "last": 13,
            }
        }
