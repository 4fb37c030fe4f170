"""
Gap model representing a hole in a partition's sequence counter.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field


class Gap(BaseModel):
    """
    A detected hole in the sequence counter of one partition.

    Gaps are derived by the GapDetector and mutated in place when a refill
    narrows them. The bounds are present records; only the interior is
    missing.

    Attributes:
        upi: Partition key the gap belongs to
        before: Sequence number of the record bounding the gap from below
        after: Sequence number of the record bounding the gap from above
        starts: Acquisition time of the `before` record
        ends: Acquisition time of the `after` record
    """

    upi: str
    before: int = Field(..., ge=0, serialization_alias="last")
    after: int = Field(..., ge=0, serialization_alias="first")
    starts: datetime = Field(..., serialization_alias="dtstart")
    ends: datetime = Field(..., serialization_alias="dtend")

    @property
    def count(self) -> int:
        """Number of missing sequence numbers, bounds excluded."""
        return self.after - self.before - 1

    @property
    def duration(self) -> timedelta:
        return self.ends - self.starts

    class Config:
        json_schema_extra = {
            "example": {
                "upi": "38/XYZ",
                "last": 11,
                "first": 13,
                "dtstart": "2018-06-24T10:15:00Z",
                "dtend": "2018-06-24T10:17:00Z",
            }
        }
