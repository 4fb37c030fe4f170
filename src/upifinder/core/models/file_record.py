"""
FileRecord model representing one decoded archive entry (ephemeral).
"""

import os
from datetime import datetime

from pydantic import BaseModel, Field

MAX_SEQUENCE = 2**32 - 1


class FileRecord(BaseModel):
    """
    A single archive entry decoded from its file name.

    Note: FileRecord is immutable once decoded. The scanner hands it to
    exactly one consumer (Aggregator or GapDetector) and keeps no reference.

    Attributes:
        path: Origin locator (filesystem path, or container member name)
        source: Source identifier, hexadecimal prefix with leading zeros stripped
        upi: Logical data-product identifier (or the forced filter value)
        size: Byte length declared by the filesystem or container entry
        sequence: Unsigned 32-bit counter, unique within (source, upi)
        acq_time: Acquisition timestamp decoded from the name (UTC)
        rec_time: Acquisition time shifted by the minutes-offset field
    """

    path: str = Field(..., min_length=1)
    source: str
    upi: str
    size: int = Field(0, ge=0)
    sequence: int = Field(..., ge=0, le=MAX_SEQUENCE)
    acq_time: datetime
    rec_time: datetime | None = None

    @property
    def extension(self) -> str:
        """Extension of the base name, dot included."""
        return os.path.splitext(os.path.basename(self.path))[1]

    @property
    def valid(self) -> bool:
        """Files marked `.bad` are counted but flagged as corrupted."""
        return self.extension != ".bad"

    @property
    def key(self) -> str:
        return f"{self.source}/{self.upi}"

    def stamped_by_rec_time(self) -> "FileRecord":
        """Copy of the record with its reception time as acquisition time."""
        if self.rec_time is None:
            return self
        return self.model_copy(update={"acq_time": self.rec_time})

    def __str__(self) -> str:
        return self.key

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "path": "/data/images/playback/38/2018/175/0038_XYZ_1_000123_20180624_101500_00010.dat",
                "source": "38",
                "upi": "XYZ",
                "size": 4096,
                "sequence": 123,
                "acq_time": "2018-06-24T10:15:00Z",
                "rec_time": "2018-06-24T10:25:00Z",
            }
        }
