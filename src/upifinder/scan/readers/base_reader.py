"""
Base class for archive entry readers.
"""

import os
from abc import ABC, abstractmethod
from collections.abc import Iterator

from upifinder.core.decoder import DEFAULT_ORIGINS, OriginTable, decode_filename, is_ignored
from upifinder.core.models import FileRecord
from upifinder.observability.logger import get_logger
from upifinder.observability.metrics import files_visited_total, increment_counter, records_decoded_total

logger = get_logger(__name__)


class BaseReader(ABC):
    """
    Turns one archive file into the records it holds.

    Subclasses implement `read` for a container kind. `decode` applies the
    checks shared by every kind: ignored extensions, the UPI pre-filter
    and the decode outcome metrics.
    """

    kind = "plain"

    def __init__(self, upi: str | None = None, origins: OriginTable = DEFAULT_ORIGINS):
        """
        Initialize reader.

        Args:
            upi: Optional UPI filter, matched as a substring of base names
            origins: Accepted origin codes
        """
        self.upi = upi
        self.origins = origins

    @abstractmethod
    def read(self, path: str) -> Iterator[FileRecord]:
        """
        Yield the records held by a file.

        Raises:
            OSError: If the file cannot be opened or read
        """
        pass

    def candidate(self, name: str) -> bool:
        """Whether an entry is worth decoding at all."""
        base = os.path.basename(name)
        if not base or is_ignored(base):
            return False
        return not self.upi or self.upi in base

    def decode(self, name: str, size: int = 0) -> FileRecord | None:
        """
        Decode one entry.

        Returns:
            The record, or None when the entry is filtered out or rejected

        Raises:
            DecodeError: If the entry name carries a malformed field
        """
        if not self.candidate(name):
            return None
        increment_counter(files_visited_total, kind=self.kind)

        try:
            record = decode_filename(name, upi=self.upi, size=size, origins=self.origins)
        except ValueError:
            increment_counter(records_decoded_total, status="failed")
            raise

        if record is None:
            increment_counter(records_decoded_total, status="rejected")
            logger.debug(f"Rejected {name}")
            return None
        increment_counter(records_decoded_total, status="accepted")
        return record
