"""
List file reader.

A list file holds one archive path per line. Sizes are unknown and
recorded as zero.
"""

from collections.abc import Iterator

from upifinder.core.decoder import DecodeError
from upifinder.core.models import FileRecord
from upifinder.observability.logger import get_logger

from .base_reader import BaseReader

logger = get_logger(__name__)


class ListReader(BaseReader):
    kind = "list"

    def read(self, path: str) -> Iterator[FileRecord]:
        with open(path, encoding="utf-8", errors="replace") as lines:
            for lineno, line in enumerate(lines, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = self.decode(line)
                except DecodeError as e:
                    logger.debug(f"Skipping line {lineno} of {path}: {e}")
                    continue
                if record is not None:
                    yield record
