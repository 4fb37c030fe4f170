"""
Zip archive reader.
"""

import os
import zipfile
from collections.abc import Iterator

from upifinder.core.decoder import DecodeError
from upifinder.core.models import FileRecord
from upifinder.observability.logger import get_logger

from .base_reader import BaseReader

logger = get_logger(__name__)


class ZipReader(BaseReader):
    """Reads the members of a zip archive, same rules as TarReader."""

    kind = "zip"

    def read(self, path: str) -> Iterator[FileRecord]:
        with zipfile.ZipFile(path) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                try:
                    record = self.decode(os.path.basename(info.filename), info.file_size)
                except DecodeError as e:
                    logger.warning(f"Stopping zip archive {path}: {e}")
                    return
                if record is not None:
                    yield record
