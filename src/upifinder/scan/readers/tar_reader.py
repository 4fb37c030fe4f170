"""
Tar archive reader.
"""

import os
import tarfile
from collections.abc import Iterator

from upifinder.core.decoder import DecodeError
from upifinder.core.models import FileRecord
from upifinder.observability.logger import get_logger

from .base_reader import BaseReader

logger = get_logger(__name__)

TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tar.xz")


class TarReader(BaseReader):
    """
    Reads the members of a tar archive, compressed or not.

    Members are decoded by base name with their declared size. A decode
    failure stops the archive; records already yielded stand.
    """

    kind = "tar"

    def read(self, path: str) -> Iterator[FileRecord]:
        with tarfile.open(path, mode="r:*") as archive:
            for member in archive:
                if not member.isfile():
                    continue
                try:
                    record = self.decode(os.path.basename(member.name), member.size)
                except DecodeError as e:
                    logger.warning(f"Stopping tar archive {path}: {e}")
                    return
                if record is not None:
                    yield record
