"""
Reader dispatching archive files by extension.
"""

import os
from collections.abc import Iterator

from upifinder.core.decoder import DEFAULT_ORIGINS, OriginTable
from upifinder.core.models import FileRecord

from .base_reader import BaseReader
from .list_reader import ListReader
from .tar_reader import TAR_SUFFIXES, TarReader
from .zip_reader import ZipReader

LIST_SUFFIX = ".lst"
ZIP_SUFFIX = ".zip"


class EntryReader(BaseReader):
    """
    Reads any archive file.

    Tar and zip archives and list files are expanded into their members,
    any other file is decoded directly with its size on disk.
    """

    def __init__(self, upi: str | None = None, origins: OriginTable = DEFAULT_ORIGINS):
        super().__init__(upi=upi, origins=origins)
        self.tar_reader = TarReader(upi=upi, origins=origins)
        self.zip_reader = ZipReader(upi=upi, origins=origins)
        self.list_reader = ListReader(upi=upi, origins=origins)

    def reader_for(self, path: str) -> BaseReader:
        """Reader handling a file, this reader for plain files."""
        name = os.path.basename(path).lower()
        if name.endswith(TAR_SUFFIXES):
            return self.tar_reader
        if name.endswith(ZIP_SUFFIX):
            return self.zip_reader
        if name.endswith(LIST_SUFFIX):
            return self.list_reader
        return self

    def read(self, path: str) -> Iterator[FileRecord]:
        """
        Yield the records of one file.

        Raises:
            OSError: If the file cannot be opened or stat'ed
            DecodeError: If a plain file name carries a malformed field
        """
        reader = self.reader_for(path)
        if reader is not self:
            yield from reader.read(path)
            return

        if not self.candidate(path):
            return
        # lstat: a dangling link is still an entry of the tree
        record = self.decode(path, os.lstat(path).st_size)
        if record is not None:
            yield record
