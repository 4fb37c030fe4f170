"""
Archive entry readers.
"""

from .base_reader import BaseReader
from .entry_reader import EntryReader
from .list_reader import ListReader
from .tar_reader import TarReader
from .zip_reader import ZipReader

__all__ = [
    "BaseReader",
    "EntryReader",
    "ListReader",
    "TarReader",
    "ZipReader",
]
