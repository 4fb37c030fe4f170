"""
Core data models for the archive consistency checker.

All models use Pydantic for runtime validation and serialization.
"""

from .coze import Coze
from .file_record import MAX_SEQUENCE, FileRecord
from .gap import Gap
from upifinder.core.ranges import Range

__all__ = [
    "FileRecord",
    "Range",
    "Gap",
    "Coze",
    "MAX_SEQUENCE",
]
