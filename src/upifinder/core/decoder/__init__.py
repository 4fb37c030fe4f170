"""
Archive file name decoding.
"""

from .filename import DecodeError, decode_filename, is_ignored, keep_name
from .origins import DEFAULT_ORIGINS, IMAGE_ORIGINS, SCIENCE_ORIGINS, OriginTable

__all__ = [
    "DecodeError",
    "decode_filename",
    "is_ignored",
    "keep_name",
    "OriginTable",
    "DEFAULT_ORIGINS",
    "IMAGE_ORIGINS",
    "SCIENCE_ORIGINS",
]
