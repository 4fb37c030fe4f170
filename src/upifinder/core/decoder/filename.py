"""
Archive file name decoding.

Names are split on underscores:

    <source>_<upi...>_<class>_<sequence>_<YYYYMMDD>_<HHMMSS>_<offset>[.ext]

The first field is the hexadecimal source code, the five trailing fields
hold the class, the sequence counter, the acquisition date and time and a
minutes-offset carrying the extension. Whatever sits in between is the UPI.
"""

import os
import re
from datetime import datetime, timedelta, timezone

from upifinder.core.decoder.origins import DEFAULT_ORIGINS, OriginTable
from upifinder.core.models.file_record import MAX_SEQUENCE, FileRecord

NAME_PATTERN = re.compile(r"[A-Za-z0-9._-]+")
HEX_PATTERN = re.compile(r"[0-9A-Fa-f]+")
DIGITS_PATTERN = re.compile(r"[0-9]+")

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
TIMESTAMP_WIDTH = 14

# source, class, sequence, date, time, offset
MIN_FIELDS = 6
# source codes are signed 8-bit values
MAX_SOURCE_CODE = 0x7F

IGNORED_EXTENSIONS = frozenset({".xml"})
INVALID_EXTENSION = ".bad"


class DecodeError(ValueError):
    """Raised when a conforming name carries a malformed field."""

    def __init__(self, path: str, field_name: str, message: str):
        self.path = path
        self.field_name = field_name
        self.message = message
        super().__init__(f"{path}: {field_name}: {message}")


def keep_name(name: str) -> bool:
    """Whether a base name only uses the archive character set."""
    return NAME_PATTERN.fullmatch(name) is not None


def is_ignored(path: str) -> bool:
    return os.path.splitext(path)[1] in IGNORED_EXTENSIONS


def decode_filename(
    path: str,
    upi: str | None = None,
    size: int = 0,
    origins: OriginTable = DEFAULT_ORIGINS,
) -> FileRecord | None:
    """
    Decode an archive entry name into a FileRecord.

    Args:
        path: File path or container member name
        upi: Optional UPI filter; when set the decoded UPI is forced to it
        size: Declared byte length of the entry
        origins: Accepted origin codes

    Returns:
        The decoded record, or None when the entry is rejected (foreign
        characters, ignored extension, too few fields, unknown origin)

    Raises:
        DecodeError: If the source, sequence or timestamp field is malformed
    """
    base = os.path.basename(path)
    if not keep_name(base) or is_ignored(base):
        return None

    parts = base.split("_")
    if len(parts) < MIN_FIELDS:
        return None

    source = parts[0].lstrip("0")
    if not HEX_PATTERN.fullmatch(source):
        raise DecodeError(path, "source", f"invalid source code {parts[0]!r}")
    code = int(source, 16)
    if code > MAX_SOURCE_CODE:
        raise DecodeError(path, "source", f"source code {parts[0]!r} out of range")
    if not origins.accepts(parts[-5], code):
        return None

    sequence_field = parts[-4]
    if not DIGITS_PATTERN.fullmatch(sequence_field):
        raise DecodeError(path, "sequence", f"invalid sequence {sequence_field!r}")
    sequence = int(sequence_field)
    if sequence > MAX_SEQUENCE:
        raise DecodeError(path, "sequence", f"sequence {sequence_field!r} exceeds 32 bits")

    stamp = parts[-3] + parts[-2]
    if len(stamp) != TIMESTAMP_WIDTH or not DIGITS_PATTERN.fullmatch(stamp):
        raise DecodeError(path, "timestamp", f"invalid timestamp {stamp!r}")
    try:
        acq_time = datetime.strptime(stamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise DecodeError(path, "timestamp", str(e)) from e

    return FileRecord(
        path=path,
        source=source,
        upi=upi if upi else "_".join(parts[1:-5]),
        size=size,
        sequence=sequence,
        acq_time=acq_time,
        rec_time=acq_time + timedelta(minutes=_offset_minutes(parts[-1])),
    )


def _offset_minutes(field: str) -> int:
    """Leading integer of the offset field, 0 when absent."""
    head = field.split(".", 1)[0].lstrip("0")
    if not DIGITS_PATTERN.fullmatch(head):
        return 0
    return int(head)
