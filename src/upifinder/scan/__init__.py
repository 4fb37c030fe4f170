"""
Archive traversal: date windows, container readers and the concurrent scanner.
"""

from .errors import ScanError, TraversalError
from .scanner import DEFAULT_QUEUE_SIZE, DEFAULT_WORKERS, ArchiveScanner
from .window import list_paths, resolve_window

__all__ = [
    "ArchiveScanner",
    "ScanError",
    "TraversalError",
    "list_paths",
    "resolve_window",
    "DEFAULT_WORKERS",
    "DEFAULT_QUEUE_SIZE",
]
