"""
Concurrent archive scanner.

Every root is traversed by one worker of a bounded thread pool. Workers
push decoded records onto a bounded queue drained by the single consumer
iterating `ArchiveScanner.scan`, so per-partition state downstream is
never shared between threads.
"""

import os
import queue
import threading
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed

from upifinder.core.decoder import DEFAULT_ORIGINS, OriginTable
from upifinder.core.models import FileRecord
from upifinder.observability.logger import get_logger
from upifinder.observability.metrics import increment_counter, roots_scanned_total
from upifinder.scan.errors import ScanError, TraversalError
from upifinder.scan.readers import EntryReader

logger = get_logger(__name__)

DEFAULT_WORKERS = 8
DEFAULT_QUEUE_SIZE = 1024

# seconds a worker waits on a full queue before checking for cancellation
PUT_TIMEOUT = 0.1

_DONE = object()


def _raise(error: OSError) -> None:
    raise error


class ArchiveScanner:
    """
    Enumerates the records held under a set of archive roots.

    Usage:
        scanner = ArchiveScanner(upi="HRD", max_workers=4)
        for record in scanner.scan(list_paths(roots, period=7)):
            ...

    Records arrive in no particular order across roots. Within a root,
    files are visited in sorted order and container members in archive
    order.
    """

    def __init__(
        self,
        upi: str | None = None,
        max_workers: int = DEFAULT_WORKERS,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        origins: OriginTable = DEFAULT_ORIGINS,
    ):
        """
        Initialize scanner.

        Args:
            upi: Optional UPI filter; matching records get this UPI
            max_workers: Number of roots traversed concurrently
            queue_size: Bound of the record queue between workers and consumer
            origins: Accepted origin codes
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self.upi = upi
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.reader = EntryReader(upi=upi, origins=origins)

    def scan(self, roots: Iterable[str]) -> Iterator[FileRecord]:
        """
        Stream the records of every root.

        Failed roots do not stop the others. Once every record has been
        yielded, the failures are raised together.

        Raises:
            ScanError: If at least one root could not be traversed
        """
        roots = list(roots)
        records: queue.Queue = queue.Queue(maxsize=self.queue_size)
        stop = threading.Event()
        errors: list[TraversalError] = []

        coordinator = threading.Thread(
            target=self._run,
            args=(roots, records, stop, errors),
            name="upifinder-scan",
            daemon=True,
        )
        logger.debug(f"Scanning {len(roots)} roots with {self.max_workers} workers")
        coordinator.start()
        try:
            while True:
                item = records.get()
                if item is _DONE:
                    break
                yield item
        finally:
            # releases workers when the consumer stops early
            stop.set()
            coordinator.join()

        if errors:
            raise ScanError(errors)

    def _run(
        self,
        roots: list[str],
        records: queue.Queue,
        stop: threading.Event,
        errors: list[TraversalError],
    ) -> None:
        try:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="upifinder-walk"
            ) as executor:
                futures = {
                    executor.submit(self._walk_root, root, records, stop): root
                    for root in roots
                }
                for future in as_completed(futures):
                    root = futures[future]
                    try:
                        future.result()
                    except Exception as e:
                        logger.error(f"Failed to scan {root}: {e}")
                        increment_counter(roots_scanned_total, status="failure")
                        errors.append(TraversalError(root, e))
        finally:
            self._put(records, _DONE, stop)

    def _walk_root(self, root: str, records: queue.Queue, stop: threading.Event) -> None:
        if stop.is_set():
            return
        if not os.path.lexists(root):
            logger.warning(f"Skipping missing root {root}")
            increment_counter(roots_scanned_total, status="missing")
            return

        count = 0
        for path in self._files(root):
            if stop.is_set():
                return
            for record in self.reader.read(path):
                if not self._put(records, record, stop):
                    return
                count += 1

        logger.debug(f"Scanned {root}: {count} records")
        increment_counter(roots_scanned_total, status="success")

    @staticmethod
    def _files(root: str) -> Iterator[str]:
        """Files under a root in sorted order, the root itself if it is a file."""
        if not os.path.isdir(root):
            yield root
            return
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames.sort()
            for name in sorted(filenames):
                yield os.path.join(dirpath, name)

    @staticmethod
    def _put(records: queue.Queue, item, stop: threading.Event) -> bool:
        """Blocking put giving up once the scan is cancelled."""
        while not stop.is_set():
            try:
                records.put(item, timeout=PUT_TIMEOUT)
                return True
            except queue.Full:
                continue
        return False
