"""
Pytest configuration and fixtures for upifinder tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import io
import os
import tarfile
import zipfile
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from upifinder.core.models import FileRecord


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't touch the filesystem beyond tmp_path"
    )
    config.addinivalue_line(
        "markers", "integration: Tests scanning real archive trees"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests of the command line"
    )


# =======================
# RECORD FIXTURES
# =======================

BASE_TIME = datetime(2018, 6, 24, 10, 0, 0, tzinfo=timezone.utc)


def archive_name(
    sequence: int,
    source: str = "0038",
    upi: str = "XYZ",
    klass: str = "1",
    when: datetime = BASE_TIME,
    offset: int = 10,
    ext: str = ".dat",
) -> str:
    """Build an archive file name in the on-disk naming scheme."""
    return (
        f"{source}_{upi}_{klass}_{sequence:06d}_"
        f"{when:%Y%m%d}_{when:%H%M%S}_{offset:05d}{ext}"
    )


@pytest.fixture
def make_name():
    """Factory for archive file names"""
    return archive_name


@pytest.fixture
def make_record():
    """
    Factory for FileRecords

    Records are spaced one minute apart by sequence number unless an
    explicit acquisition time is given.
    """
    def _make(
        sequence: int,
        source: str = "38",
        upi: str = "XYZ",
        acq_time: datetime | None = None,
        ext: str = ".dat",
        size: int = 1024,
    ) -> FileRecord:
        return FileRecord(
            path=f"{source}_{upi}_1_{sequence}_x{ext}",
            source=source,
            upi=upi,
            size=size,
            sequence=sequence,
            acq_time=acq_time or BASE_TIME + timedelta(minutes=sequence),
        )

    return _make


# =======================
# ARCHIVE FIXTURES
# =======================

def write_files(directory, names, payload: bytes = b"x" * 16) -> list[str]:
    """Create one file per name under a directory."""
    os.makedirs(directory, exist_ok=True)
    paths = []
    for name in names:
        path = os.path.join(directory, name)
        with open(path, "wb") as f:
            f.write(payload)
        paths.append(path)
    return paths


def write_tar(path, names, payload: bytes = b"x" * 16, mode: str = "w") -> str:
    """Create a tar archive holding one member per name."""
    with tarfile.open(path, mode) as archive:
        for name in names:
            info = tarfile.TarInfo(name=name)
            info.size = len(payload)
            archive.addfile(info, io.BytesIO(payload))
    return str(path)


def write_zip(path, names, payload: bytes = b"x" * 16) -> str:
    """Create a zip archive holding one member per name."""
    with zipfile.ZipFile(path, "w") as archive:
        for name in names:
            archive.writestr(name, payload)
    return str(path)


def write_list(path, lines) -> str:
    with open(path, "w") as f:
        f.write("\n".join(lines) + "\n")
    return str(path)


@pytest.fixture
def archive_tree(tmp_path):
    """
    Archive laid out by year and day of year

    Two days (2018/175 and 2018/176) of source 0x38, product XYZ:
    sequences 1-3 and 5 on day 175, 6 and 8 on day 176, plus an xml
    sidecar and a corrupted file.
    """
    root = tmp_path / "archive"
    day1 = root / "2018" / "175"
    day2 = root / "2018" / "176"
    first = BASE_TIME
    second = BASE_TIME + timedelta(days=1)
    write_files(day1, [
        archive_name(1, when=first),
        archive_name(2, when=first + timedelta(minutes=1)),
        archive_name(3, when=first + timedelta(minutes=2)),
        archive_name(5, when=first + timedelta(minutes=4)),
        archive_name(5, when=first + timedelta(minutes=4), ext=".xml"),
    ])
    write_files(day2, [
        archive_name(6, when=second),
        archive_name(8, when=second + timedelta(minutes=2)),
        archive_name(9, when=second + timedelta(minutes=3), ext=".bad"),
    ])
    return str(root)


@pytest.fixture
def archive_files():
    """Writers for plain files, tar and zip archives and list files"""
    return SimpleNamespace(
        name=archive_name,
        files=write_files,
        tar=write_tar,
        zip=write_zip,
        list=write_list,
    )
