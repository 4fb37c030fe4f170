"""
Unit tests for logging and metrics helpers.
"""

import json
import logging

import pytest

from upifinder.core.config.settings import LoggingSettings
from upifinder.observability.logger import (
    CommandFilter,
    _make_formatter,
    configure_logging,
    get_logger,
    log_scan,
    setup_logger,
)
from upifinder.observability.metrics import (
    REGISTRY,
    generate_metrics,
    record_check_report,
    record_walk_report,
)
from upifinder.scan.readers import EntryReader


def sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


def log_record(message: str, level: int = logging.INFO, name: str = "upifinder") -> logging.LogRecord:
    record = logging.LogRecord(name, level, __file__, 1, message, (), None)
    CommandFilter("walk").filter(record)
    return record


@pytest.mark.unit
class TestLogger:
    """Tests for logger setup"""

    def test_json_formatter_fields(self):
        record = log_record("root /a missing", logging.WARNING, "upifinder.scan")
        line = json.loads(_make_formatter("json").format(record))

        assert line["message"] == "root /a missing"
        assert line["level"] == "WARNING"
        assert line["logger"] == "upifinder.scan"
        assert line["command"] == "walk"
        assert line["thread"] == record.threadName

    def test_text_formatter(self):
        line = _make_formatter("text").format(log_record("hello"))
        assert line.endswith("INFO    [walk] upifinder: hello")

    def test_explicit_command_kept(self):
        record = logging.LogRecord("upifinder", logging.INFO, __file__, 1, "x", (), None)
        record.command = "check"
        CommandFilter("walk").filter(record)
        assert record.command == "check"

    def test_setup_replaces_handlers(self):
        logger = setup_logger(level="debug", format_type="text")
        setup_logger(level="ERROR", format_type="json")

        assert len(logger.handlers) == 1
        assert logger.level == logging.ERROR
        assert not logger.propagate

    def test_configure_from_settings(self):
        settings = LoggingSettings(level="debug", format="text")

        assert configure_logging(settings).level == logging.DEBUG
        assert configure_logging(settings, level="WARNING").level == logging.WARNING

    def test_module_loggers_share_package_handler(self):
        setup_logger(level="INFO")
        child = get_logger("upifinder.scan.scanner")

        assert child.handlers == []
        assert child.parent is logging.getLogger("upifinder")


@pytest.mark.unit
class TestLogScan:
    """Tests for log_scan"""

    def test_records_duration(self):
        with log_scan("walk", logger=get_logger("upifinder.test"), roots=2) as scan:
            scan.records = 5
        assert scan.duration >= 0.0
        assert scan.records == 5

    def test_does_not_suppress(self):
        scan = log_scan("check", logger=get_logger("upifinder.test"))
        with pytest.raises(RuntimeError):
            with scan:
                raise RuntimeError("boom")
        assert scan.duration >= 0.0


@pytest.mark.unit
class TestMetrics:
    """Tests for Prometheus metrics"""

    def test_decode_outcomes_counted(self, make_name):
        reader = EntryReader()
        accepted = sample("upifinder_records_decoded_total", status="accepted")
        rejected = sample("upifinder_records_decoded_total", status="rejected")

        assert reader.decode(make_name(1)) is not None
        assert reader.decode(make_name(1, source="0050")) is None

        assert sample("upifinder_records_decoded_total", status="accepted") == accepted + 1
        assert sample("upifinder_records_decoded_total", status="rejected") == rejected + 1

    def test_report_gauges(self):
        record_walk_report(3, 1, 7, 0.5)
        record_check_report(2, 4, 9, 1.5)

        assert sample("upifinder_partitions_reported", command="walk") == 3
        assert sample("upifinder_missing_files", command="walk") == 7
        assert sample("upifinder_missing_files", command="check") == 9
        assert sample("upifinder_gaps_reported") == 4
        assert sample("upifinder_corrupted_files") == 1

    def test_exposition(self):
        record_walk_report(1, 0, 0, 0.1, command="inspect")
        text = generate_metrics().decode()

        assert "upifinder_scan_duration_seconds_bucket" in text
        assert 'upifinder_partitions_reported{command="inspect"} 1.0' in text
