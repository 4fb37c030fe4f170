"""
Unit tests for the Aggregator (walk report).
"""

from datetime import datetime, timedelta, timezone

import pytest

from upifinder.core.stats import Aggregator, by_merged_upi, by_source, by_upi, get_partitioner

T0 = datetime(2018, 6, 24, 10, 0, tzinfo=timezone.utc)


@pytest.mark.unit
class TestAggregator:
    """Tests for Aggregator"""

    def test_end_to_end_partition(self, make_record):
        """Test sequences 10, 11, 13 of 38/XYZ"""
        aggregator = Aggregator()
        consumed = aggregator.update_all([
            make_record(10, acq_time=T0),
            make_record(11, acq_time=T0 + timedelta(minutes=1)),
            make_record(13, acq_time=T0 + timedelta(minutes=2)),
        ])

        assert consumed == 3
        coze = aggregator.results()["38/XYZ"]
        assert coze.count == 3
        assert coze.uniq <= 3
        assert coze.first == 10
        assert coze.last == 13
        assert coze.missing() == 1

    def test_partition_by_upi_keeps_sources_apart(self, make_record):
        aggregator = Aggregator(partition=by_upi)
        aggregator.update(make_record(1, source="38"))
        aggregator.update(make_record(1, source="39"))

        assert list(aggregator.results()) == ["38/XYZ", "39/XYZ"]
        assert all(coze.uniq == 1 for coze in aggregator.results().values())

    def test_partition_by_source(self, make_record):
        aggregator = Aggregator(partition=by_source)
        aggregator.update(make_record(1, upi="A"))
        aggregator.update(make_record(2, upi="B"))

        assert list(aggregator.results()) == ["38"]
        assert aggregator.results()["38"].count == 2

    def test_partition_merged_upi(self, make_record):
        """Test that merged grouping keys by UPI across sources"""
        aggregator = Aggregator(partition=by_merged_upi)
        aggregator.update(make_record(1, source="38"))
        aggregator.update(make_record(2, source="39"))

        assert list(aggregator.results()) == ["XYZ"]
        assert aggregator.results()["XYZ"].missing() == 0

    def test_results_sorted_by_key(self, make_record):
        aggregator = Aggregator()
        for upi in ("ZZZ", "AAA", "MMM"):
            aggregator.update(make_record(1, upi=upi))
        assert list(aggregator.results()) == ["38/AAA", "38/MMM", "38/ZZZ"]
        assert len(aggregator) == 3

    def test_invalid_records(self, make_record):
        aggregator = Aggregator()
        aggregator.update(make_record(1))
        aggregator.update(make_record(2, ext=".bad"))

        coze = aggregator.results()["38/XYZ"]
        assert coze.count == 2
        assert coze.invalid == 1
        assert coze.uniq == 1
        assert coze.corrupted() == 0.5

    def test_summary(self, make_record):
        aggregator = Aggregator()
        aggregator.update_all(make_record(seq, upi=upi) for seq in (1, 2) for upi in ("A", "B"))

        summary = aggregator.summary()
        assert summary.count == 4
        assert summary.uniq == 4
        assert summary.size == 4 * 1024

    def test_stream_error_propagates_after_consumption(self, make_record):
        """Test that records delivered before a stream error are kept"""
        def stream():
            yield make_record(1)
            yield make_record(2)
            raise RuntimeError("root failed")

        aggregator = Aggregator()
        with pytest.raises(RuntimeError):
            aggregator.update_all(stream())
        assert aggregator.results()["38/XYZ"].count == 2


@pytest.mark.unit
class TestPartitioners:
    """Tests for partition selection"""

    @pytest.mark.parametrize("name,func", [
        ("upi", by_upi),
        ("source", by_source),
        ("merged", by_merged_upi),
        ("UPI", by_upi),
    ])
    def test_get_partitioner(self, name, func):
        assert get_partitioner(name) is func

    def test_unknown_partitioner(self):
        with pytest.raises(ValueError) as exc_info:
            get_partitioner("day")
        assert "day" in str(exc_info.value)
