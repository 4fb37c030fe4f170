"""
Unit tests for the GapDetector (check report).

Includes property-based testing with hypothesis for refill collapsing.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from upifinder.core.models import FileRecord
from upifinder.core.ranges import RangeSet
from upifinder.core.stats import GapDetector, by_source

T0 = datetime(2018, 6, 24, 10, 0, tzinfo=timezone.utc)


def feed(detector: GapDetector, make_record, sequences, **kwargs) -> GapDetector:
    """Feed records whose acquisition times follow arrival order."""
    for ix, sequence in enumerate(sequences):
        detector.update(make_record(sequence, acq_time=T0 + timedelta(minutes=ix), **kwargs))
    return detector


def bounds(detector: GapDetector) -> list[tuple[int, int]]:
    return [(gap.before, gap.after) for gap in detector.gaps()]


@pytest.mark.unit
class TestGapDetection:
    """Tests for gap creation"""

    def test_end_to_end_partition(self, make_record):
        """Test that 10, 11, 13 of 38/XYZ yield a single gap 11..13"""
        t1, t2 = T0 + timedelta(minutes=1), T0 + timedelta(minutes=2)
        detector = GapDetector()
        detector.update_all([
            make_record(10, acq_time=T0),
            make_record(11, acq_time=t1),
            make_record(13, acq_time=t2),
        ])

        gaps = detector.gaps()
        assert len(gaps) == 1
        gap = gaps[0]
        assert gap.upi == "38/XYZ"
        assert (gap.before, gap.after) == (11, 13)
        assert (gap.starts, gap.ends) == (t1, t2)
        assert gap.count == 1

    def test_contiguous_sequences_have_no_gap(self, make_record):
        detector = feed(GapDetector(), make_record, [1, 2, 3, 4])
        assert detector.gaps() == []
        assert detector.missing() == 0

    def test_lower_sequence_creates_no_gap(self, make_record):
        detector = feed(GapDetector(), make_record, [10, 5])
        assert detector.gaps() == []

    def test_duplicate_produces_no_duplicate_gap(self, make_record):
        """Test that feeding 5 twice keeps a single gap"""
        detector = feed(GapDetector(), make_record, [1, 5, 5])
        assert bounds(detector) == [(1, 5)]

    def test_min_duration_discards_short_gaps(self, make_record):
        detector = GapDetector(min_duration=timedelta(minutes=5))
        detector.update(make_record(1, acq_time=T0))
        detector.update(make_record(3, acq_time=T0 + timedelta(minutes=1)))
        detector.update(make_record(6, acq_time=T0 + timedelta(minutes=10)))

        assert bounds(detector) == [(3, 6)]

    def test_invalid_records_skipped(self, make_record):
        detector = GapDetector()
        detector.update(make_record(1, acq_time=T0))
        detector.update(make_record(2, acq_time=T0 + timedelta(minutes=1), ext=".bad"))
        detector.update(make_record(3, acq_time=T0 + timedelta(minutes=2)))

        assert bounds(detector) == [(1, 3)]

    def test_keep_invalid(self, make_record):
        detector = GapDetector(keep_invalid=True)
        detector.update(make_record(1, acq_time=T0))
        detector.update(make_record(2, acq_time=T0 + timedelta(minutes=1), ext=".bad"))
        detector.update(make_record(3, acq_time=T0 + timedelta(minutes=2)))

        assert detector.gaps() == []

    def test_inverted_times_keep_ascending_bounds(self, make_record):
        detector = GapDetector()
        detector.update(make_record(1, acq_time=T0 + timedelta(minutes=5)))
        detector.update(make_record(4, acq_time=T0))

        gap = detector.gaps()[0]
        assert (gap.before, gap.after) == (1, 4)
        assert gap.starts <= gap.ends


@pytest.mark.unit
class TestRefill:
    """Tests for refill collapsing"""

    def test_refill_narrows_gap(self, make_record):
        """Test 1, 5 then 3: the gap narrows to 3..5"""
        detector = feed(GapDetector(), make_record, [1, 5, 3])

        gaps = detector.gaps()
        assert bounds(detector) == [(3, 5)]
        assert gaps[0].count == 1
        assert gaps[0].starts == T0 + timedelta(minutes=2)

    def test_all_gaps_keeps_original(self, make_record):
        """Test that with all_gaps the 1..5 gap survives the refill"""
        detector = feed(GapDetector(all_gaps=True), make_record, [1, 5, 3])

        assert bounds(detector) == [(1, 5)]
        assert detector.gaps()[0].count == 3

    def test_refill_closes_gap(self, make_record):
        detector = feed(GapDetector(), make_record, [1, 3, 2])
        assert detector.gaps() == []

    def test_successive_refills_close_gap(self, make_record):
        detector = feed(GapDetector(), make_record, [1, 5, 2, 3, 4])
        assert detector.gaps() == []

    def test_refill_splits_gap_with_integrated_values(self, make_record):
        """Test that a refill above integrated values splits the gap"""
        detector = GapDetector()
        detector.update(make_record(5, acq_time=T0))
        detector.update(make_record(3, acq_time=T0 + timedelta(minutes=5)))
        # 5 is already integrated inside the 3..8 gap
        detector.update(make_record(8, acq_time=T0 + timedelta(minutes=6)))
        assert bounds(detector) == [(3, 8)]

        detector.update(make_record(6, acq_time=T0 + timedelta(minutes=7)))
        assert bounds(detector) == [(3, 6), (6, 8)]
        assert detector.missing() == 3

    def test_refill_outside_gaps_opens_new_gap(self, make_record):
        detector = feed(GapDetector(), make_record, [1, 3, 7])
        assert bounds(detector) == [(1, 3), (3, 7)]

    @given(st.lists(st.integers(min_value=0, max_value=200), min_size=1, max_size=60))
    def test_ascending_arrival_matches_missing_ranges(self, values):
        """Property: for ascending arrival the gaps are exactly the holes"""
        ordered = sorted(set(values))
        detector = GapDetector()
        for ix, sequence in enumerate(ordered):
            detector.update(_record(sequence, ix))

        holes = [(r.first, r.last) for r in RangeSet(ordered).missing_ranges()]
        assert bounds(detector) == holes
        assert detector.missing() == RangeSet(ordered).missing()

    @given(st.lists(st.integers(min_value=0, max_value=200), min_size=1, max_size=60))
    def test_gap_bounds_are_present_values(self, values):
        """Property: open gaps are never empty and are bounded by seen values"""
        detector = GapDetector()
        for ix, sequence in enumerate(values):
            detector.update(_record(sequence, ix))

        seen = RangeSet(values)
        for gap in detector.gaps():
            assert gap.count > 0
            assert gap.before in seen
            assert gap.after in seen


@pytest.mark.unit
class TestPartitioning:
    """Tests for partition keys in the gap detector"""

    def test_sources_kept_apart_by_upi(self, make_record):
        detector = GapDetector()
        detector.update(make_record(1, source="38", acq_time=T0))
        detector.update(make_record(3, source="39", acq_time=T0 + timedelta(minutes=1)))

        assert detector.gaps() == []
        assert len(detector) == 2

    def test_sources_merged_by_source(self, make_record):
        """Test that by_source merges products of one source"""
        detector = GapDetector(partition=by_source)
        detector.update(make_record(1, upi="A", acq_time=T0))
        detector.update(make_record(3, upi="B", acq_time=T0 + timedelta(minutes=1)))

        assert [(g.upi, g.before, g.after) for g in detector.gaps()] == [("38", 1, 3)]

    def test_partitions_sorted(self, make_record):
        detector = GapDetector()
        for upi in ("B", "A"):
            detector.update(make_record(1, upi=upi, acq_time=T0))
            detector.update(make_record(4, upi=upi, acq_time=T0 + timedelta(minutes=1)))

        assert list(detector.partitions()) == ["38/A", "38/B"]
        assert [g.upi for g in detector.gaps()] == ["38/A", "38/B"]


def _record(sequence: int, minute: int):
    return FileRecord(
        path=f"38_XYZ_1_{sequence}_x.dat",
        source="38",
        upi="XYZ",
        sequence=sequence,
        acq_time=T0 + timedelta(minutes=minute),
    )
