"""
Tests for range and tick conversion.
"""

from types import SimpleNamespace

from sessionfinder.domain.models import Range, Tick
from sessionfinder.domain.range_algebra import merge
from sessionfinder.domain.slot_conversion import (
    ranges_to_ticks,
    tick_for,
    tick_label,
    ticks_to_ranges,
)
from sessionfinder.domain.time_primitives import MAX_TICKS_PER_RANGE

MONDAY = "2024-11-25"
TUESDAY = "2024-11-26"


class TestRangesToTicks:
    """Tests for ranges_to_ticks."""

    def test_one_tick_per_half_hour(self):
        ticks = ranges_to_ticks([Range(MONDAY, "13:00", "14:30")])

        assert ticks == {
            tick_for(MONDAY, "13:00"),
            tick_for(MONDAY, "13:30"),
            tick_for(MONDAY, "14:00"),
        }

    def test_full_day_is_capped_exactly(self):
        ticks = ranges_to_ticks([Range(MONDAY, "00:00", "24:00")])

        assert len(ticks) == MAX_TICKS_PER_RANGE
        assert tick_for(MONDAY, "23:30") in ticks

    def test_inverted_row_contributes_nothing(self):
        corrupt = SimpleNamespace(date=MONDAY, start="14:00", end="13:00")

        assert ranges_to_ticks([corrupt]) == frozenset()

    def test_overlapping_ranges_share_ticks(self):
        ticks = ranges_to_ticks([Range(MONDAY, "13:00", "14:00"), Range(MONDAY, "13:30", "14:30")])

        assert len(ticks) == 3


class TestTicksToRanges:
    """Tests for ticks_to_ranges."""

    def test_consecutive_ticks_fold_into_one_range(self):
        ticks = [tick_for(MONDAY, "13:30"), tick_for(MONDAY, "13:00"), tick_for(MONDAY, "14:00")]

        assert ticks_to_ranges(ticks) == [Range(MONDAY, "13:00", "14:30")]

    def test_gap_splits_ranges(self):
        ticks = [tick_for(MONDAY, "13:00"), tick_for(MONDAY, "14:00")]

        assert ticks_to_ranges(ticks) == [
            Range(MONDAY, "13:00", "13:30"),
            Range(MONDAY, "14:00", "14:30"),
        ]

    def test_last_tick_ends_at_midnight(self):
        assert ticks_to_ranges([tick_for(MONDAY, "23:30")]) == [Range(MONDAY, "23:30", "24:00")]

    def test_midnight_does_not_join_dates(self):
        ticks = [tick_for(MONDAY, "23:30"), tick_for(TUESDAY, "00:00")]

        assert ticks_to_ranges(ticks) == [
            Range(MONDAY, "23:30", "24:00"),
            Range(TUESDAY, "00:00", "00:30"),
        ]

    def test_no_ticks(self):
        assert ticks_to_ranges([]) == []

    def test_round_trip_equals_merge(self):
        ranges = [
            Range(MONDAY, "18:00", "20:00"),
            Range(MONDAY, "19:00", "21:30"),
            Range(MONDAY, "22:00", "23:00"),
            Range(TUESDAY, "08:00", "09:00"),
        ]

        assert ticks_to_ranges(ranges_to_ticks(ranges)) == merge(ranges)


class TestTickLabels:
    """Tests for tick_for and tick_label."""

    def test_label_round_trip(self):
        tick = tick_for(MONDAY, "18:30")

        assert isinstance(tick, Tick)
        assert tick.minute == 1110
        assert tick_label(tick) == (MONDAY, "18:30")
