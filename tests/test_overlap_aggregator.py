"""
Tests for overlap aggregation - the core business logic.
"""

import logging

import pytest

from sessionfinder.domain.exceptions import InvalidAvailabilityError
from sessionfinder.domain.models import (
    CampaignWindow,
    OverlapSlot,
    ParticipantAvailability,
    Range,
    WeeklyPattern,
)
from sessionfinder.domain.overlap_aggregator import (
    OverlapAggregator,
    aggregate,
    build_heatmap,
    find_session_slots,
    tick_universe,
)
from sessionfinder.domain.slot_conversion import tick_for

MONDAY = "2024-11-25"
TUESDAY = "2024-11-26"


@pytest.fixture
def monday_window():
    """A single full day."""
    return CampaignWindow(start_date=MONDAY, end_date=MONDAY)


@pytest.fixture
def evening_window():
    """Monday evening, 18:00 to 23:00."""
    return CampaignWindow(MONDAY, MONDAY, "18:00", "23:00")


class TestTickUniverse:
    """Tests for tick_universe."""

    def test_full_day(self, monday_window):
        assert len(tick_universe(monday_window)) == 48

    def test_daily_window_limits_ticks(self, evening_window):
        universe = tick_universe(evening_window)

        assert len(universe) == 10
        assert universe[0] == tick_for(MONDAY, "18:00")
        assert universe[-1] == tick_for(MONDAY, "22:30")

    def test_spans_every_date(self):
        window = CampaignWindow(MONDAY, TUESDAY, "18:00", "19:00")

        assert tick_universe(window) == [
            tick_for(MONDAY, "18:00"),
            tick_for(MONDAY, "18:30"),
            tick_for(TUESDAY, "18:00"),
            tick_for(TUESDAY, "18:30"),
        ]


class TestAggregate:
    """Tests for aggregate."""

    def test_shared_hour(self, monday_window):
        """Test the classic case: two overlapping afternoons."""
        effective = {
            "a": [Range(MONDAY, "13:00", "15:00")],
            "b": [Range(MONDAY, "14:00", "16:00")],
        }

        result = aggregate(effective, monday_window)

        expected = [OverlapSlot(MONDAY, "14:00", "15:00", ("a", "b"), 2)]
        assert result.perfect_slots == expected
        assert result.best_slots == expected

    def test_no_participants(self, monday_window):
        result = aggregate({}, monday_window)

        assert result.perfect_slots == []
        assert result.best_slots == []

    def test_nobody_available(self, monday_window):
        result = aggregate({"a": [], "b": []}, monday_window)

        assert result.perfect_slots == []
        assert result.best_slots == []

    def test_best_without_perfect(self, monday_window):
        effective = {
            "a": [Range(MONDAY, "13:00", "15:00")],
            "b": [Range(MONDAY, "14:00", "16:00")],
            "c": [Range(MONDAY, "09:00", "10:00")],
        }

        result = aggregate(effective, monday_window)

        assert result.perfect_slots == []
        assert result.best_slots == [OverlapSlot(MONDAY, "14:00", "15:00", ("a", "b"), 3)]

    def test_all_ties_are_kept_in_order(self, monday_window):
        effective = {
            "a": [Range(MONDAY, "10:00", "11:00"), Range(MONDAY, "14:00", "15:00")],
            "b": [Range(MONDAY, "14:00", "15:00"), Range(MONDAY, "10:00", "11:00")],
        }

        result = aggregate(effective, monday_window)

        assert [(s.start, s.end) for s in result.best_slots] == [("10:00", "11:00"), ("14:00", "15:00")]
        assert result.best_slots == result.perfect_slots

    def test_slot_lists_participants_of_its_first_tick(self, monday_window):
        effective = {
            "a": [Range(MONDAY, "13:00", "15:00")],
            "b": [Range(MONDAY, "14:00", "15:00")],
            "c": [Range(MONDAY, "13:00", "14:00")],
        }

        result = aggregate(effective, monday_window)

        assert result.best_slots == [OverlapSlot(MONDAY, "13:00", "15:00", ("a", "c"), 3)]

    def test_daily_window_restricts_slots(self):
        window = CampaignWindow(MONDAY, MONDAY, "14:00", "15:00")
        effective = {
            "a": [Range(MONDAY, "13:00", "15:00")],
            "b": [Range(MONDAY, "13:00", "16:00")],
        }

        result = aggregate(effective, window)

        assert result.perfect_slots == [OverlapSlot(MONDAY, "14:00", "15:00", ("a", "b"), 2)]

    def test_slots_ordered_by_date_then_start(self):
        window = CampaignWindow(MONDAY, TUESDAY)
        effective = {
            "a": [Range(TUESDAY, "09:00", "10:00"), Range(MONDAY, "20:00", "21:00")],
        }

        result = aggregate(effective, window)

        assert [s.date for s in result.perfect_slots] == [MONDAY, TUESDAY]

    def test_slots_never_run_past_the_window(self):
        window = CampaignWindow(MONDAY, MONDAY, "18:30", "21:00")
        effective = {
            "a": [Range(MONDAY, "18:00", "21:30")],
            "b": [Range(MONDAY, "18:00", "21:00")],
        }

        result = aggregate(effective, window)

        assert result.perfect_slots == [OverlapSlot(MONDAY, "18:30", "21:00", ("a", "b"), 2)]
        assert result.best_slots == result.perfect_slots

    def test_off_grid_input_is_rejected_up_front(self):
        """Quarter-hour bounds would never line up with the half-hour ticks."""
        with pytest.raises(InvalidAvailabilityError):
            CampaignWindow(MONDAY, MONDAY, "18:15", "21:00")
        with pytest.raises(InvalidAvailabilityError):
            Range(MONDAY, "18:15", "20:15")

    def test_availability_outside_window_is_not_counted(self, evening_window):
        effective = {"a": [Range(TUESDAY, "18:00", "20:00"), Range(MONDAY, "09:00", "10:00")]}

        result = aggregate(effective, evening_window)

        assert result.best_slots == []


class TestBuildHeatmap:
    """Tests for build_heatmap."""

    def test_counts_every_tick(self, evening_window):
        effective = {
            "a": [Range(MONDAY, "18:00", "20:00")],
            "b": [Range(MONDAY, "19:00", "23:00")],
        }

        heatmap = build_heatmap(effective, evening_window)

        assert len(heatmap) == 10
        assert heatmap[tick_for(MONDAY, "18:00")].participant_ids == ("a",)
        assert heatmap[tick_for(MONDAY, "19:30")].count == 2
        assert heatmap[tick_for(MONDAY, "22:30")].participant_ids == ("b",)


class TestFindSessionSlots:
    """Tests for find_session_slots."""

    def test_three_hour_sessions(self, evening_window):
        effective = {
            "a": [Range(MONDAY, "18:00", "22:00")],
            "b": [Range(MONDAY, "18:00", "22:00")],
        }

        candidates = find_session_slots(effective, evening_window, session_minutes=180)

        assert [(c.start, c.end) for c in candidates] == [
            ("18:00", "21:00"),
            ("18:30", "21:30"),
            ("19:00", "22:00"),
        ]
        assert all(c.participant_ids == ("a", "b") for c in candidates)

    def test_threshold_needs_same_people_throughout(self, evening_window):
        effective = {
            "a": [Range(MONDAY, "18:00", "20:00")],
            "b": [Range(MONDAY, "20:00", "23:00")],
        }

        candidates = find_session_slots(effective, evening_window, session_minutes=60, min_participants=1)

        starts = [c.start for c in candidates]
        assert "19:30" not in starts
        assert starts == ["18:00", "18:30", "19:00", "20:00", "20:30", "21:00", "21:30", "22:00"]

    def test_partial_tick_rounds_up(self, evening_window):
        effective = {"a": [Range(MONDAY, "18:00", "19:00")]}

        candidates = find_session_slots(effective, evening_window, session_minutes=45)

        assert [(c.start, c.end) for c in candidates] == [("18:00", "19:00")]

    def test_no_room_for_session(self, evening_window):
        effective = {"a": [Range(MONDAY, "18:00", "19:00")]}

        assert find_session_slots(effective, evening_window, session_minutes=120) == []

    @pytest.mark.parametrize("minutes, minimum", [(0, None), (-30, None), (60, 0)])
    def test_invalid_arguments(self, evening_window, minutes, minimum):
        with pytest.raises(InvalidAvailabilityError):
            find_session_slots({}, evening_window, session_minutes=minutes, min_participants=minimum)


class TestOverlapAggregator:
    """Tests for OverlapAggregator."""

    def test_find_overlap_from_raw_participants(self, evening_window):
        aggregator = OverlapAggregator(window=evening_window)
        participants = [
            ParticipantAvailability("gm", available_patterns=[WeeklyPattern(1, "18:00", "23:00")]),
            ParticipantAvailability("sam", available_patterns=[WeeklyPattern(1, "19:00", "21:00")]),
        ]

        result = aggregator.find_overlap(participants)

        assert result.perfect_slots == [OverlapSlot(MONDAY, "19:00", "21:00", ("gm", "sam"), 2)]

    def test_duplicate_ids_keep_first_record(self, evening_window, caplog):
        aggregator = OverlapAggregator(window=evening_window)
        participants = [
            ParticipantAvailability("gm", manual_additions=[Range(MONDAY, "18:00", "19:00")]),
            ParticipantAvailability("gm", manual_additions=[Range(MONDAY, "20:00", "21:00")]),
        ]

        with caplog.at_level(logging.WARNING):
            effective = aggregator.resolve_participants(participants)

        assert effective == {"gm": [Range(MONDAY, "18:00", "19:00")]}
        assert "Ignoring duplicate participant record: gm" in caplog.text

    def test_heatmap_from_raw_participants(self, evening_window):
        aggregator = OverlapAggregator(window=evening_window)
        participants = [
            ParticipantAvailability("gm", available_patterns=[WeeklyPattern(1, "18:00", "23:00")]),
            ParticipantAvailability("sam", manual_additions=[Range(MONDAY, "22:00", "24:00")]),
        ]

        heatmap = aggregator.heatmap(participants)

        assert len(heatmap) == 10
        assert heatmap[tick_for(MONDAY, "18:00")].participant_ids == ("gm",)
        assert heatmap[tick_for(MONDAY, "22:30")].participant_ids == ("gm", "sam")
        assert tick_for(MONDAY, "23:00") not in heatmap

    def test_find_sessions(self, evening_window):
        aggregator = OverlapAggregator(window=evening_window)
        participants = [
            ParticipantAvailability("gm", available_patterns=[WeeklyPattern(1, "18:00", "23:00")]),
        ]

        candidates = aggregator.find_sessions(participants, session_minutes=300)

        assert [(c.start, c.end) for c in candidates] == [("18:00", "23:00")]
