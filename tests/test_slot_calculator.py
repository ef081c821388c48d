"""
Tests for the free-slot computation.
"""

import itertools

import pendulum
import pytest

from studiopost.domain.exceptions import MalformedIntervalError
from studiopost.domain.models import TimeRange
from studiopost.domain.slot_calculator import compute_free_slots, merge_ranges, total_minutes

TZ = "Asia/Tokyo"
DAY_START = pendulum.datetime(2026, 3, 2, tz=TZ)  # Monday
DAY_END = DAY_START.add(days=1)


def at(hour: int, minute: int = 0):
    """Local timestamp on the test day; hour 24 is the next midnight."""
    return DAY_START.add(hours=hour, minutes=minute)


def span(start_hour, end_hour) -> TimeRange:
    return TimeRange(start=at(start_hour), end=at(end_hour))


def as_hours(ranges):
    return [
        (int((r.start - DAY_START).total_seconds() // 3600),
         int((r.end - DAY_START).total_seconds() // 3600))
        for r in ranges
    ]


class TestComputeFreeSlots:
    """Tests for compute_free_slots."""

    def test_no_busy_times_whole_day_free(self):
        slots = compute_free_slots(DAY_START, DAY_END, [])

        assert slots == [TimeRange(start=DAY_START, end=DAY_END)]

    def test_single_booking_leaves_two_slots(self):
        slots = compute_free_slots(DAY_START, DAY_END, [span(10, 12)])

        assert as_hours(slots) == [(0, 10), (12, 24)]

    def test_full_day_booking_leaves_nothing(self):
        slots = compute_free_slots(DAY_START, DAY_END, [span(0, 24)])

        assert slots == []

    def test_adjacent_bookings_leave_no_gap(self):
        slots = compute_free_slots(DAY_START, DAY_END, [span(10, 14), span(14, 18)])

        assert as_hours(slots) == [(0, 10), (18, 24)]

    def test_overlapping_bookings_are_merged(self):
        slots = compute_free_slots(DAY_START, DAY_END, [span(10, 15), span(12, 18)])

        assert as_hours(slots) == [(0, 10), (18, 24)]

    def test_reverse_order_input_is_sorted(self):
        slots = compute_free_slots(DAY_START, DAY_END, [span(18, 20), span(10, 12)])

        assert as_hours(slots) == [(0, 10), (12, 18), (20, 24)]

    def test_nested_bookings(self):
        """Scenario: a booking inside another one."""
        slots = compute_free_slots(DAY_START, DAY_END, [span(10, 20), span(12, 16)])

        assert as_hours(slots) == [(0, 10), (20, 24)]

    def test_non_overlapping_bookings(self):
        """Scenario: three separate bookings."""
        slots = compute_free_slots(
            DAY_START, DAY_END, [span(9, 11), span(14, 16), span(19, 21)]
        )

        assert as_hours(slots) == [(0, 9), (11, 14), (16, 19), (21, 24)]

    def test_minute_precision_gap(self):
        busy = [
            TimeRange(start=at(9), end=at(9, 45)),
            TimeRange(start=at(10), end=at(24)),
        ]

        slots = compute_free_slots(DAY_START, DAY_END, busy)

        assert slots[1] == TimeRange(start=at(9, 45), end=at(10))
        assert slots[1].duration_minutes() == 15

    def test_bookings_reaching_outside_the_day_are_clipped(self):
        """An overnight booking from yesterday and one running into tomorrow."""
        busy = [
            TimeRange(start=DAY_START.subtract(hours=2), end=at(3)),
            TimeRange(start=at(22), end=DAY_END.add(hours=2)),
        ]

        slots = compute_free_slots(DAY_START, DAY_END, busy)

        assert as_hours(slots) == [(3, 22)]

    def test_booking_entirely_after_the_day_is_ignored(self):
        busy = [TimeRange(start=DAY_END.add(hours=1), end=DAY_END.add(hours=3))]

        slots = compute_free_slots(DAY_START, DAY_END, busy)

        assert slots == [TimeRange(start=DAY_START, end=DAY_END)]

    def test_inverted_day_window_is_rejected(self):
        with pytest.raises(MalformedIntervalError):
            compute_free_slots(DAY_END, DAY_START, [])


class TestFreeSlotProperties:
    """Invariants that hold for every input."""

    BUSY = [span(9, 11), span(10, 12), span(14, 15), span(15, 16), span(13, 14), span(20, 23)]

    def test_free_and_busy_cover_the_day_exactly(self):
        free = compute_free_slots(DAY_START, DAY_END, self.BUSY)

        assert merge_ranges(free + self.BUSY) == [TimeRange(start=DAY_START, end=DAY_END)]
        assert total_minutes(free) + total_minutes(merge_ranges(self.BUSY)) == 24 * 60

    def test_slots_are_sorted_positive_and_never_touch(self):
        free = compute_free_slots(DAY_START, DAY_END, self.BUSY)

        for slot in free:
            assert slot.duration_minutes() > 0
        for earlier, later in zip(free, free[1:]):
            assert earlier.end < later.start

    def test_slots_never_overlap_busy_time(self):
        free = compute_free_slots(DAY_START, DAY_END, self.BUSY)

        for slot in free:
            assert not any(slot.overlaps(busy) for busy in self.BUSY)

    def test_order_independent(self):
        sample = [span(9, 11), span(10, 12), span(14, 16), span(13, 14)]
        expected = compute_free_slots(DAY_START, DAY_END, sample)

        for permutation in itertools.permutations(sample):
            assert compute_free_slots(DAY_START, DAY_END, list(permutation)) == expected

    def test_duplicates_do_not_change_result(self):
        expected = compute_free_slots(DAY_START, DAY_END, self.BUSY)

        assert compute_free_slots(DAY_START, DAY_END, self.BUSY + self.BUSY) == expected


class TestMergeRanges:
    """Tests for merge_ranges."""

    def test_merges_adjacent_and_overlapping(self):
        merged = merge_ranges([span(9, 10), span(10, 11), span(12, 14), span(13, 15)])

        assert as_hours(merged) == [(9, 11), (12, 15)]

    def test_empty(self):
        assert merge_ranges([]) == []
