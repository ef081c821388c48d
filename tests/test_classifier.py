"""
Tests for availability classification.
"""

import pendulum

from studiopost.domain.classifier import (
    AvailabilityCalculator,
    classify,
    is_weekend,
    peak_free_slots_for,
)
from studiopost.domain.models import AvailabilityCase, PeakHours, PeakWindow, TimeRange
from studiopost.domain.slot_calculator import compute_free_slots
from studiopost.formatting import format_day_label

TZ = "Asia/Tokyo"
MONDAY = pendulum.datetime(2026, 3, 2, tz=TZ)
SUNDAY = pendulum.datetime(2026, 3, 1, tz=TZ)

PEAK_HOURS = PeakHours(weekday=PeakWindow(17, 21), weekend=PeakWindow(13, 17))


def window_for(day_start) -> TimeRange:
    return TimeRange(start=day_start, end=day_start.add(days=1))


def span(day_start, start_hour, end_hour) -> TimeRange:
    return TimeRange(start=day_start.add(hours=start_hour), end=day_start.add(hours=end_hour))


class TestPeakClamp:
    """Tests for peak_free_slots_for."""

    def test_partial_overlap_is_clamped(self):
        window = window_for(MONDAY)

        clamped = peak_free_slots_for([span(MONDAY, 10, 12)], window, PeakWindow(11, 13))

        assert clamped == [span(MONDAY, 11, 12)]

    def test_slot_before_peak_contributes_nothing(self):
        window = window_for(MONDAY)

        clamped = peak_free_slots_for([span(MONDAY, 9, 10)], window, PeakWindow(11, 13))

        assert clamped == []

    def test_slot_touching_peak_boundary_contributes_nothing(self):
        window = window_for(MONDAY)

        clamped = peak_free_slots_for(
            [span(MONDAY, 9, 11), span(MONDAY, 13, 15)], window, PeakWindow(11, 13)
        )

        assert clamped == []

    def test_slot_covering_peak_is_cut_to_peak(self):
        window = window_for(MONDAY)

        clamped = peak_free_slots_for([span(MONDAY, 0, 24)], window, PeakWindow(17, 21))

        assert clamped == [span(MONDAY, 17, 21)]


class TestClassify:
    """Tests for classify."""

    def test_no_reservations_is_case_b(self):
        window = window_for(MONDAY)

        result = classify([], window, PeakWindow(17, 21), has_reservations=False, day_label="x")

        assert result.case is AvailabilityCase.B
        assert result.free_slots == (window,)
        assert result.peak_free_slots == ()
        assert result.day_label == "x"

    def test_fully_booked_is_case_c_without_slots(self):
        window = window_for(MONDAY)
        free = compute_free_slots(window.start, window.end, [window])

        result = classify(free, window, PeakWindow(17, 21))

        assert result.case is AvailabilityCase.C
        assert result.free_slots == ()
        assert result.peak_free_slots == ()

    def test_gap_inside_peak_is_case_a(self):
        window = window_for(MONDAY)
        busy = [span(MONDAY, 9, 11), span(MONDAY, 14, 16), span(MONDAY, 19, 21)]
        free = compute_free_slots(window.start, window.end, busy)

        result = classify(free, window, PeakWindow(17, 21))

        assert result.case is AvailabilityCase.A
        assert result.peak_free_slots == (span(MONDAY, 17, 19),)
        assert len(result.free_slots) == 4

    def test_peak_free_for_evening_window(self):
        """Peak 17-21 against free 16-19 and 21-24 leaves 17-19 only."""
        window = window_for(MONDAY)
        free = [span(MONDAY, 16, 19), span(MONDAY, 21, 24)]

        result = classify(free, window, PeakWindow(17, 21))

        assert result.peak_free_slots == (span(MONDAY, 17, 19),)

    def test_peak_booked_is_case_c_with_off_peak_slots(self):
        window = window_for(MONDAY)
        free = compute_free_slots(window.start, window.end, [span(MONDAY, 16, 22)])

        result = classify(free, window, PeakWindow(17, 21))

        assert result.case is AvailabilityCase.C
        assert result.free_slots == (span(MONDAY, 0, 16), span(MONDAY, 22, 24))
        assert result.peak_free_slots == ()

    def test_peak_subset_for_case_b_via_secondary_call(self):
        window = window_for(SUNDAY)
        result = classify([], window, PeakWindow(13, 17), has_reservations=False)

        peak = peak_free_slots_for(result.free_slots, window, PeakWindow(13, 17))

        assert result.peak_free_slots == ()
        assert peak == [span(SUNDAY, 13, 17)]


class TestWeekend:
    """Tests for the weekend rule."""

    def test_saturday_and_sunday_are_weekend(self):
        assert is_weekend(pendulum.datetime(2026, 2, 28, tz=TZ))
        assert is_weekend(SUNDAY)
        assert not is_weekend(MONDAY)
        assert not is_weekend(pendulum.datetime(2026, 2, 27, tz=TZ))  # Friday

    def test_custom_weekend_days(self):
        # Friday and Saturday
        assert is_weekend(pendulum.datetime(2026, 2, 27, tz=TZ), weekend_days=[4, 5])
        assert not is_weekend(SUNDAY, weekend_days=[4, 5])


class TestAvailabilityCalculator:
    """Tests for the combined calculation."""

    def test_empty_day_is_case_b(self):
        calculator = AvailabilityCalculator(PEAK_HOURS, label_formatter=format_day_label)

        result = calculator.calculate(window_for(MONDAY), [])

        assert result.case is AvailabilityCase.B
        assert result.free_slots == (window_for(MONDAY),)
        assert result.peak_free_slots == ()
        assert result.is_weekend is False
        assert result.day_label == "3月2日(月)"

    def test_weekday_uses_weekday_peak(self):
        calculator = AvailabilityCalculator(PEAK_HOURS)

        result = calculator.calculate(window_for(MONDAY), [span(MONDAY, 13, 17)])

        # 13-17 is booked but the weekday peak 17-21 is open
        assert result.case is AvailabilityCase.A
        assert result.peak_free_slots == (span(MONDAY, 17, 21),)

    def test_weekend_uses_weekend_peak(self):
        calculator = AvailabilityCalculator(PEAK_HOURS)

        result = calculator.calculate(window_for(SUNDAY), [span(SUNDAY, 13, 17)])

        assert result.is_weekend is True
        assert result.case is AvailabilityCase.C
        assert result.free_slots == (span(SUNDAY, 0, 13), span(SUNDAY, 17, 24))

    def test_default_label_is_iso_date(self):
        calculator = AvailabilityCalculator(PEAK_HOURS)

        result = calculator.calculate(window_for(MONDAY), [])

        assert result.day_label == "2026-03-02"

    def test_bookings_outside_the_day_count_as_none(self):
        calculator = AvailabilityCalculator(PEAK_HOURS)
        previous_day = MONDAY.subtract(days=1)

        result = calculator.calculate(
            window_for(MONDAY),
            [span(previous_day, 20, 24), span(MONDAY, 24, 26)],
        )

        assert result.case is AvailabilityCase.B
        assert result.free_slots == (window_for(MONDAY),)

    def test_booking_from_previous_day_is_clipped(self):
        calculator = AvailabilityCalculator(PEAK_HOURS)

        result = calculator.calculate(
            window_for(MONDAY), [span(MONDAY.subtract(days=1), 22, 26)]
        )

        assert result.case is AvailabilityCase.A
        assert result.free_slots == (span(MONDAY, 2, 24),)
