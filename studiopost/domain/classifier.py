"""
Classification of a day's free slots into availability cases.
"""

from typing import Callable, Iterable, List, Sequence

from pendulum import DateTime

from .models import (
    AvailabilityCase,
    AvailabilityResult,
    PeakHours,
    PeakWindow,
    TimeRange,
)
from .slot_calculator import compute_free_slots

DEFAULT_WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


def is_weekend(day: DateTime, weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS) -> bool:
    """Check if a datetime falls on a weekend day (0=Monday, 6=Sunday)."""
    return day.weekday() in tuple(weekend_days)


def peak_free_slots_for(
    free_slots: Sequence[TimeRange],
    day_window: TimeRange,
    peak_window: PeakWindow
) -> List[TimeRange]:
    """
    Clamp free slots to the peak window of the day.

    Slots that only touch the window contribute nothing.
    """
    peak = peak_window.bounds(day_window.start)
    clamped: List[TimeRange] = []

    for slot in free_slots:
        intersection = slot.intersect(peak)
        if intersection is not None:
            clamped.append(intersection)

    return clamped


def classify(
    free_slots: Sequence[TimeRange],
    day_window: TimeRange,
    peak_window: PeakWindow,
    *,
    has_reservations: bool = True,
    weekend: bool = False,
    day_label: str = ""
) -> AvailabilityResult:
    """
    Assign the availability case for one day.

    A day without reservations is CASE B and carries the whole day as its
    only free slot; its peak subset stays empty. Otherwise the day is
    CASE A when some free time falls inside the peak window and CASE C when
    none does, which includes a fully booked day.
    """
    if not has_reservations:
        return AvailabilityResult(
            case=AvailabilityCase.B,
            free_slots=(day_window,),
            peak_free_slots=(),
            is_weekend=weekend,
            day_label=day_label,
        )

    peak_free = peak_free_slots_for(free_slots, day_window, peak_window)
    case = AvailabilityCase.A if peak_free else AvailabilityCase.C

    return AvailabilityResult(
        case=case,
        free_slots=tuple(free_slots),
        peak_free_slots=tuple(peak_free),
        is_weekend=weekend,
        day_label=day_label,
    )


class AvailabilityCalculator:
    """
    Computes a studio's availability for one day from its reservations.

    Algorithm:
    1. Decide weekday or weekend and pick the matching peak window
    2. Invert the busy intervals into free slots within the day window
    3. Clamp free slots to the peak window and assign the case
    """

    def __init__(
        self,
        peak_hours: PeakHours,
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
        label_formatter: Callable[[DateTime], str] | None = None
    ):
        self.peak_hours = peak_hours
        self.weekend_days = tuple(weekend_days)
        self.label_formatter = label_formatter or (lambda d: d.format("YYYY-MM-DD"))

    def calculate(
        self,
        window: TimeRange,
        busy_intervals: Sequence[TimeRange]
    ) -> AvailabilityResult:
        """
        Classify the day bounded by ``window`` given its busy intervals.

        Args:
            window: Local day window of the studio
            busy_intervals: Reservations resolved to absolute timestamps

        Returns:
            AvailabilityResult for the day
        """
        weekend = is_weekend(window.start, self.weekend_days)
        peak_window = self.peak_hours.select(weekend)
        label = self.label_formatter(window.start)

        # A booking ending exactly at local midnight belongs to another day
        busy_intervals = [busy for busy in busy_intervals if busy.overlaps(window)]

        if not busy_intervals:
            return classify(
                [],
                window,
                peak_window,
                has_reservations=False,
                weekend=weekend,
                day_label=label,
            )

        free_slots = compute_free_slots(window.start, window.end, busy_intervals)

        return classify(
            free_slots,
            window,
            peak_window,
            weekend=weekend,
            day_label=label,
        )
