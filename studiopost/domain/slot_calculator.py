"""
Core interval logic for turning a day's reservations into free slots.

Pure domain logic without any external dependencies (no API calls,
no database, no I/O).
"""

from typing import Iterable, List

from pendulum import DateTime

from .exceptions import MalformedIntervalError
from .models import TimeRange


def compute_free_slots(
    day_start: DateTime,
    day_end: DateTime,
    busy_intervals: Iterable[TimeRange]
) -> List[TimeRange]:
    """
    Subtract busy intervals from the day window, yielding free time ranges.

    Busy intervals may arrive in any order and may overlap, touch or nest.
    Anything reaching outside the day window is clipped to it.

    Example:
    Day: 00:00 - 24:00
    Busy: [10:00-20:00, 12:00-16:00]
    Result: [00:00-10:00, 20:00-24:00]

    Args:
        day_start: Start of the day window (inclusive)
        day_end: End of the day window (exclusive)
        busy_intervals: Reserved time ranges

    Returns:
        Sorted, non-touching free ranges, each with positive duration

    Raises:
        MalformedIntervalError: If day_start is not before day_end
    """
    if day_start >= day_end:
        raise MalformedIntervalError(
            f"Day start {day_start} must be before day end {day_end}"
        )

    free_ranges: List[TimeRange] = []
    cursor = day_start

    # Sort busy ranges by start time
    sorted_busy = sorted(busy_intervals, key=lambda r: r.start)

    for busy in sorted_busy:
        if cursor >= day_end:
            break

        gap_end = min(busy.start, day_end)

        # If there's free time before this busy period
        if cursor < gap_end:
            free_ranges.append(TimeRange(start=cursor, end=gap_end))

        # Overlapping and nested ranges never move the cursor backwards
        cursor = max(cursor, busy.end)

    # Add remaining free time after last busy period
    if cursor < day_end:
        free_ranges.append(TimeRange(start=cursor, end=day_end))

    return free_ranges


def merge_ranges(ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping or adjacent time ranges.

    Example: [09:00-10:00, 10:00-11:00] -> [09:00-11:00]
    """
    sorted_ranges = sorted(ranges, key=lambda r: r.start)
    if not sorted_ranges:
        return []

    merged: List[TimeRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        if current.start <= last.end:
            merged[-1] = TimeRange(
                start=last.start,
                end=max(last.end, current.end)
            )
        else:
            merged.append(current)

    return merged


def total_minutes(ranges: Iterable[TimeRange]) -> int:
    """Total duration of the given ranges in minutes."""
    return sum(r.duration_minutes() for r in ranges)
