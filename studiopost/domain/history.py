"""
Hour-of-day booking statistics over past reservations.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from pendulum import DateTime

from .classifier import DEFAULT_WEEKEND_DAYS, is_weekend
from .models import CalendarEvent

DEFAULT_EXCLUDED_KEYWORDS = ("見学", "予約不可")  # viewings, blocked slots


def _empty_counts() -> List[int]:
    return [0] * 24


@dataclass
class HourlyBookingCounts:
    """
    Number of bookings occupying each hour (0-23), split weekday/weekend.
    """
    weekday: List[int] = field(default_factory=_empty_counts)
    weekend: List[int] = field(default_factory=_empty_counts)
    total_events: int = 0

    def busiest_hours(self, weekend: bool, top: int = 3) -> List[int]:
        """Return the hours with the highest counts, busiest first."""
        counts = self.weekend if weekend else self.weekday
        ranked = sorted(
            (h for h in range(24) if counts[h] > 0),
            key=lambda h: (-counts[h], h)
        )
        return ranked[:top]


def filter_booking_events(
    events: Iterable[CalendarEvent],
    exclude_keywords: Sequence[str] = DEFAULT_EXCLUDED_KEYWORDS,
    since: DateTime | None = None
) -> List[CalendarEvent]:
    """
    Keep timed reservations only.

    All-day entries and titles containing an excluded keyword are dropped,
    as are events starting before ``since``.
    """
    kept: List[CalendarEvent] = []

    for event in events:
        if event.all_day:
            continue
        if any(keyword in event.summary for keyword in exclude_keywords):
            continue
        if since is not None and event.time_range.start < since:
            continue
        kept.append(event)

    return kept


def count_bookings_by_hour(
    events: Iterable[CalendarEvent],
    timezone: str,
    weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS
) -> HourlyBookingCounts:
    """
    Count bookings per local hour.

    A booking from 10:00 to 12:00 counts for hours 10 and 11; one ending at
    12:30 also counts for hour 12.
    """
    weekend_days = tuple(weekend_days)
    counts = HourlyBookingCounts()

    for event in events:
        start = event.time_range.start.in_timezone(timezone)
        end = event.time_range.end.in_timezone(timezone)
        bucket = counts.weekend if is_weekend(start, weekend_days) else counts.weekday

        end_hour = end.hour
        if end.date() > start.date():
            end_hour = 24
        elif end.minute > 0:
            end_hour += 1

        for hour in range(start.hour, min(end_hour, 24)):
            bucket[hour] += 1

        counts.total_events += 1

    return counts
