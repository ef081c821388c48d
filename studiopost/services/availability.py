"""
Application services for computing a studio's availability.

The services coordinate fetching reservations via a calendar client adapter
and delegate the interval logic to the domain layer. This keeps the CLI thin
and allows the calendar dependency to be stubbed via a simple protocol.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..domain.classifier import DEFAULT_WEEKEND_DAYS, AvailabilityCalculator
from ..domain.history import (
    DEFAULT_EXCLUDED_KEYWORDS,
    HourlyBookingCounts,
    count_bookings_by_hour,
    filter_booking_events,
)
from ..domain.models import AvailabilityResult, CalendarEvent, PeakHours, TimeRange, day_window


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the services."""

    def list_events(
        self,
        calendar_id: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
        max_results: int = 2500,
    ) -> List[CalendarEvent]:
        """Return events overlapping the window, ordered by start."""


class AvailabilityService:
    """
    Orchestrates reservation retrieval and availability classification.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
        label_formatter: Callable[[DateTime], str] | None = None,
    ) -> None:
        self._calendar_client = calendar_client
        self._weekend_days = tuple(weekend_days)
        self._label_formatter = label_formatter

    def get_availability(
        self,
        *,
        calendar_id: str,
        timezone: str,
        peak_hours: PeakHours,
        now: DateTime | None = None,
    ) -> AvailabilityResult:
        """
        Compute today's availability in the studio's timezone.
        """
        window = day_window(now or pendulum.now(timezone), timezone)

        busy_intervals = self.fetch_busy_intervals(
            calendar_id=calendar_id,
            window=window,
            timezone=timezone,
        )

        return self.calculate(
            window=window,
            busy_intervals=busy_intervals,
            peak_hours=peak_hours,
        )

    def fetch_busy_intervals(
        self,
        *,
        calendar_id: str,
        window: TimeRange,
        timezone: str,
    ) -> List[TimeRange]:
        """Fetch the reservations of the day as busy intervals."""
        events = self._calendar_client.list_events(
            calendar_id=calendar_id,
            start_time=window.start,
            end_time=window.end,
            timezone=timezone,
        )
        return [event.time_range for event in events]

    def calculate(
        self,
        *,
        window: TimeRange,
        busy_intervals: Sequence[TimeRange],
        peak_hours: PeakHours,
    ) -> AvailabilityResult:
        """Classify the day from busy data."""
        calculator = AvailabilityCalculator(
            peak_hours=peak_hours,
            weekend_days=self._weekend_days,
            label_formatter=self._label_formatter,
        )
        return calculator.calculate(window, busy_intervals)


class HistoryService:
    """
    Aggregates past reservations into hour-of-day booking counts.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
        exclude_keywords: Sequence[str] = DEFAULT_EXCLUDED_KEYWORDS,
    ) -> None:
        self._calendar_client = calendar_client
        self._weekend_days = tuple(weekend_days)
        self._exclude_keywords = tuple(exclude_keywords)

    def fetch_bookings(
        self,
        *,
        calendar_id: str,
        timezone: str,
        days: int = 365,
        now: DateTime | None = None,
    ) -> List[CalendarEvent]:
        """Fetch timed bookings of the last ``days`` days."""
        end = now or pendulum.now(timezone)
        start = end.subtract(days=days)

        events = self._calendar_client.list_events(
            calendar_id=calendar_id,
            start_time=start,
            end_time=end,
            timezone=timezone,
        )
        return filter_booking_events(events, self._exclude_keywords)

    def count_by_hour(
        self,
        bookings: Sequence[CalendarEvent],
        *,
        timezone: str,
        since: DateTime | None = None,
    ) -> HourlyBookingCounts:
        """Count bookings per hour, optionally only those starting at or after ``since``."""
        if since is not None:
            bookings = filter_booking_events(bookings, (), since=since)

        return count_bookings_by_hour(bookings, timezone, self._weekend_days)
