"""
Mock calendar client for running without Google credentials.
"""

import json
from pathlib import Path
from typing import List

from pendulum import DateTime

from ..domain.exceptions import MalformedIntervalError
from ..domain.models import CalendarEvent, TimeRange, parse_local


class MockCalendarClient:
    """
    Mock client that serves events from a JSON file.

    File format: a list of objects with ``calendarId``, ``summary``,
    ``start`` and ``end``. Values are ISO strings, a bare date marks an
    all-day event and a bare "HH:MM" means that time on the requested day.
    """

    def __init__(self, data_file: Path | None = None):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file with events; defaults to mock_calendar_data.json
                next to this module
        """
        self.data_file = data_file or Path(__file__).parent / "mock_calendar_data.json"
        self._load_calendar_data()

    def _load_calendar_data(self):
        """Load mock calendar data from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                self.calendar_events = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            self.calendar_events = []

    def list_events(
        self,
        calendar_id: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "Asia/Tokyo",
        max_results: int = 2500
    ) -> List[CalendarEvent]:
        """
        Return events of ``calendar_id`` overlapping the time window, ordered by start.
        """
        events: List[CalendarEvent] = []

        for event in self.calendar_events:
            if event.get("calendarId") != calendar_id:
                continue

            try:
                event_start = self._resolve(event["start"], start_time, timezone)
                event_end = self._resolve(event["end"], start_time, timezone)
                time_range = TimeRange(start=event_start, end=event_end)
            except (KeyError, ValueError, MalformedIntervalError):
                # Skip invalid events
                continue

            # Check if event overlaps with requested time window
            if event_start < end_time and event_end > start_time:
                events.append(CalendarEvent(
                    summary=event.get("summary", ""),
                    time_range=time_range,
                    all_day=len(event["start"]) == 10,
                ))

        events.sort(key=lambda e: e.time_range.start)
        return events[:max_results]

    @staticmethod
    def _resolve(value: str, window_start: DateTime, timezone: str) -> DateTime:
        """Parse an ISO string; a bare "HH:MM" is taken on the window's local day."""
        if len(value) == 5 and value[2] == ":":
            day = window_start.in_timezone(timezone)
            return day.set(hour=int(value[:2]), minute=int(value[3:]), second=0, microsecond=0)
        return parse_local(value, timezone)
