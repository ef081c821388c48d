"""
Google Calendar API client for fetching a studio's reservations.
"""

from typing import Any, Callable, Dict, List
from urllib.parse import quote

import requests
from pendulum import DateTime
from rich.console import Console
from rich.markup import escape

from ..domain.exceptions import CalendarAPIError, MalformedIntervalError
from ..domain.models import CalendarEvent, TimeRange, parse_local

console = Console()


class GoogleCalendarClient:
    """
    Client for Google Calendar v3 event listings.

    Recurring events are expanded server-side (``singleEvents``) so every
    returned item is one concrete reservation.
    """

    CALENDAR_API_ENDPOINT = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str = "",
        session: requests.Session | None = None,
        token_provider: Callable[[], str] | None = None
    ):
        """
        Initialize the Calendar API client.

        Args:
            access_token: Valid Google OAuth access token
            session: Optional requests session (for tests)
            token_provider: Called for a token on every request instead of
                using ``access_token``; refresh failures surface per studio
        """
        self.access_token = access_token
        self.session = session or requests.Session()
        self.token_provider = token_provider

    @property
    def headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else self.access_token
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        }

    def list_events(
        self,
        calendar_id: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "Asia/Tokyo",
        max_results: int = 2500
    ) -> List[CalendarEvent]:
        """
        Get all events overlapping the time window, ordered by start.

        Args:
            calendar_id: Google calendar id
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone the events are resolved to
            max_results: Page size requested from the API

        Returns:
            List of CalendarEvent objects

        Raises:
            CalendarAPIError: If API call fails
            AuthenticationError: If the token provider cannot get a token
        """
        url = f"{self.CALENDAR_API_ENDPOINT}/calendars/{quote(calendar_id, safe='')}/events"
        params: Dict[str, Any] = {
            "timeMin": start_time.to_iso8601_string(),
            "timeMax": end_time.to_iso8601_string(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": max_results,
        }

        items: List[Dict[str, Any]] = []

        while True:
            try:
                response = self.session.get(
                    url,
                    headers=self.headers,
                    params=params,
                    timeout=30
                )
                response.raise_for_status()
                data = response.json()

            except (requests.exceptions.RequestException, ValueError) as e:
                raise CalendarAPIError(f"Failed to fetch events from Google Calendar: {e}") from e

            items.extend(data.get("items", []))

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        return self._parse_events(items, timezone)

    def _parse_events(self, items: List[Dict[str, Any]], timezone: str) -> List[CalendarEvent]:
        """
        Parse event resources into our domain model.

        Event format (timed and all-day):
        {
            "summary": "...",
            "start": {"dateTime": "2026-02-25T10:00:00+09:00"} | {"date": "2026-02-25"},
            "end": {"dateTime": "..."} | {"date": "2026-02-26"}
        }
        """
        events: List[CalendarEvent] = []

        for item in items:
            if item.get("status") == "cancelled":
                continue

            start_info = item.get("start") or {}
            end_info = item.get("end") or {}
            all_day = "dateTime" not in start_info

            try:
                start = parse_local(start_info.get("dateTime") or start_info["date"], timezone)
                end = parse_local(end_info.get("dateTime") or end_info["date"], timezone)
                time_range = TimeRange(start=start, end=end)

            except (KeyError, ValueError, MalformedIntervalError) as e:
                console.print(
                    f"[yellow]Warning: Could not parse calendar event "
                    f"'{escape(str(item.get('summary', item.get('id', '?'))))}': {escape(str(e))}[/yellow]"
                )
                continue

            events.append(CalendarEvent(
                summary=item.get("summary", ""),
                time_range=time_range,
                all_day=all_day,
            ))

        return events
