"""
Domain models for time ranges, peak windows and availability results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import pendulum
from pendulum import DateTime

from .exceptions import MalformedIntervalError


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range [start, end).

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise MalformedIntervalError(
                f"Start time {self.start} must be before end time {self.end}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (touching ends do not count)."""
        return self.start < other.end and self.end > other.start

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        start = max(self.start, other.start)
        end = min(self.end, other.end)

        return TimeRange(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"


def day_window(now: DateTime, timezone: str) -> TimeRange:
    """
    Return the local calendar day containing ``now`` in ``timezone``.

    The window runs from local midnight to the next local midnight, so a
    process running in UTC still gets the studio's own day.
    """
    local = now.in_timezone(timezone)
    start = local.start_of("day")
    return TimeRange(start=start, end=start.add(days=1))


@dataclass(frozen=True)
class PeakWindow:
    """
    High-demand hour range [start_hour, end_hour) within a day.
    """
    start_hour: int
    end_hour: int

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise MalformedIntervalError(
                f"Peak window must satisfy 0 <= start < end <= 24, "
                f"got {self.start_hour}-{self.end_hour}"
            )

    def bounds(self, day_start: DateTime) -> TimeRange:
        """Apply the hours to a local day start and return absolute bounds."""
        return TimeRange(
            start=_at_hour(day_start, self.start_hour),
            end=_at_hour(day_start, self.end_hour),
        )


def _at_hour(day_start: DateTime, hour: int) -> DateTime:
    # hour 24 is the following local midnight
    if hour == 24:
        return day_start.add(days=1)
    return day_start.set(hour=hour, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class PeakHours:
    """
    Weekday and weekend peak windows for one studio.
    """
    weekday: PeakWindow
    weekend: PeakWindow

    def select(self, is_weekend: bool) -> PeakWindow:
        """Pick the variant that applies to the day."""
        return self.weekend if is_weekend else self.weekday


class AvailabilityCase(str, Enum):
    """The three availability classifications of a day."""
    A = "A"  # peak window has free room
    B = "B"  # no reservations at all
    C = "C"  # only off-peak time is free (or nothing)


@dataclass(frozen=True)
class AvailabilityResult:
    """
    Outcome of one availability computation for one studio and day.
    """
    case: AvailabilityCase
    free_slots: Tuple[TimeRange, ...]
    peak_free_slots: Tuple[TimeRange, ...]
    is_weekend: bool
    day_label: str


@dataclass(frozen=True)
class CalendarEvent:
    """
    A reservation resolved from the calendar feed.
    """
    summary: str
    time_range: TimeRange
    all_day: bool = False


def parse_local(value: str, timezone: str) -> DateTime:
    """Parse an ISO string and express it in ``timezone``."""
    dt = pendulum.parse(value, tz=timezone)

    if isinstance(dt, DateTime):
        return dt.in_timezone(timezone)

    raise ValueError(f"Could not parse datetime: {value}")
