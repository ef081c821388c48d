"""
Domain layer - Pure business logic without external dependencies.
"""

from .classifier import AvailabilityCalculator, classify, is_weekend, peak_free_slots_for
from .models import (
    AvailabilityCase,
    AvailabilityResult,
    CalendarEvent,
    PeakHours,
    PeakWindow,
    TimeRange,
    day_window,
)
from .slot_calculator import compute_free_slots, merge_ranges, total_minutes

__all__ = [
    "AvailabilityCalculator",
    "AvailabilityCase",
    "AvailabilityResult",
    "CalendarEvent",
    "PeakHours",
    "PeakWindow",
    "TimeRange",
    "classify",
    "compute_free_slots",
    "day_window",
    "is_weekend",
    "merge_ranges",
    "peak_free_slots_for",
    "total_minutes",
]
