"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, CalendarClientProtocol, HistoryService
from .daily_post import DailyPostRunner, StudioRunResult

__all__ = [
    "AvailabilityService",
    "CalendarClientProtocol",
    "DailyPostRunner",
    "HistoryService",
    "StudioRunResult",
]
