"""
Adapters layer - External integrations (Google APIs, Slack).
"""

from .google_auth import GoogleAuthenticator
from .google_calendar import GoogleCalendarClient
from .mock_calendar_client import MockCalendarClient
from .publisher import GbpPublisher, LocalPost, PostResult, WebhookPublisher
from .slack_notifier import SlackNotifier

__all__ = [
    "GoogleAuthenticator",
    "GoogleCalendarClient",
    "MockCalendarClient",
    "GbpPublisher",
    "LocalPost",
    "PostResult",
    "WebhookPublisher",
    "SlackNotifier",
]
