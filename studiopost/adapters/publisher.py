"""
Publishing posts to Google Business Profile, directly or via a webhook relay.

HTTP failures never raise: a failed attempt is retried once after a delay
and the outcome is reported as a PostResult for the caller to act on.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

import requests
from rich.console import Console
from rich.markup import escape

console = Console()


@dataclass(frozen=True)
class PostResult:
    """Outcome of a publish call."""
    success: bool
    retried: bool
    error: str | None = None


@dataclass(frozen=True)
class LocalPost:
    """A post for one business location."""
    account_id: str  # "accounts/<number>"
    location_id: str  # "locations/<number>"
    text: str
    booking_url: str
    language_code: str = "ja"

    def to_payload(self) -> Dict[str, Any]:
        """Request body of a standard post with a booking button."""
        return {
            "languageCode": self.language_code,
            "summary": self.text,
            "callToAction": {
                "actionType": "BOOK",
                "url": self.booking_url,
            },
            "topicType": "STANDARD",
        }


class _RetryingPublisher(ABC):
    """Shared one-retry loop; subclasses supply the request."""

    def __init__(
        self,
        retry_delay_seconds: float = 10.0,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.retry_delay_seconds = retry_delay_seconds
        self.session = session or requests.Session()
        self._sleep = sleep

    def publish(self, post: LocalPost) -> PostResult:
        """
        Publish a post, retrying once on failure.

        Returns:
            PostResult with success flag, whether a retry happened and the
            last error
        """
        ok, error = self._attempt(post)
        if ok:
            return PostResult(success=True, retried=False)

        # Covers rate limiting (429) and transient 5xx responses
        console.print(
            f"[yellow]Publish failed ({escape(error or '')}). "
            f"Retrying in {self.retry_delay_seconds:g}s...[/yellow]"
        )
        self._sleep(self.retry_delay_seconds)

        ok, error = self._attempt(post)
        if ok:
            return PostResult(success=True, retried=True)

        return PostResult(success=False, retried=True, error=error)

    def _attempt(self, post: LocalPost) -> Tuple[bool, str]:
        url, headers, body = self._build_request(post)

        try:
            response = self.session.post(url, headers=headers, json=body, timeout=30)
        except requests.exceptions.RequestException as e:
            return False, f"Request failed: {e}"

        if response.ok:
            return True, ""

        return False, f"HTTP {response.status_code}: {response.text or '(empty response body)'}"

    @abstractmethod
    def _build_request(self, post: LocalPost) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        """Return the URL, headers and JSON body for one attempt."""


class GbpPublisher(_RetryingPublisher):
    """
    Posts to the Business Profile v4 ``localPosts`` endpoint.

    Business information v1 has no localPosts resource, so this goes to the
    v4 API directly with a bearer token.
    """

    GBP_API_ENDPOINT = "https://mybusiness.googleapis.com/v4"

    def __init__(
        self,
        access_token: str = "",
        token_provider: Callable[[], str] | None = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.access_token = access_token
        self.token_provider = token_provider

    def _build_request(self, post: LocalPost):
        # AuthenticationError from the provider propagates to the caller
        token = self.token_provider() if self.token_provider else self.access_token
        url = f"{self.GBP_API_ENDPOINT}/{post.account_id}/{post.location_id}/localPosts"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        return url, headers, post.to_payload()


class WebhookPublisher(_RetryingPublisher):
    """
    Hands the post to an automation webhook (e.g. Make.com) that owns the
    Business Profile connection.
    """

    def __init__(self, webhook_url: str, **kwargs):
        super().__init__(**kwargs)
        self.webhook_url = webhook_url

    def _build_request(self, post: LocalPost):
        body = {
            "accountId": post.account_id,
            "locationId": post.location_id,
            **post.to_payload(),
        }
        return self.webhook_url, {"Content-Type": "application/json"}, body
