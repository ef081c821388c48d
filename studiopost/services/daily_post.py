"""
The daily job: for each studio, classify today, write a post, publish it,
and report failures to Slack.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence

import requests
from pendulum import DateTime
from rich.console import Console
from rich.markup import escape

from ..adapters.publisher import LocalPost, PostResult
from ..adapters.slack_notifier import SlackNotifier
from ..config import AppConfig, StudioConfig
from ..domain.exceptions import StudioPostError
from ..domain.models import AvailabilityCase, AvailabilityResult
from ..generator import PostGenerator, StudioGeneratorConfig
from .availability import AvailabilityService

console = Console()


class PublisherProtocol(Protocol):
    """Anything that can publish a LocalPost."""

    def publish(self, post: LocalPost) -> PostResult:
        """Publish and report the outcome."""


@dataclass
class StudioRunResult:
    """Outcome of the daily job for one studio."""
    studio_id: str
    studio_name: str
    case: AvailabilityCase | None = None
    post_text: str = ""
    published: bool = False
    retried: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class DailyPostRunner:
    """
    Runs the daily job over all studios, one after another.

    A failure in one studio is reported and does not stop the others.
    """

    def __init__(
        self,
        config: AppConfig,
        availability_service: AvailabilityService,
        generator: PostGenerator,
        publisher: PublisherProtocol | None,
        notifier: SlackNotifier,
    ) -> None:
        self._config = config
        self._availability_service = availability_service
        self._generator = generator
        self._publisher = publisher
        self._notifier = notifier

    def run(
        self,
        studios: Sequence[StudioConfig] | None = None,
        now: DateTime | None = None,
    ) -> List[StudioRunResult]:
        """
        Process the given studios (all configured ones by default).

        Without a publisher this is a dry run: posts are generated but not sent.
        """
        results: List[StudioRunResult] = []

        for studio in studios if studios is not None else self._config.studios:
            console.print(f"\n[bold]{escape(_tag(studio))}[/bold] 処理開始...")
            results.append(self.run_studio(studio, now=now))

        return results

    def run_studio(self, studio: StudioConfig, now: DateTime | None = None) -> StudioRunResult:
        """Run the job for a single studio."""
        result = StudioRunResult(studio_id=studio.id, studio_name=studio.name)

        try:
            availability = self._availability_service.get_availability(
                calendar_id=studio.calendar_id,
                timezone=studio.timezone,
                peak_hours=studio.peak_hours.to_domain(),
                now=now,
            )
            result.case = availability.case
            console.print(f"{escape(_tag(studio))} Availability case: CASE {availability.case.value}")

            result.post_text = self.generate_post(studio, availability)
            console.print(
                f"{escape(_tag(studio))} 投稿文 ({len(result.post_text)}文字):\n{escape(result.post_text)}"
            )

            if self._publisher is None:
                console.print(f"[yellow]{escape(_tag(studio))} Dry run, not publishing[/yellow]")
                return result

            outcome = self._publisher.publish(LocalPost(
                account_id=studio.account_id,
                location_id=studio.location_id,
                text=result.post_text,
                booking_url=studio.booking_url,
                language_code=self._config.post.language_code,
            ))
            result.published = outcome.success
            result.retried = outcome.retried
            result.error = outcome.error if not outcome.success else None

        except (StudioPostError, requests.exceptions.RequestException, ValueError) as e:
            result.error = str(e)

        if result.failed:
            console.print(f"[red]{escape(_tag(studio))} 投稿失敗: {escape(result.error)}[/red]")
            self._notify_failure(studio, result)
        elif result.published:
            suffix = "（リトライ後）" if result.retried else ""
            console.print(f"[green]{escape(_tag(studio))} 投稿成功{suffix}[/green]")

        return result

    def generate_post(self, studio: StudioConfig, availability: AvailabilityResult) -> str:
        return self._generator.generate(
            availability,
            StudioGeneratorConfig(
                name=studio.name,
                timezone=studio.timezone,
                peak_hours=studio.peak_hours.to_domain(),
                area=studio.area,
            ),
        )

    def _notify_failure(self, studio: StudioConfig, result: StudioRunResult) -> None:
        # A broken Slack webhook must not hide the original failure
        try:
            self._notifier.notify(
                studio_name=studio.name,
                success=False,
                retried=result.retried,
                error=result.error,
                timezone=studio.timezone,
            )
        except requests.exceptions.RequestException as e:
            console.print(f"[yellow]Warning: Slack notification failed: {e}[/yellow]")


def _tag(studio: StudioConfig) -> str:
    return f"[{studio.name}]"
