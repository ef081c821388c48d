"""
Slack incoming-webhook notifications for failed posts.
"""

import pendulum
import requests
from rich.console import Console

console = Console()


class SlackNotifier:
    """
    Sends a message to Slack when a studio's post failed.

    Successful runs stay silent. Without a webhook URL (local runs) the
    notification is skipped.
    """

    def __init__(self, webhook_url: str = "", session: requests.Session | None = None):
        self.webhook_url = webhook_url
        self.session = session or requests.Session()

    @staticmethod
    def format_failure(
        studio_name: str,
        error: str | None,
        retried: bool,
        day: str
    ) -> str:
        """
        Message text, e.g.:

        ❌ [Studio Beat 24h] GBP 投稿失敗
        日付: 2026-02-25
        エラー: HTTP 403: ...
        リトライ: 実施済み（失敗）
        """
        lines = [
            f"❌ [{studio_name}] GBP 投稿失敗",
            f"日付: {day}",
            f"エラー: {error or '不明なエラー'}",
        ]
        if retried:
            lines.append("リトライ: 実施済み（失敗）")
        return "\n".join(lines)

    def notify(
        self,
        studio_name: str,
        success: bool,
        retried: bool = False,
        error: str | None = None,
        timezone: str = "Asia/Tokyo"
    ) -> bool:
        """
        Notify about a publish outcome.

        Returns:
            True if a message was sent

        Raises:
            requests.exceptions.RequestException: If the webhook call fails
        """
        if success:
            return False

        if not self.webhook_url:
            console.print("[dim]\\[Slack] SLACK_WEBHOOK_URL is not set, skipping notification[/dim]")
            return False

        day = pendulum.now(timezone).format("YYYY-MM-DD")
        text = self.format_failure(studio_name, error, retried, day)

        response = self.session.post(self.webhook_url, json={"text": text}, timeout=10)
        response.raise_for_status()
        return True
