"""
Smoke tests for the CLI (mock calendar, stubbed Google and Slack).
"""

import json

from typer.testing import CliRunner

from studiopost.adapters.google_auth import GoogleAuthenticator
from studiopost.adapters.slack_notifier import SlackNotifier
from studiopost.cli.app import app
from studiopost.domain.exceptions import AuthenticationError

runner = CliRunner()


def write_files(tmp_path):
    data_file = tmp_path / "events.json"
    data_file.write_text(json.dumps([
        {"calendarId": "beat-cal", "summary": "予約", "start": "09:00", "end": "11:00"},
    ]), encoding="utf-8")

    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "mock_calendar_file: " + str(data_file) + "\n"
        "studios:\n"
        "  - id: beat\n"
        "    name: Beat\n"
        "    calendar_id: beat-cal\n"
        "    area: 天満橋\n",
        encoding="utf-8",
    )
    return config_file


def test_list_studios(tmp_path):
    result = runner.invoke(app, ["list-studios", "--config", str(write_files(tmp_path))])

    assert result.exit_code == 0
    assert "beat" in result.output


def test_check_mock(tmp_path):
    result = runner.invoke(app, ["check", "--mock", "--config", str(write_files(tmp_path))])

    assert result.exit_code == 0
    assert "Availability today" in result.output
    assert "Beat" in result.output


def test_post_dry_run_mock(tmp_path):
    result = runner.invoke(
        app, ["post", "--mock", "--dry-run", "--seed", "1", "--config", str(write_files(tmp_path))]
    )

    assert result.exit_code == 0
    assert "CASE A" in result.output
    assert "1 studio(s) processed" in result.output


def test_unknown_studio_fails(tmp_path):
    result = runner.invoke(
        app, ["post", "nope", "--mock", "--dry-run", "--config", str(write_files(tmp_path))]
    )

    assert result.exit_code == 1
    assert "Unknown studio" in result.output


def test_missing_config(tmp_path):
    result = runner.invoke(app, ["check", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


def test_token_refresh_failure_is_notified(tmp_path, monkeypatch):
    config_file = write_files(tmp_path)
    monkeypatch.chdir(tmp_path)
    for name, value in {
        "GOOGLE_CLIENT_ID": "id",
        "GOOGLE_CLIENT_SECRET": "secret",
        "GOOGLE_REFRESH_TOKEN": "revoked",
        "MAKE_WEBHOOK_URL": "https://hook.example.com",
        "SLACK_WEBHOOK_URL": "https://hooks.slack.com/x",
    }.items():
        monkeypatch.setenv(name, value)

    def revoked(self, force_refresh=False):
        raise AuthenticationError("Authentication failed: invalid_grant")

    notified = []

    def record(self, studio_name, success, retried=False, error=None, timezone="Asia/Tokyo"):
        notified.append((studio_name, error))
        return True

    monkeypatch.setattr(GoogleAuthenticator, "get_access_token", revoked)
    monkeypatch.setattr(SlackNotifier, "notify", record)

    result = runner.invoke(app, ["post", "--config", str(config_file)])

    assert result.exit_code == 1
    assert notified == [("Beat", "Authentication failed: invalid_grant")]


def test_analyze_saves_report(tmp_path):
    report = tmp_path / "output" / "analysis.txt"

    result = runner.invoke(
        app, ["analyze", "--mock", "--days", "30", "--output", str(report),
              "--config", str(write_files(tmp_path))]
    )

    assert result.exit_code == 0
    text = report.read_text(encoding="utf-8")
    assert "Beat — 予約時間帯分析" in text
    assert "取得件数:" in text
