"""
Main CLI application using Typer.
"""

import random
from pathlib import Path
from typing import List, Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..adapters.google_auth import GoogleAuthenticator
from ..adapters.google_calendar import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..adapters.publisher import GbpPublisher, WebhookPublisher
from ..adapters.slack_notifier import SlackNotifier
from ..config import AppConfig, Secrets, get_default_config_path
from ..domain.exceptions import StudioPostError
from ..domain.slot_calculator import total_minutes
from ..formatting import format_hourly_report, slots_to_string
from ..generator import PostGenerator
from ..services.availability import AvailabilityService, HistoryService
from ..services.daily_post import DailyPostRunner

app = typer.Typer(
    name="studiopost",
    help="Post same-day studio availability to Google Business Profile",
    add_completion=False
)

console = Console()

DEFAULT_REDIRECT_URI = "http://localhost:3000/callback"


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_calendar_client(config: AppConfig, secrets: Secrets, mock: bool):
    """Return the calendar client and the authenticator used for it (None in mock mode)."""
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using calendar data from JSON[/yellow]\n")
        return MockCalendarClient(data_file=config.mock_calendar_file), None

    missing = secrets.missing_google_credentials()
    if missing:
        console.print(
            f"[bold red]Error:[/bold red] Missing required environment variables: {', '.join(missing)}"
        )
        raise typer.Exit(1)

    authenticator = GoogleAuthenticator(
        client_id=secrets.google_client_id,
        client_secret=secrets.google_client_secret,
        refresh_token=secrets.google_refresh_token,
    )
    # Tokens are fetched on first use, inside each studio's run
    return GoogleCalendarClient(token_provider=authenticator.get_access_token), authenticator


@app.command()
def post(
    studios: Annotated[Optional[List[str]], typer.Argument(help="Studio ids or names. Defaults to all studios.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Generate posts without publishing them.")] = False,
    mock: Annotated[bool, typer.Option("--mock", help="Use mock calendar data and skip authentication.")] = False,
    direct: Annotated[bool, typer.Option("--direct", help="Post to the Business Profile API instead of the webhook relay.")] = False,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Seed for template selection.")] = None,
):
    """
    Run the daily job: classify today, generate a post and publish it.

    Examples:

        studiopost post
        studiopost post studio-beat --dry-run
        studiopost post --mock --dry-run --seed 1
    """
    try:
        config = _load_config(config_file)
        secrets = Secrets()

        selected = config.select_studios(studios)
        calendar_client, authenticator = _build_calendar_client(config, secrets, mock)

        if dry_run:
            publisher = None
        elif direct:
            if authenticator is None:
                console.print("[bold red]Error:[/bold red] --direct cannot be combined with --mock")
                raise typer.Exit(1)
            publisher = GbpPublisher(
                token_provider=authenticator.get_access_token,
                retry_delay_seconds=config.retry_delay_seconds,
            )
        else:
            if not secrets.make_webhook_url:
                console.print(
                    "[bold red]Error:[/bold red] Missing required environment variable: MAKE_WEBHOOK_URL"
                )
                raise typer.Exit(1)
            publisher = WebhookPublisher(
                webhook_url=secrets.make_webhook_url,
                retry_delay_seconds=config.retry_delay_seconds,
            )

        runner = DailyPostRunner(
            config=config,
            availability_service=AvailabilityService(
                calendar_client,
                weekend_days=config.weekend_days,
                label_formatter=config.post.label_for,
            ),
            generator=PostGenerator(
                rng=random.Random(seed),
                slot_format=config.post.slot_format,
                separator=config.post.separator,
                max_off_peak_slots=config.post.max_off_peak_slots,
                footer=config.post.footer,
            ),
            publisher=publisher,
            notifier=SlackNotifier(webhook_url=secrets.slack_webhook_url),
        )

        results = runner.run(selected)

    except (FileNotFoundError, ValueError, StudioPostError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    failed = [r for r in results if r.failed]
    console.print()
    if failed:
        console.print(f"[bold red]✗ {len(failed)} of {len(results)} studio(s) failed[/bold red]")
        raise typer.Exit(1)

    console.print(f"[bold green]✓ {len(results)} studio(s) processed[/bold green]")


@app.command()
def check(
    studios: Annotated[Optional[List[str]], typer.Argument(help="Studio ids or names. Defaults to all studios.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use mock calendar data and skip authentication.")] = False,
):
    """
    Show today's availability per studio without posting anything.
    """
    try:
        config = _load_config(config_file)
        selected = config.select_studios(studios)
        calendar_client, _ = _build_calendar_client(config, Secrets(), mock)

        service = AvailabilityService(
            calendar_client,
            weekend_days=config.weekend_days,
            label_formatter=config.post.label_for,
        )

        table = Table(
            title="Availability today",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Studio", style="bold yellow")
        table.add_column("Day")
        table.add_column("Case", justify="center")
        table.add_column("Free slots")
        table.add_column("Peak free")
        table.add_column("Free (min)", justify="right")

        for studio in selected:
            result = service.get_availability(
                calendar_id=studio.calendar_id,
                timezone=studio.timezone,
                peak_hours=studio.peak_hours.to_domain(),
            )
            table.add_row(
                studio.name,
                result.day_label + (" (weekend)" if result.is_weekend else ""),
                result.case.value,
                slots_to_string(result.free_slots, studio.timezone) or "-",
                slots_to_string(result.peak_free_slots, studio.timezone) or "-",
                str(total_minutes(result.free_slots)),
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, StudioPostError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def analyze(
    studios: Annotated[Optional[List[str]], typer.Argument(help="Studio ids or names. Defaults to all studios.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    days: Annotated[int, typer.Option("--days", help="How many past days to analyze.")] = 365,
    since: Annotated[Optional[str], typer.Option("--since", help="Also analyze bookings from this date on (YYYY-MM-DD).")] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Also save the report as plain text to this file.")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use mock calendar data and skip authentication.")] = False,
):
    """
    Count past bookings per hour of day, weekday vs. weekend.
    """
    try:
        config = _load_config(config_file)
        selected = config.select_studios(studios)
        calendar_client, _ = _build_calendar_client(config, Secrets(), mock)
        service = HistoryService(calendar_client, weekend_days=config.weekend_days)
        report_blocks: List[str] = []

        for studio in selected:
            console.print(f"{escape('[' + studio.name + ']')} Fetching bookings...")
            bookings = service.fetch_bookings(
                calendar_id=studio.calendar_id,
                timezone=studio.timezone,
                days=days,
            )

            today = pendulum.now(studio.timezone)
            periods = [(f"last {days} days", None, today.subtract(days=days))]
            if since:
                try:
                    since_dt = pendulum.from_format(since, "YYYY-MM-DD", tz=studio.timezone)
                except ValueError as e:
                    console.print(f"[red]Could not parse --since: {e}[/red]")
                    raise typer.Exit(1)
                periods.append((f"since {since}", since_dt, since_dt))

            for title, cutoff, period_start in periods:
                counts = service.count_by_hour(bookings, timezone=studio.timezone, since=cutoff)
                report_blocks.append(format_hourly_report(
                    studio.name,
                    f"{period_start.to_date_string()} 〜 {today.to_date_string()}",
                    counts,
                ))

                table = Table(
                    title=f"{studio.name} - {title} ({counts.total_events} bookings)",
                    show_header=True,
                    header_style="bold cyan"
                )
                table.add_column("Hour", style="bold")
                table.add_column("Weekday", justify="right")
                table.add_column("Weekend", justify="right")

                for hour in range(24):
                    if counts.weekday[hour] == 0 and counts.weekend[hour] == 0:
                        continue
                    table.add_row(
                        f"{hour:02d}:00",
                        str(counts.weekday[hour]),
                        str(counts.weekend[hour]),
                    )

                console.print()
                if counts.total_events == 0:
                    console.print(f"[yellow]{table.title}: no bookings[/yellow]")
                else:
                    console.print(table)
                    console.print(
                        f"Busiest weekday hours: {counts.busiest_hours(weekend=False)}  "
                        f"weekend: {counts.busiest_hours(weekend=True)}"
                    )

        console.print()

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text("\n\n".join(report_blocks) + "\n", encoding="utf-8")
            console.print(f"[green]Report saved to {output}[/green]\n")

    except (FileNotFoundError, ValueError, StudioPostError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def auth(
    redirect_uri: Annotated[str, typer.Option("--redirect-uri", help="Redirect URI registered for the OAuth client.")] = DEFAULT_REDIRECT_URI,
):
    """
    Obtain a Google refresh token (run once, locally).
    """
    secrets = Secrets()
    if not secrets.google_client_id or not secrets.google_client_secret:
        console.print(
            "[bold red]Error:[/bold red] Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET in .env first."
        )
        raise typer.Exit(1)

    authenticator = GoogleAuthenticator(
        client_id=secrets.google_client_id,
        client_secret=secrets.google_client_secret,
    )

    console.print("\n[bold cyan]🔐 Google Authorization[/bold cyan]\n")
    console.print("1. Open this URL in a browser and grant access:")
    console.print(f"   [bold cyan]{authenticator.build_authorization_url(redirect_uri)}[/bold cyan]")
    console.print("2. Copy the [bold]code[/bold] parameter from the URL you are redirected to.\n")

    code = typer.prompt("→ Authorization code").strip()

    try:
        tokens = authenticator.exchange_code(code, redirect_uri)
    except StudioPostError as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}\n")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold]refresh_token:[/bold] {tokens['refresh_token']}\n\n"
        "Store it as GOOGLE_REFRESH_TOKEN in .env and in your CI secrets.",
        title="✓ Authorization successful"
    ))


@app.command()
def list_studios(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List all configured studios.
    """
    try:
        config = _load_config(config_file)

        if not config.studios:
            console.print("[yellow]No studios defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured studios",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Id", style="bold yellow")
        table.add_column("Name")
        table.add_column("Timezone", style="dim")
        table.add_column("Peak weekday", justify="center")
        table.add_column("Peak weekend", justify="center")

        for studio in config.studios:
            peak = studio.peak_hours
            table.add_row(
                studio.id,
                studio.name,
                studio.timezone,
                f"{peak.weekday.start}-{peak.weekday.end}",
                f"{peak.weekend.start}-{peak.weekend.end}",
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]studiopost[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
