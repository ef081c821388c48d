"""
Human-readable rendering of day labels and free slots.
"""

from typing import Iterable

from pendulum import DateTime

from .domain.history import HourlyBookingCounts
from .domain.models import TimeRange

JA_WEEKDAYS = ["月", "火", "水", "木", "金", "土", "日"]  # Monday first

SLOT_STYLES = ("clock", "hour")


def format_day_label(day: DateTime, locale: str = "ja") -> str:
    """
    Format a calendar date for use in post text.

    ja: 2月25日(水)
    en: Wed, Feb 25
    """
    if locale == "ja":
        return f"{day.month}月{day.day}日({JA_WEEKDAYS[day.weekday()]})"
    return day.format("ddd, MMM D", locale=locale)


def format_slot(slot: TimeRange, timezone: str, style: str = "clock") -> str:
    """
    Format one slot in the studio timezone.

    clock: 17:00 - 21:00
    hour:  17時〜21時
    """
    start = slot.start.in_timezone(timezone)
    end = slot.end.in_timezone(timezone)

    if style == "hour":
        end_hour = 24 if end.date() > start.date() and end.hour == 0 else end.hour
        return f"{start.hour}時〜{end_hour}時"

    if end.date() > start.date() and end.format("HH:mm") == "00:00":
        return f"{start.format('HH:mm')} - 24:00"
    return f"{start.format('HH:mm')} - {end.format('HH:mm')}"


def slots_to_string(
    slots: Iterable[TimeRange],
    timezone: str,
    style: str = "clock",
    separator: str = "\n"
) -> str:
    """Format slots and join them with ``separator``."""
    return separator.join(format_slot(slot, timezone, style) for slot in slots)


def format_hourly_report(title: str, period: str, counts: HourlyBookingCounts, bar_width: int = 20) -> str:
    """
    Plain-text bar chart of bookings per hour, weekday next to weekend.

    Hours without any booking are left out.
    """
    peak = max(counts.weekday + counts.weekend + [1])
    rule = "═" * 64

    lines = [
        rule,
        f"  {title} — 予約時間帯分析",
        f"  期間: {period}",
        f"  取得件数: {counts.total_events} 件",
        rule,
        f"時間帯   {'平日'.ljust(28)}土日",
        "─" * 64,
    ]

    for hour in range(24):
        weekday, weekend = counts.weekday[hour], counts.weekend[hour]
        if weekday == 0 and weekend == 0:
            continue
        weekday_bar = "█" * round(weekday / peak * bar_width)
        weekend_bar = "█" * round(weekend / peak * bar_width)
        lines.append(
            f"{hour:02d}:00   {weekday_bar.ljust(bar_width)} {weekday:3d}件  "
            f"{weekend_bar.ljust(bar_width)} {weekend:3d}件"
        )

    if counts.total_events == 0:
        lines.append("  （予約データなし）")

    lines.append("─" * 64)
    return "\n".join(lines)
