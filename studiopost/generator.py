"""
Post text generation from an availability result.

Each case has a pool of templates; one is drawn per post so consecutive
daily posts do not repeat word for word. The random source is injected so
a fixed seed reproduces the same choice.
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .config import DEFAULT_FOOTER
from .domain.models import AvailabilityCase, AvailabilityResult, PeakHours
from .formatting import slots_to_string

DEFAULT_TEMPLATES: Dict[AvailabilityCase, List[str]] = {
    AvailabilityCase.A: [
        "【本日{peak_start}〜{peak_end}に空きあり】{label}、{area}の24時間営業・年中無休レンタルスタジオ {studio} に空きが出ました！お仕事帰りの個人練習や直前のダンス練習にすぐ対応可能です。",
        "【{label} {peak_start}台に空き】{area}の年中無休・24時間営業レンタルスタジオに本日ピーク時間帯の空きがあります。仕事・学校帰りにそのままスタジオへどうぞ。即時予約OK。",
        "【今日の{peak_start}〜空き情報】{label}の人気時間帯に空きが出ました。{area}から好アクセスの24時間営業・年中無休レンタルスタジオ。直前予約でもキーボックスですぐ入室できます。",
        "【{peak_start}〜{peak_end} 空き速報】{label}、{area} {studio} の人気時間帯に空きあり。24時間営業・年中無休なので急な予定にも対応。今すぐご予約ください。",
    ],
    AvailabilityCase.B: [
        "【本日穴場です】本日{label}は終日予約にゆとりがあります。{area}の24時間営業・年中無休のレンタルスタジオをたっぷり使いたい方に最適です。動画撮影、長時間のリハーサル、深夜の自主練など、周りを気にせず集中できる1日です。",
        "【{label} 終日空きあり】{area}で24時間営業・年中無休のレンタルスタジオをお探しの方へ。本日は1日を通じてご予約にゆとりがあります。長時間の撮影セッションや集中練習にぜひご活用ください。",
        "【本日は穴場日です】{label}、{studio}は終日空き状態です。{area}の24時間営業・年中無休スタジオで、のびのびと練習・撮影ができる絶好のチャンスです。深夜・早朝のご利用も大歓迎。",
        "【{label} 贅沢に使える1日】{area}の24時間営業・年中無休レンタルスタジオ、本日は終日ゆとりあり。周りを気にせず長時間練習したい方や、グループでのリハーサルにも最適です。",
    ],
    AvailabilityCase.C: [
        "【{label} 空き時間帯のご案内】{area}の24時間営業・年中無休レンタルスタジオ {studio} の本日空き情報です。キーボックスで非対面入室できます。",
        "【本日の空き状況】{label}、{area}の年中無休・24時間営業スタジオに空きがあります。練習・撮影・リハーサルなど用途に合わせてご利用ください。",
        "【{label} スタジオ空き情報】{area} {studio} の本日の空き時間帯をお知らせします。24時間営業・年中無休なので急な予定でもご安心ください。即時予約可能です。",
        "【本日ご利用いただける枠】{label}、{area}の24時間営業・年中無休レンタルスタジオで、個人練習からグループリハーサルまで対応しています。",
    ],
}


@dataclass
class StudioGeneratorConfig:
    """Per-studio values the templates need."""
    name: str
    timezone: str
    peak_hours: PeakHours
    area: str = ""


class PostGenerator:
    """
    Renders marketing copy for one availability result.
    """

    def __init__(
        self,
        templates: Dict[AvailabilityCase, Sequence[str]] | None = None,
        rng: random.Random | None = None,
        slot_format: str = "clock",
        separator: str = "\n",
        max_off_peak_slots: int = 3,
        footer: str = DEFAULT_FOOTER
    ):
        self.templates = templates or DEFAULT_TEMPLATES
        self.rng = rng or random.Random()
        self.slot_format = slot_format
        self.separator = separator
        self.max_off_peak_slots = max_off_peak_slots
        self.footer = footer

        missing = [case.value for case in AvailabilityCase if not self.templates.get(case)]
        if missing:
            raise ValueError(f"No templates configured for case(s): {', '.join(missing)}")

    def generate(self, availability: AvailabilityResult, studio: StudioGeneratorConfig) -> str:
        """
        Build the post text: a template body, the listed slots, then the footer.
        """
        peak = studio.peak_hours.select(availability.is_weekend)
        template = self.rng.choice(list(self.templates[availability.case]))

        body = template.format(
            label=availability.day_label,
            studio=studio.name,
            area=studio.area or studio.name,
            peak_start=f"{peak.start_hour}時",
            peak_end=f"{peak.end_hour}時",
        )

        slots_text = slots_to_string(
            self.slots_for(availability),
            studio.timezone,
            style=self.slot_format,
            separator=self.separator,
        )

        parts = [body]
        if slots_text:
            parts.append(f"空き枠:\n{slots_text}")
        if self.footer:
            parts.append(self.footer)

        return "\n\n".join(parts)

    def slots_for(self, availability: AvailabilityResult):
        """Slots listed in the post for the result's case."""
        if availability.case is AvailabilityCase.A:
            return list(availability.peak_free_slots)
        if availability.case is AvailabilityCase.C:
            return list(availability.free_slots[: self.max_off_peak_slots])
        return list(availability.free_slots)
