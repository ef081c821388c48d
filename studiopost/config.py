"""
Configuration management using Pydantic and Pydantic Settings.
"""

import os
import re
from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import PeakHours, PeakWindow
from .formatting import format_day_label

_ENV_REFERENCE = re.compile(r"^\$\{(.+)\}$")

DEFAULT_FOOTER = (
    "24時間即時予約・キーボックスで非対面入室可能。\n"
    "スマホ用三脚や大型鏡、ヨガマットも無料で使えます。\n"
    "✅ ご予約は公式LINEから！"
)


class PeakRange(BaseModel):
    """Peak hour range [start, end)."""
    start: int
    end: int

    @field_validator("start", "end")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "PeakRange":
        """Ensure the configured window opens before it closes."""
        if self.end <= self.start:
            raise ValueError("end must be later than start")
        return self

    def to_window(self) -> PeakWindow:
        return PeakWindow(start_hour=self.start, end_hour=self.end)


class PeakHoursConfig(BaseModel):
    """Weekday and weekend peak hours."""
    weekday: PeakRange = Field(default_factory=lambda: PeakRange(start=17, end=21))
    weekend: PeakRange = Field(default_factory=lambda: PeakRange(start=13, end=17))

    def to_domain(self) -> PeakHours:
        return PeakHours(weekday=self.weekday.to_window(), weekend=self.weekend.to_window())


class StudioConfig(BaseModel):
    """One studio to post for."""
    id: str
    name: str
    calendar_id: str
    account_id: str = ""  # "accounts/<number>"
    location_id: str = ""  # "locations/<number>"
    booking_url: str = ""
    timezone: str = "Asia/Tokyo"
    area: str = ""
    peak_hours: PeakHoursConfig = Field(default_factory=PeakHoursConfig)

    @field_validator("calendar_id")
    @classmethod
    def expand_env_reference(cls, value: str) -> str:
        """Resolve "${VAR_NAME}" calendar ids from the environment."""
        match = _ENV_REFERENCE.match(value)
        if not match:
            return value
        resolved = os.environ.get(match.group(1))
        if not resolved:
            raise ValueError(f"Missing environment variable: {match.group(1)}")
        return resolved


class PostConfig(BaseModel):
    """Presentation settings for generated posts."""
    slot_format: Literal["clock", "hour"] = "clock"
    separator: str = "\n"
    max_off_peak_slots: int = 3
    locale: str = "ja"
    language_code: str = "ja"
    footer: str = DEFAULT_FOOTER

    @field_validator("max_off_peak_slots")
    @classmethod
    def validate_max_slots(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_off_peak_slots must be greater than zero")
        return value

    def label_for(self, day) -> str:
        """Day label in the configured locale."""
        return format_day_label(day, self.locale)


class AppConfig(BaseModel):
    """Application configuration."""
    studios: List[StudioConfig] = Field(default_factory=list)
    weekend_days: List[int] = Field(default_factory=lambda: [5, 6])  # Saturday, Sunday
    post: PostConfig = Field(default_factory=PostConfig)
    retry_delay_seconds: float = 10.0
    mock_calendar_file: Path | None = None

    @field_validator("weekend_days")
    @classmethod
    def validate_weekend_days(cls, value: List[int]) -> List[int]:
        """Ensure exactly two distinct weekdays in valid range."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"weekend_days must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        if len(deduped) != 2:
            raise ValueError(
                f"weekend_days must name exactly two distinct days, got {deduped}"
            )
        return deduped

    @field_validator("studios")
    @classmethod
    def validate_studios(cls, value: List[StudioConfig]) -> List[StudioConfig]:
        """Ensure studio ids are unique."""
        seen_ids: set[str] = set()
        for studio in value:
            key = studio.id.lower()
            if key in seen_ids:
                raise ValueError(f"Duplicate studio id detected: {studio.id}")
            seen_ids.add(key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_studio(self, identifier: str) -> StudioConfig | None:
        """Find a studio by id or name."""
        for studio in self.studios:
            if identifier.lower() in (studio.id.lower(), studio.name.lower()):
                return studio
        return None

    def select_studios(self, identifiers: List[str] | None) -> List[StudioConfig]:
        """
        Resolve studio identifiers, or return all studios when none are given.

        Raises:
            ValueError: If an identifier matches no studio
        """
        if not identifiers:
            return list(self.studios)

        selected: List[StudioConfig] = []
        unknown: List[str] = []
        for identifier in identifiers:
            studio = self.find_studio(identifier)
            if studio is None:
                unknown.append(identifier)
            elif studio not in selected:
                selected.append(studio)

        if unknown:
            raise ValueError(f"Unknown studio(s): {', '.join(sorted(set(unknown)))}")

        return selected


class Secrets(BaseSettings):
    """Credentials read from the environment or a local .env file."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    make_webhook_url: str = ""
    slack_webhook_url: str = ""

    @field_validator("*", mode="after")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return (v or "").strip()

    def missing_google_credentials(self) -> List[str]:
        """Names of unset variables needed for the calendar API."""
        required = {
            "GOOGLE_CLIENT_ID": self.google_client_id,
            "GOOGLE_CLIENT_SECRET": self.google_client_secret,
            "GOOGLE_REFRESH_TOKEN": self.google_refresh_token,
        }
        return [name for name, value in required.items() if not value]


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of studiopost/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
