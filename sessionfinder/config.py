"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidAvailabilityError
from .domain.models import CampaignWindow
from .domain.time_primitives import format_time, validate_date, validate_time


class CampaignConfig(BaseModel):
    """Campaign date range, daily window and session length."""
    start_date: str
    end_date: str
    earliest_time: str = "18:00"
    latest_time: str = "23:00"
    session_length_minutes: int = 180

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def validate_dates(cls, value: Any) -> str:
        """Accept YYYY-MM-DD strings or YAML dates."""
        if isinstance(value, date):
            value = value.isoformat()
        try:
            return validate_date(value)
        except InvalidAvailabilityError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("earliest_time", "latest_time", mode="before")
    @classmethod
    def validate_times(cls, value: Any) -> str:
        """Accept HH:MM strings; unquoted YAML times arrive as base-60 integers."""
        try:
            if isinstance(value, int) and not isinstance(value, bool):
                value = format_time(value)
            return validate_time(value, allow_end_of_day=True)
        except InvalidAvailabilityError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("session_length_minutes")
    @classmethod
    def validate_session_length(cls, value: int) -> int:
        """Ensure session length is positive."""
        if value <= 0:
            raise ValueError("session_length_minutes must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_window(self) -> "CampaignConfig":
        """Ensure the dates and daily window form a usable campaign window."""
        try:
            self.to_window()
        except InvalidAvailabilityError as exc:
            raise ValueError(str(exc)) from exc
        return self

    def to_window(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> CampaignWindow:
        """Build the engine window, optionally overriding the dates."""
        return CampaignWindow(
            start_date=start_date or self.start_date,
            end_date=end_date or self.end_date,
            earliest_time=self.earliest_time,
            latest_time=self.latest_time,
        )


class TranslatorConfig(BaseModel):
    """Endpoint of the external text-to-pattern translator."""
    url: str
    api_key: Optional[str] = None
    timeout_seconds: int = 30

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    campaign: CampaignConfig
    participants_file: Path = Path("participants.yaml")
    timezone: str = "Europe/Berlin"  # Display only; rows are already normalized
    translator: Optional[TranslatorConfig] = None
    config_dir: Path = Field(default_factory=Path.cwd, exclude=True)

    def get_participants_path(self) -> Path:
        """Resolve the participants file relative to the config file."""
        if self.participants_file.is_absolute():
            return self.participants_file
        return self.config_dir / self.participants_file

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

        data["config_dir"] = config_path.resolve().parent
        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
