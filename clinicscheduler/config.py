"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.availability import DEFAULT_HORIZON_DAYS, AvailabilityScanner
from .domain.exceptions import InvalidScheduleInputError
from .domain.grouping import STATUS_LABELS, STATUS_ORDERS, UNASSIGNED_LABEL, GroupingEngine
from .domain.slot_generator import SlotGenerator, SlotRecommender
from .domain.time_grid import SLOT_MINUTES, time_to_minutes

CONFIG_FILE_NAME = "clinicscheduler.yaml"


class SlotsConfig(BaseModel):
    """Slot grid and recommendation settings."""
    slot_minutes: int = SLOT_MINUTES
    midday: str = "12:00"
    recommendations_per_period: int = 3

    @field_validator("slot_minutes", "recommendations_per_period")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure counts and step sizes are positive."""
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value

    @field_validator("midday")
    @classmethod
    def validate_midday(cls, value: str) -> str:
        """Ensure midday is an HH:MM clock time."""
        try:
            time_to_minutes(value)
        except InvalidScheduleInputError as exc:
            raise ValueError(str(exc)) from exc
        return value


class AvailabilityConfig(BaseModel):
    """Settings for the forward availability search."""
    horizon_days: int = DEFAULT_HORIZON_DAYS

    @field_validator("horizon_days")
    @classmethod
    def validate_horizon(cls, value: int) -> int:
        """Ensure the search horizon is positive."""
        if value <= 0:
            raise ValueError("horizon_days must be greater than zero")
        return value


class GroupingConfig(BaseModel):
    """Grouping labels and status order presets."""
    unassigned_label: str = UNASSIGNED_LABEL
    status_orders: Dict[str, List[str]] = Field(default_factory=lambda: dict(STATUS_ORDERS))
    status_labels: Dict[str, str] = Field(default_factory=lambda: dict(STATUS_LABELS))

    @field_validator("unassigned_label")
    @classmethod
    def validate_label(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("unassigned_label must not be blank")
        return value

    @field_validator("status_orders")
    @classmethod
    def validate_status_orders(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        """Reject presets that list the same status twice."""
        for record_type, statuses in value.items():
            if len(set(statuses)) != len(statuses):
                raise ValueError(f"Duplicate status in order for '{record_type}'")
        return value

    def label_for(self, key: str) -> str:
        return self.status_labels.get(key, key)


class EngineConfig(BaseModel):
    """Application configuration."""
    slots: SlotsConfig = Field(default_factory=SlotsConfig)
    availability: AvailabilityConfig = Field(default_factory=AvailabilityConfig)
    grouping: GroupingConfig = Field(default_factory=GroupingConfig)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "EngineConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            EngineConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def build_slot_generator(self) -> SlotGenerator:
        return SlotGenerator(slot_minutes=self.slots.slot_minutes)

    def build_recommender(self) -> SlotRecommender:
        return SlotRecommender(
            slot_generator=self.build_slot_generator(),
            per_period=self.slots.recommendations_per_period,
            midday=self.slots.midday,
        )

    def build_scanner(self) -> AvailabilityScanner:
        return AvailabilityScanner(horizon_days=self.availability.horizon_days)

    def build_grouping_engine(self) -> GroupingEngine:
        return GroupingEngine(unassigned_label=self.grouping.unassigned_label)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for the config file in current directory
    config_path = Path.cwd() / CONFIG_FILE_NAME

    if not config_path.exists():
        # Try in the project root (parent of clinicscheduler/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / CONFIG_FILE_NAME

    return config_path


def load_config(config_path: Path | None = None) -> EngineConfig:
    """
    Load an explicit config file, or the default one if it exists.

    Without an explicit path and without a default file, built-in defaults apply.
    """
    if config_path is not None:
        return EngineConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if not default_path.exists():
        return EngineConfig()
    return EngineConfig.load_from_yaml(default_path)
