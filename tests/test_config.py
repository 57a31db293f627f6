"""
Tests for configuration loading.
"""

from pathlib import Path

import pendulum
import pytest
from pydantic import ValidationError

from clinicscheduler.config import EngineConfig, load_config


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self):
        """Test the built-in defaults match the fixed engine constants."""
        config = EngineConfig()

        assert config.slots.slot_minutes == 30
        assert config.slots.midday == "12:00"
        assert config.slots.recommendations_per_period == 3
        assert config.availability.horizon_days == 30
        assert config.grouping.unassigned_label == "Not specified"
        assert config.grouping.status_orders["appointments"] == ["scheduled", "completed", "cancelled", "no-show"]
        assert config.grouping.label_for("paid") == "Paid"

    def test_label_for_falls_back_to_key(self):
        """Test unknown status keys are shown as-is."""
        grouping = EngineConfig().grouping

        assert grouping.label_for("no-show") == "No-show"
        assert grouping.label_for("mystery") == "mystery"

    def test_load_from_yaml(self, tmp_path: Path):
        """Test values from a YAML file override defaults."""
        config_path = tmp_path / "clinicscheduler.yaml"
        config_path.write_text(
            "slots:\n"
            "  recommendations_per_period: 2\n"
            "availability:\n"
            "  horizon_days: 14\n",
            encoding="utf-8",
        )

        config = EngineConfig.load_from_yaml(config_path)

        assert config.slots.recommendations_per_period == 2
        assert config.slots.slot_minutes == 30
        assert config.availability.horizon_days == 14

    def test_empty_yaml_gives_defaults(self, tmp_path: Path):
        config_path = tmp_path / "clinicscheduler.yaml"
        config_path.write_text("", encoding="utf-8")

        assert EngineConfig.load_from_yaml(config_path) == EngineConfig()

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_load_config_with_explicit_missing_path_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_non_mapping_root_raises(self, tmp_path: Path):
        config_path = tmp_path / "clinicscheduler.yaml"
        config_path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping at the root"):
            EngineConfig.load_from_yaml(config_path)

    def test_invalid_yaml_raises(self, tmp_path: Path):
        config_path = tmp_path / "clinicscheduler.yaml"
        config_path.write_text("slots: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            EngineConfig.load_from_yaml(config_path)

    @pytest.mark.parametrize(
        "data",
        [
            {"slots": {"slot_minutes": 0}},
            {"slots": {"midday": "noon"}},
            {"availability": {"horizon_days": -1}},
            {"grouping": {"unassigned_label": "  "}},
            {"grouping": {"status_orders": {"payments": ["paid", "paid"]}}},
        ],
    )
    def test_invalid_values_raise(self, data):
        with pytest.raises(ValidationError):
            EngineConfig(**data)

    def test_builders_use_configured_values(self, doctor):
        """Test the component builders carry the configured settings."""
        config = EngineConfig(
            slots={"recommendations_per_period": 1},
            availability={"horizon_days": 3},
            grouping={"unassigned_label": "Unknown"},
        )
        monday = pendulum.date(2024, 11, 25)

        recommended = config.build_recommender().recommend(doctor, monday, 30, [])

        assert [slot.time for slot in recommended] == ["09:00", "12:00"]
        assert config.build_scanner().horizon_days == 3
        assert config.build_grouping_engine().unassigned_label == "Unknown"
