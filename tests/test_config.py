"""Tests for configuration manager."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]
import yaml  # type: ignore[import-untyped]

from task_timer.core.config import ConfigManager


@pytest.fixture
def temp_config_path():
    """Create a temporary config file path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "config.yml"


class TestConfigManager:
    """Test ConfigManager."""

    def test_initialization_creates_default_config(self, temp_config_path: Path) -> None:
        """Test that initialization creates default configuration."""
        assert not temp_config_path.exists()

        config = ConfigManager(temp_config_path)

        assert temp_config_path.exists()
        assert config.get("general.data_dir") == "~/.task-timer/data"
        assert config.get("tracker.tick_interval") == 1.0
        assert config.get("notifications.enabled") is False

    def test_merge_with_defaults(self, temp_config_path: Path) -> None:
        """Test that partial config is merged with defaults."""
        config_data = {
            "tracker": {"tick_interval": 0.5},
        }
        with open(temp_config_path, "w") as f:
            yaml.dump(config_data, f)

        config = ConfigManager(temp_config_path)

        assert config.get("tracker.tick_interval") == 0.5
        assert config.get("tracker.max_task_id_length") == 64
        assert config.get("api.port") == 8000

    def test_get_with_default(self, temp_config_path: Path) -> None:
        """Test missing keys fall back to the given default."""
        config = ConfigManager(temp_config_path)

        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"
        assert config.get("tracker.tick_interval.deeper", 5) == 5

    def test_set_persists_value(self, temp_config_path: Path) -> None:
        """Test setting a value writes it to disk."""
        config = ConfigManager(temp_config_path)
        config.set("display.show_seconds", False)

        reloaded = ConfigManager(temp_config_path)
        assert reloaded.get("display.show_seconds") is False

    def test_set_invalid_value_rolls_back(self, temp_config_path: Path) -> None:
        """Test an invalid value is rejected and the old value kept."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("tracker.tick_interval", 0)

        assert config.get("tracker.tick_interval") == 1.0
        assert ConfigManager(temp_config_path).get("tracker.tick_interval") == 1.0

    def test_invalid_file_is_backed_up(self, temp_config_path: Path) -> None:
        """Test a broken config file is moved aside and defaults written."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"api": {"port": 70000}}, f)

        with pytest.raises(ValueError, match="Backed up"):
            ConfigManager(temp_config_path)

        assert temp_config_path.with_suffix(".yml.backup").exists()
        assert ConfigManager(temp_config_path).get("api.port") == 8000

    def test_reset(self, temp_config_path: Path) -> None:
        """Test reset restores defaults."""
        config = ConfigManager(temp_config_path)
        config.set("api.port", 9000)
        config.reset()

        assert config.get("api.port") == 8000

    def test_get_all_keys(self, temp_config_path: Path) -> None:
        """Test flattening keys to dot notation."""
        keys = ConfigManager(temp_config_path).get_all_keys()

        assert "tracker.tick_interval" in keys
        assert "api.cors.origins" in keys
        assert "api.cors" not in keys

    def test_data_dir_expands_home(self, temp_config_path: Path) -> None:
        """Test the data directory property expands ~."""
        config = ConfigManager(temp_config_path)

        assert config.data_dir == Path.home() / ".task-timer" / "data"

    def test_to_dict_is_copy(self, temp_config_path: Path) -> None:
        """Test to_dict returns a detached copy."""
        config = ConfigManager(temp_config_path)
        data = config.to_dict()
        data["tracker"]["tick_interval"] = 30

        assert config.get("tracker.tick_interval") == 1.0

    def test_unknown_key_rejected(self, temp_config_path: Path) -> None:
        """Test typos in key names are not silently stored."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="tracker"):
            config.set("tracker.tick_intervall", 2)

        assert "tracker.tick_intervall" not in config.get_all_keys()

    def test_set_below_a_leaf_rejected(self, temp_config_path: Path) -> None:
        """Test a leaf value cannot be turned into a section."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="not a section"):
            config.set("api.port.number", 1)

    def test_tracker_options(self, temp_config_path: Path) -> None:
        """Test the tracker section maps onto TimeTracker arguments."""
        config = ConfigManager(temp_config_path)
        config.set("tracker.tick_interval", 2)

        assert config.tracker_options() == {"tick_interval": 2.0, "max_task_id_length": 64}
