"""Configuration for Task Timer, stored as YAML and checked with jsonschema."""

import copy
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import Draft7Validator  # type: ignore[import-untyped]

DEFAULT_CONFIG_PATH = Path.home() / ".task-timer" / "config.yml"

DEFAULTS: dict[str, Any] = {
    "general": {"data_dir": "~/.task-timer/data"},
    "tracker": {"tick_interval": 1.0, "max_task_id_length": 64},
    "notifications": {"enabled": False, "backend": "auto"},
    "display": {"show_seconds": True},
    "advanced": {"log_level": "WARNING", "log_file": None},
    "api": {
        "host": "localhost",
        "port": 8000,
        "cors": {
            "enabled": True,
            "origins": ["http://localhost:3000", "http://localhost:5173"],
        },
        "advanced": {"log_level": "info", "access_log": True},
    },
}


def _section(properties: dict[str, Any]) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "additionalProperties": False}


# Tracker bounds mirror what TimeTracker and validate_task_id accept
SCHEMA = _section(
    {
        "general": _section({"data_dir": {"type": "string", "minLength": 1}}),
        "tracker": _section(
            {
                "tick_interval": {"type": "number", "exclusiveMinimum": 0, "maximum": 60},
                "max_task_id_length": {"type": "integer", "minimum": 1, "maximum": 1024},
            }
        ),
        "notifications": _section(
            {"enabled": {"type": "boolean"}, "backend": {"enum": ["auto", "plyer"]}}
        ),
        "display": _section({"show_seconds": {"type": "boolean"}}),
        "advanced": _section(
            {
                "log_level": {"enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
                "log_file": {"type": ["string", "null"]},
            }
        ),
        "api": _section(
            {
                "host": {"type": "string"},
                "port": {"type": "integer", "minimum": 1, "maximum": 65535},
                "cors": _section(
                    {
                        "enabled": {"type": "boolean"},
                        "origins": {"type": "array", "items": {"type": "string"}},
                    }
                ),
                "advanced": _section(
                    {
                        "log_level": {"enum": ["critical", "error", "warning", "info", "debug"]},
                        "access_log": {"type": "boolean"},
                    }
                ),
            }
        ),
    }
)


def _overlay(base: dict[str, Any], override: dict[str, Any]) -> None:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _overlay(base[key], value)
        else:
            base[key] = value


def _leaves(tree: dict[str, Any], prefix: str = "") -> Iterator[str]:
    for key, value in tree.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _leaves(value, f"{path}.")
        else:
            yield path


class ConfigManager:
    """Settings file with dot-notation access.

    Missing keys fall back to ``DEFAULTS``. Every change is validated before
    it is written, and an invalid file on disk is moved aside.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Load the config file, creating it with defaults if missing.

        Raises:
            ValueError: If the file on disk was invalid. It is renamed to
                ``config.yml.backup`` and defaults are written in its place.
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._config = copy.deepcopy(DEFAULTS)

        if not self.config_path.exists():
            self.save()
            return

        with open(self.config_path, encoding="utf-8") as f:
            _overlay(self._config, yaml.safe_load(f) or {})
        try:
            self.validate()
        except ValueError as e:
            backup_path = self.config_path.with_suffix(".yml.backup")
            self.config_path.replace(backup_path)
            self.reset()
            raise ValueError(f"{e}. Backed up to {backup_path} and restored defaults")

    def get(self, key: str, default: Any = None) -> Any:
        """Value at a dotted key such as ``tracker.tick_interval``, or default."""
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key and save.

        Raises:
            ValueError: If the result fails validation; nothing is changed
        """
        candidate = copy.deepcopy(self._config)
        *parents, leaf = key.split(".")
        node = candidate
        for part in parents:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ValueError(f"Invalid configuration: '{part}' is not a section")
        node[leaf] = value

        self._check(candidate)
        self._config = candidate
        self.save()

    def validate(self) -> bool:
        """Check the loaded settings.

        Raises:
            ValueError: On the first schema violation
        """
        self._check(self._config)
        return True

    def _check(self, config: dict[str, Any]) -> None:
        error = next(iter(Draft7Validator(SCHEMA).iter_errors(config)), None)
        if error is not None:
            where = ".".join(str(p) for p in error.absolute_path) or "config"
            raise ValueError(f"Invalid configuration at {where}: {error.message}")

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)

    def reset(self) -> None:
        self._config = copy.deepcopy(DEFAULTS)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def get_all_keys(self) -> list[str]:
        """Every leaf setting in dot notation."""
        return list(_leaves(self._config))

    @property
    def data_dir(self) -> Path:
        """Configured data directory with ~ expanded."""
        return Path(self.get("general.data_dir", DEFAULTS["general"]["data_dir"])).expanduser()

    def tracker_options(self) -> dict[str, Any]:
        """Keyword arguments for TimeTracker taken from the tracker section."""
        return {
            "tick_interval": float(self.get("tracker.tick_interval", 1.0)),
            "max_task_id_length": int(self.get("tracker.max_task_id_length", 64)),
        }
