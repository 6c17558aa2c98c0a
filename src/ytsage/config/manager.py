"""Configuration manager for loading and saving ytsage config."""

from pathlib import Path
from typing import Any

import yaml

from ytsage.config.schema import GlobalConfig
from ytsage.utils.errors import InvalidConfigError
from ytsage.utils.paths import get_config_dir


class ConfigManager:
    """Manages the ytsage configuration file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to XDG config dir.
        """
        self.config_dir = config_dir if config_dir is not None else get_config_dir()
        self.config_file = self.config_dir / "config.yaml"

    def load_config(self) -> GlobalConfig:
        """Load and validate global configuration.

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If config is invalid
        """
        if not self.config_file.exists():
            config = GlobalConfig()
            self.save_config(config)
            return config

        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f) or {}
            return GlobalConfig(**data)
        except Exception as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

    def save_config(self, config: GlobalConfig) -> None:
        """Save global configuration.

        Args:
            config: GlobalConfig instance to save
        """
        data = config.model_dump(mode="json")

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def set_value(self, key: str, value: str) -> GlobalConfig:
        """Set a dotted configuration key (e.g. ``retry.max_attempts``).

        Args:
            key: Dotted path into the configuration
            value: New value as text; YAML scalars are parsed

        Returns:
            The updated, validated configuration

        Raises:
            InvalidConfigError: If the key is unknown or the value is invalid
        """
        config = self.load_config()
        data: dict[str, Any] = config.model_dump(mode="json")

        parts = key.split(".")
        target = data
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                raise InvalidConfigError(f"Unknown configuration key: {key}")
            target = target[part]

        if parts[-1] not in target:
            raise InvalidConfigError(f"Unknown configuration key: {key}")

        target[parts[-1]] = yaml.safe_load(value)

        try:
            updated = GlobalConfig(**data)
        except Exception as e:
            raise InvalidConfigError(f"Invalid value for {key}: {e}") from e

        self.save_config(updated)
        return updated
