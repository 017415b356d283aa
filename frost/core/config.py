"""Configuration management with environment variable integration and validation."""

import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml
from pydantic import ValidationError

from .types import FrostConfig
from .errors import ConfigurationError

ENV_PREFIX = "FROST_"
CONFIG_FILE_ENV = "FROST_CONFIG_FILE"


def load_env_overrides(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """Load environment variables with the given prefix and convert to appropriate types."""
    overrides = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            field_name = key[len(prefix) :].lower()
            overrides[field_name] = _convert_env_value(value)

    return overrides


def _convert_env_value(value: str) -> Any:
    """Convert string environment value to appropriate Python type."""
    if not value:
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if value.lower() in ("true", "yes", "on"):
        return True
    elif value.lower() in ("false", "no", "off"):
        return False

    return value


class ConfigManager:
    """Central configuration management."""

    def __init__(self) -> None:
        self._config: Optional[FrostConfig] = None

    def load_config(
        self, config_file: Optional[Path] = None, **overrides: Any
    ) -> FrostConfig:
        """Load configuration from file and environment with CLI overrides."""

        # Precedence, highest first:
        # 1. CLI overrides
        # 2. Environment variables
        # 3. Config file data
        # 4. Model defaults

        config_data: Dict[str, Any] = {}

        if config_file is None and os.environ.get(CONFIG_FILE_ENV):
            config_file = Path(os.environ[CONFIG_FILE_ENV])

        if config_file is not None:
            if not config_file.exists():
                raise ConfigurationError(f"Config file {config_file} does not exist")
            config_data.update(self._load_from_file(config_file))
            config_data["config_file"] = config_file

        config_data.update(load_env_overrides())

        config_data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            self._config = FrostConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        return self._config

    def get_config(self) -> FrostConfig:
        """Get current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def _load_from_file(self, config_file: Path) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if config_file.suffix.lower() not in (".yml", ".yaml"):
            raise ConfigurationError(
                f"Unsupported config file format: {config_file.suffix}"
            )
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_file} must contain a mapping"
            )
        return data


# Global config manager instance
_config_manager = ConfigManager()


def load_config(**kwargs) -> FrostConfig:
    """Load global configuration."""
    return _config_manager.load_config(**kwargs)


def get_config() -> FrostConfig:
    """Get current global configuration."""
    return _config_manager.get_config()
