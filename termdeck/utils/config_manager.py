"""Configuration management utilities."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..core.constants import CONFIG_FILE_NAME
from ..models.config import StoreConfig
from ..services.exceptions import ConfigError

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages the stored session store configuration."""

    def __init__(self, data_dir: Path):
        """Initialize config manager."""
        self.data_dir = data_dir
        self.config_file = data_dir / CONFIG_FILE_NAME

    def has_config(self) -> bool:
        return self.config_file.exists()

    def load_config(self) -> StoreConfig:
        """Load configuration, falling back to defaults when none is saved."""
        if not self.config_file.exists():
            return StoreConfig()
        try:
            data = json.loads(self.config_file.read_text())
            return StoreConfig.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration file {self.config_file}: {e}") from e

    def save_config(self, config: StoreConfig) -> None:
        """Save configuration to disk."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config.to_display_dict(), indent=2))
        logger.debug(f"Saved configuration to {self.config_file}")

    def update_config(self, **values) -> StoreConfig:
        """Validate and save new values on top of the current configuration."""
        current = self.load_config().to_display_dict()
        current.update(values)
        try:
            config = StoreConfig.model_validate(current)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e
        self.save_config(config)
        return config

    def reset_config(self) -> StoreConfig:
        config = StoreConfig()
        self.save_config(config)
        return config

    def resolve_config(self, overrides: Optional[Dict[str, Any]] = None) -> StoreConfig:
        """Stored configuration with one-off overrides applied (None values skipped)."""
        data = self.load_config().to_display_dict()
        data.update({k: v for k, v in (overrides or {}).items() if v is not None})
        try:
            return StoreConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e
