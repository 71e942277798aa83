"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Optional, cast

import yaml
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_TIME_ZONE = "Europe/Oslo"
DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "10:00"
MAX_ICS_FILE_BYTES = 10 * 1024 * 1024  # 10MB upload limit


class CoparentSettings(BaseSettings):
    """Application settings with environment variable support."""

    _explicit_args: set = PrivateAttr(default_factory=set)

    # Event defaults
    default_time_zone: str = Field(
        default=DEFAULT_TIME_ZONE, description="Time zone for newly created events"
    )
    import_time_zone: str = Field(
        default="UTC", description="Time zone assigned to events imported from ICS files"
    )
    default_start_time: str = Field(
        default=DEFAULT_START_TIME, description="Start time used when an import has no time"
    )
    default_end_time: str = Field(
        default=DEFAULT_END_TIME, description="End time used when an import has no time"
    )

    # ICS import/export
    max_ics_file_bytes: int = Field(
        default=MAX_ICS_FILE_BYTES, description="Largest accepted ICS upload in bytes"
    )
    export_prodid: str = Field(
        default="-//Coparent Calendar//EN", description="PRODID written to exported calendars"
    )
    export_filename_prefix: str = Field(
        default="coparent-calendar", description="Prefix for exported ICS file names"
    )

    # Recurrence expansion
    max_occurrences: int = Field(
        default=20000, description="Occurrences allowed per expansion before it is refused"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    # Optional YAML file
    config_file: Optional[Path] = Field(default=None, description="Path to YAML config file")

    model_config = SettingsConfigDict(
        env_prefix="COPARENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._explicit_args = set(kwargs.keys())
        self._load_yaml_config()

    def _find_config_file(self) -> Optional[Path]:
        """Locate the YAML config file, if any."""
        if self.config_file is not None:
            return self.config_file if self.config_file.exists() else None

        project_config = Path.cwd() / "config" / "config.yaml"
        if project_config.exists():
            return project_config
        return None

    def _load_yaml_config(self) -> None:
        """Load configuration from YAML file if it exists.

        Explicit constructor arguments and ``COPARENT_*`` environment variables
        win over values in the file.
        """
        config_file = self._find_config_file()
        if not config_file:
            return

        try:
            with config_file.open() as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            # Don't fail if YAML loading fails, just continue with defaults/env vars
            logger.warning("Could not load YAML config from %s: %s", config_file, e)
            return

        if not config_data:
            return
        if not isinstance(config_data, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping", config_file)
            return

        env_vars_set = {
            key[len("COPARENT_") :].lower() for key in os.environ if key.startswith("COPARENT_")
        }
        for key, value in config_data.items():
            if key not in type(self).model_fields or key == "config_file":
                logger.debug("Ignoring unknown config key %r in %s", key, config_file)
                continue
            if key in self._explicit_args or key in env_vars_set:
                continue
            setattr(self, key, value)

        logger.info("Loaded configuration from %s", config_file)


# Global settings management
_settings_instance: Optional[CoparentSettings] = None


def get_settings() -> CoparentSettings:
    """Get the global settings instance, creating it lazily if needed."""
    if globals()["_settings_instance"] is None:
        # COPARENT_CONFIG_FILE is picked up as ``config_file`` by pydantic-settings
        globals()["_settings_instance"] = CoparentSettings()
    return cast(CoparentSettings, globals()["_settings_instance"])


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
