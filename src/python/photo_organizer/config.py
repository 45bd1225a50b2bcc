"""
Configuration management for photo-organizer.

Settings come from, in increasing precedence: defaults, a YAML file,
PHOTO_ORGANIZER_* environment variables, and command-line flags.

Example config.yaml:

    pattern: "%Y/%Y-%m"
    action: move
    output: /photos/library
    max_workers: 4
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from photo_organizer.layout import DEFAULT_PATTERN, PatternError, validate_pattern
from photo_organizer.models.enums import TransferAction

logger = logging.getLogger(__name__)

# Default locations to search for a config file
CONFIG_SEARCH_PATHS = [
    Path("photo_organizer.yaml"),
    Path("config.yaml"),
    Path.home() / ".photo_organizer" / "config.yaml",
]

ENV_PREFIX = "PHOTO_ORGANIZER_"


class ConfigError(ValueError):
    """Raised for configuration values that cannot be used."""


@dataclass
class OrganizerSettings:
    """Settings for an organize run.

    Attributes:
        pattern: Destination directory pattern (%Y, %m, %d tokens)
        action: "copy" or "move"
        output: Output root; None means "<source>/organized"
        recursive: Whether to scan subdirectories of the source
        include_hidden: Whether to organize dot-files
        max_workers: Threads used to read metadata
        log_level: Logging level name
        log_file: Optional log file path
    """
    pattern: str = DEFAULT_PATTERN
    action: str = TransferAction.COPY.value
    output: Optional[str] = None
    recursive: bool = True
    include_hidden: bool = False
    max_workers: int = 1
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrganizerSettings":
        """Create settings from a config dictionary.

        Raises:
            ConfigError: If the dictionary has keys that are not settings
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config settings: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def update_from_env(self, environ: Optional[Dict[str, str]] = None) -> None:
        """Update settings from PHOTO_ORGANIZER_<SETTING> environment variables.

        Example:
            >>> os.environ['PHOTO_ORGANIZER_MAX_WORKERS'] = '8'
            >>> settings = OrganizerSettings()
            >>> settings.update_from_env()
        """
        environ = os.environ if environ is None else environ

        for f in fields(self):
            value = environ.get(ENV_PREFIX + f.name.upper())
            if value is None:
                continue

            current_value = getattr(self, f.name)
            if isinstance(current_value, bool):
                value = value.lower() in ("true", "1", "yes", "on")
            elif isinstance(current_value, int):
                try:
                    value = int(value)
                except ValueError:
                    raise ConfigError(f"{ENV_PREFIX}{f.name.upper()} must be an integer") from None

            setattr(self, f.name, value)

    @property
    def transfer_action(self) -> TransferAction:
        return TransferAction(self.action.lower())

    def validate(self) -> "OrganizerSettings":
        """Check that all settings are usable.

        Raises:
            ConfigError: Describing the first invalid setting
        """
        if not isinstance(self.pattern, str):
            raise ConfigError(f"pattern must be a string, got {self.pattern!r}")
        try:
            validate_pattern(self.pattern)
        except PatternError as e:
            raise ConfigError(str(e)) from e

        try:
            self.transfer_action
        except (ValueError, AttributeError):
            raise ConfigError(f"action must be 'copy' or 'move', got {self.action!r}") from None

        for name in ("recursive", "include_hidden"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigError(f"{name} must be true or false, got {value!r}")

        # bool is an int subclass
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ConfigError(f"max_workers must be a positive integer, got {self.max_workers!r}")

        return self


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Specific path to config file. If None, searches default locations.

    Returns:
        Dictionary containing configuration; empty if no file was found in
        the default locations.

    Raises:
        FileNotFoundError: If config_path is given but does not exist.
        ConfigError: If the file does not contain a mapping.
    """
    path_to_load = None

    if config_path:
        if config_path.exists():
            path_to_load = config_path
        else:
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                path_to_load = path
                break

    if not path_to_load:
        logger.debug("No config file found, using defaults")
        return {}

    logger.info("Loading config from %s", path_to_load)

    with open(path_to_load, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Config file {path_to_load} must contain a mapping")

    return config


def load_settings(config_path: Optional[Path] = None) -> OrganizerSettings:
    """
    Load settings from the config file and the environment.

    Args:
        config_path: Specific path to config file. If None, searches default locations.

    Returns:
        Validated OrganizerSettings
    """
    settings = OrganizerSettings.from_dict(load_config(config_path))
    settings.update_from_env()
    return settings.validate()
