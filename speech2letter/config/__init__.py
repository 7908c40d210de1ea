"""Simple YAML configuration loader for speech2letter."""

import copy
import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..models.session import SupportedLanguage

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "session": {
        "default_language": "en-US",
        "start_delay_seconds": 0.1,
        "restart_delay_seconds": 0.4,
        "surface_engine_errors": True,
    },
    "google_cloud": {
        "use_enhanced_model": True,
        "enable_automatic_punctuation": True,
    },
    "audio": {
        "sample_rate": 16000,
        "chunk_size": 1600,
        "channels": 1,
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/speech2letter.log",
        "console_output": False,
    },
    "ui": {
        "refresh_per_second": 8,
    },
}


class Speech2LetterConfig:
    """speech2letter configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used and relative paths resolve against the
                        current directory.
        """
        if config_path is None:
            self.config_file = None
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            logger.info("No configuration file given, using defaults")
            return

        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file, layered over the defaults."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        config = _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (("google_cloud", "credentials_path"), ("logging", "file_path")):
            value = config.get(section, {}).get(key)
            if value and not os.path.isabs(value):
                config[section][key] = str(config_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'session.default_language').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'session.default_language')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_google_credentials_path(self) -> Optional[str]:
        """Get the Google credentials path, or None when it is not configured or missing."""
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            logger.warning("Google credentials path not configured")
            return None

        creds_file = Path(creds_path)
        if not creds_file.exists():
            logger.warning(f"Google credentials file not found: {creds_path}")
            return None

        return str(creds_file.absolute())

    def get_default_language(self) -> SupportedLanguage:
        """Get the language a new session starts with."""
        value = self.get('session.default_language', SupportedLanguage.EN_US.value)
        try:
            return SupportedLanguage(value)
        except ValueError:
            supported = ", ".join(lang.value for lang in SupportedLanguage)
            raise ValueError(f"Unsupported default language '{value}' (supported: {supported})")


@dataclass(frozen=True)
class SessionSettings:
    """Timing and error-reporting policy for a session manager.

    Raises:
        ValueError: If a settling delay is negative.
    """

    start_delay_seconds: float = 0.1
    restart_delay_seconds: float = 0.4
    surface_engine_errors: bool = True

    def __post_init__(self) -> None:
        for field_name in ("start_delay_seconds", "restart_delay_seconds"):
            value = getattr(self, field_name)
            if value < 0:
                raise ValueError(f"'{field_name}' must be >= 0, got {value}")

    @classmethod
    def from_config(cls, config: Speech2LetterConfig) -> "SessionSettings":
        return cls(
            start_delay_seconds=float(config.get('session.start_delay_seconds', 0.1)),
            restart_delay_seconds=float(config.get('session.restart_delay_seconds', 0.4)),
            surface_engine_errors=bool(config.get('session.surface_engine_errors', True)),
        )


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base
