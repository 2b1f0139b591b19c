"""Configuration management for nosr.

Handles loading of the YAML settings file that tells the sync where the
pacman configuration lives, where to cache files databases and how to log.
The repository list itself comes from the pacman configuration, see
src.repos.conf.
"""

import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_SETTINGS_PATH = "/etc/nosr/config.yaml"


@dataclass
class SyncSettings:
    """Settings for a files database sync run."""

    config_file: str = "/etc/pacman.conf"
    cache_dir: str = "/var/cache/nosr"
    db_path: str = "/var/lib/pacman"
    root_dir: str = "/"
    architecture: Optional[str] = None
    fetch_timeout: float = 30.0
    log_dir: str = "/var/log/nosr"
    log_level: str = "INFO"
    file_logging: bool = False

    def get_architecture(self) -> str:
        """Get the architecture substituted for $arch in mirror URLs.

        Returns:
            Configured architecture, or the host machine type if unset
        """
        return self.architecture or platform.machine()


def parse_settings(config_dict: Dict[str, Any]) -> SyncSettings:
    """Parse the settings dictionary.

    Args:
        config_dict: Settings dictionary as loaded from YAML

    Returns:
        SyncSettings instance
    """
    defaults = SyncSettings()
    logging_dict = config_dict.get("logging", {}) or {}

    return SyncSettings(
        config_file=config_dict.get("config_file", defaults.config_file),
        cache_dir=config_dict.get("cache_dir", defaults.cache_dir),
        db_path=config_dict.get("db_path", defaults.db_path),
        root_dir=config_dict.get("root_dir", defaults.root_dir),
        architecture=config_dict.get("architecture") or None,
        fetch_timeout=float(config_dict.get("fetch_timeout", defaults.fetch_timeout)),
        log_dir=logging_dict.get("log_dir", defaults.log_dir),
        log_level=logging_dict.get("level", defaults.log_level),
        file_logging=logging_dict.get("file_logging", defaults.file_logging),
    )


def load_config(config_path: str = DEFAULT_SETTINGS_PATH) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        TypeError: If the document root is not a mapping
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return _expand_env_vars(config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration.

    Args:
        obj: Configuration object (dict, list, str, etc.)

    Returns:
        Configuration with expanded environment variables
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_settings(config_path: Optional[str] = None) -> SyncSettings:
    """Load and parse settings into the typed dataclass.

    An explicitly named file must exist. Without one, NOSR_CONFIG or the
    default location is tried and defaults are used if it is missing.

    Args:
        config_path: Optional path to the settings file

    Returns:
        SyncSettings instance

    Raises:
        FileNotFoundError: If an explicitly named file doesn't exist
        yaml.YAMLError: If the file is invalid YAML
    """
    if config_path is not None:
        return parse_settings(load_config(config_path))

    try:
        config_dict = load_config(os.environ.get("NOSR_CONFIG", DEFAULT_SETTINGS_PATH))
    except FileNotFoundError:
        config_dict = {}

    return parse_settings(config_dict)
