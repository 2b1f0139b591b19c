"""Common utilities for nosr."""

from .logger import setup_logger, get_logger
from .config import SyncSettings, load_config, load_settings

__all__ = ["SyncSettings", "get_logger", "load_config", "load_settings", "setup_logger"]
