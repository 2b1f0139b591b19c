"""CLI interface for files database sync."""

import sys

import yaml

from .driver import nosr_update
from ..common.logger import setup_logger
from ..common.config import load_settings
from ..repos.conf import find_active_repos


def main():
    """Main entry point for sync CLI."""
    if len(sys.argv) > 2:
        print("Usage: python -m src.sync [settings.yaml]", file=sys.stderr)
        sys.exit(2)

    settings_path = sys.argv[1] if len(sys.argv) == 2 else None

    try:
        settings = load_settings(settings_path)
    except (FileNotFoundError, TypeError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logger(
        "nosr",
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.file_logging,
    )

    repos = find_active_repos(settings.config_file)
    if repos is None:
        sys.exit(1)

    sys.exit(nosr_update(repos, settings))


if __name__ == "__main__":
    main()
