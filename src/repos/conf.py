"""Parser for pacman-style repository configuration.

Reads the INI-like configuration file and turns every section other than
[options] into a Repository. Servers come from `Server =` lines and from
`Include =` files, which hold further `Server =` lines.

Example:
    [options]
    Architecture = auto

    [core]
    Include = /etc/pacman.d/mirrorlist

    [custom]
    Server = http://example.com/$repo/os/$arch
"""

from typing import Iterator, List, Optional, Tuple

from ..common.logger import get_logger
from .base import Repository

logger = get_logger("nosr.conf")

OPTIONS_SECTION = "options"
SERVER_KEY = "Server"
INCLUDE_KEY = "Include"


def strip_line(line: str) -> str:
    """Remove a trailing comment and surrounding whitespace.

    Args:
        line: Raw line from a config file

    Returns:
        Line content before the first '#', stripped
    """
    return line.split("#", 1)[0].strip()


def split_key_value(line: str) -> Tuple[str, str]:
    """Split a `key = value` line at the first '='.

    Args:
        line: Stripped line containing '='

    Returns:
        Tuple of (key, value), both stripped
    """
    key, _, value = line.partition("=")
    return key.strip(), value.strip()


def _iter_lines(fp) -> Iterator[Tuple[int, str]]:
    """Yield (line number, content) for non-blank lines of a config file."""
    for lineno, raw in enumerate(fp, start=1):
        line = strip_line(raw)
        if line:
            yield lineno, line


def add_servers_from_include(repo: Repository, path: str) -> bool:
    """Append the `Server =` entries of an include file to a repository.

    Args:
        repo: Repository to extend
        path: Path of the include file (usually a mirrorlist)

    Returns:
        True if the file was read, False if it could not be opened
    """
    try:
        with open(path, "r") as fp:
            for _, line in _iter_lines(fp):
                if "=" not in line:
                    continue
                key, value = split_key_value(line)
                if key == SERVER_KEY:
                    repo.add_server(value)
    except OSError as e:
        logger.error(f"failed to open include file {path}: {e.strerror or e}")
        return False

    return True


def find_active_repos(filename: str) -> Optional[List[Repository]]:
    """Parse the repository configuration.

    Args:
        filename: Path to the pacman-style configuration file

    Returns:
        Repositories in section order, or None if the file can't be opened
    """
    repos: List[Repository] = []
    current: Optional[Repository] = None
    in_options = False

    try:
        with open(filename, "r") as fp:
            for lineno, line in _iter_lines(fp):
                if line.startswith("[") and line.endswith("]"):
                    section = line[1:-1]
                    if section == OPTIONS_SECTION:
                        in_options = True
                        current = None
                    elif not section:
                        logger.warning(f"{filename}:{lineno}: ignoring empty section name")
                        in_options = False
                        current = None
                    else:
                        in_options = False
                        current = Repository(name=section)
                        repos.append(current)
                    continue

                if in_options or "=" not in line:
                    continue

                key, value = split_key_value(line)

                if current is None:
                    logger.warning(
                        f"{filename}:{lineno}: ignoring '{key}' outside of a repository section"
                    )
                    continue

                if key == SERVER_KEY:
                    current.add_server(value)
                elif key == INCLUDE_KEY:
                    add_servers_from_include(current, value)
    except OSError as e:
        logger.error(f"failed to open {filename}: {e.strerror or e}")
        return None

    logger.debug(f"Found {len(repos)} repositories in {filename}")
    return repos
