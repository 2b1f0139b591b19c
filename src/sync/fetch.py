"""Mirror fallback download of a repository's files database."""

import os
import sys
from pathlib import Path
from typing import Optional

from ..common.logger import get_logger
from ..repos.base import Repository
from ..repos.urls import prepare_url
from .context import RunContext

logger = get_logger("nosr.fetch")

FILES_SUFFIX = ".files"


def unlink_files_dbfile(cache_dir: Path, repo_name: str) -> bool:
    """Remove a cached files database.

    Args:
        cache_dir: Cache directory
        repo_name: Repository name

    Returns:
        True if the file is gone afterwards (removed or never there)
    """
    path = Path(cache_dir) / f"{repo_name}{FILES_SUFFIX}"
    try:
        os.unlink(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.debug(f"Could not remove {path}: {e}")
        return False
    return True


def download_repo_files(ctx: RunContext, repo: Repository) -> Optional[str]:
    """Download a repository's files database from the first working mirror.

    Mirrors are tried in the order they were declared. The first success
    ends the loop, so later mirrors are never contacted.

    Args:
        ctx: Run context holding the handle and cache directory
        repo: Repository to download

    Returns:
        URL the database was downloaded from, or None if every mirror failed
    """
    if not repo.servers:
        logger.warning(f"no servers configured for repo '{repo.name}'")
        return None

    if not ctx.interactive:
        print(f"downloading {repo.files_name}...", end="")
        sys.stdout.flush()

    for server in repo.servers:
        url = prepare_url(server, repo.name, ctx.architecture, FILES_SUFFIX)

        unlink_files_dbfile(ctx.cache_dir, repo.name)

        if ctx.handle.fetch(url) is None:
            logger.warning(f"failed to download: {url}")
            continue

        # Terminates the progress or "downloading" line
        print()
        return url

    if not ctx.interactive:
        print()
    return None
