"""Sync driver: downloads and converts the files database of every repository."""

import os
import sys
from pathlib import Path
from typing import Callable, List

from ..common.config import SyncSettings
from ..common.logger import get_logger
from ..formats.cpio import decompress_repo_file
from ..repos.base import Repository, SyncResult, SyncStatus
from .context import RunContext
from .fetch import download_repo_files
from .handle import FetchHandle, HandleError
from .progress import print_progress

logger = get_logger("nosr.sync")

HandleFactory = Callable[..., FetchHandle]


def check_cache_dir(path: str) -> bool:
    """Check that the cache directory exists and is writable."""
    if not os.access(path, os.W_OK):
        reason = "No such file or directory" if not os.path.exists(path) else "Permission denied"
        logger.error(f"unable to write to {path}: {reason}")
        return False
    return True


def sync_repository(ctx: RunContext, repo: Repository) -> SyncResult:
    """Download a repository's files database, then convert it.

    Args:
        ctx: Run context
        repo: Repository to sync

    Returns:
        SyncResult for the repository
    """
    url = download_repo_files(ctx, repo)
    if url is None:
        return SyncResult(
            repo_name=repo.name,
            status=SyncStatus.FETCH_FAILED,
            error_message=f"no mirror of {repo.name} could be downloaded from",
        )

    if not decompress_repo_file(ctx.cache_dir, repo):
        return SyncResult(
            repo_name=repo.name,
            status=SyncStatus.TRANSCODE_FAILED,
            url=url,
            error_message=f"failed to convert {repo.files_name}",
        )

    return SyncResult(repo_name=repo.name, status=SyncStatus.SUCCESS, url=url)


def nosr_update(
    repos: List[Repository],
    settings: SyncSettings,
    handle_factory: HandleFactory = FetchHandle.initialize,
) -> int:
    """Sync every repository in order.

    A failing repository doesn't stop the others. The handle is created
    once and released once, whatever the individual outcomes.

    Args:
        repos: Repositories to sync
        settings: Sync settings
        handle_factory: Callable creating the download handle

    Returns:
        0 if every repository synced, 1 otherwise
    """
    interactive = sys.stdout.isatty()

    if not check_cache_dir(settings.cache_dir):
        return 1

    try:
        handle = handle_factory(
            settings.root_dir, settings.db_path, timeout=settings.fetch_timeout
        )
    except HandleError as e:
        logger.error(f"unable to initialize download handle: {e}")
        return 1

    try:
        handle.set_cache_dir(settings.cache_dir)
        if interactive:
            # Progress lines only make sense on a terminal
            handle.set_progress_callback(print_progress)

        ctx = RunContext(
            handle=handle,
            cache_dir=Path(settings.cache_dir),
            architecture=settings.get_architecture(),
            interactive=interactive,
        )

        results = [sync_repository(ctx, repo) for repo in repos]
    finally:
        handle.release()

    failed = [r for r in results if not r.is_success]
    for result in failed:
        logger.error(f"{result.repo_name}: {result.error_message}")

    logger.info(f"Synced {len(results) - len(failed)}/{len(results)} repositories")
    return 1 if failed else 0
