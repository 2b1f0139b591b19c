"""Download and conversion of repository files databases."""

from .context import RunContext
from .driver import check_cache_dir, nosr_update, sync_repository
from .fetch import download_repo_files, unlink_files_dbfile
from .handle import FetchHandle, HandleError

__all__ = [
    "FetchHandle",
    "HandleError",
    "RunContext",
    "check_cache_dir",
    "download_repo_files",
    "nosr_update",
    "sync_repository",
    "unlink_files_dbfile",
]
