"""Repository discovery for files database syncing.

This module resolves the configured repositories, their mirror servers
and the download URL of each repository's files database.
"""

from .base import (
    Repository,
    SyncResult,
    SyncStatus,
)
from .conf import (
    find_active_repos,
    add_servers_from_include,
)
from .urls import prepare_url

__all__ = [
    "Repository",
    "SyncResult",
    "SyncStatus",
    "find_active_repos",
    "add_servers_from_include",
    "prepare_url",
]
