"""Data structures for configured repositories and sync outcomes."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional


class SyncStatus(Enum):
    """Status of a repository sync."""

    SUCCESS = auto()
    FETCH_FAILED = auto()  # Every mirror failed
    TRANSCODE_FAILED = auto()


@dataclass
class Repository:
    """A package repository declared by a config section.

    Servers are mirror URL templates in declaration order. The order is
    the fetch priority and is never changed after parsing.
    """

    name: str
    servers: List[str] = field(default_factory=list)

    def add_server(self, server: str) -> None:
        """Append a mirror URL template."""
        self.servers.append(server)

    @property
    def files_name(self) -> str:
        """Filename of the repository's files database."""
        return f"{self.name}.files"


@dataclass
class SyncResult:
    """Result of syncing a single repository."""

    repo_name: str
    status: SyncStatus
    url: Optional[str] = None  # Mirror URL that served the archive
    error_message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Check if the repository synced successfully."""
        return self.status == SyncStatus.SUCCESS
