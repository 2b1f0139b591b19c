"""Download handle used by the sync.

Plays the part of the package manager runtime: it is initialized once
against a root and database directory, holds the cache directory that
downloads land in, reports progress through an optional callback and is
released once at the end of the run.
"""

import os
import posixpath
import shutil
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

import httpx

from ..common.logger import get_logger

logger = get_logger("nosr.handle")

# (filename, bytes transferred, bytes total)
ProgressCallback = Callable[[str, int, int], None]

CHUNK_SIZE = 64 * 1024


class HandleError(RuntimeError):
    """Raised when the handle can't be created or is used incorrectly."""


class FetchHandle:
    """HTTP fetcher writing into a cache directory.

    Use FetchHandle.initialize() to create one; it validates the
    directories the way a package manager would before handing out a
    handle.
    """

    def __init__(
        self,
        root_dir: str,
        db_path: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the handle.

        Args:
            root_dir: Filesystem root the package manager operates on
            db_path: Package database directory
            timeout: Network timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.root_dir = Path(root_dir)
        self.db_path = Path(db_path)
        self.cache_dir: Optional[Path] = None
        self.progress_cb: Optional[ProgressCallback] = None
        self._client: Optional[httpx.Client] = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def initialize(
        cls,
        root_dir: str,
        db_path: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "FetchHandle":
        """Create a handle after checking its directories exist.

        Raises:
            HandleError: If root_dir or db_path is not a directory
        """
        if not Path(root_dir).is_dir():
            raise HandleError(f"could not find or read root directory: {root_dir}")
        if not Path(db_path).is_dir():
            raise HandleError(f"could not find or read database directory: {db_path}")

        return cls(root_dir, db_path, timeout=timeout, transport=transport)

    def set_cache_dir(self, path: str) -> None:
        """Set the directory downloads are written to."""
        self.cache_dir = Path(path)

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        """Register a callback invoked after every received chunk."""
        self.progress_cb = callback

    @property
    def released(self) -> bool:
        return self._client is None

    def fetch(self, url: str) -> Optional[Path]:
        """Download a URL into the cache directory.

        The body is streamed to "<name>.part" and renamed to "<name>" once
        complete, name being the last path component of the URL. file://
        URLs are copied from the local filesystem.

        Args:
            url: URL to download

        Returns:
            Path of the downloaded file, or None if the download failed

        Raises:
            HandleError: If the handle was released or has no cache dir
        """
        if self._client is None:
            raise HandleError("handle has been released")
        if self.cache_dir is None:
            raise HandleError("no cache directory set")

        try:
            parts = urlsplit(url)
        except ValueError as e:
            logger.debug(f"Malformed URL {url}: {e}")
            return None

        filename = posixpath.basename(parts.path)
        if not filename:
            logger.debug(f"URL has no filename component: {url}")
            return None

        dest = self.cache_dir / filename
        part = self.cache_dir / f"{filename}.part"

        try:
            if parts.scheme == "file":
                self._copy_local(url2pathname(parts.path), part, filename)
            else:
                self._download(url, part, filename)
            os.replace(part, dest)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Download of {url} failed: {e}")
            part.unlink(missing_ok=True)
            return None
        except OSError as e:
            logger.debug(f"Could not fetch {url} into {part}: {e}")
            part.unlink(missing_ok=True)
            return None

        return dest

    def _download(self, url: str, part: Path, filename: str) -> None:
        """Stream an HTTP(S) response body into the part file."""
        with self._client.stream("GET", url) as response:
            response.raise_for_status()
            total = int(response.headers.get("Content-Length", 0) or 0)
            xfer = 0
            with open(part, "wb") as f:
                for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
                    xfer += len(chunk)
                    if self.progress_cb is not None:
                        self.progress_cb(filename, xfer, total)

    def _copy_local(self, source: str, part: Path, filename: str) -> None:
        """Copy a file:// mirror's file into the part file."""
        shutil.copyfile(source, part)
        if self.progress_cb is not None:
            size = part.stat().st_size
            self.progress_cb(filename, size, size)

    def release(self) -> None:
        """Close the underlying HTTP client. Safe to call more than once."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "FetchHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
