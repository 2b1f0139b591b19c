"""Tests for the sync driver."""

import logging
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.common.config import SyncSettings
from src.repos.base import Repository, SyncStatus
from src.repos.conf import find_active_repos
from src.sync.context import RunContext
from src.sync.driver import check_cache_dir, nosr_update, sync_repository
from src.sync.handle import FetchHandle, HandleError
from src.sync.progress import print_progress


@pytest.fixture
def settings(tmp_path, cache_dir):
    db = tmp_path / "db"
    db.mkdir()
    return SyncSettings(
        cache_dir=str(cache_dir),
        db_path=str(db),
        root_dir=str(tmp_path),
        architecture="x86_64",
    )


@pytest.fixture
def handle():
    return MagicMock()


@pytest.fixture
def factory(handle):
    return MagicMock(return_value=handle)


def repos(*names):
    return [Repository(name=n, servers=["http://mirror/$repo/os/$arch"]) for n in names]


class TestCheckCacheDir:
    """Tests for check_cache_dir."""

    def test_writable(self, cache_dir):
        """Test a writable directory passes."""
        assert check_cache_dir(str(cache_dir))

    def test_missing(self, tmp_path, caplog):
        """Test a missing directory fails."""
        with caplog.at_level(logging.ERROR):
            assert not check_cache_dir(str(tmp_path / "missing"))
        assert "unable to write to" in caplog.text


class TestSyncRepository:
    """Tests for sync_repository."""

    @pytest.fixture
    def ctx(self, handle, cache_dir):
        return RunContext(handle=handle, cache_dir=cache_dir, architecture="x86_64")

    def test_success(self, ctx):
        """Test fetch then convert gives success."""
        with patch("src.sync.driver.download_repo_files", return_value="http://m/core.files"), \
                patch("src.sync.driver.decompress_repo_file", return_value=True) as convert:
            result = sync_repository(ctx, repos("core")[0])

        assert result.is_success
        assert result.url == "http://m/core.files"
        convert.assert_called_once()

    def test_fetch_failure_skips_convert(self, ctx):
        """Test conversion only runs after a successful fetch."""
        with patch("src.sync.driver.download_repo_files", return_value=None), \
                patch("src.sync.driver.decompress_repo_file") as convert:
            result = sync_repository(ctx, repos("core")[0])

        assert result.status == SyncStatus.FETCH_FAILED
        convert.assert_not_called()

    def test_convert_failure(self, ctx):
        """Test a failed conversion is reported."""
        with patch("src.sync.driver.download_repo_files", return_value="http://m/core.files"), \
                patch("src.sync.driver.decompress_repo_file", return_value=False):
            result = sync_repository(ctx, repos("core")[0])

        assert result.status == SyncStatus.TRANSCODE_FAILED


class TestNosrUpdate:
    """Tests for nosr_update."""

    def test_all_succeed(self, settings, factory, handle):
        """Test exit status 0 when every repository syncs."""
        with patch("src.sync.driver.download_repo_files", return_value="http://m"), \
                patch("src.sync.driver.decompress_repo_file", return_value=True):
            assert nosr_update(repos("core", "extra"), settings, handle_factory=factory) == 0

        factory.assert_called_once_with(settings.root_dir, settings.db_path, timeout=30.0)
        handle.set_cache_dir.assert_called_once_with(settings.cache_dir)
        handle.release.assert_called_once()

    def test_failure_does_not_stop_others(self, settings, factory, handle):
        """Test every repository is processed after one fails."""
        outcomes = {"core": "http://m", "extra": None, "community": "http://m"}

        def download(ctx, repo):
            return outcomes[repo.name]

        with patch("src.sync.driver.download_repo_files", side_effect=download) as fetch, \
                patch("src.sync.driver.decompress_repo_file", return_value=True) as convert:
            status = nosr_update(repos("core", "extra", "community"), settings, handle_factory=factory)

        assert status == 1
        assert [c.args[1].name for c in fetch.call_args_list] == ["core", "extra", "community"]
        assert [c.args[1].name for c in convert.call_args_list] == ["core", "community"]
        handle.release.assert_called_once()

    def test_convert_failure_sets_status(self, settings, factory):
        """Test a conversion failure makes the run fail."""
        with patch("src.sync.driver.download_repo_files", return_value="http://m"), \
                patch("src.sync.driver.decompress_repo_file", side_effect=[True, False]):
            assert nosr_update(repos("core", "extra"), settings, handle_factory=factory) == 1

    def test_unwritable_cache_dir(self, settings, factory, tmp_path):
        """Test a missing cache directory fails before anything else."""
        settings.cache_dir = str(tmp_path / "missing")

        assert nosr_update(repos("core"), settings, handle_factory=factory) == 1
        factory.assert_not_called()

    def test_handle_init_failure(self, settings):
        """Test a handle that can't be created fails the run."""
        factory = MagicMock(side_effect=HandleError("no database"))

        with patch("src.sync.driver.download_repo_files") as fetch:
            assert nosr_update(repos("core"), settings, handle_factory=factory) == 1
        fetch.assert_not_called()

    def test_release_on_error(self, settings, factory, handle):
        """Test the handle is released when a step raises."""
        with patch("src.sync.driver.download_repo_files", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                nosr_update(repos("core"), settings, handle_factory=factory)

        handle.release.assert_called_once()

    def test_progress_callback_only_interactive(self, settings, factory, handle):
        """Test progress output is registered only on a terminal."""
        with patch("src.sync.driver.sys.stdout") as stdout:
            stdout.isatty.return_value = False
            nosr_update([], settings, handle_factory=factory)
        handle.set_progress_callback.assert_not_called()

        with patch("src.sync.driver.sys.stdout") as stdout:
            stdout.isatty.return_value = True
            nosr_update([], settings, handle_factory=factory)
        handle.set_progress_callback.assert_called_once_with(print_progress)

    def test_context_carries_architecture(self, settings, factory):
        """Test steps receive the configured architecture."""
        seen = []

        def download(ctx, repo):
            seen.append((ctx.architecture, ctx.cache_dir))
            return None

        with patch("src.sync.driver.download_repo_files", side_effect=download):
            nosr_update(repos("core"), settings, handle_factory=factory)

        assert seen == [("x86_64", Path(settings.cache_dir))]


class TestEndToEnd:
    """Sync through the real handle, mirror fallback and conversion."""

    def test_sync_with_fallback(self, settings, tmp_path, files_db_builder, write_conf):
        """Test a failing first mirror falls back and the result is cpio."""
        body = files_db_builder(tmp_path / "upstream.files").read_bytes()

        def handler(request):
            if request.url.host == "good":
                return httpx.Response(200, content=body)
            return httpx.Response(503)

        conf = write_conf(
            "pacman.conf",
            "[options]\nArchitecture = auto\n"
            "[core]\nServer = http://bad/$repo/os/$arch\nServer = http://good/$repo/os/$arch\n"
            "[broken]\nServer = http://bad/$repo/os/$arch\n",
        )

        def factory(root, db, timeout):
            return FetchHandle.initialize(root, db, timeout=timeout, transport=httpx.MockTransport(handler))

        status = nosr_update(find_active_repos(str(conf)), settings, handle_factory=factory)

        assert status == 1
        cached = os.path.join(settings.cache_dir, "core.files")
        with open(cached, "rb") as f:
            assert f.read(5) == b"07070"
        assert not os.path.exists(os.path.join(settings.cache_dir, "broken.files"))
