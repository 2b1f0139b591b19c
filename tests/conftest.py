"""Pytest configuration and shared fixtures."""

import io
import tarfile

import pytest


SAMPLE_ENTRIES = [
    ("bash-5.2.015-1/desc", b"%NAME%\nbash\n\n%VERSION%\n5.2.015-1\n"),
    ("bash-5.2.015-1/files", b"%FILES%\nusr/\nusr/bin/\nusr/bin/bash\n"),
    ("coreutils-9.1-3/desc", b"%NAME%\ncoreutils\n\n%VERSION%\n9.1-3\n"),
    ("coreutils-9.1-3/files", b"%FILES%\n" + b"usr/bin/ls\n" * 2000),
]


def build_files_db(path, entries=None, mode="w:gz"):
    """Write a tar archive shaped like a repository files database.

    Entries are (name, data) or (name, data, mode) tuples; data None
    makes a directory entry.
    """
    entries = SAMPLE_ENTRIES if entries is None else entries
    with tarfile.open(path, mode) as tar:
        for name, data, *perm in entries:
            info = tarfile.TarInfo(name)
            info.mtime = 1700000000
            if data is None:
                info.type = tarfile.DIRTYPE
                info.mode = perm[0] if perm else 0o755
                tar.addfile(info)
            else:
                info.size = len(data)
                info.mode = perm[0] if perm else 0o644
                tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def sample_entries():
    """Entries of the sample files database."""
    return list(SAMPLE_ENTRIES)


@pytest.fixture
def files_db_builder():
    """Builder for tar files databases: (path, entries=None, mode="w:gz")."""
    return build_files_db


@pytest.fixture
def cache_dir(tmp_path):
    """Empty, writable cache directory."""
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def write_conf(tmp_path):
    """Write a config file below tmp_path and return its path."""

    def _write(name, content):
        path = tmp_path / name
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def sample_settings_dict(tmp_path):
    """Sample settings dictionary."""
    return {
        "config_file": str(tmp_path / "pacman.conf"),
        "cache_dir": str(tmp_path / "cache"),
        "db_path": str(tmp_path / "db"),
        "root_dir": str(tmp_path),
        "architecture": "x86_64",
        "fetch_timeout": 10,
        "logging": {
            "level": "DEBUG",
            "log_dir": str(tmp_path / "logs"),
        },
    }
