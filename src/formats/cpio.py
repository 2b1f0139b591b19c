"""Conversion of repository files databases to uncompressed cpio.

Files databases are published as tar archives, usually gzip compressed,
though nothing guarantees that. Reading them through libarchive with every
filter enabled keeps the conversion compression agnostic. Rewriting them
as an uncompressed cpio archive makes later lookups, which always scan the
whole archive front to back, cheaper.
"""

import os
from pathlib import Path

import libarchive
from libarchive.ffi import write_data, write_finish_entry, write_header

from ..common.logger import get_logger
from ..repos.base import Repository

logger = get_logger("nosr.cpio")

BLOCK_SIZE = 8192
TEMP_SUFFIX = "~"


class TranscodeError(RuntimeError):
    """Raised when an entry can't be written completely."""


def transcode_archive(src: Path, dest: Path, block_size: int = BLOCK_SIZE) -> int:
    """Copy every entry of a tar archive into a new uncompressed cpio archive.

    Headers are copied unchanged and entry data is streamed in chunks of at
    most block_size bytes. Reader and writer are released on every exit
    path, including errors.

    Args:
        src: Source archive, tar format with any compression
        dest: Destination path, created or truncated
        block_size: Maximum chunk size for entry data

    Returns:
        Number of entries written

    Raises:
        libarchive.ArchiveError: If either archive can't be opened, read or written
        TranscodeError: If a chunk is only partially written
    """
    count = 0

    with libarchive.file_reader(str(src), "tar") as reader:
        with libarchive.file_writer(str(dest), "cpio") as writer:
            write_p = writer._pointer
            for entry in reader:
                write_header(write_p, entry._entry_p)
                for block in entry.get_blocks(block_size):
                    written = write_data(write_p, block, len(block))
                    if written != len(block):
                        raise TranscodeError(
                            f"failed to write {len(block)} bytes of "
                            f"'{entry.pathname}' to {dest} (wrote {written})"
                        )
                write_finish_entry(write_p)
                count += 1

    return count


def decompress_repo_file(cache_dir: Path, repo: Repository) -> bool:
    """Rewrite a downloaded files database as uncompressed cpio in place.

    The archive is converted into "<name>.files~" which then replaces
    "<name>.files". If the conversion fails the temporary file is removed
    and the downloaded file is left as it was.

    Args:
        cache_dir: Cache directory holding the downloaded database
        repo: Repository whose database was just downloaded

    Returns:
        True if the converted database is in place
    """
    infile = Path(cache_dir) / repo.files_name
    outfile = Path(cache_dir) / f"{repo.files_name}{TEMP_SUFFIX}"

    try:
        count = transcode_archive(infile, outfile)
    except (libarchive.ArchiveError, TranscodeError, OSError) as e:
        logger.error(f"failed to convert {infile} to cpio: {e}")
        try:
            outfile.unlink(missing_ok=True)
        except OSError as unlink_error:
            logger.warning(f"could not remove {outfile}: {unlink_error}")
        return False

    try:
        os.replace(outfile, infile)
    except OSError as e:
        logger.error(
            f"failed to rotate file for repo '{repo.name}' into place: {e.strerror or e}"
        )
        return False

    logger.debug(f"Converted {infile} ({count} entries)")
    return True
