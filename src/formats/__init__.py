"""Archive format handling for files databases."""

from .cpio import (
    BLOCK_SIZE,
    TranscodeError,
    decompress_repo_file,
    transcode_archive,
)

__all__ = [
    "BLOCK_SIZE",
    "TranscodeError",
    "decompress_repo_file",
    "transcode_archive",
]
