"""Per-run state shared by the sync steps."""

from dataclasses import dataclass
from pathlib import Path

from .handle import FetchHandle


@dataclass
class RunContext:
    """State created once by the driver and passed to every step."""

    handle: FetchHandle
    cache_dir: Path
    architecture: str
    interactive: bool = False
