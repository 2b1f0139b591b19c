"""Console progress output for interactive runs."""

import sys
from typing import Optional, TextIO, Tuple

SIZE_LABELS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB")


def humanize_size(size: int, target_unit: Optional[str] = None) -> Tuple[float, str]:
    """Scale a byte count for display.

    Args:
        size: Number of bytes
        target_unit: First letter of the unit to convert to ("K", "M", ...).
            Without one, the largest unit keeping the value within
            +/-2048 is used.

    Returns:
        Tuple of (scaled value, unit label)
    """
    value = float(size)
    index = 0
    while index < len(SIZE_LABELS) - 1:
        if target_unit is not None:
            if SIZE_LABELS[index][0] == target_unit:
                break
        elif -2048.0 <= value <= 2048.0:
            break
        value /= 1024.0
        index += 1

    return value, SIZE_LABELS[index]


def print_progress(
    filename: str, xfer: int, total: int, stream: Optional[TextIO] = None
) -> None:
    """Redraw the progress line for a download.

    Args:
        filename: Name of the file being downloaded
        xfer: Bytes received so far
        total: Expected size in bytes (0 if unknown)
        stream: Output stream, stdout by default
    """
    stream = stream or sys.stdout
    percent = 100.0 * xfer / total if total > 0 else 0.0
    size, label = humanize_size(total, "K")

    stream.write(f"  {filename:<40} {size:7.2f} {label:>3} [{percent:6.2f}%]\r")
    stream.flush()
