"""Human-readable file metadata helpers."""

from datetime import datetime

_UNITS = "KMGTPE"


def format_file_size(size: int) -> str:
    """Binary-unit size string: ``"512 B"``, ``"1.5 KB"``, ``"3.0 GB"``."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {_UNITS[exp]}B"


def format_mod_time(timestamp: float) -> str:
    """Local modification time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
