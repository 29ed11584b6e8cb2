from __future__ import annotations

"""
Human-Readable Formatting Helpers.
"""

from typing import Tuple

_UNITS: Tuple[str, ...] = ("B", "K", "M", "G", "T")


def human_size(num_bytes: int) -> str:
    """
    Convert a byte count into a binary-prefixed string.

    Bytes are printed without decimals, every larger unit with one decimal
    place: 10 -> '10B', 1536 -> '1.5K', 1048576 -> '1.0M'. Values beyond
    the terabyte range stay in 'T'.

    Args:
        num_bytes: Size in bytes.

    Returns:
        str: Formatted size.
    """
    size = float(num_bytes)
    unit = 0
    while size >= 1024.0 and unit < len(_UNITS) - 1:
        size /= 1024.0
        unit += 1

    if unit == 0:
        return f"{size:.0f}{_UNITS[unit]}"
    return f"{size:.1f}{_UNITS[unit]}"
