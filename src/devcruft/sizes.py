"""Human-readable size parsing and formatting."""

import re
from decimal import Decimal, InvalidOperation

from devcruft.exceptions import SizeParseError

# Longest suffixes first so "MIB" is not read as "B"
SIZE_UNITS: list[tuple[str, int]] = [
    ("TIB", 1024**4),
    ("GIB", 1024**3),
    ("MIB", 1024**2),
    ("KIB", 1024),
    ("TB", 1000**4),
    ("GB", 1000**3),
    ("MB", 1000**2),
    ("KB", 1000),
    ("B", 1),
]

_NUMBER_RE = re.compile(r"^\d+(\.\d+)?$")
MAX_DECIMAL_PLACES = 9


def parse_size(size_str: str) -> int:
    """
    Parse a size such as ``"100MB"``, ``"1.5GiB"`` or ``"2048"`` into bytes.

    Decimal units (KB, MB, GB, TB) are powers of 1000, binary units
    (KiB, MiB, GiB, TiB) powers of 1024. A bare number is a byte count.
    Fractional bytes are truncated.

    Raises:
        SizeParseError: If the string is not a valid size
    """
    text = size_str.strip().upper().replace(" ", "")
    if not text:
        raise SizeParseError("Empty size")

    multiplier = 1
    number = text
    for suffix, unit in SIZE_UNITS:
        if text.endswith(suffix):
            number = text[: -len(suffix)]
            multiplier = unit
            break

    if not _NUMBER_RE.match(number):
        raise SizeParseError(f"Invalid size: {size_str!r}")

    if "." in number and len(number.split(".")[1]) > MAX_DECIMAL_PLACES:
        raise SizeParseError(f"Too many decimal places: {size_str!r}")

    try:
        return int(Decimal(number) * multiplier)
    except InvalidOperation as e:
        raise SizeParseError(f"Invalid size: {size_str!r}") from e


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units)."""
    if size_bytes >= 1000**4:
        return f"{size_bytes / (1000**4):.1f} TB"
    elif size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"
