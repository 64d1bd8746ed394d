"""Parsing utilities for data extraction."""

from __future__ import annotations

import re

_SIZE_RE = re.compile(r"([\d.]+)\s*([KMGTP]?I?B)\b")

_MULTIPLIERS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
    "PB": 1024**5,
}


def parse_size_to_bytes(size_str: str) -> int:
    """Parse size string to bytes.

    Supports formats:
        - "1234" (raw bytes)
        - "4.5 GB"
        - "1,024.50 MB"
        - "1.2 TiB"

    Args:
        size_str: Size string.

    Returns:
        Size in bytes (int), 0 when unparseable.
    """
    if not size_str:
        return 0

    txt = size_str.replace(",", "").strip()
    if txt.isdigit():
        return int(txt)

    match = _SIZE_RE.search(txt.upper())
    if not match:
        return 0

    try:
        value = float(match.group(1))
    except ValueError:
        return 0
    unit = match.group(2).replace("IB", "B")

    return int(value * _MULTIPLIERS.get(unit, 1))
