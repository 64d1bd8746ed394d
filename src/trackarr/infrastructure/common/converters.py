"""Type conversion utilities."""

from __future__ import annotations

import json
import math
from typing import Any


def to_int(raw: Any) -> int | None:
    """Convert string or number to int, return None if invalid.

    Handles various formats:
        - None → None
        - int → int (passthrough)
        - 12.7 → 12
        - "123" → 123
        - "1,234" → 1234
        - "1 234" → 1234
        - "12.0" → 12
        - "-1" → -1
        - "12 peers" → 12 (digits only, when not a plain number)
        - "" → None
        - invalid → None
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return raw

    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None

    if isinstance(raw, str):
        txt = "".join(raw.split()).replace(",", "")
        if not txt:
            return None
        try:
            return int(txt)
        except ValueError:
            pass
        number = to_float(txt)
        if number is not None:
            return int(number) if math.isfinite(number) else None
        digits = "".join(ch for ch in txt if ch.isdigit())
        return int(digits) if digits else None

    return None


def to_float(raw: Any) -> float | None:
    """Convert a number or numeric string to float.

    Thousands separators are dropped; ``"inf"`` and ``"nan"`` parse the
    way ``float()`` parses them. Integers too large for a float become
    ``inf`` with their sign. Booleans and containers yield None.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, float):
        return raw

    if isinstance(raw, int):
        try:
            return float(raw)
        except OverflowError:
            return math.inf if raw > 0 else -math.inf

    if isinstance(raw, str):
        txt = raw.strip().replace(",", "")
        if not txt:
            return None
        try:
            return float(txt)
        except ValueError:
            return None

    return None


def to_text(raw: Any) -> str:
    """Render a raw JSON value as a string (None → ``""``)."""
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (dict, list)):
        return json.dumps(raw, ensure_ascii=False)
    return str(raw)
