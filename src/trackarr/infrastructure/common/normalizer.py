"""Canonical rendering of sizes, share ratios and coded enumerations.

Every function here is total: ``None``, booleans, containers and malformed
strings all produce a defined value.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from trackarr.domain.sites.site_schema import VolumeFactors

from .converters import to_float, to_text
from .parsers import parse_size_to_bytes

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
ZERO_SIZE = "0 B"
INFINITE_RATIO = "∞"
RATIO_CEILING = 10_000

_FORMATTED_SIZE_RE = re.compile(r"^\d+(\.\d+)?\s*(B|KB|MB|GB|TB|PB)$", re.IGNORECASE)
_UNLIMITED_TOKENS = frozenset({"inf", "infinity", "∞", "無限"})

# Promotion codes of the JSON API family the bundled site documents target.
DEFAULT_DISCOUNTS: Mapping[str, VolumeFactors] = {
    "NORMAL": VolumeFactors(download=1.0, upload=1.0),
    "FREE": VolumeFactors(download=0.0, upload=1.0),
    "PERCENT_30": VolumeFactors(download=0.3, upload=1.0),
    "PERCENT_50": VolumeFactors(download=0.5, upload=1.0),
    "PERCENT_70": VolumeFactors(download=0.7, upload=1.0),
    "_2X": VolumeFactors(download=1.0, upload=2.0),
    "_2X_FREE": VolumeFactors(download=0.0, upload=2.0),
    "_2X_PERCENT_50": VolumeFactors(download=0.5, upload=2.0),
}


def bytes_to_string(num_bytes: float) -> str:
    """Render a byte count in the largest unit whose value is >= 1.

    Counts beyond float range render like any other non-finite count.
    """
    value = to_float(num_bytes)
    if value is None or not math.isfinite(value) or value <= 0:
        return ZERO_SIZE
    index = 0
    while value >= 1024 and index < len(SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{value:.2f} {SIZE_UNITS[index]}"


def format_size(raw: Any) -> str:
    """Human-readable size for a byte count or an already formatted size.

    Unit-suffixed strings pass through unchanged (thousands separators
    dropped), so the function is idempotent on its own output.
    """
    if raw is None or isinstance(raw, bool):
        return ZERO_SIZE

    if isinstance(raw, (int, float)):
        return bytes_to_string(raw)

    if not isinstance(raw, str):
        return ZERO_SIZE

    text = raw.strip()
    if _FORMATTED_SIZE_RE.match(text):
        return text
    compact = text.replace(",", "")
    if _FORMATTED_SIZE_RE.match(compact):
        return compact

    number = to_float(compact)
    if number is not None:
        return bytes_to_string(number)

    # "1.5 TiB", "700 MiB" and similar spellings
    return bytes_to_string(parse_size_to_bytes(compact))


def format_ratio(raw: Any, unlimited_tokens: Iterable[str] = ()) -> str:
    """Three-decimal share ratio, ``"∞"`` for unbounded values.

    ``unlimited_tokens`` adds a site's own spelling of "unlimited".
    """
    if isinstance(raw, str):
        token = raw.strip()
        if token.lower() in _UNLIMITED_TOKENS or token in set(unlimited_tokens):
            return INFINITE_RATIO

    number = to_float(raw)
    if number is None or math.isnan(number):
        return "0.000"
    if number == math.inf or number > RATIO_CEILING:
        return INFINITE_RATIO
    if number <= 0:
        return "0.000"
    return f"{number:.3f}"


def compute_ratio(uploaded: Any, downloaded: Any) -> float | None:
    """Uploaded / downloaded, ``inf`` when nothing was downloaded."""
    up = to_float(uploaded)
    down = to_float(downloaded)
    if up is None or down is None:
        return None
    if down <= 0:
        return math.inf if up > 0 else 0.0
    return up / down


def map_code(code: Any, table: Mapping[str, str] | None) -> str:
    """Translate a site-specific enumeration code; unmapped codes pass through."""
    key = to_text(code)
    if not table:
        return key
    return table.get(key, key)


def volume_factors(
    discount: Any,
    overrides: Mapping[str, VolumeFactors] | None = None,
) -> VolumeFactors | None:
    """Look up promotion volume factors for a discount code.

    Site overrides win over the built-in table. Unknown codes give None.
    """
    code = to_text(discount).strip()
    if not code:
        return None
    for table in (overrides or {}, DEFAULT_DISCOUNTS):
        if code in table:
            return table[code]
        upper = code.upper()
        if upper in table:
            return table[upper]
    return None
