"""Common infrastructure utilities."""

from __future__ import annotations

from .converters import to_float, to_int, to_text
from .field_mapper import apply_filters, get_nested
from .normalizer import format_ratio, format_size, map_code, volume_factors
from .parsers import parse_size_to_bytes

__all__ = [
    "apply_filters",
    "format_ratio",
    "format_size",
    "get_nested",
    "map_code",
    "parse_size_to_bytes",
    "to_float",
    "to_int",
    "to_text",
    "volume_factors",
]
