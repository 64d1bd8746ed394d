"""Shared constants for site adapters."""

from __future__ import annotations

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

DEFAULT_CLIENT_TIMEOUT = 30.0

JSON_CONTENT_TYPE = "application/json"

# Record fields holding links; relative values are joined to the site domain.
URL_FIELDS = frozenset({"download_url", "detail_url", "poster_url"})

# Alternative field names accepted in site documents.
FIELD_ALIASES = {
    "user_group": "vip_group",
    "ratio": "share_ratio",
    "completed": "grabs",
    "snatched": "grabs",
}
