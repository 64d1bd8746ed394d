"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from trackarr.infrastructure.sites.constants import DEFAULT_USER_AGENT

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "trackarr",
    "environment": "dev",
    "sites": {
        "sites_dir": "./sites",
    },
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "search": {
        "max_concurrent_sites": 10,
        "site_timeout_seconds": None,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
