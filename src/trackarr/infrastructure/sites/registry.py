"""Site registry with lazy loading and in-memory caching."""

from __future__ import annotations

import re
from pathlib import Path

import structlog
import yaml

from trackarr.domain.sites import ConfigNotFound, ConfigParseError, SiteConfiguration
from trackarr.infrastructure.sites.validation_schema import SITE_ID_RE

from .loader import load_site_config, parse_site_config

log = structlog.get_logger(__name__)

_SUFFIXES = (".yml", ".yaml")
_SITE_ID = re.compile(SITE_ID_RE)


class SiteRegistry:
    """
    Directory-backed site registry.

    load():
      - resolves ``<sites_dir>/<site_id>.yml`` (or ``.yaml``), falling back to
        documents whose ``id`` key names the site
    list():
      - every loadable document sorted by id; broken documents are logged
        and skipped

    Parsed documents are cached per registry; results never are.
    """

    def __init__(self, sites_dir: Path) -> None:
        self._sites_dir = sites_dir
        self._cache: dict[Path, SiteConfiguration] = {}

    @property
    def sites_dir(self) -> Path:
        return self._sites_dir

    def _paths(self) -> list[Path]:
        if not self._sites_dir.is_dir():
            log.warning("sites_directory_not_found", directory=str(self._sites_dir))
            return []
        return sorted(
            (
                p
                for p in self._sites_dir.iterdir()
                if p.is_file() and p.suffix.lower() in _SUFFIXES
            ),
            key=lambda p: p.name,
        )

    def _load_path(self, path: Path) -> SiteConfiguration:
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        config = load_site_config(path)
        self._cache[path] = config
        log.info("site_loaded", site=config.id, site_file=str(path))
        return config

    def _peek_id(self, path: Path) -> str | None:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError):
            return None
        if not isinstance(data, dict):
            return None
        site_id = data.get("id")
        return site_id if isinstance(site_id, str) else path.stem

    def load(self, site_id: str) -> SiteConfiguration:
        """Return the configuration for ``site_id``.

        Raises ConfigNotFound when no document exists, ConfigParseError when
        the document exists but is malformed.
        """
        if not _SITE_ID.match(site_id):
            raise ConfigNotFound(site_id)

        for suffix in _SUFFIXES:
            path = self._sites_dir / f"{site_id}{suffix}"
            if path.is_file():
                config = self._load_path(path)
                if config.id == site_id:
                    return config

        for path in self._paths():
            if self._peek_id(path) == site_id:
                return self._load_path(path)

        raise ConfigNotFound(site_id)

    def list(self) -> list[SiteConfiguration]:
        configs: dict[str, SiteConfiguration] = {}
        for path in self._paths():
            try:
                config = self._load_path(path)
            except ConfigParseError as e:
                log.warning("site_skipped", site_file=str(path), error=str(e))
                continue
            if config.id in configs:
                log.warning(
                    "site_duplicate_id",
                    site=config.id,
                    site_file=str(path),
                )
                continue
            configs[config.id] = config

        log.info(
            "sites_discovered",
            count=len(configs),
            directory=str(self._sites_dir),
        )
        return [configs[k] for k in sorted(configs)]

    def parse(self, text: str, site_id: str) -> SiteConfiguration:
        """Parse a document supplied by an external store (not cached)."""
        return parse_site_config(text, default_id=site_id, source=f"<{site_id}>")
