"""Canonical, site-independent output records."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TorrentRecord:
    """Normalized search result from a single tracker site.

    ``size`` is always a human-readable string produced by the normalizer.
    Volume factors stay raw multipliers (0 = free download, 2 = double upload).
    """

    site_id: str
    site_name: str
    id: str
    title: str
    size: str = "0 B"
    size_bytes: int | None = None
    seeders: int = 0
    leechers: int = 0
    grabs: int | None = None

    subtitle: str | None = None
    category: str | None = None
    upload_time: str | None = None

    download_url: str | None = None
    detail_url: str | None = None
    poster_url: str | None = None

    imdb_url: str | None = None
    imdb_rating: str | None = None
    douban_url: str | None = None
    douban_rating: str | None = None

    # Promotion
    discount: str | None = None
    discount_end_time: str | None = None
    download_volume_factor: float = 1.0
    upload_volume_factor: float = 1.0

    # Media attributes (after code-table mapping)
    resolution: str | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    source: str | None = None


@dataclass(frozen=True)
class SiteUserInfo:
    """Account snapshot for one tracker site."""

    uid: str = "0"
    username: str = "unknown"
    uploaded: str = "0 B"
    downloaded: str = "0 B"
    share_ratio: str = "0.000"
    seeding: int = 0
    leeching: int = 0
    vip_group: str | None = None
    bonus: str = "0"


@dataclass(frozen=True)
class SiteSearchOutcome:
    """Per-site result of one aggregated search.

    ``error`` is set when the site failed; ``records`` is then empty.
    """

    site_id: str
    site_name: str
    records: list[TorrentRecord] = field(default_factory=list)
    error: str | None = None
    duration_ms: int = 0
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AggregatedSearchResult:
    """Merged search output across all enabled sites for one keyword."""

    keyword: str
    results: list[TorrentRecord]
    outcomes: list[SiteSearchOutcome]
    time_taken_ms: int

    @property
    def failed_sites(self) -> list[str]:
        return [o.site_id for o in self.outcomes if not o.ok]

    @property
    def failure_count(self) -> int:
        return len(self.failed_sites)


@dataclass(frozen=True)
class ConnectionCheck:
    """Outcome of a site connection test."""

    success: bool
    message: str
    user_info: SiteUserInfo | None = None
