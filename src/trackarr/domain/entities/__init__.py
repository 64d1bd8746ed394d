from .records import (
    AggregatedSearchResult,
    ConnectionCheck,
    SiteSearchOutcome,
    SiteUserInfo,
    TorrentRecord,
)

__all__ = [
    "AggregatedSearchResult",
    "ConnectionCheck",
    "SiteSearchOutcome",
    "SiteUserInfo",
    "TorrentRecord",
]
