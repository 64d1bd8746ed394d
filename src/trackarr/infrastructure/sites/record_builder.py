"""Build canonical records from resolved raw field values."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from trackarr.domain.entities import SiteUserInfo, TorrentRecord
from trackarr.domain.sites.site_schema import SiteConfiguration
from trackarr.infrastructure.common.converters import to_float, to_int, to_text
from trackarr.infrastructure.common.normalizer import (
    compute_ratio,
    format_ratio,
    format_size,
    volume_factors,
)
from trackarr.infrastructure.common.parsers import parse_size_to_bytes

from .constants import URL_FIELDS

_OPTIONAL_TEXT_FIELDS = (
    "subtitle",
    "category",
    "upload_time",
    "imdb_url",
    "imdb_rating",
    "douban_url",
    "douban_rating",
    "discount",
    "discount_end_time",
    "resolution",
    "video_codec",
    "audio_codec",
    "source",
)


def build_url(domain: str, path: str) -> str:
    """Absolute URLs pass through; relative paths are joined to ``domain``."""
    if path.startswith(("http://", "https://")):
        return path
    if path.startswith("//"):
        scheme = domain.split(":", 1)[0]
        return f"{scheme}:{path}"
    base = domain if domain.endswith("/") else f"{domain}/"
    return f"{base}{path.lstrip('/')}"


def _optional_text(raw: Any) -> str | None:
    text = to_text(raw).strip()
    return text or None


def size_in_bytes(raw: Any) -> int | None:
    """Byte count from a numeric value or a human-readable size string."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    number = to_float(raw)
    if number is not None:
        return int(number) if math.isfinite(number) and number >= 0 else None
    parsed = parse_size_to_bytes(to_text(raw))
    return parsed or None


def _count(raw: Any) -> int | None:
    """Peer or transfer count; negative site values clamp to 0."""
    number = to_int(raw)
    return None if number is None else max(number, 0)


def _factor(raw: Any) -> float | None:
    number = to_float(raw)
    if number is None or not math.isfinite(number) or number < 0:
        return None
    return number


def build_torrent_record(
    config: SiteConfiguration, values: Mapping[str, Any]
) -> TorrentRecord:
    """Normalize one search item.

    Explicit volume-factor fields win over the discount-code lookup.
    """
    urls: dict[str, str | None] = {}
    for name in URL_FIELDS:
        link = _optional_text(values.get(name))
        urls[name] = build_url(config.domain, link) if link else None

    discount = _optional_text(values.get("discount"))
    promo = volume_factors(discount, config.discounts)
    download_factor = _factor(values.get("download_volume_factor"))
    upload_factor = _factor(values.get("upload_volume_factor"))
    if download_factor is None:
        download_factor = promo.download if promo else 1.0
    if upload_factor is None:
        upload_factor = promo.upload if promo else 1.0

    raw_size = values.get("size")
    return TorrentRecord(
        site_id=config.id,
        site_name=config.name,
        id=to_text(values.get("id")),
        title=to_text(values.get("title")),
        size=format_size(raw_size),
        size_bytes=size_in_bytes(raw_size),
        seeders=_count(values.get("seeders")) or 0,
        leechers=_count(values.get("leechers")) or 0,
        grabs=_count(values.get("grabs")),
        download_volume_factor=download_factor,
        upload_volume_factor=upload_factor,
        **urls,
        **{name: _optional_text(values.get(name)) for name in _OPTIONAL_TEXT_FIELDS},
    )


def build_user_info(
    config: SiteConfiguration, values: Mapping[str, Any]
) -> SiteUserInfo:
    """Normalize one account snapshot.

    Without a share-ratio value the ratio is computed from the raw
    uploaded/downloaded byte counts.
    """
    uploaded = values.get("uploaded")
    downloaded = values.get("downloaded")

    raw_ratio = values.get("share_ratio")
    if raw_ratio is None:
        raw_ratio = compute_ratio(size_in_bytes(uploaded), size_in_bytes(downloaded))

    return SiteUserInfo(
        uid=_optional_text(values.get("uid")) or "0",
        username=_optional_text(values.get("username")) or "unknown",
        uploaded=format_size(uploaded),
        downloaded=format_size(downloaded),
        share_ratio=format_ratio(raw_ratio, config.unlimited_ratio_tokens),
        seeding=_count(values.get("seeding")) or 0,
        leeching=_count(values.get("leeching")) or 0,
        vip_group=_optional_text(values.get("vip_group")),
        bonus=_optional_text(values.get("bonus")) or "0",
    )
