from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

import structlog

from trackarr.application.use_cases import SiteAccount
from trackarr.domain.entities import AggregatedSearchResult
from trackarr.domain.sites import Credential, SearchBadRequest, SiteError
from trackarr.infrastructure.config import AppConfig, load_config
from trackarr.infrastructure.logging.setup import configure_logging
from trackarr.infrastructure.sites import SiteRegistry
from trackarr.infrastructure.sites.credentials import load_credentials
from trackarr.interfaces.composition import services

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="trackarr")

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--sites-dir",
        default=None,
        help="Override site documents directory.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sites", help="List loadable site documents.")

    search = sub.add_parser("search", help="Search all sites with credentials.")
    search.add_argument("keyword", help="Free-text search keyword.")
    search.add_argument(
        "--credentials",
        required=True,
        help="YAML file mapping site id to {cookies, api_key}.",
    )
    search.add_argument(
        "--site",
        action="append",
        default=None,
        help="Restrict the search to this site id (repeatable).",
    )

    userinfo = sub.add_parser("userinfo", help="Show account info for one site.")
    userinfo.add_argument("site_id", help="Site identifier.")
    userinfo.add_argument(
        "--credentials",
        required=True,
        help="YAML file mapping site id to {cookies, api_key}.",
    )

    return parser.parse_args(list(argv) if argv is not None else None)


def _dump(data: Any, out: TextIO) -> None:
    out.write(json.dumps(data, ensure_ascii=False, indent=2))
    out.write("\n")


def _search_payload(result: AggregatedSearchResult) -> dict[str, Any]:
    payload = dataclasses.asdict(result)
    payload["failed_sites"] = result.failed_sites
    payload["failure_count"] = result.failure_count
    return payload


def _cmd_sites(config: AppConfig, out: TextIO) -> int:
    registry = SiteRegistry(config.sites_dir)
    _dump(
        [
            {
                "id": site.id,
                "name": site.name,
                "domain": site.domain,
                "allow_auth_type": list(site.allow_auth_type),
                "api_search": site.api_search is not None,
                "html_search": site.search is not None,
            }
            for site in registry.list()
        ],
        out,
    )
    return EXIT_OK


async def _cmd_search(
    config: AppConfig, keyword: str, accounts: list[SiteAccount], out: TextIO
) -> int:
    async with services(config) as svc:
        result = await svc.search.search(keyword, accounts)
    _dump(_search_payload(result), out)
    return EXIT_OK


async def _cmd_userinfo(
    config: AppConfig, site_id: str, credential: Credential, out: TextIO
) -> int:
    async with services(config) as svc:
        info = await svc.user_info.get_user_info(site_id, credential)
    _dump(dataclasses.asdict(info) if info is not None else None, out)
    return EXIT_OK


def _run(args: argparse.Namespace, config: AppConfig, out: TextIO) -> int:
    if args.command == "sites":
        return _cmd_sites(config, out)

    credentials = load_credentials(Path(args.credentials))

    if args.command == "search":
        wanted = set(args.site) if args.site else None
        accounts = [
            SiteAccount(site_id=site_id, credential=credential)
            for site_id, credential in credentials.items()
            if wanted is None or site_id in wanted
        ]
        return asyncio.run(_cmd_search(config, args.keyword, accounts, out))

    credential = credentials.get(args.site_id, Credential())
    return asyncio.run(_cmd_userinfo(config, args.site_id, credential, out))


def start(argv: Iterable[str] | None = None, out: TextIO | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, configures logging (stderr), runs one
    command and writes its JSON result to stdout.
    """
    if argv is None:
        argv = sys.argv[1:]
    out = out or sys.stdout

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.sites_dir:
        cli_overrides["sites_dir"] = args.sites_dir
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )
    configure_logging(config)

    try:
        return _run(args, config, out)
    except SearchBadRequest as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (SiteError, FileNotFoundError, ValueError) as e:
        log.error("command_failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(start())
