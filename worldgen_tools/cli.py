"""Fetch the vanilla worldgen summaries into the local download cache."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from worldgen_tools.data.downloader import Downloader
from worldgen_tools.data.transport import OfflineDownloader, RequestsDownloader
from worldgen_tools.services.vanilla import VanillaDataService
from worldgen_tools.utils.config import get_cache_root, load_settings
from worldgen_tools.utils.logging import configure_logging

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download (or reuse cached) vanilla worldgen data from mcmeta."
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        help="Directory for cached payloads (default: WORLDGEN_CACHE_ROOT or the user cache dir).",
    )
    parser.add_argument(
        "--version",
        type=str,
        help="Minecraft version whose summary to fetch (default: WORLDGEN_MC_VERSION or 1.19.2).",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Never touch the network; serve whatever is already cached.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    settings = load_settings()

    cache_root = args.cache_dir or get_cache_root()
    if args.offline:
        transport = OfflineDownloader()
    else:
        transport = RequestsDownloader(
            user_agent=settings.user_agent,
            default_timeout_ms=settings.timeout_ms,
        )
    downloader = Downloader(cache_root, transport=transport)
    service = VanillaDataService(downloader, version=args.version or settings.mc_version)

    LOGGER.info("Using cache at %s", cache_root)
    data = service.load()
    for resource in service.resource_types:
        print(f"{resource.name}: {len(data.get(resource.key, {}))} entries")

    if not any(data.values()):
        LOGGER.error("No vanilla data available for %s", service.version)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
