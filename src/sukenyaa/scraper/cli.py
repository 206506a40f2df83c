"""One-shot search entry point: ``python -m sukenyaa.scraper.cli``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from sukenyaa.cache.fallback import create_cache
from sukenyaa.config import Settings, get_settings
from sukenyaa.scraper.service import build_scrapers
from sukenyaa.shared.enums import Site, SortKey, SortOrder
from sukenyaa.shared.exceptions import FetchError
from sukenyaa.shared.models import SearchFilters, SearchOptions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sukenyaa", description="Search a nyaa-style listing site.")
    parser.add_argument("query", nargs="?", default=None)
    parser.add_argument("--site", choices=[s.value for s in Site], default=Site.NYAA.value)
    parser.add_argument("--category")
    parser.add_argument("--quality")
    parser.add_argument("--language")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int)
    parser.add_argument("--sort", choices=[k.value for k in SortKey])
    parser.add_argument("--order", choices=[o.value for o in SortOrder])
    parser.add_argument("--trusted-only", action="store_true")
    parser.add_argument("--no-remakes", action="store_true")
    parser.add_argument("--health", action="store_true", help="only probe the site and report up/down")
    return parser


async def run_once(settings: Settings, args: argparse.Namespace) -> int:
    """Run a single search (or health probe) and print the outcome.

    Returns:
        Process exit status.
    """
    cache = await create_cache(settings)
    scrapers = build_scrapers(settings, cache)
    scraper = scrapers[Site(args.site)]

    try:
        await scraper.start()
        if args.health:
            up = await scraper.check_health()
            print("up" if up else "down")
            return 0 if up else 1

        filters = SearchFilters(
            query=args.query,
            category=args.category,
            quality=args.quality,
            language=args.language,
            trusted_only=args.trusted_only,
            exclude_remakes=args.no_remakes,
        )
        options = SearchOptions(
            page=args.page,
            limit=args.limit,
            sort=SortKey(args.sort) if args.sort else None,
            order=SortOrder(args.order) if args.order else None,
        )
        try:
            result = await scraper.search(filters, options)
        except FetchError as exc:
            print(str(exc), file=sys.stderr)
            return 1

        print(result.model_dump_json(indent=2))
        return 0
    finally:
        for item in scrapers.values():
            await item.close()
        await cache.close()


def main(argv: list[str] | None = None) -> None:
    """Entry point for ``python -m sukenyaa.scraper.cli``."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    sys.exit(asyncio.run(run_once(settings, args)))


if __name__ == "__main__":
    main()
