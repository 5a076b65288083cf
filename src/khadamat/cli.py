"""Command-line interface for browsing the marketplace catalog."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from .api import MarketplaceClient
from .browser import CATEGORY_PARAM, SEARCH_PARAM, QueryParams, ServiceBrowser
from .catalog import load_catalog
from .config import Settings, get_settings
from .filters import RATING_THRESHOLDS, SortOrder, mean_rating
from .governorates import GOVERNORATES, governorate_name
from .metrics import metrics_payload
from .notifications import LoggingNotifier


async def _services_async(
    settings: Settings,
    *,
    category: str | None,
    search: str | None,
    governorate: str,
    min_price: str,
    max_price: str,
    ratings: Sequence[int],
    sort: str | None,
) -> None:
    params = QueryParams()
    if category:
        params.set(CATEGORY_PARAM, category)
    if search:
        params.set(SEARCH_PARAM, search)

    async with MarketplaceClient(settings) as client:
        catalog = await load_catalog(client, LoggingNotifier())

    browser = ServiceBrowser(
        params,
        services=catalog.services,
        categories=catalog.categories,
        default_sort=settings.default_sort,
    )
    browser.select_governorate(governorate)
    browser.set_min_price(min_price)
    browser.set_max_price(max_price)
    for rating in ratings:
        browser.toggle_rating(rating)
    if sort:
        browser.select_sort(sort)

    visible = browser.visible_services()
    print(f"→ {len(visible)} of {browser.total_count()} service(s)")
    for service in visible:
        region = governorate_name(str(service.profile.user.region_id)) or service.profile.user.region_id
        print(
            f"   - {service.id}: {service.title} | {service.price:g} | "
            f"{mean_rating(service):.1f}★ | {region}"
        )


async def _categories_async(settings: Settings) -> None:
    async with MarketplaceClient(settings) as client:
        catalog = await load_catalog(client, LoggingNotifier())

    browser = ServiceBrowser(services=catalog.services, categories=catalog.categories)
    print(f"→ All services: {browser.total_count()}")
    for category, count in browser.category_badges():
        print(f"   - {category.id}: {category.name} ({count})")


def _emit_metrics(enabled: bool) -> None:
    if not enabled:
        return
    payload, _ = metrics_payload()
    print(payload.decode(), end="")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CLI helpers for the Khadamat marketplace catalog",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--emit-metrics",
        action="store_true",
        help="Print Prometheus metrics collected during the command",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    services_parser = subparsers.add_parser("services", help="List services matching filters")
    services_parser.add_argument("--category", help="Category id")
    services_parser.add_argument("--search", help="Free-text search on title and description")
    services_parser.add_argument(
        "--governorate",
        default="all",
        help="Governorate id (see the 'governorates' command)",
    )
    services_parser.add_argument("--min-price", default="", help="Minimum price")
    services_parser.add_argument("--max-price", default="", help="Maximum price")
    services_parser.add_argument(
        "--rating",
        type=int,
        action="append",
        choices=RATING_THRESHOLDS,
        default=[],
        help="Minimum average rating; may be repeated",
    )
    services_parser.add_argument(
        "--sort",
        choices=[order.value for order in SortOrder],
        help="Sort order (default from configuration)",
    )

    subparsers.add_parser("categories", help="List categories with service counts")
    subparsers.add_parser("governorates", help="List governorate ids")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    if args.command == "governorates":
        for governorate in GOVERNORATES:
            print(f"{governorate.id}: {governorate.name}")
        return 0

    settings = get_settings()

    if args.command == "services":
        asyncio.run(
            _services_async(
                settings,
                category=args.category,
                search=args.search,
                governorate=args.governorate,
                min_price=args.min_price,
                max_price=args.max_price,
                ratings=args.rating,
                sort=args.sort,
            )
        )
        _emit_metrics(args.emit_metrics)
        return 0

    if args.command == "categories":
        asyncio.run(_categories_async(settings))
        _emit_metrics(args.emit_metrics)
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
