"""Faceted filter, search and sort pipeline over the service catalog."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List

from .governorates import ALL_GOVERNORATES
from .models import Service

ALL_CATEGORIES = "all"
RATING_THRESHOLDS = (5, 4, 3, 2, 1)

_INTEGER_PREFIX = re.compile(r"^\s*([+-]?[0-9]+)")


class SortOrder(str, Enum):
    """Sort orders offered by the listing page."""

    NEWEST = "newest"
    TOP_RATED = "top-rated"
    PRICE_HIGH_LOW = "price-high-low"
    PRICE_LOW_HIGH = "price-low-high"

    @classmethod
    def parse(cls, value: str | "SortOrder" | None) -> "SortOrder":
        """Return the matching sort order, falling back to ``NEWEST``."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST


@dataclass(frozen=True)
class FilterCriteria:
    """The six independent criteria that narrow and order the listing."""

    selected_category: str = ALL_CATEGORIES
    search_query: str = ""
    selected_governorate: str = ALL_GOVERNORATES
    min_price: str = ""
    max_price: str = ""
    selected_ratings: frozenset[int] = field(default_factory=frozenset)
    selected_sort: str = SortOrder.NEWEST.value

    def evolve(self, **changes: object) -> "FilterCriteria":
        return replace(self, **changes)


def mean_rating(service: Service) -> float:
    """Average star rating of a service; ``0`` when it has no rates."""

    if not service.rates:
        return 0.0
    return sum(rate.num_star for rate in service.rates) / len(service.rates)


def parse_price_bound(value: str | None) -> int | None:
    """Read a price bound the way the listing form does.

    The leading integer of the text is used (``"12.5"`` reads as ``12``).
    Empty or non-numeric text yields ``None``, meaning no bound.
    """

    if not value:
        return None
    match = _INTEGER_PREFIX.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def category_count(services: Iterable[Service], category_id: int | str) -> int:
    """Count services in ``category_id`` across the whole, unfiltered catalog."""

    target = str(category_id)
    return sum(1 for service in services if str(service.category_id) == target)


def _narrow_by_category(services: Sequence[Service], category: str) -> List[Service]:
    if category == ALL_CATEGORIES:
        return list(services)
    return [service for service in services if str(service.category_id) == category]


def _narrow_by_text(services: Sequence[Service], query: str) -> List[Service]:
    if not query:
        return list(services)
    needle = query.lower()
    return [
        service
        for service in services
        if needle in service.title.lower() or needle in service.desc.lower()
    ]


def sort_services(services: Iterable[Service], sort: str | SortOrder) -> List[Service]:
    """Stable sort; unrecognised sort values order by newest first."""

    order = SortOrder.parse(sort)
    if order is SortOrder.TOP_RATED:
        return sorted(services, key=mean_rating, reverse=True)
    if order is SortOrder.PRICE_HIGH_LOW:
        return sorted(services, key=lambda service: service.price, reverse=True)
    if order is SortOrder.PRICE_LOW_HIGH:
        return sorted(services, key=lambda service: service.price)
    return sorted(services, key=lambda service: service.created_at.timestamp(), reverse=True)


def _passes_refinements(
    service: Service,
    *,
    governorate: str,
    min_price: int | None,
    max_price: int | None,
    ratings: frozenset[int],
) -> bool:
    if governorate != ALL_GOVERNORATES and str(service.profile.user.region_id) != governorate:
        return False
    if min_price is not None and service.price < min_price:
        return False
    if max_price is not None and service.price > max_price:
        return False
    if ratings:
        average = mean_rating(service)
        if not any(average >= threshold for threshold in ratings):
            return False
    return True


def compute_visible(services: Sequence[Service], criteria: FilterCriteria) -> List[Service]:
    """Derive the ordered list of services shown for ``criteria``.

    Stages run in a fixed order: category, text search, sort, then the
    governorate, price and rating refinements. No stage raises; invalid price
    text simply imposes no bound.
    """

    narrowed = _narrow_by_category(services, criteria.selected_category)
    narrowed = _narrow_by_text(narrowed, criteria.search_query)
    ordered = sort_services(narrowed, criteria.selected_sort)

    min_price = parse_price_bound(criteria.min_price)
    max_price = parse_price_bound(criteria.max_price)
    return [
        service
        for service in ordered
        if _passes_refinements(
            service,
            governorate=criteria.selected_governorate,
            min_price=min_price,
            max_price=max_price,
            ratings=criteria.selected_ratings,
        )
    ]


def toggle_rating(ratings: frozenset[int], rating: int) -> frozenset[int]:
    """Add ``rating`` to the selection, or remove it when already selected."""

    if rating not in RATING_THRESHOLDS:
        return ratings
    if rating in ratings:
        return ratings - {rating}
    return ratings | {rating}
