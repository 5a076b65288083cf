"""Stateful service listing view keeping filter criteria in step with the URL."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import List
from urllib.parse import parse_qsl, urlencode

from .filters import (
    ALL_CATEGORIES,
    FilterCriteria,
    SortOrder,
    category_count,
    compute_visible,
    toggle_rating,
)
from .governorates import ALL_GOVERNORATES
from .models import Category, Service

logger = logging.getLogger(__name__)

CATEGORY_PARAM = "category"
SEARCH_PARAM = "search"


class QueryParams:
    """Ordered, multi-valued query string, mutated in place."""

    def __init__(self, pairs: Sequence[tuple[str, str]] = ()) -> None:
        self._pairs: List[tuple[str, str]] = [(str(k), str(v)) for k, v in pairs]

    @classmethod
    def parse(cls, query: str) -> "QueryParams":
        return cls(parse_qsl(query.lstrip("?"), keep_blank_values=True))

    def get(self, key: str) -> str | None:
        for name, value in self._pairs:
            if name == key:
                return value
        return None

    def set(self, key: str, value: str) -> None:
        """Replace every ``key`` entry with a single one at the first position."""

        updated: List[tuple[str, str]] = []
        placed = False
        for name, current in self._pairs:
            if name != key:
                updated.append((name, current))
            elif not placed:
                updated.append((key, value))
                placed = True
        if not placed:
            updated.append((key, value))
        self._pairs = updated

    def delete(self, key: str) -> None:
        self._pairs = [(name, value) for name, value in self._pairs if name != key]

    def items(self) -> List[tuple[str, str]]:
        return list(self._pairs)

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self._pairs)

    def __str__(self) -> str:
        return urlencode(self._pairs)

    def __repr__(self) -> str:
        return f"QueryParams({self._pairs!r})"


class ServiceBrowser:
    """Holds the catalog and the current criteria for one listing view.

    The ``category`` and ``search`` query parameters seed the criteria once.
    After that only the search setter writes back to the query string.
    """

    def __init__(
        self,
        query_params: QueryParams | None = None,
        *,
        services: Sequence[Service] = (),
        categories: Sequence[Category] = (),
        default_sort: str = SortOrder.NEWEST.value,
    ) -> None:
        self.query_params = query_params if query_params is not None else QueryParams()
        self._default_sort = SortOrder.parse(default_sort).value
        self.criteria = FilterCriteria(selected_sort=self._default_sort)
        self._services: List[Service] = list(services)
        self._categories: List[Category] = []
        self._pending_category: str | None = None
        self.seed_from_query()
        self.load_categories(categories)

    @property
    def services(self) -> List[Service]:
        return list(self._services)

    @property
    def categories(self) -> List[Category]:
        return list(self._categories)

    def seed_from_query(self) -> None:
        """Read the initial ``category`` and ``search`` parameters."""

        search = self.query_params.get(SEARCH_PARAM)
        if search:
            self.criteria = self.criteria.evolve(search_query=search)
        category = self.query_params.get(CATEGORY_PARAM)
        self._pending_category = category or None

    def load_services(self, services: Sequence[Service]) -> None:
        self._services = list(services)

    def load_categories(self, categories: Sequence[Category]) -> None:
        """Replace the category collection and apply a pending URL category."""

        self._categories = list(categories)
        if self._pending_category is None or not self._categories:
            return
        candidate = self._pending_category
        if any(str(category.id) == candidate for category in self._categories):
            self.criteria = self.criteria.evolve(selected_category=candidate)
            self._pending_category = None
        else:
            logger.debug("url_category_unknown category=%s", candidate)

    # Mutators

    def select_category(self, category_id: int | str) -> None:
        # A user choice supersedes any category still waiting on the URL seed.
        self._pending_category = None
        self.criteria = self.criteria.evolve(selected_category=str(category_id))

    def set_search_query(self, value: str) -> None:
        self.criteria = self.criteria.evolve(search_query=value)
        if value:
            self.query_params.set(SEARCH_PARAM, value)
        else:
            self.query_params.delete(SEARCH_PARAM)

    def select_governorate(self, governorate_id: int | str) -> None:
        self.criteria = self.criteria.evolve(selected_governorate=str(governorate_id))

    def set_min_price(self, value: str) -> None:
        self.criteria = self.criteria.evolve(min_price=value)

    def set_max_price(self, value: str) -> None:
        self.criteria = self.criteria.evolve(max_price=value)

    def toggle_rating(self, rating: int) -> None:
        self.criteria = self.criteria.evolve(
            selected_ratings=toggle_rating(self.criteria.selected_ratings, rating)
        )

    def select_sort(self, sort: str) -> None:
        self.criteria = self.criteria.evolve(selected_sort=sort)

    def reset_filters(self) -> None:
        """Return every criterion to its default and drop the search parameter."""

        self._pending_category = None
        self.criteria = FilterCriteria(
            selected_category=ALL_CATEGORIES,
            selected_governorate=ALL_GOVERNORATES,
            selected_sort=self._default_sort,
        )
        self.query_params.delete(SEARCH_PARAM)

    # Derivations

    def visible_services(self) -> List[Service]:
        return compute_visible(self._services, self.criteria)

    def category_count(self, category_id: int | str) -> int:
        return category_count(self._services, category_id)

    def total_count(self) -> int:
        return len(self._services)

    def category_badges(self) -> List[tuple[Category, int]]:
        return [(category, self.category_count(category.id)) for category in self._categories]
