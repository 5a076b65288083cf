"""Loading of the service catalog with graceful degradation on fetch failures."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List

from .api import MarketplaceClient
from .models import Category, Notification, Service
from .notifications import Notifier

logger = logging.getLogger(__name__)

CATEGORIES_FETCH_FAILED = Notification(
    title="خطأ في جلب التصنيفات",
    description="حدث خطأ أثناء محاولة جلب التصنيفات. يرجى المحاولة مرة أخرى.",
    severity="destructive",
)
SERVICES_FETCH_FAILED = Notification(
    title="خطأ في جلب الخدمات",
    description="حدث خطأ أثناء محاولة جلب الخدمات. يرجى المحاولة مرة أخرى.",
    severity="destructive",
)


@dataclass
class Catalog:
    """Services and categories available to a listing view."""

    services: List[Service] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


async def load_catalog(
    client: MarketplaceClient,
    notifier: Notifier,
    *,
    refresh: bool = False,
) -> Catalog:
    """Fetch services and categories concurrently.

    Each failed fetch is reported once and replaced by an empty collection.
    """

    services_result, categories_result = await asyncio.gather(
        client.fetch_services(refresh=refresh),
        client.fetch_categories(refresh=refresh),
        return_exceptions=True,
    )
    catalog = Catalog()

    if isinstance(categories_result, BaseException):
        if isinstance(categories_result, asyncio.CancelledError):
            raise categories_result
        logger.warning("categories_unavailable error=%s", categories_result)
        catalog.errors.append(str(categories_result))
        notifier.notify(CATEGORIES_FETCH_FAILED)
    else:
        catalog.categories = list(categories_result)

    if isinstance(services_result, BaseException):
        if isinstance(services_result, asyncio.CancelledError):
            raise services_result
        logger.warning("services_unavailable error=%s", services_result)
        catalog.errors.append(str(services_result))
        notifier.notify(SERVICES_FETCH_FAILED)
    else:
        catalog.services = list(services_result)

    logger.info(
        "catalog_loaded services=%d categories=%d",
        len(catalog.services),
        len(catalog.categories),
    )
    return catalog
