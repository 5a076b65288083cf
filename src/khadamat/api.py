"""HTTP client for the marketplace API with caching, retries and metrics."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, List
from urllib.parse import urljoin

import httpx
from aiocache import Cache  # type: ignore[import-untyped]
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import Settings
from .metrics import record_fetch
from .models import Category, Service, User

logger = logging.getLogger(__name__)

_RETRY = dict(
    wait=wait_exponential(multiplier=1, min=1, max=6),
    stop=stop_after_attempt(3),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)


class ApiError(Exception):
    """Raised when the marketplace API cannot satisfy a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MarketplaceClient:
    """Fetches catalog and user data from the marketplace REST API."""

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        self._base_url = str(settings.api_base_url).rstrip("/") + "/"
        self._semaphore = asyncio.Semaphore(settings.concurrency)
        self._client = httpx.AsyncClient(
            timeout=settings.timeout_seconds,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
            transport=transport,
        )
        self._cache: Cache | None = None
        if settings.cache_ttl_seconds > 0:
            self._cache = Cache(Cache.MEMORY, ttl=settings.cache_ttl_seconds)

    async def close(self) -> None:
        """Close underlying HTTP client and cache."""

        await self._client.aclose()
        if self._cache:
            await self._cache.close()

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _absolute_url(self, path: str) -> str:
        return urljoin(self._base_url, path.lstrip("/"))

    @retry(**_RETRY)
    async def _get_json(
        self,
        path: str,
        *,
        resource: str,
        use_cache: bool = True,
        refresh: bool = False,
    ) -> Any:
        url = self._absolute_url(path)

        if use_cache and not refresh and self._cache:
            cached = await self._cache.get(url)
            if cached is not None:
                record_fetch(resource, cache_hit=True, outcome="success", duration_seconds=0.0)
                return json.loads(cached)

        start = time.perf_counter()
        try:
            async with self._semaphore:
                response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except Exception as exc:
            record_fetch(
                resource,
                cache_hit=False,
                outcome="error",
                duration_seconds=time.perf_counter() - start,
            )
            logger.warning("api_fetch_failed resource=%s url=%s error=%s", resource, url, exc)
            if isinstance(exc, httpx.HTTPStatusError):
                raise ApiError(
                    f"Error fetching {resource}: {exc.response.status_code}",
                    status_code=exc.response.status_code,
                ) from exc
            raise

        record_fetch(
            resource,
            cache_hit=False,
            outcome="success",
            duration_seconds=time.perf_counter() - start,
        )
        # A refresh still stores the new response for later cached reads.
        if use_cache and self._cache:
            await self._cache.set(url, response.text)
        return payload

    async def _load(
        self,
        path: str,
        *,
        resource: str,
        use_cache: bool = True,
        refresh: bool = False,
    ) -> Any:
        """Fetch JSON, converting failures left after retries into ``ApiError``."""

        try:
            return await self._get_json(path, resource=resource, use_cache=use_cache, refresh=refresh)
        except ApiError:
            raise
        except (httpx.HTTPError, ValueError) as exc:
            raise ApiError(f"Error fetching {resource}: {exc}") from exc

    async def fetch_services(self, *, refresh: bool = False) -> List[Service]:
        payload = await self._load("services", resource="services", refresh=refresh)
        return [Service.model_validate(item) for item in payload]

    async def fetch_categories(self, *, refresh: bool = False) -> List[Category]:
        payload = await self._load("categories", resource="categories", refresh=refresh)
        return [Category.model_validate(item) for item in payload]

    async def fetch_users(self) -> List[User]:
        payload = await self._load("users", resource="users", use_cache=False)
        return [User.model_validate(item) for item in payload]

    async def fetch_user_by_id(self, user_id: int) -> User:
        payload = await self._load(f"users/{user_id}", resource="user", use_cache=False)
        return User.model_validate(payload)

    async def update_user_status(self, user_id: int, status: str, token: str) -> User:
        """Change a user's status; requires a bearer token."""

        url = self._absolute_url(f"users/{user_id}")
        start = time.perf_counter()
        try:
            async with self._semaphore:
                response = await self._client.put(
                    url,
                    json={"status": status},
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            record_fetch(
                "user_status",
                cache_hit=False,
                outcome="error",
                duration_seconds=time.perf_counter() - start,
            )
            logger.warning("user_status_update_failed user_id=%s error=%s", user_id, exc)
            raise ApiError(f"Error updating user status: {exc}") from exc

        outcome = "success" if response.is_success else "error"
        record_fetch(
            "user_status",
            cache_hit=False,
            outcome=outcome,
            duration_seconds=time.perf_counter() - start,
        )
        if not response.is_success:
            message = f"Error updating user status: {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
            logger.warning("user_status_update_failed user_id=%s status=%s", user_id, response.status_code)
            raise ApiError(message, status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(f"Error updating user status: {exc}") from exc
        return User.model_validate(payload)
