"""
Base API Client - Shared HTTP plumbing for chapter backend collaborators.

Provides:
- One aiohttp session per client (or an injected one)
- Bearer token header
- Retry with exponential backoff for idempotent GETs
- Request counters for diagnostics
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Optional

import aiohttp

from core.config import ChapterApiConfig
from member_sources.exceptions import FetchError, RateLimitError
from member_sources.models import ApiStats


logger = logging.getLogger(__name__)


class BaseApiClient:
    """
    Base class for clients of the chapter REST backend.

    Subclasses call ``_get()`` with a path relative to the configured base
    URL. Server errors (5xx), rate limits (429) and connection errors are
    retried; other client errors (4xx) are raised immediately.
    """

    def __init__(
        self,
        config: Optional[ChapterApiConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config or ChapterApiConfig()
        self._session = session
        self._owns_session = session is None
        self._stats = ApiStats()

    @property
    def name(self) -> str:
        return "chapter_api"

    @property
    def config(self) -> ChapterApiConfig:
        return self._config

    async def _get(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """GET ``path`` with retries and return the decoded JSON body."""
        url = f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"
        try:
            data = await self._fetch_with_retry("GET", url, params)
        except FetchError as e:
            self._on_error(path, e)
            raise
        self._on_success()
        return data

    async def _fetch_with_retry(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Fetch with exponential backoff retry."""
        last_error: Optional[Exception] = None
        attempts = max(1, self._config.max_retries)
        backoff = self._config.retry_backoff_base

        for attempt in range(attempts):
            is_last = attempt + 1 >= attempts
            try:
                return await self._make_request(method, url, params=params)

            except RateLimitError as e:
                last_error = e
                if is_last:
                    break
                wait_time = e.retry_after_seconds or backoff ** attempt
                logger.warning(
                    f"[{self.name}] Rate limited, waiting {wait_time}s "
                    f"(attempt {attempt + 1}/{attempts})"
                )
                await asyncio.sleep(wait_time)

            except FetchError as e:
                if e.status_code is not None and not e.is_server_error():
                    raise
                last_error = e
                if is_last:
                    break
                wait_time = backoff ** attempt
                logger.warning(
                    f"[{self.name}] {e.message} for {url}, "
                    f"retrying in {wait_time}s (attempt {attempt + 1}/{attempts})"
                )
                await asyncio.sleep(wait_time)

        raise FetchError(
            message=f"Failed after {attempts} attempts",
            source_name=self.name,
            status_code=getattr(last_error, "status_code", None),
            request_url=url,
            original_error=last_error,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return headers

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make HTTP request with error handling."""
        session = await self._get_session()

        start_time = time.time()
        try:
            async with session.request(method, url, params=params) as response:
                latency_ms = (time.time() - start_time) * 1000

                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise RateLimitError(
                        message="Rate limit exceeded",
                        source_name=self.name,
                        retry_after_seconds=int(retry_after) if retry_after and retry_after.isdigit() else None,
                    )

                if response.status in (401, 403):
                    # Session is kept; the console decides whether to log out
                    logger.warning(f"[{self.name}] Auth error {response.status} for {url}")

                if response.status >= 400:
                    body = await response.text()
                    raise FetchError(
                        message=f"HTTP {response.status}",
                        source_name=self.name,
                        status_code=response.status,
                        response_body=body[:1000],
                        request_url=url,
                    )

                data = await response.json(content_type=None)
                logger.debug(f"[{self.name}] {method} {url} completed in {latency_ms:.1f}ms")
                return data

        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise FetchError(
                message=f"Connection error: {e}",
                source_name=self.name,
                request_url=url,
                original_error=e,
            )

    def _on_success(self) -> None:
        self._stats.request_count += 1
        self._stats.success_count += 1

    def _on_error(self, path: str, error: FetchError) -> None:
        self._stats.request_count += 1
        self._stats.error_count += 1
        self._stats.last_error = str(error)
        self._stats.last_error_time = datetime.utcnow()
        self._stats.per_endpoint_errors[path] = self._stats.per_endpoint_errors.get(path, 0) + 1
        logger.warning(f"[{self.name}] Request to {path} failed: {error}")

    def get_stats(self) -> ApiStats:
        return self._stats

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BaseApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(base_url={self._config.base_url})>"
