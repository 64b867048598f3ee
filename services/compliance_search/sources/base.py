"""
Base Source Module
==================

Abstract base class and common types for compliance rule sources.

Version: 0.1.0
"""

import asyncio
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx

from shared.logging import get_logger
from shared.models.compliance import RuleLevel, SearchQuery


logger = get_logger(__name__)


@dataclass
class SourceConfig:
    """HTTP behaviour for a source."""

    # Rate limiting
    min_request_interval_seconds: float = 0.0
    retry_count: int = 2
    retry_delay_seconds: float = 0.5

    # Timeouts
    connect_timeout: float = 5.0
    read_timeout: float = 8.0

    user_agent: str = "ComplianceSearch/0.1 (real-time compliance search)"


@dataclass
class RawRule:
    """A rule as returned by one source, before dedup and classification."""

    title: str
    summary: str
    authority: str
    source: str
    source_url: str
    content: str = ""
    level: RuleLevel = RuleLevel.FEDERAL

    document_id: str | None = None
    posted_date: str | None = None
    search_term: str = ""

    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def text(self) -> str:
        """Lowercased title, summary and content for keyword matching."""
        return f"{self.title} {self.summary} {self.content}".lower()


@dataclass
class SourceResult:
    """Outcome of one source search."""

    source: str
    results: list[RawRule] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BaseSource(ABC):
    """
    Abstract base class for compliance rule sources.

    Provides common functionality:
    - Lazily created HTTP client
    - Minimum spacing between successive requests
    - Retry on rate limiting, server errors and connection failures

    The caller enforces the overall per-search timeout.
    """

    def __init__(self, config: SourceConfig | None = None) -> None:
        self.config = config or SourceConfig()
        self._client: httpx.AsyncClient | None = None
        self._request_count = 0
        self._last_request_at: float | None = None
        self._spacing_lock = asyncio.Lock()

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Short identifier used in stats and errors (e.g. "regulations")."""
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier stamped on produced rules (e.g. "regulations.gov")."""
        ...

    @property
    @abstractmethod
    def authority(self) -> str:
        """Default issuing authority for rules from this source."""
        ...

    @abstractmethod
    async def search(self, query: SearchQuery) -> SourceResult:
        """
        Search the source for rules relevant to a query.

        Args:
            query: The search query and optional business context

        Returns:
            SourceResult with normalized raw rules
        """
        ...

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            timeout = httpx.Timeout(
                connect=self.config.connect_timeout,
                read=self.config.read_timeout,
                write=10.0,
                pool=10.0,
            )

            self._client = httpx.AsyncClient(
                timeout=timeout,
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "application/json",
                },
                follow_redirects=True,
                http2=True,
            )

        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _wait_for_slot(self) -> None:
        """Sleep until the minimum interval since the previous request has passed."""
        interval = self.config.min_request_interval_seconds
        async with self._spacing_lock:
            if interval > 0 and self._last_request_at is not None:
                elapsed = time.monotonic() - self._last_request_at
                if elapsed < interval:
                    await asyncio.sleep(interval - elapsed)
            self._last_request_at = time.monotonic()

    async def _request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an HTTP request with rate limiting and retry.

        Args:
            method: HTTP method
            url: URL to request
            **kwargs: Additional arguments for httpx

        Returns:
            HTTP response
        """
        client = await self._get_client()

        last_error: Exception | None = None
        for attempt in range(self.config.retry_count):
            await self._wait_for_slot()
            try:
                self._request_count += 1

                response = await client.request(method, url, **kwargs)
                response.raise_for_status()

                logger.debug(
                    "source_request",
                    source=self.source_id,
                    url=url,
                    status=response.status_code,
                )

                return response

            except httpx.HTTPStatusError as e:
                last_error = e
                if e.response.status_code == 429:
                    wait_time = self.config.retry_delay_seconds * (attempt + 1) * 2
                    logger.warning(
                        "rate_limited",
                        source=self.source_id,
                        wait=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                elif e.response.status_code >= 500:
                    await asyncio.sleep(self.config.retry_delay_seconds * (attempt + 1))
                else:
                    raise

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_error = e
                logger.warning(
                    "request_failed",
                    source=self.source_id,
                    attempt=attempt + 1,
                    error=str(e),
                )
                await asyncio.sleep(self.config.retry_delay_seconds * (attempt + 1))

        raise last_error or RuntimeError(f"Request failed after {self.config.retry_count} attempts")
