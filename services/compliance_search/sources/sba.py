"""
SBA Source
==========

Small Business Administration guidance. Tries the SBA content search API
and falls back to a canned catalog of core small-business requirements.

Version: 0.1.0
"""

import asyncio
from typing import Any

from shared.config import settings
from shared.logging import get_logger
from shared.models.compliance import SearchQuery
from services.compliance_search.sources.base import (
    BaseSource,
    RawRule,
    SourceConfig,
    SourceResult,
)
from services.compliance_search.sources.catalog import SBA_CATALOG, build_rules

logger = get_logger(__name__)


class SBASource(BaseSource):
    """SBA content search with a canned fallback. Never raises from search()."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        limit: int | None = None,
        category: str = "business-guide",
        config: SourceConfig | None = None,
    ) -> None:
        cfg = settings.sba
        timeout = timeout_seconds or cfg.timeout_seconds
        super().__init__(config or SourceConfig(read_timeout=timeout, retry_count=1))
        self.timeout_seconds = timeout
        self.base_url = (base_url or cfg.base_url).rstrip("/")
        self.limit = limit or cfg.limit
        self.category = category

    @property
    def source_id(self) -> str:
        return "sba"

    @property
    def source_name(self) -> str:
        return "sba.gov"

    @property
    def authority(self) -> str:
        return "Small Business Administration"

    async def search(self, query: SearchQuery) -> SourceResult:
        try:
            # One deadline for the whole live call, below the fetch timeout
            results = await asyncio.wait_for(self._search_api(query), self.timeout_seconds)
        except Exception as e:
            logger.info("sba_api_unavailable", error=str(e) or type(e).__name__)
            results = []

        if not results:
            results = build_rules(SBA_CATALOG, query.text, self.authority, self.source_name)
            logger.debug("sba_fallback_rules", query=query.text, results=len(results))

        return SourceResult(source=self.source_id, results=results)

    async def _search_api(self, query: SearchQuery) -> list[RawRule]:
        response = await self._request(
            "GET",
            f"{self.base_url}/content/search",
            params={
                "q": query.text,
                "category": self.category,
                "limit": self.limit,
            },
        )

        data = response.json()
        items: list[dict[str, Any]] = data.get("results", []) if isinstance(data, dict) else []

        return [self.parse_item(item, query.text) for item in items if item.get("title")]

    def parse_item(self, item: dict[str, Any], search_term: str) -> RawRule:
        """Map one SBA content record onto a raw rule."""
        summary = item.get("summary") or item.get("description") or item["title"]
        url = item.get("url") or "https://www.sba.gov/business-guide"
        if url.startswith("/"):
            url = f"https://www.sba.gov{url}"

        return RawRule(
            title=item["title"],
            summary=summary,
            content=item.get("body") or "",
            authority=self.authority,
            source=self.source_name,
            source_url=url,
            document_id=str(item["id"]) if item.get("id") is not None else None,
            search_term=search_term,
        )
