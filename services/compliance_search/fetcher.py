"""
Parallel Fetch Coordinator
==========================

Runs every source concurrently under a per-source timeout. A slow or failing
source never affects the others; its failure is recorded, not raised.

Version: 0.1.0
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from shared.logging import get_logger
from shared.models.compliance import SearchQuery
from services.compliance_search.sources.base import BaseSource, RawRule, SourceResult

logger = get_logger(__name__)


DEFAULT_SOURCE_TIMEOUT = 8.0


@dataclass
class FetchResult:
    """Per-source outcomes of one fan-out, in source order."""

    per_source: list[SourceResult] = field(default_factory=list)

    @property
    def raw_rules(self) -> list[RawRule]:
        """All results merged in source order."""
        return [rule for result in self.per_source for rule in result.results]

    @property
    def errors(self) -> list[str]:
        return [f"{r.source}: {r.error}" for r in self.per_source if r.error]

    @property
    def counts(self) -> dict[str, int]:
        return {r.source: len(r.results) for r in self.per_source}

    @property
    def all_failed(self) -> bool:
        return bool(self.per_source) and all(not r.ok for r in self.per_source)


class FetchCoordinator:
    """Fans a query out to all sources and gathers their results."""

    def __init__(
        self,
        sources: Sequence[BaseSource],
        timeout_seconds: float = DEFAULT_SOURCE_TIMEOUT,
    ) -> None:
        self.sources = list(sources)
        self.timeout_seconds = timeout_seconds

    async def _fetch_one(self, source: BaseSource, query: SearchQuery) -> SourceResult:
        try:
            result = await asyncio.wait_for(source.search(query), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "source_timeout",
                source=source.source_id,
                timeout=self.timeout_seconds,
            )
            return SourceResult(
                source=source.source_id,
                error=f"timed out after {self.timeout_seconds:g}s",
            )
        except Exception as e:
            logger.warning("source_failed", source=source.source_id, error=str(e))
            return SourceResult(source=source.source_id, error=str(e) or type(e).__name__)

        logger.debug("source_complete", source=source.source_id, results=len(result.results))
        return result

    async def fetch_all(self, query: SearchQuery) -> FetchResult:
        """
        Query every source concurrently.

        Args:
            query: The search query

        Returns:
            FetchResult with one entry per source, in configured order
        """
        per_source = await asyncio.gather(
            *(self._fetch_one(source, query) for source in self.sources)
        )
        return FetchResult(per_source=list(per_source))

    async def close(self) -> None:
        """Close every source's HTTP client."""
        for source in self.sources:
            await source.close()
