"""
Search Orchestrator
===================

Entry point of the compliance search engine.

Pipeline for one query:
    cache check -> (miss) coalesce -> extract -> fetch -> dedupe
    -> classify -> cache store

Identical concurrent queries share one pipeline run. Source failures
degrade the result instead of failing it; anything else that goes wrong
is raised as SearchPipelineError to every caller waiting on the run.

Version: 0.1.0
"""

import asyncio
import time
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

from shared.config import Settings, get_settings
from shared.llm import LLMProvider, get_llm_provider
from shared.logging import get_logger
from shared.models.compliance import BusinessContext, SearchQuery
from shared.models.search import (
    ApiStats,
    CacheStatsResponse,
    SearchResponse,
    SearchStats,
)
from services.compliance_search.cache import CacheEntry, ResultCache
from services.compliance_search.coalescing import InFlightRegistry
from services.compliance_search.dedup import dedupe
from services.compliance_search.errors import SearchPipelineError
from services.compliance_search.fetcher import DEFAULT_SOURCE_TIMEOUT, FetchCoordinator
from services.compliance_search.keywords import build_targeted_query, extract_search_terms
from services.compliance_search.progress import (
    ProgressCallback,
    ProgressReporter,
    ProgressStep,
)
from services.compliance_search.relevance import RelevanceClassifier
from services.compliance_search.sources import (
    BaseSource,
    IRSSource,
    RegulationsGovSource,
    SBASource,
)

logger = get_logger(__name__)


PREWARM_QUERIES = (
    "restaurant licensing",
    "healthcare compliance",
    "construction permits",
    "retail business requirements",
    "technology startup compliance",
    "manufacturing safety",
    "financial services regulations",
    "food service permits",
    "business tax requirements",
    "employee hiring requirements",
)


class SearchStage(str, Enum):
    """Pipeline states. ERROR is reported with the stage that failed."""

    IDLE = "idle"
    CACHE_CHECK = "cache_check"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    COALESCE = "coalesce"
    EXTRACT = "extract"
    FETCH = "fetch"
    DEDUPE = "dedupe"
    CLASSIFY = "classify"
    CACHE_STORE = "cache_store"
    DONE = "done"
    ERROR = "error"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class ComplianceSearchOrchestrator:
    """
    Wires cache, coalescing, fetch, dedup and classification together.

    Owns the result cache and the in-flight registry; both are only touched
    from the event loop.
    """

    def __init__(
        self,
        sources: Sequence[BaseSource],
        classifier: RelevanceClassifier,
        cache: ResultCache | None = None,
        source_timeout_seconds: float = DEFAULT_SOURCE_TIMEOUT,
        prewarm_delay_seconds: float = 2.0,
    ) -> None:
        self.fetcher = FetchCoordinator(sources, timeout_seconds=source_timeout_seconds)
        self.classifier = classifier
        self.cache = cache if cache is not None else ResultCache()
        self.in_flight: InFlightRegistry[SearchResponse] = InFlightRegistry()
        self.prewarm_delay_seconds = prewarm_delay_seconds

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        llm: LLMProvider | None = None,
    ) -> "ComplianceSearchOrchestrator":
        """Build an orchestrator with the three standard sources."""
        cfg = settings or get_settings()

        if llm is None and cfg.llm.enabled:
            try:
                llm = get_llm_provider()
            except ValueError as e:
                logger.warning("llm_classification_disabled", reason=str(e))

        classifier = RelevanceClassifier(
            llm=llm if cfg.llm.enabled else None,
            threshold=cfg.search.relevance_threshold,
            batch_size=cfg.search.batch_size,
            batch_delay_seconds=cfg.search.batch_delay_seconds,
            temperature=cfg.llm.temperature,
            max_tokens=cfg.llm.max_tokens,
        )

        return cls(
            sources=[RegulationsGovSource(), SBASource(), IRSSource()],
            classifier=classifier,
            cache=ResultCache(
                ttl_seconds=cfg.search.cache_ttl_seconds,
                max_entries=cfg.search.cache_max_entries,
            ),
            source_timeout_seconds=cfg.search.source_timeout_seconds,
            prewarm_delay_seconds=cfg.search.prewarm_delay_seconds,
        )

    # =========================================================================
    # Search
    # =========================================================================

    async def search(
        self,
        text: str,
        business_category: str | None = None,
        business_context: BusinessContext | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> SearchResponse:
        """
        Run a compliance search.

        Args:
            text: Free-text query
            business_category: Optional category; part of the cache key
            business_context: Optional business profile; enables scoring threshold
            on_progress: Optional sync or async callback receiving ProgressEvents

        Returns:
            SearchResponse, served from cache when a fresh entry exists

        Raises:
            SearchPipelineError: If the pipeline fails for a reason other
                than source unavailability
        """
        started = time.perf_counter()
        query = SearchQuery(
            text=text,
            business_category=business_category,
            business_context=business_context,
        )
        reporter = ProgressReporter(on_progress)
        key = query.cache_key

        await reporter.emit(ProgressStep.INITIALIZING, "Starting compliance search")
        await reporter.emit(ProgressStep.CACHE_CHECK, "Checking cached results")

        entry = self._cache_get(key)
        if entry is not None:
            logger.info("search_cache_hit", cache_key=key, query=query.text, hits=entry.hit_count)
            response = entry.response.model_copy(
                update={
                    "source": "cache",
                    "cached": True,
                    "response_time_ms": _elapsed_ms(started),
                },
                deep=True,
            )
            await reporter.emit(
                ProgressStep.COMPLETE,
                f"Found {len(response.results)} cached rules",
            )
            return response

        # No await between the cache check and joining the shared run.
        coalesced = self.in_flight.is_in_flight(key)
        task = self.in_flight.join(key, lambda: self._run_pipeline(query, reporter))

        if coalesced:
            await reporter.emit(ProgressStep.WAITING, "Waiting for an identical search in progress")

        try:
            response = await asyncio.shield(task)
        except SearchPipelineError as e:
            await reporter.error(str(e), recoverable=False)
            raise

        await reporter.emit(
            ProgressStep.COMPLETE,
            f"Found {len(response.results)} relevant rules",
        )
        return response.model_copy(
            update={"response_time_ms": _elapsed_ms(started)},
            deep=True,
        )

    async def _run_pipeline(self, query: SearchQuery, reporter: ProgressReporter) -> SearchResponse:
        started = time.perf_counter()
        stage = SearchStage.EXTRACT

        try:
            terms = extract_search_terms(query.text)
            logger.info(
                "search_started",
                query=query.text,
                targeted_query=build_targeted_query(terms),
                has_context=query.business_context is not None,
            )

            stage = SearchStage.FETCH
            await reporter.emit(ProgressStep.API_SEARCH, "Searching government sources")
            fetched = await self.fetcher.fetch_all(query)
            raw_rules = fetched.raw_rules

            await reporter.emit(
                ProgressStep.PROCESSING_APIS,
                f"Found {len(raw_rules)} rules from {len(fetched.per_source)} sources",
            )
            for error in fetched.errors:
                await reporter.error(f"Source unavailable: {error}", recoverable=True)

            stage = SearchStage.DEDUPE
            await reporter.emit(ProgressStep.AI_PROCESSING, "Processing rules")
            await reporter.emit(ProgressStep.DEDUPLICATING, "Removing duplicate rules")
            unique = dedupe(raw_rules)

            stage = SearchStage.CLASSIFY
            results = await self.classifier.classify(unique, query, reporter)

            stage = SearchStage.CACHE_STORE
            await reporter.emit(ProgressStep.FINALIZING, "Finalizing results")

            response = SearchResponse(
                results=results,
                source="hybrid",
                cached=False,
                response_time_ms=_elapsed_ms(started),
                stats=SearchStats(
                    from_apis=len(raw_rules),
                    after_dedup=len(unique),
                    total_processed=len(unique),
                    new_rules_found=len(results),
                    api_stats=ApiStats(counts=fetched.counts, errors=fetched.errors),
                    processing_time_ms=_elapsed_ms(started),
                ),
            )

            if fetched.all_failed:
                logger.warning("search_result_not_cached", query=query.text, reason="all sources failed")
            else:
                self._cache_put(query, response)

        except Exception as e:
            logger.error(
                "search_pipeline_failed",
                query=query.text,
                stage=stage.value,
                error=str(e),
                exc_info=True,
            )
            raise SearchPipelineError(stage.value, e) from e

        logger.info(
            "search_complete",
            query=query.text,
            from_apis=response.stats.from_apis,
            after_dedup=response.stats.after_dedup,
            results=len(results),
            duration_ms=response.stats.processing_time_ms,
        )
        return response

    # =========================================================================
    # Cache access (fails open)
    # =========================================================================

    def _cache_get(self, key: str) -> CacheEntry | None:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning("cache_read_failed", cache_key=key, error=str(e))
            return None

    def _cache_put(self, query: SearchQuery, response: SearchResponse) -> None:
        try:
            self.cache.put(query.cache_key, query.text, response)
        except Exception as e:
            logger.warning("cache_write_failed", cache_key=query.cache_key, error=str(e))

    # =========================================================================
    # Introspection and lifecycle
    # =========================================================================

    def get_cache_stats(self) -> CacheStatsResponse:
        """Cache size, popular queries, hit rate and in-flight count."""
        return self.cache.stats().model_copy(update={"in_flight": len(self.in_flight)})

    async def prewarm(self, queries: Iterable[str] = PREWARM_QUERIES) -> int:
        """
        Populate the cache with common queries, one at a time.

        Failures are logged and skipped.

        Returns:
            Number of queries that completed
        """
        warmed = 0

        for index, text in enumerate(queries):
            if index > 0 and self.prewarm_delay_seconds > 0:
                await asyncio.sleep(self.prewarm_delay_seconds)
            try:
                await self.search(text)
                warmed += 1
            except Exception as e:
                logger.warning("prewarm_query_failed", query=text, error=str(e))

        logger.info("cache_prewarmed", queries=warmed)
        return warmed

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "sources": [source.source_id for source in self.fetcher.sources],
            "ai_classification": self.classifier.ai_enabled,
            "cache_entries": len(self.cache),
            "in_flight": len(self.in_flight),
        }

    async def close(self) -> None:
        """Release HTTP clients held by sources and the model provider."""
        await self.fetcher.close()
        if self.classifier.llm is not None:
            await self.classifier.llm.close()
