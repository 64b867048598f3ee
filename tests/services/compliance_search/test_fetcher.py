"""
Tests for the Parallel Fetch Coordinator
========================================

Version: 0.1.0
"""

import asyncio
import time
from collections.abc import Callable

import pytest

from shared.models.compliance import SearchQuery
from services.compliance_search.fetcher import FetchCoordinator
from services.compliance_search.sources import BaseSource, RawRule, SourceResult


class ScriptedSource(BaseSource):
    """Source that returns fixed rules after an optional delay, or raises."""

    def __init__(
        self,
        name: str,
        rules: list[RawRule] | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        super().__init__()
        self._name = name
        self._rules = rules or []
        self._delay = delay
        self._error = error
        self.closed = False

    @property
    def source_id(self) -> str:
        return self._name

    @property
    def source_name(self) -> str:
        return f"{self._name}.test"

    @property
    def authority(self) -> str:
        return "Test Authority"

    async def search(self, query: SearchQuery) -> SourceResult:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return SourceResult(source=self.source_id, results=list(self._rules))

    async def close(self) -> None:
        self.closed = True


QUERY = SearchQuery(text="business tax")


class TestFetchCoordinator:
    """Tests for FetchCoordinator."""

    @pytest.mark.asyncio
    async def test_merges_in_source_order(self, make_rule: Callable[..., RawRule]) -> None:
        coordinator = FetchCoordinator(
            [
                ScriptedSource("a", [make_rule(title="A1")], delay=0.02),
                ScriptedSource("b", [make_rule(title="B1"), make_rule(title="B2")]),
                ScriptedSource("c", [make_rule(title="C1")], delay=0.01),
            ]
        )

        result = await coordinator.fetch_all(QUERY)

        assert [r.title for r in result.raw_rules] == ["A1", "B1", "B2", "C1"]
        assert result.counts == {"a": 1, "b": 2, "c": 1}
        assert result.errors == []
        assert not result.all_failed

    @pytest.mark.asyncio
    async def test_failure_isolated(self, make_rule: Callable[..., RawRule]) -> None:
        coordinator = FetchCoordinator(
            [
                ScriptedSource("a", error=RuntimeError("api down")),
                ScriptedSource("b", [make_rule(title="B1")]),
            ]
        )

        result = await coordinator.fetch_all(QUERY)

        assert [r.title for r in result.raw_rules] == ["B1"]
        assert result.errors == ["a: api down"]
        assert not result.all_failed

    @pytest.mark.asyncio
    async def test_timeout_isolated(self, make_rule: Callable[..., RawRule]) -> None:
        coordinator = FetchCoordinator(
            [
                ScriptedSource("slow", [make_rule(title="late")], delay=5),
                ScriptedSource("fast", [make_rule(title="F1")]),
            ],
            timeout_seconds=0.05,
        )

        started = time.perf_counter()
        result = await coordinator.fetch_all(QUERY)
        elapsed = time.perf_counter() - started

        assert [r.title for r in result.raw_rules] == ["F1"]
        assert len(result.errors) == 1
        assert result.errors[0].startswith("slow: timed out")
        assert elapsed < 1

    @pytest.mark.asyncio
    async def test_sources_run_concurrently(self) -> None:
        coordinator = FetchCoordinator(
            [ScriptedSource(name, delay=0.1) for name in ("a", "b", "c")]
        )

        started = time.perf_counter()
        await coordinator.fetch_all(QUERY)

        assert time.perf_counter() - started < 0.25

    @pytest.mark.asyncio
    async def test_all_failed(self) -> None:
        coordinator = FetchCoordinator(
            [
                ScriptedSource("a", error=RuntimeError("down")),
                ScriptedSource("b", error=ValueError("bad payload")),
            ]
        )

        result = await coordinator.fetch_all(QUERY)

        assert result.all_failed
        assert result.raw_rules == []
        assert len(result.errors) == 2

    @pytest.mark.asyncio
    async def test_empty_results_are_not_failures(self) -> None:
        coordinator = FetchCoordinator([ScriptedSource("a"), ScriptedSource("b")])

        result = await coordinator.fetch_all(QUERY)

        assert not result.all_failed

    @pytest.mark.asyncio
    async def test_close_closes_sources(self) -> None:
        sources = [ScriptedSource("a"), ScriptedSource("b")]
        coordinator = FetchCoordinator(sources)

        await coordinator.close()

        assert all(source.closed for source in sources)
