"""
Tests for Request Coalescing
============================

Version: 0.1.0
"""

import asyncio

import pytest

from services.compliance_search.coalescing import InFlightRegistry


class TestInFlightRegistry:
    """Tests for InFlightRegistry."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_run(self) -> None:
        registry: InFlightRegistry[str] = InFlightRegistry()
        release = asyncio.Event()
        calls = 0

        async def pipeline() -> str:
            nonlocal calls
            calls += 1
            await release.wait()
            return "result"

        waiters = [asyncio.create_task(registry.run("key", pipeline)) for _ in range(5)]
        await asyncio.sleep(0)

        assert registry.is_in_flight("key")
        assert len(registry) == 1

        release.set()
        results = await asyncio.gather(*waiters)

        assert results == ["result"] * 5
        assert calls == 1

    @pytest.mark.asyncio
    async def test_join_registers_before_first_await(self) -> None:
        registry: InFlightRegistry[str] = InFlightRegistry()
        calls = 0

        async def pipeline() -> str:
            nonlocal calls
            calls += 1
            return "result"

        first = registry.join("key", pipeline)
        second = registry.join("key", pipeline)

        assert first is second
        assert registry.is_in_flight("key")

        assert await first == "result"
        await asyncio.sleep(0)

        assert calls == 1
        assert not registry.is_in_flight("key")

    @pytest.mark.asyncio
    async def test_registration_cleared_on_success(self) -> None:
        registry: InFlightRegistry[int] = InFlightRegistry()

        async def pipeline() -> int:
            return 42

        assert await registry.run("key", pipeline) == 42
        assert not registry.is_in_flight("key")
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_error_propagates_to_all_callers_and_clears(self) -> None:
        registry: InFlightRegistry[int] = InFlightRegistry()
        release = asyncio.Event()

        async def pipeline() -> int:
            await release.wait()
            raise RuntimeError("boom")

        waiters = [asyncio.create_task(registry.run("key", pipeline)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()

        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert not registry.is_in_flight("key")

    @pytest.mark.asyncio
    async def test_new_run_after_failure(self) -> None:
        registry: InFlightRegistry[str] = InFlightRegistry()

        async def failing() -> str:
            raise RuntimeError("boom")

        async def succeeding() -> str:
            return "ok"

        with pytest.raises(RuntimeError):
            await registry.run("key", failing)

        assert await registry.run("key", succeeding) == "ok"

    @pytest.mark.asyncio
    async def test_cancelling_one_waiter_keeps_shared_run(self) -> None:
        registry: InFlightRegistry[str] = InFlightRegistry()
        release = asyncio.Event()

        async def pipeline() -> str:
            await release.wait()
            return "done"

        first = asyncio.create_task(registry.run("key", pipeline))
        second = asyncio.create_task(registry.run("key", pipeline))
        await asyncio.sleep(0)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        release.set()

        assert await second == "done"
        assert not registry.is_in_flight("key")

    @pytest.mark.asyncio
    async def test_different_keys_run_independently(self) -> None:
        registry: InFlightRegistry[str] = InFlightRegistry()
        calls: list[str] = []

        def factory(name: str):
            async def pipeline() -> str:
                calls.append(name)
                await asyncio.sleep(0)
                return name

            return pipeline

        results = await asyncio.gather(
            registry.run("a", factory("a")),
            registry.run("b", factory("b")),
        )

        assert results == ["a", "b"]
        assert sorted(calls) == ["a", "b"]
