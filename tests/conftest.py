"""
Test Configuration
==================

Pytest fixtures for compliance search tests.
"""

import os
from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before settings are loaded
os.environ["ENVIRONMENT"] = "testing"
os.environ["LLM_ENABLED"] = "false"
os.environ["REGULATIONS_GOV_API_KEY"] = ""

from shared.llm import LLMMessage, LLMProvider, LLMResponse  # noqa: E402
from shared.models.compliance import RuleLevel  # noqa: E402
from services.compliance_search.cache import ResultCache  # noqa: E402
from services.compliance_search.orchestrator import ComplianceSearchOrchestrator  # noqa: E402
from services.compliance_search.relevance import RelevanceClassifier  # noqa: E402
from services.compliance_search.sources import (  # noqa: E402
    IRSSource,
    RawRule,
    RegulationsGovSource,
    SBASource,
)


class StubLLMProvider(LLMProvider):
    """Completion provider that replays queued responses."""

    def __init__(self, responses: list[str | Exception] | None = None) -> None:
        self.responses = list(responses or [])
        self.prompts: list[str] = []

    @property
    def name(self) -> str:
        return "stub"

    @property
    def model(self) -> str:
        return "stub-model"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        self.prompts.append(messages[-1].content)
        reply = self.responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=self.model, provider=self.name)

    async def health_check(self) -> dict[str, Any]:
        return {"status": "healthy", "provider": self.name}


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def make_rule() -> Callable[..., RawRule]:
    """Factory for raw rules with sensible defaults."""

    def _make(
        title: str = "Business License Requirements",
        summary: str = "Most businesses need licenses and permits to operate legally.",
        authority: str = "Small Business Administration",
        source: str = "sba.gov",
        level: RuleLevel = RuleLevel.FEDERAL,
        **kwargs: Any,
    ) -> RawRule:
        return RawRule(
            title=title,
            summary=summary,
            authority=authority,
            source=source,
            source_url=kwargs.pop("source_url", "https://www.sba.gov/business-guide"),
            level=level,
            **kwargs,
        )

    return _make


@pytest.fixture
def stub_llm() -> Callable[..., StubLLMProvider]:
    """Factory for stub completion providers."""
    return StubLLMProvider


@pytest.fixture
def offline_sba() -> Generator[SBASource, None, None]:
    """SBA source whose live API is unreachable, so it answers from its catalog."""
    source = SBASource()
    with patch.object(
        source,
        "_search_api",
        new_callable=AsyncMock,
        side_effect=httpx.ConnectError("connection refused"),
    ):
        yield source


@pytest.fixture
def orchestrator(offline_sba: SBASource) -> ComplianceSearchOrchestrator:
    """Orchestrator over offline sources with heuristic classification."""
    return ComplianceSearchOrchestrator(
        sources=[RegulationsGovSource(api_key=""), offline_sba, IRSSource()],
        classifier=RelevanceClassifier(llm=None, batch_delay_seconds=0),
        cache=ResultCache(),
        prewarm_delay_seconds=0,
    )


@pytest_asyncio.fixture
async def compliance_search_client(
    orchestrator: ComplianceSearchOrchestrator,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the Compliance Search Service."""
    from services.compliance_search.main import app
    from services.compliance_search.routes.search import get_orchestrator

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.state.orchestrator = orchestrator

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
    app.state.orchestrator = None
