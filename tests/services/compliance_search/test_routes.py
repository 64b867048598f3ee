"""
Tests for Compliance Search Routes
==================================

Version: 0.1.0
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from services.compliance_search.errors import SearchPipelineError
from services.compliance_search.orchestrator import ComplianceSearchOrchestrator


class TestSearchRoutes:
    """Tests for /api/v1/search."""

    @pytest.mark.asyncio
    async def test_search(self, compliance_search_client: AsyncClient) -> None:
        response = await compliance_search_client.post(
            "/api/v1/search",
            json={"query": "restaurant licensing"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "hybrid"
        assert data["cached"] is False
        assert [r["title"] for r in data["results"]] == ["Business License Requirements"]
        assert data["results"][0]["classification_method"] == "keyword"

    @pytest.mark.asyncio
    async def test_search_repeat_is_cached(self, compliance_search_client: AsyncClient) -> None:
        await compliance_search_client.post("/api/v1/search", json={"query": "restaurant licensing"})

        response = await compliance_search_client.post(
            "/api/v1/search",
            json={"query": "restaurant licensing"},
        )

        assert response.json()["cached"] is True
        assert response.json()["source"] == "cache"

    @pytest.mark.asyncio
    async def test_search_with_business_context(
        self, compliance_search_client: AsyncClient
    ) -> None:
        response = await compliance_search_client.post(
            "/api/v1/search",
            json={
                "query": "payroll tax",
                "business_context": {
                    "business_type": "LLC",
                    "industry": "consulting",
                    "has_employees": True,
                },
            },
        )

        assert response.status_code == 200
        assert all(r["relevance_score"] >= 0.8 for r in response.json()["results"])

    @pytest.mark.asyncio
    async def test_empty_query_rejected(self, compliance_search_client: AsyncClient) -> None:
        response = await compliance_search_client.post("/api/v1/search", json={"query": ""})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_pipeline_failure_returns_502(
        self,
        compliance_search_client: AsyncClient,
        orchestrator: ComplianceSearchOrchestrator,
    ) -> None:
        with patch.object(
            orchestrator,
            "search",
            new_callable=AsyncMock,
            side_effect=SearchPipelineError("fetch", RuntimeError("boom")),
        ):
            response = await compliance_search_client.post(
                "/api/v1/search",
                json={"query": "restaurant licensing"},
            )

        assert response.status_code == 502
        body = response.json()
        assert body["error_code"] == "search_fetch_failed"
        assert body["success"] is False
        assert body["status_code"] == 502
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_missing_orchestrator_returns_503(
        self, compliance_search_client: AsyncClient
    ) -> None:
        from services.compliance_search.main import app

        app.dependency_overrides.clear()
        app.state.orchestrator = None

        response = await compliance_search_client.post(
            "/api/v1/search",
            json={"query": "restaurant licensing"},
        )

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["status_code"] == 503
        assert body["error_code"] is None

    @pytest.mark.asyncio
    async def test_cache_stats(self, compliance_search_client: AsyncClient) -> None:
        await compliance_search_client.post("/api/v1/search", json={"query": "restaurant licensing"})
        await compliance_search_client.post("/api/v1/search", json={"query": "restaurant licensing"})

        response = await compliance_search_client.get("/api/v1/search/cache/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["total_cached"] == 1
        assert data["cache_hit_rate"] == 50
        assert data["popular_terms"] == [{"query": "restaurant licensing", "hits": 1}]
        assert data["in_flight"] == 0


class TestHealthRoutes:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, compliance_search_client: AsyncClient) -> None:
        response = await compliance_search_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "compliance-search"
        assert data["components"]["search_engine"]["sources"] == ["regulations", "sba", "irs"]

    @pytest.mark.asyncio
    async def test_root(self, compliance_search_client: AsyncClient) -> None:
        response = await compliance_search_client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Compliance Search Service"
