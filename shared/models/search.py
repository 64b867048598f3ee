"""
Search Response Models
======================

Shapes returned by the compliance search engine and its HTTP surface.

Version: 0.1.0
"""

from typing import Literal

from pydantic import BaseModel, Field

from shared.models.compliance import BusinessContext, ClassifiedRule


class ApiStats(BaseModel):
    """Per-source result counts and captured source errors."""

    counts: dict[str, int] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)


class SearchStats(BaseModel):
    """Pipeline statistics for one search."""

    from_apis: int = 0
    after_dedup: int = 0
    total_processed: int = 0
    new_rules_found: int = 0
    api_stats: ApiStats = Field(default_factory=ApiStats)
    processing_time_ms: float = 0.0


class SearchResponse(BaseModel):
    """Result of a compliance search."""

    results: list[ClassifiedRule] = Field(default_factory=list)
    source: Literal["cache", "hybrid"] = "hybrid"
    response_time_ms: float = 0.0
    cached: bool = False
    stats: SearchStats = Field(default_factory=SearchStats)


class SearchRequest(BaseModel):
    """HTTP request body for a compliance search."""

    query: str = Field(..., min_length=1, max_length=500)
    business_category: str | None = Field(default=None, max_length=100)
    business_context: BusinessContext | None = None


class PopularTerm(BaseModel):
    """A cached query and how often it was served from cache."""

    query: str
    hits: int


class CacheStatsResponse(BaseModel):
    """Read-only cache introspection."""

    total_cached: int = 0
    popular_terms: list[PopularTerm] = Field(default_factory=list)
    cache_hit_rate: int = Field(default=0, description="Percent of lookups served from cache")
    hits: int = 0
    misses: int = 0
    in_flight: int = 0
