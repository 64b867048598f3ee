"""
Shared Models
=============

Pydantic models shared by the compliance search service.

Models:
- Query models (SearchQuery, BusinessContext)
- Rule models (ClassifiedRule, RuleCategorization, ApplicabilityCriteria)
- Response models (SearchResponse, SearchStats, CacheStatsResponse)
- Common models (ErrorResponse, HealthResponse)
"""

from shared.models.compliance import (
    DEFAULT_BUSINESS_TYPES,
    ApplicabilityCriteria,
    BusinessContext,
    ClassificationMethod,
    ClassifiedRule,
    ComplianceStep,
    EstimatedCost,
    NumericRange,
    PenaltyRange,
    Priority,
    RuleCategorization,
    RuleLevel,
    SearchQuery,
)
from shared.models.search import (
    ApiStats,
    CacheStatsResponse,
    PopularTerm,
    SearchRequest,
    SearchResponse,
    SearchStats,
)
from shared.models.common import (
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    # Query
    "BusinessContext",
    "SearchQuery",
    # Rules
    "DEFAULT_BUSINESS_TYPES",
    "ApplicabilityCriteria",
    "ClassificationMethod",
    "ClassifiedRule",
    "ComplianceStep",
    "EstimatedCost",
    "NumericRange",
    "PenaltyRange",
    "Priority",
    "RuleCategorization",
    "RuleLevel",
    # Search
    "ApiStats",
    "CacheStatsResponse",
    "PopularTerm",
    "SearchRequest",
    "SearchResponse",
    "SearchStats",
    # Common
    "ErrorResponse",
    "HealthResponse",
]
