"""
Relevance Classification
========================

Heuristic scoring, policy tables and the batched model classifier.
"""

from services.compliance_search.relevance.classifier import (
    RelevanceClassifier,
    build_classified_rule,
)
from services.compliance_search.relevance.policy import (
    DEFAULT_POLICY,
    RelevancePolicy,
)
from services.compliance_search.relevance.scoring import (
    calculate_relevance_score,
    has_penalty_terms,
    infer_business_type,
    is_business_in_category,
    matches_query,
)

__all__ = [
    "DEFAULT_POLICY",
    "RelevanceClassifier",
    "RelevancePolicy",
    "build_classified_rule",
    "calculate_relevance_score",
    "has_penalty_terms",
    "infer_business_type",
    "is_business_in_category",
    "matches_query",
]
