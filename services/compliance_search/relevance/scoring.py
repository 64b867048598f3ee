"""
Heuristic Relevance Scoring
===========================

Additive keyword scoring with category penalties. Pure functions.

Version: 0.1.0
"""

from collections.abc import Iterable

from services.compliance_search.keywords import BusinessKeywords, contains_term
from services.compliance_search.relevance.policy import (
    DEFAULT_POLICY,
    GENERAL_BUSINESS,
    RelevancePolicy,
)
from services.compliance_search.sources.base import RawRule


def infer_business_type(
    keywords: BusinessKeywords,
    policy: RelevancePolicy = DEFAULT_POLICY,
) -> str:
    """First matching row of the policy's inference table, else general_business."""
    for row in policy.business_type_rules:
        values: list[str] = getattr(keywords, row.field)
        if not values:
            continue
        if not row.terms or any(term in values for term in row.terms):
            return row.business_type

    return GENERAL_BUSINESS


def is_business_in_category(
    business_type: str,
    category: str,
    policy: RelevancePolicy = DEFAULT_POLICY,
) -> bool:
    """Whether a business type is exempt from a category's penalty."""
    return business_type in policy.category_compatibility.get(category, ())


def has_penalty_terms(text: str, policy: RelevancePolicy = DEFAULT_POLICY) -> bool:
    """Whether text mentions any penalized category keyword or phrase."""
    text = text.lower()
    return any(contains_term(text, term) for term in policy.penalty_terms)


def matches_query(text: str, query_keywords: Iterable[str]) -> bool:
    """Whether text mentions at least one query keyword."""
    text = text.lower()
    return any(contains_term(text, keyword) for keyword in query_keywords)


def calculate_relevance_score(
    rule: RawRule,
    business_keywords: BusinessKeywords,
    query_keywords: Iterable[str],
    policy: RelevancePolicy = DEFAULT_POLICY,
) -> float:
    """
    Score how relevant a rule is to a business and query.

    Each business keyword found in the rule adds its group's weight, each
    query keyword adds the query weight. Each keyword of a penalized
    category subtracts the category penalty unless the inferred business
    type is compatible with that category; each high-penalty phrase
    subtracts the high penalty.

    Returns:
        Score clamped to [0, 1]
    """
    text = rule.text
    weights = policy.weights
    score = 0.0

    for group in ("services", "technology", "online", "industry", "activities"):
        for keyword in getattr(business_keywords, group):
            if contains_term(text, keyword):
                score += weights[group]

    for keyword in set(query_keywords):
        if contains_term(text, keyword):
            score += weights["query"]

    business_type = infer_business_type(business_keywords, policy)

    for category, keywords in policy.irrelevant_categories.items():
        if is_business_in_category(business_type, category, policy):
            continue
        for keyword in keywords:
            if contains_term(text, keyword):
                score -= policy.category_penalty

    for phrase in policy.high_penalty_phrases:
        if contains_term(text, phrase):
            score -= policy.high_penalty

    return max(0.0, min(1.0, score))
