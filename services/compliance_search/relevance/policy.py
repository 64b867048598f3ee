"""
Relevance Policy
================

Data tables that drive heuristic relevance scoring.

The category penalty lists and the business-type compatibility matrix are
tuning data. Swap in a different ``RelevancePolicy`` to change them without
touching the scorer.

Version: 0.1.0
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


# Keywords that mark a rule as belonging to an industry most businesses
# have nothing to do with.
IRRELEVANT_CATEGORIES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "healthcare": (
            "hospital", "medicare", "medicaid", "medical", "patient", "clinical",
            "health care", "nursing", "dialysis", "renal",
        ),
        "manufacturing": (
            "manufacturing", "factory", "production line", "assembly", "furnace",
            "washer", "appliance",
        ),
        "aviation": (
            "aircraft", "airplane", "helicopter", "aviation", "airworthiness", "flight",
        ),
        "marine": ("marine", "ocean", "offshore", "maritime", "vessel", "ship"),
        "agriculture": ("farming", "agricultural", "crop", "livestock", "pesticide"),
        "energy": (
            "nuclear", "power plant", "energy production", "utility",
            "electricity generation",
        ),
        "specialized": (
            "endangered species", "wildlife", "environmental protection",
            "toxic substances", "hazardous waste",
        ),
        "consumer_products": (
            "toy", "children", "infant", "baby", "consumer product safety",
        ),
    }
)

# Business types exempt from a category's penalty.
CATEGORY_COMPATIBILITY: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "healthcare": ("healthcare",),
        "manufacturing": ("manufacturing",),
        "aviation": ("aviation", "transportation"),
        "marine": ("marine", "transportation"),
        "agriculture": ("agriculture",),
        "energy": ("energy",),
        "specialized": (),
        "consumer_products": ("manufacturing", "retail"),
    }
)

# Phrases that are never relevant to a general small-business search.
HIGH_PENALTY_PHRASES: tuple[str, ...] = (
    "premerger notification",
    "merger",
    "acquisition",
    "cybersecurity labeling",
    "copyright circumvention",
    "supplemental nutrition",
    "food assistance",
    "clearing agency",
    "derivatives",
    "patent fees",
    "trademark fees",
)

SCORE_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "services": 0.3,
        "technology": 0.4,
        "online": 0.4,
        "industry": 0.5,
        "activities": 0.6,
        "query": 0.2,
    }
)

CATEGORY_PENALTY = 0.9
HIGH_PENALTY = 1.0

GENERAL_BUSINESS = "general_business"


@dataclass(frozen=True)
class BusinessTypeRule:
    """
    One row of the business-type inference table.

    Matches when the named keyword field contains any of ``terms``, or is
    non-empty at all when ``terms`` is empty.
    """

    business_type: str
    field: str
    terms: tuple[str, ...] = ()


# Evaluated in order; the first matching row wins.
BUSINESS_TYPE_RULES: tuple[BusinessTypeRule, ...] = (
    BusinessTypeRule("transportation", "industry", ("transportation", "logistics", "delivery", "trucking")),
    BusinessTypeRule("technology", "technology"),
    BusinessTypeRule("healthcare", "industry", ("healthcare", "medical")),
    BusinessTypeRule("professional_services", "services", ("consulting", "professional")),
    BusinessTypeRule("manufacturing", "industry", ("manufacturing",)),
    BusinessTypeRule("retail", "industry", ("retail",)),
    BusinessTypeRule("retail", "online"),
    BusinessTypeRule("agriculture", "industry", ("agriculture", "farming")),
    BusinessTypeRule("energy", "industry", ("energy",)),
    BusinessTypeRule("aviation", "industry", ("aviation",)),
    BusinessTypeRule("marine", "industry", ("marine",)),
)


@dataclass(frozen=True)
class RelevancePolicy:
    """Bundle of the tables above."""

    irrelevant_categories: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: IRRELEVANT_CATEGORIES
    )
    category_compatibility: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: CATEGORY_COMPATIBILITY
    )
    high_penalty_phrases: tuple[str, ...] = HIGH_PENALTY_PHRASES
    weights: Mapping[str, float] = field(default_factory=lambda: SCORE_WEIGHTS)
    category_penalty: float = CATEGORY_PENALTY
    high_penalty: float = HIGH_PENALTY
    business_type_rules: tuple[BusinessTypeRule, ...] = BUSINESS_TYPE_RULES

    @property
    def penalty_terms(self) -> tuple[str, ...]:
        """Every category keyword plus every high-penalty phrase."""
        terms = [t for keywords in self.irrelevant_categories.values() for t in keywords]
        return (*terms, *self.high_penalty_phrases)


DEFAULT_POLICY = RelevancePolicy()
