"""
Keyword and Context Extraction
==============================

Derives search terms and business-activity signals from free text.

Everything here is a pure function: no I/O, no shared state.

Version: 0.1.0
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import lru_cache

from shared.models.compliance import BusinessContext


STOP_WORDS = frozenset(
    {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
        "by", "a", "an", "are", "is", "was", "be", "been", "do", "does", "what",
        "how", "my", "our", "your", "any", "all", "from", "that", "this", "about",
        "into", "can", "will", "should", "not", "who", "which", "when", "where",
        "why", "its", "their", "there", "has", "have", "had", "get",
    }
)

# Terms that make a regulatory query more specific, in priority order
BUSINESS_PROCESS_TERMS = frozenset(
    {
        "business", "company", "startup", "llc", "corporation", "compliance",
        "licensing", "license", "registration", "permit", "permits",
    }
)
TECHNOLOGY_QUERY_TERMS = frozenset(
    {"software", "website", "digital", "online", "technology", "app", "development"}
)

MAX_TARGETED_TERMS = 5

SERVICE_TERMS = (
    "design", "development", "consulting", "support", "maintenance", "training",
    "implementation", "integration", "customization", "optimization",
    "management", "analysis", "strategy", "solutions", "professional",
)
TECHNOLOGY_TERMS = (
    "software", "website", "mobile", "app", "application", "platform", "database",
    "cloud", "api", "digital", "web", "internet", "saas",
)
ONLINE_TERMS = (
    "online", "e-commerce", "ecommerce", "marketplace", "online store",
    "dropshipping", "subscription",
)
INDUSTRY_TERMS = (
    "healthcare", "finance", "retail", "manufacturing", "construction",
    "education", "nonprofit", "government", "startup", "enterprise",
    "restaurant", "food", "medical", "legal", "accounting", "transportation",
    "logistics", "delivery", "trucking", "agriculture", "farming", "energy",
    "aviation", "marine",
)

_PHRASE = r"((?:[a-z][a-z-]*\s?){1,4})"
ACTIVITY_PATTERNS = (
    re.compile(
        r"\bwe (?:provide|offer|deliver|create|build|develop|design|manage|help with)\s+"
        + _PHRASE
    ),
    re.compile(r"\bspeciali[sz](?:e|es|ing) in\s+" + _PHRASE),
    re.compile(r"\b(?:custom|affordable|user-friendly|tailored)\s+" + _PHRASE),
)
_PHRASE_BREAKERS = STOP_WORDS | {"we", "us", "also", "including", "such"}

_TOKEN_RE = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


@dataclass
class BusinessKeywords:
    """Business-activity signals extracted from a profile description."""

    services: list[str] = field(default_factory=list)
    technology: list[str] = field(default_factory=list)
    online: list[str] = field(default_factory=list)
    industry: list[str] = field(default_factory=list)
    activities: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.services or self.technology or self.online or self.industry or self.activities
        )


@lru_cache(maxsize=2048)
def _term_pattern(term: str) -> re.Pattern[str]:
    escaped = r"\s+".join(re.escape(word) for word in term.lower().split())
    return re.compile(rf"(?<![a-z0-9]){escaped}(?:s|es)?(?![a-z0-9])")


def contains_term(text: str, term: str) -> bool:
    """
    Check whether ``term`` occurs in ``text`` as a whole word or phrase.

    A trailing plural suffix is allowed, so "toy" matches "toys" but "ship"
    does not match "partnership". ``text`` is expected to be lowercase.
    """
    if not term:
        return False
    return _term_pattern(term).search(text) is not None


def _match_terms(text: str, terms: Iterable[str]) -> list[str]:
    return [term for term in terms if contains_term(text, term)]


def extract_search_terms(text: str) -> list[str]:
    """
    Tokenize a query into ordered, unique search terms.

    Lowercases, splits on non-word characters, and drops stop words and
    tokens of two characters or fewer.
    """
    terms: list[str] = []
    seen: set[str] = set()

    for token in _TOKEN_RE.findall(text.lower()):
        if len(token) <= 2 or token in STOP_WORDS or token in seen:
            continue
        seen.add(token)
        terms.append(token)

    return terms


def extract_search_keywords(text: str) -> set[str]:
    """Set of meaningful keywords in a query."""
    return set(extract_search_terms(text))


def _clean_activity(phrase: str) -> str:
    words: list[str] = []
    for word in phrase.split():
        if word in _PHRASE_BREAKERS:
            break
        words.append(word)
    return " ".join(words).strip("- ")


def extract_business_keywords(description: str) -> BusinessKeywords:
    """
    Categorize a business description against the fixed keyword lists.

    Also extracts short activity phrases such as "we provide X" or
    "specializing in X".
    """
    text = description.lower()

    keywords = BusinessKeywords(
        services=_match_terms(text, SERVICE_TERMS),
        technology=_match_terms(text, TECHNOLOGY_TERMS),
        online=_match_terms(text, ONLINE_TERMS),
        industry=_match_terms(text, INDUSTRY_TERMS),
    )

    for pattern in ACTIVITY_PATTERNS:
        for match in pattern.finditer(text):
            activity = _clean_activity(match.group(1))
            if len(activity) > 2 and activity not in keywords.activities:
                keywords.activities.append(activity)

    return keywords


def build_targeted_query(terms: Sequence[str]) -> str:
    """
    Build a short, specific query string for the document search API.

    Business/process terms come first, technology terms second, the rest
    last; duplicates are dropped and at most five terms are kept.
    """
    business = [t for t in terms if t in BUSINESS_PROCESS_TERMS]
    technology = [t for t in terms if t in TECHNOLOGY_QUERY_TERMS]
    remainder = [
        t for t in terms if t not in BUSINESS_PROCESS_TERMS and t not in TECHNOLOGY_QUERY_TERMS
    ]

    ordered = list(dict.fromkeys([*business, *technology, *remainder]))
    return " ".join(ordered[:MAX_TARGETED_TERMS])


def infer_business_context(query: str, context: BusinessContext | None = None) -> str:
    """Describe the business for the classification prompt."""
    text = query.lower()
    contexts: list[str] = []

    if context is not None:
        summary = context.summary()
        if summary:
            contexts.append(summary)
        description = context.industry_description or context.business_description
        if description:
            contexts.append(description.strip())

    if any(contains_term(text, t) for t in ("software", "website", "digital", "app", "technology")):
        contexts.append("Technology/Digital Services company")
    if any(contains_term(text, t) for t in ("consulting", "services", "solutions")):
        contexts.append("Professional Services provider")
    if any(contains_term(text, t) for t in ("small", "startup", "llc", "sole proprietorship")):
        contexts.append("Small Business")
    if any(contains_term(text, t) for t in ("online", "ecommerce", "e-commerce", "marketplace")):
        contexts.append("Online/E-commerce business")

    if not contexts:
        contexts.append("General business")

    return ", ".join(contexts)


def relevant_agencies(terms: Iterable[str]) -> list[str]:
    """Agency ids to filter the document search by."""
    terms = set(terms)
    agencies: list[str] = []

    if terms & {"software", "digital", "online", "website", "technology"}:
        agencies.extend(["FTC", "FCC"])

    agencies.extend(["SBA", "IRS", "DOL"])
    return agencies


def generate_search_keywords(title: str, body: str, limit: int = 15) -> list[str]:
    """Index keywords for a rule: unique words longer than three characters."""
    words = re.findall(r"\b\w+\b", f"{title} {body}".lower())
    keywords = [w for w in words if len(w) > 3 and w not in STOP_WORDS][:limit]
    return list(dict.fromkeys(keywords))
