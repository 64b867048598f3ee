"""
Rule Deduplication
==================

Collapses rules that different sources (or pages) report more than once.

Two rules are the same when their canonical keys match. The first occurrence
wins; later duplicates are dropped without merging fields.

Version: 0.1.0
"""

import hashlib
import re
from collections.abc import Iterable

from services.compliance_search.sources.base import RawRule


def _normalize(value: str) -> str:
    return re.sub(r"\s+", " ", value.lower()).strip()


def canonical_key(rule: RawRule) -> str:
    """SHA-256 of normalized title, authority and level."""
    level = rule.level.value if hasattr(rule.level, "value") else str(rule.level)
    basis = f"{_normalize(rule.title)}|{_normalize(rule.authority)}|{level}"
    return hashlib.sha256(basis.encode()).hexdigest()


def dedupe(rules: Iterable[RawRule]) -> list[RawRule]:
    """Keep the first rule per canonical key, preserving input order."""
    seen: set[str] = set()
    unique: list[RawRule] = []

    for rule in rules:
        key = canonical_key(rule)
        if key in seen:
            continue
        seen.add(key)
        unique.append(rule)

    return unique
