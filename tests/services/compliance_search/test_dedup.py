"""
Tests for Rule Deduplication
============================

Version: 0.1.0
"""

from collections.abc import Callable

from shared.models.compliance import RuleLevel
from services.compliance_search.dedup import canonical_key, dedupe
from services.compliance_search.sources import RawRule


class TestCanonicalKey:
    """Tests for canonical_key."""

    def test_is_sha256_hex(self, make_rule: Callable[..., RawRule]) -> None:
        key = canonical_key(make_rule())

        assert len(key) == 64
        int(key, 16)

    def test_stable_across_calls(self, make_rule: Callable[..., RawRule]) -> None:
        rule = make_rule()

        assert canonical_key(rule) == canonical_key(rule)

    def test_ignores_case_and_whitespace(self, make_rule: Callable[..., RawRule]) -> None:
        a = make_rule(title="Business License Requirements", authority="Small Business Administration")
        b = make_rule(
            title="  business   LICENSE requirements ",
            authority="small business  administration",
        )

        assert canonical_key(a) == canonical_key(b)

    def test_ignores_source_and_body(self, make_rule: Callable[..., RawRule]) -> None:
        a = make_rule(source="sba.gov", summary="one")
        b = make_rule(source="regulations.gov", summary="two", source_url="https://example.test")

        assert canonical_key(a) == canonical_key(b)

    def test_level_distinguishes(self, make_rule: Callable[..., RawRule]) -> None:
        federal = make_rule(level=RuleLevel.FEDERAL)
        state = make_rule(level=RuleLevel.STATE)

        assert canonical_key(federal) != canonical_key(state)

    def test_authority_distinguishes(self, make_rule: Callable[..., RawRule]) -> None:
        a = make_rule(authority="Small Business Administration")
        b = make_rule(authority="Internal Revenue Service")

        assert canonical_key(a) != canonical_key(b)


class TestDedupe:
    """Tests for dedupe."""

    def test_first_seen_wins(self, make_rule: Callable[..., RawRule]) -> None:
        first = make_rule(source="regulations.gov", summary="first")
        duplicate = make_rule(source="sba.gov", summary="second")
        other = make_rule(title="Payroll Tax Obligations")

        result = dedupe([first, other, duplicate])

        assert result == [first, other]
        assert result[0].summary == "first"

    def test_idempotent(self, make_rule: Callable[..., RawRule]) -> None:
        rules = [
            make_rule(title="A"),
            make_rule(title="B"),
            make_rule(title="a"),
            make_rule(title="C"),
            make_rule(title="B "),
        ]

        once = dedupe(rules)

        assert dedupe(once) == once
        assert [r.title for r in once] == ["A", "B", "C"]

    def test_empty(self) -> None:
        assert dedupe([]) == []
