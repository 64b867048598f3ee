"""
Canned Rule Catalog
===================

Baseline rules produced when a source has no usable live API. Each entry
fires when any of its trigger terms appears in the query.

Version: 0.1.0
"""

from dataclasses import dataclass

from services.compliance_search.keywords import contains_term
from services.compliance_search.sources.base import RawRule
from shared.models.compliance import RuleLevel


@dataclass(frozen=True)
class CannedRule:
    """A static rule template keyed by query terms."""

    triggers: tuple[str, ...]
    title: str
    summary: str
    content: str
    source_url: str
    level: RuleLevel = RuleLevel.FEDERAL

    def matches(self, query_text: str) -> bool:
        return any(contains_term(query_text, term) for term in self.triggers)


SBA_CATALOG: tuple[CannedRule, ...] = (
    CannedRule(
        triggers=("license", "licensing", "licence", "permit"),
        title="Business License Requirements",
        summary="Most businesses need licenses and permits to operate legally.",
        content=(
            "Check with your state and local government for specific licensing "
            "requirements for your business type."
        ),
        source_url="https://www.sba.gov/business-guide/launch-your-business/apply-licenses-permits",
    ),
    CannedRule(
        triggers=("tax", "ein"),
        title="Federal Tax ID (EIN) Requirement",
        summary="Most businesses need an Employer Identification Number (EIN) from the IRS.",
        content=(
            "Apply for an EIN if you have employees, operate as a partnership or "
            "corporation, or file certain tax returns."
        ),
        source_url="https://www.sba.gov/business-guide/launch-your-business/get-federal-tax-id-ein",
    ),
    CannedRule(
        triggers=("employee", "hiring", "hire", "employment"),
        title="Employee Rights and Responsibilities",
        summary="Understand your obligations when hiring employees.",
        content=(
            "Learn about wage and hour laws, workplace safety, and "
            "anti-discrimination requirements."
        ),
        source_url="https://www.sba.gov/business-guide/manage-your-business/hire-retain-employees",
    ),
    CannedRule(
        triggers=("registration", "register", "llc", "incorporate", "formation"),
        title="Business Registration Requirements",
        summary="Register your business name and structure with your state.",
        content=(
            "Most businesses register with the secretary of state where they "
            "operate; sole proprietors may need a DBA filing."
        ),
        source_url="https://www.sba.gov/business-guide/launch-your-business/register-your-business",
    ),
    CannedRule(
        triggers=("insurance", "liability", "workers compensation"),
        title="Business Insurance Requirements",
        summary="Some types of business insurance are required by law.",
        content=(
            "Businesses with employees must carry workers compensation, "
            "unemployment and, in some states, disability insurance."
        ),
        source_url="https://www.sba.gov/business-guide/launch-your-business/get-business-insurance",
    ),
)


IRS_CATALOG: tuple[CannedRule, ...] = (
    CannedRule(
        triggers=("tax", "filing", "return"),
        title="Business Tax Filing Requirements",
        summary="All businesses must file annual tax returns and pay applicable taxes.",
        content=(
            "File Form 1120 for corporations, Form 1065 for partnerships, or "
            "Schedule C for sole proprietorships."
        ),
        source_url="https://www.irs.gov/businesses/small-businesses-self-employed/business-taxes",
    ),
    CannedRule(
        triggers=("payroll", "employee", "wage"),
        title="Payroll Tax Obligations",
        summary="Employers must withhold and pay payroll taxes for employees.",
        content=(
            "Withhold federal income tax and FICA taxes from wages. "
            "File Form 941 quarterly."
        ),
        source_url="https://www.irs.gov/businesses/small-businesses-self-employed/employment-taxes",
    ),
    CannedRule(
        triggers=("ein", "employer identification"),
        title="Employer Identification Number Application",
        summary="Apply for an EIN online with the IRS at no cost.",
        content="Use IRS Form SS-4 or the online EIN assistant to obtain an EIN.",
        source_url="https://www.irs.gov/businesses/small-businesses-self-employed/apply-for-an-employer-identification-number-ein-online",
    ),
    CannedRule(
        triggers=("estimated", "self-employed", "self-employment", "freelance"),
        title="Estimated Tax Payments",
        summary="Self-employed individuals generally must make quarterly estimated tax payments.",
        content="Use Form 1040-ES to figure and pay estimated tax each quarter.",
        source_url="https://www.irs.gov/businesses/small-businesses-self-employed/estimated-taxes",
    ),
)


def build_rules(
    catalog: tuple[CannedRule, ...],
    query_text: str,
    authority: str,
    source: str,
) -> list[RawRule]:
    """Materialize every catalog entry triggered by the query."""
    text = query_text.lower()
    return [
        RawRule(
            title=entry.title,
            summary=entry.summary,
            content=entry.content,
            authority=authority,
            source=source,
            source_url=entry.source_url,
            level=entry.level,
            search_term=query_text,
        )
        for entry in catalog
        if entry.matches(text)
    ]
