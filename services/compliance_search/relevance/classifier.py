"""
Relevance Classifier
====================

Categorizes deduplicated rules and prunes the ones that do not apply.

Two paths:
- Language-model: rules go out in fixed-size batches, one completion per
  batch, with a fixed delay between batches. Each rule comes back as a
  structured categorization with a relevance score.
- Heuristic: a basic categorization plus the keyword score from
  ``scoring.calculate_relevance_score``. Used when no model is configured,
  and per batch or per rule whenever the model output is unusable.

Without a business context, rules are kept when they mention a query keyword
and no penalized term, with no score threshold. With one, every rule is
scored and rules below the threshold are dropped.

Version: 0.1.0
"""

import asyncio
import re
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from shared.llm import LLMProvider
from shared.logging import get_logger
from shared.models.compliance import (
    ApplicabilityCriteria,
    ClassificationMethod,
    ClassifiedRule,
    RuleCategorization,
    SearchQuery,
)
from services.compliance_search.dedup import canonical_key
from services.compliance_search.errors import ClassificationError
from services.compliance_search.keywords import (
    BusinessKeywords,
    extract_business_keywords,
    extract_search_keywords,
    generate_search_keywords,
    infer_business_context,
)
from services.compliance_search.progress import (
    ProgressReporter,
    ProgressStep,
    batch_percentage,
)
from services.compliance_search.relevance.policy import DEFAULT_POLICY, RelevancePolicy
from services.compliance_search.relevance.scoring import (
    calculate_relevance_score,
    has_penalty_terms,
    matches_query,
)
from services.compliance_search.sources.base import RawRule

logger = get_logger(__name__)


DEFAULT_THRESHOLD = 0.8
DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_DELAY = 1.0

SYSTEM_PROMPT = """You are a compliance expert specializing in business regulations.
You decide which government rules apply to a specific business and describe
what the business must do to comply.

Treat these as NOT relevant unless the business itself operates in that field:
- Healthcare: hospitals, Medicare/Medicaid, medical facilities, nursing, dialysis, patient care
- Manufacturing: factories, appliances, furnaces, washers, production equipment, assembly lines
- Aviation: aircraft, helicopters, airworthiness, flight operations
- Marine: offshore wind, marine mammals, maritime, vessels, ships
- Environmental: endangered species, wildlife protection, toxic substances, hazardous waste
- Consumer products: toys, children's products, infant safety
- Financial: mergers, acquisitions, derivatives, clearing agencies, premerger notifications
- Specialized: patent/trademark fees, cybersecurity labeling, copyright circumvention
- Food programs: supplemental nutrition, food assistance
- Energy: nuclear, power plants, utility regulations, energy production

For a transportation business, relevant rules cover commercial vehicle safety,
DOT regulations and commercial driver licensing, vehicle inspection,
employment of drivers, business formation, tax and insurance."""

RULE_SCHEMA = """{
  "description": "Clear description of what businesses must do",
  "priority": "critical|high|medium|low",
  "industries": ["industries the rule applies to, or ALL"],
  "industry_groups": ["short snake_case groups"],
  "business_types": ["LLC", "Corporation", "Partnership", "Sole Proprietorship"],
  "states": ["specific states or ALL for federal"],
  "employee_count": {"min": 0, "max": 999999},
  "annual_revenue": {"min": 0, "max": 999999999},
  "special_conditions": ["has_employees", "handles_personal_data", "sells_online"],
  "compliance_steps": [
    {
      "step_number": 1,
      "step_description": "Specific action to take",
      "deadline": "When this must be completed",
      "estimated_cost": 0,
      "estimated_time": "Time estimate"
    }
  ],
  "estimated_cost": {"filing_fees": 0, "penalty_range": {"min": 0, "max": 1000}},
  "relevance_score": 0.0
}"""


def authority_slug(authority: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", authority.lower()).strip("-")


def basic_categorization(rule: RawRule, relevance_score: float) -> RuleCategorization:
    """Default categorization for rules the model did not (or could not) classify."""
    return RuleCategorization(
        description=rule.summary or f"{rule.authority} compliance requirement",
        relevance_score=relevance_score,
    )


def build_classified_rule(
    rule: RawRule,
    categorization: RuleCategorization,
    method: ClassificationMethod,
) -> ClassifiedRule:
    """Merge a raw rule with its categorization."""
    description = categorization.description or rule.summary or rule.title

    return ClassifiedRule(
        id=rule.id,
        canonical_key=canonical_key(rule),
        title=rule.title,
        description=description,
        content=rule.content or rule.summary,
        authority=rule.authority,
        level=rule.level,
        source=rule.source,
        source_url=rule.source_url,
        document_id=rule.document_id,
        posted_date=rule.posted_date,
        priority=categorization.priority,
        applicability=ApplicabilityCriteria(
            business_types=categorization.business_types,
            states=categorization.states,
            industries=categorization.industries,
            industry_groups=categorization.industry_groups,
            employee_count=categorization.employee_count,
            annual_revenue=categorization.annual_revenue,
            special_conditions=categorization.special_conditions,
        ),
        compliance_steps=categorization.compliance_steps,
        estimated_cost=categorization.estimated_cost,
        relevance_score=categorization.relevance_score,
        classification_method=method,
        tags=["real-time-search", rule.source, rule.level.value, authority_slug(rule.authority)],
        search_keywords=generate_search_keywords(rule.title, f"{rule.summary} {rule.content}"),
        fetched_at=rule.fetched_at,
    )


def build_batch_prompt(rules: Sequence[RawRule], query: SearchQuery) -> str:
    """User prompt for one classification batch."""
    context = infer_business_context(query.text, query.business_context)

    listed = "\n".join(
        f"{index}. Title: {rule.title}\n"
        f"   Authority: {rule.authority}\n"
        f"   Content: {rule.content or rule.summary}\n"
        f"   Source: {rule.source}"
        for index, rule in enumerate(rules, start=1)
    )

    return (
        f"Analyze these {len(rules)} rules for a business with this context:\n\n"
        f"BUSINESS CONTEXT: {context}\n"
        f'SEARCH QUERY: "{query.text}"\n\n'
        f"Rules to process:\n{listed}\n\n"
        f"Return a JSON array with exactly {len(rules)} objects, one per rule, in the "
        f"same order as listed. Each object has this structure:\n{RULE_SCHEMA}\n\n"
        "Give rules that are not relevant to this business a relevance_score below 0.3 "
        "instead of leaving them out."
    )


class RelevanceClassifier:
    """
    Scores and categorizes rules for one query.

    Args:
        llm: Completion provider; None disables the model path
        threshold: Minimum score kept when a business context is present
        batch_size: Rules per model call
        batch_delay_seconds: Pause between consecutive model calls
        policy: Heuristic scoring tables
    """

    def __init__(
        self,
        llm: LLMProvider | None = None,
        threshold: float = DEFAULT_THRESHOLD,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_seconds: float = DEFAULT_BATCH_DELAY,
        policy: RelevancePolicy = DEFAULT_POLICY,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self.llm = llm
        self.threshold = threshold
        self.batch_size = max(1, batch_size)
        self.batch_delay_seconds = batch_delay_seconds
        self.policy = policy
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def ai_enabled(self) -> bool:
        return self.llm is not None

    async def classify(
        self,
        rules: Sequence[RawRule],
        query: SearchQuery,
        reporter: ProgressReporter | None = None,
    ) -> list[ClassifiedRule]:
        """
        Categorize rules and drop the irrelevant ones.

        Returns:
            Classified rules sorted by relevance score, highest first
        """
        context = query.business_context
        query_keywords = extract_search_keywords(query.text)

        if context is None:
            business_keywords = BusinessKeywords()
            candidates = [
                rule
                for rule in rules
                if matches_query(rule.text, query_keywords)
                and not has_penalty_terms(rule.text, self.policy)
            ]
            logger.debug("keyword_filter", before=len(rules), after=len(candidates))
        else:
            business_keywords = extract_business_keywords(context.description_text())
            candidates = list(rules)

        if reporter is not None:
            await reporter.emit(
                ProgressStep.AI_CATEGORIZING,
                f"Categorizing {len(candidates)} rules",
            )

        fallback_method = (
            ClassificationMethod.KEYWORD if context is None else ClassificationMethod.HEURISTIC
        )

        if self.llm is not None and candidates:
            classified = await self._classify_with_model(
                self.llm,
                candidates, query, business_keywords, query_keywords, fallback_method, reporter
            )
        else:
            classified = [
                self._classify_heuristic(rule, business_keywords, query_keywords, fallback_method)
                for rule in candidates
            ]

        if context is not None:
            kept = [rule for rule in classified if rule.relevance_score >= self.threshold]
            logger.info(
                "relevance_threshold_applied",
                threshold=self.threshold,
                before=len(classified),
                after=len(kept),
            )
            classified = kept

        classified.sort(key=lambda rule: rule.relevance_score, reverse=True)
        return classified

    def _classify_heuristic(
        self,
        rule: RawRule,
        business_keywords: BusinessKeywords,
        query_keywords: set[str],
        method: ClassificationMethod,
    ) -> ClassifiedRule:
        score = calculate_relevance_score(rule, business_keywords, query_keywords, self.policy)
        return build_classified_rule(rule, basic_categorization(rule, score), method)

    async def _classify_with_model(
        self,
        llm: LLMProvider,
        rules: Sequence[RawRule],
        query: SearchQuery,
        business_keywords: BusinessKeywords,
        query_keywords: set[str],
        fallback_method: ClassificationMethod,
        reporter: ProgressReporter | None,
    ) -> list[ClassifiedRule]:
        batches = [
            list(rules[i : i + self.batch_size]) for i in range(0, len(rules), self.batch_size)
        ]
        classified: list[ClassifiedRule] = []

        for index, batch in enumerate(batches):
            if index > 0 and self.batch_delay_seconds > 0:
                await asyncio.sleep(self.batch_delay_seconds)

            try:
                categorizations = await self._request_batch(llm, batch, query)
            except Exception as e:
                logger.warning(
                    "classification_batch_failed",
                    batch=index + 1,
                    batches=len(batches),
                    rules=len(batch),
                    error=str(e),
                )
                categorizations = [None] * len(batch)

            for rule, categorization in zip(batch, categorizations):
                if categorization is None:
                    classified.append(
                        self._classify_heuristic(
                            rule, business_keywords, query_keywords, fallback_method
                        )
                    )
                else:
                    classified.append(
                        build_classified_rule(rule, categorization, ClassificationMethod.AI)
                    )

            if reporter is not None:
                await reporter.emit(
                    ProgressStep.AI_BATCH_PROCESSING,
                    f"Processed batch {index + 1} of {len(batches)}",
                    percentage=batch_percentage(index + 1, len(batches)),
                )

        return classified

    async def _request_batch(
        self,
        llm: LLMProvider,
        batch: Sequence[RawRule],
        query: SearchQuery,
    ) -> list[RuleCategorization | None]:
        """
        Ask the model to categorize one batch.

        Returns:
            One categorization per rule, in order; None where the model's
            item failed validation

        Raises:
            ClassificationError: If the response is not an array of one
                object per rule
        """
        kwargs: dict[str, Any] = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens

        payload = await llm.generate_json(
            build_batch_prompt(batch, query),
            system_prompt=SYSTEM_PROMPT,
            **kwargs,
        )

        if not isinstance(payload, list):
            raise ClassificationError(f"expected a JSON array, got {type(payload).__name__}")
        if len(payload) != len(batch):
            raise ClassificationError(f"expected {len(batch)} items, got {len(payload)}")

        categorizations: list[RuleCategorization | None] = []
        for position, item in enumerate(payload, start=1):
            try:
                categorizations.append(RuleCategorization.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "classification_item_invalid",
                    position=position,
                    errors=e.error_count(),
                )
                categorizations.append(None)

        return categorizations
