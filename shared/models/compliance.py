"""
Compliance Rule Models
======================

Models for search queries, business context, and classified compliance rules.

Version: 0.1.0
"""

import hashlib
import math
import re
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_BUSINESS_TYPES = ["LLC", "Corporation", "Partnership", "Sole Proprietorship"]
MAX_EMPLOYEES = 999_999
MAX_REVENUE = 999_999_999


class Priority(str, Enum):
    """How urgently a business should act on a rule."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RuleLevel(str, Enum):
    """Government level that issued a rule."""

    FEDERAL = "federal"
    STATE = "state"
    LOCAL = "local"


class ClassificationMethod(str, Enum):
    """How a rule's categorization and score were produced."""

    AI = "ai"
    HEURISTIC = "heuristic"
    KEYWORD = "keyword"


# ============================================================================
# Query Models
# ============================================================================


class BusinessContext(BaseModel):
    """Profile of the business a search is run for. Read-only input to scoring."""

    business_name: str | None = None
    business_type: str | None = Field(
        default=None,
        description="Legal form (LLC, Corporation, Sole Proprietorship, ...)",
    )
    industry: str | None = None
    industry_description: str | None = None
    business_description: str | None = None
    state: str | None = Field(default=None, max_length=50)

    has_employees: bool = False
    employee_count: int | None = Field(default=None, ge=0)
    annual_revenue: float | None = Field(default=None, ge=0)
    sells_online: bool = False
    handles_personal_data: bool = False

    def description_text(self) -> str:
        """Free-text fields joined for keyword extraction."""
        parts = [
            self.industry,
            self.industry_description,
            self.business_description,
        ]
        text = " ".join(p for p in parts if p)
        if self.sells_online:
            text += " online"
        return text.strip()

    def summary(self) -> str:
        """One-line profile used in model prompts."""
        parts: list[str] = []
        if self.business_type:
            parts.append(self.business_type)
        if self.industry:
            parts.append(f"in {self.industry}")
        if self.state:
            parts.append(f"based in {self.state}")
        if self.has_employees or self.employee_count:
            count = f" ({self.employee_count})" if self.employee_count else ""
            parts.append(f"with employees{count}")
        if self.sells_online:
            parts.append("selling online")
        if self.handles_personal_data:
            parts.append("handling personal data")
        return " ".join(parts)


class SearchQuery(BaseModel):
    """A compliance search request. Immutable once issued."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1)
    business_category: str | None = None
    business_context: BusinessContext | None = None

    @property
    def normalized_text(self) -> str:
        """Lowercased query with whitespace collapsed."""
        return re.sub(r"\s+", " ", self.text.lower()).strip()

    @property
    def cache_key(self) -> str:
        """Stable key from normalized text and category. Context is not part of it."""
        key = f"{self.normalized_text}:{self.business_category or 'general'}"
        return hashlib.md5(key.encode()).hexdigest()


# ============================================================================
# Categorization Models
# ============================================================================


class NumericRange(BaseModel):
    """Inclusive numeric bounds."""

    min: float = 0
    max: float


class ComplianceStep(BaseModel):
    """One action a business takes to comply."""

    step_number: int = Field(default=1, ge=1)
    step_description: str
    deadline: str = "As required"
    estimated_cost: float = 0
    estimated_time: str = "1-2 hours"


DEFAULT_STEP = ComplianceStep(
    step_number=1,
    step_description="Review requirement and take appropriate action",
)


class PenaltyRange(BaseModel):
    """Range of penalties for non-compliance, in USD."""

    min: float = 0
    max: float = 1000


class EstimatedCost(BaseModel):
    """Expected cost of compliance, in USD."""

    filing_fees: float = 0
    penalty_range: PenaltyRange = Field(default_factory=PenaltyRange)


class RuleCategorization(BaseModel):
    """
    Categorization of a single rule.

    Parsed from language-model output, so every optional field has an explicit
    default and nulls are treated as absent. ``relevance_score`` is required:
    a payload without one is a schema mismatch.
    """

    model_config = ConfigDict(extra="ignore")

    description: str | None = None
    priority: Priority = Priority.MEDIUM
    industries: list[str] = Field(default_factory=lambda: ["ALL"])
    industry_groups: list[str] = Field(default_factory=list)
    business_types: list[str] = Field(default_factory=lambda: list(DEFAULT_BUSINESS_TYPES))
    states: list[str] = Field(default_factory=lambda: ["ALL"])
    employee_count: NumericRange = Field(default_factory=lambda: NumericRange(max=MAX_EMPLOYEES))
    annual_revenue: NumericRange = Field(default_factory=lambda: NumericRange(max=MAX_REVENUE))
    special_conditions: list[str] = Field(default_factory=list)
    compliance_steps: list[ComplianceStep] = Field(
        default_factory=lambda: [DEFAULT_STEP.model_copy()]
    )
    estimated_cost: EstimatedCost = Field(default_factory=EstimatedCost)
    relevance_score: float

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat explicit nulls as missing so defaults apply."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator(
        "industries",
        "industry_groups",
        "business_types",
        "states",
        "special_conditions",
        mode="before",
    )
    @classmethod
    def wrap_scalar(cls, v: Any) -> Any:
        """Accept a bare string where a list is expected."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def coerce_priority(cls, v: Any) -> Any:
        """Unknown priority labels fall back to medium."""
        if isinstance(v, str):
            value = v.strip().lower()
            return value if value in {p.value for p in Priority} else Priority.MEDIUM
        return v

    @field_validator("compliance_steps")
    @classmethod
    def ensure_steps(cls, v: list[ComplianceStep]) -> list[ComplianceStep]:
        """A rule always carries at least one step."""
        return v or [DEFAULT_STEP.model_copy()]

    @field_validator("relevance_score")
    @classmethod
    def clamp_score(cls, v: float) -> float:
        """Clamp into [0, 1]. NaN and infinities are rejected."""
        if not math.isfinite(v):
            raise ValueError("relevance_score must be a finite number")
        return max(0.0, min(1.0, v))


class ApplicabilityCriteria(BaseModel):
    """Which businesses a rule applies to."""

    business_types: list[str] = Field(default_factory=lambda: list(DEFAULT_BUSINESS_TYPES))
    states: list[str] = Field(default_factory=lambda: ["ALL"])
    industries: list[str] = Field(default_factory=lambda: ["ALL"])
    industry_groups: list[str] = Field(default_factory=list)
    employee_count: NumericRange = Field(default_factory=lambda: NumericRange(max=MAX_EMPLOYEES))
    annual_revenue: NumericRange = Field(default_factory=lambda: NumericRange(max=MAX_REVENUE))
    special_conditions: list[str] = Field(default_factory=list)


class ClassifiedRule(BaseModel):
    """A deduplicated, categorized, scored compliance rule returned to callers."""

    id: str
    canonical_key: str
    title: str
    description: str
    content: str = ""
    authority: str
    level: RuleLevel = RuleLevel.FEDERAL
    jurisdiction: str = "US"

    # Source
    source: str
    source_url: str
    document_id: str | None = None
    posted_date: str | None = None

    # Categorization
    priority: Priority = Priority.MEDIUM
    applicability: ApplicabilityCriteria = Field(default_factory=ApplicabilityCriteria)
    compliance_steps: list[ComplianceStep] = Field(default_factory=list)
    estimated_cost: EstimatedCost = Field(default_factory=EstimatedCost)

    # Scoring
    relevance_score: float = Field(default=0.0, ge=0.0, le=1.0)
    classification_method: ClassificationMethod = ClassificationMethod.HEURISTIC

    # Search metadata
    tags: list[str] = Field(default_factory=list)
    search_keywords: list[str] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
