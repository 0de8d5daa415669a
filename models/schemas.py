"""
Data models and schemas for the AI Visibility Scanner.

This module defines the Pydantic models passed between pipeline stages,
the API request/response models, and the persisted report.

JSON produced for clients uses camelCase aliases; Python code uses the
snake_case field names.
"""

from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# Query Generation Models

class QueryIntent(str, Enum):
    """Customer intent represented by a generated query."""
    DISCOVERY = "discovery"
    BRAND = "brand"
    DECISION = "decision"


class GeneratedQuery(CamelModel):
    """A single natural-language query for one intent."""
    intent: QueryIntent
    text: str


class QuerySet(CamelModel):
    """Exactly one query per intent plus the business summary."""
    discovery: str
    brand: str
    decision: str
    business_summary: str
    source: str = Field(
        "template",
        description="Where the queries came from",
        examples=["ai", "template"]
    )

    def for_intent(self, intent: QueryIntent) -> str:
        return getattr(self, intent.value)

    def as_list(self) -> List[GeneratedQuery]:
        return [GeneratedQuery(intent=intent, text=self.for_intent(intent)) for intent in QueryIntent]


class SiteContext(CamelModel):
    """Descriptive signals scraped from a domain's homepage."""
    title: str = ""
    description: str = ""
    headings: List[str] = Field(default_factory=list)
    og_type: Optional[str] = None
    site_name: Optional[str] = None
    category: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return bool(self.title or self.description)


# Platform Models

class PlatformResponse(CamelModel):
    """Raw answer from one AI platform for one query."""
    platform: str
    intent: QueryIntent
    query: str
    text: str
    citations: List[str] = Field(default_factory=list)


class ResponseSignals(CamelModel):
    """Signals extracted from a single platform response."""
    mentioned_domains: List[str] = Field(default_factory=list)
    domain_in_text: bool = False
    in_citations: bool = False
    brand_mentioned: bool = False
    negative: bool = False
    mention_position: float = -1.0
    mention_count: int = 0

    @property
    def positive(self) -> bool:
        return self.in_citations or self.domain_in_text or self.brand_mentioned


class PlatformResult(CamelModel):
    """Merged signals for one platform that answered at least one query."""
    platform: str
    query_shown: str
    mentioned_you: bool = False
    in_citations: bool = False
    domain_found: bool = False
    mention_position: float = Field(
        -1.0,
        description="Fractional offset of the first mention (0 = start), -1 if absent",
        ge=-1.0,
        le=1.0
    )
    mention_count: int = Field(0, ge=0)
    recommended_others: List[str] = Field(default_factory=list)
    snippet: str = ""


# Scoring Models

class ScoreBreakdown(CamelModel):
    """Points earned on each scoring factor."""
    citation_presence: int = Field(0, ge=0)
    domain_visibility: int = Field(0, ge=0)
    brand_recognition: int = Field(0, ge=0)
    mention_prominence: int = Field(0, ge=0)
    mention_depth: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return (
            self.citation_presence
            + self.domain_visibility
            + self.brand_recognition
            + self.mention_prominence
            + self.mention_depth
        )


class VisibilityScoring(CamelModel):
    """Output of a scoring strategy."""
    score: int = Field(..., ge=0, le=100)
    breakdown: ScoreBreakdown
    explanation: str
    version: str


# Report Models

class FaqItem(CamelModel):
    question: str
    answer: str


class ContentPreview(CamelModel):
    """Sample AI-optimized page shown alongside a scan report."""
    title: str
    meta_description: str
    first_paragraph: str
    blurred_body: str
    faq_items: List[FaqItem] = Field(default_factory=list)
    word_count: int = 0
    brand_used: str
    generated_at: datetime


class ScanSummary(CamelModel):
    """Aggregate numbers for one scan."""
    total_queries: int = Field(..., ge=0)
    mentioned_count: int = Field(..., ge=0)
    is_invisible: bool
    visibility_score: int = Field(..., ge=0, le=100)
    platform_scores: Dict[str, int] = Field(default_factory=dict)
    score_breakdown: ScoreBreakdown
    score_explanation: str
    business_summary: str
    message: str
    platforms_checked: Optional[int] = None
    platform_errors: Optional[List[str]] = None
    platform_error_details: Optional[Dict[str, str]] = None


class VisibilityReport(CamelModel):
    """
    The persisted, shareable result of one scan.

    Reports are immutable; a new scan always produces a new report.
    """
    id: Optional[str] = None
    domain: str
    visibility_score: int = Field(..., ge=0, le=100)
    is_invisible: bool
    results: List[PlatformResult] = Field(default_factory=list)
    summary: ScanSummary
    content_preview: Optional[ContentPreview] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @property
    def score(self) -> int:
        return self.visibility_score

    @property
    def breakdown(self) -> ScoreBreakdown:
        return self.summary.score_breakdown

    @property
    def platform_errors(self) -> List[str]:
        return self.summary.platform_errors or []

    @property
    def business_summary(self) -> str:
        return self.summary.business_summary


# API Request/Response Models

class ScanRequest(BaseModel):
    """Request model for the /scan endpoint."""
    domain: Optional[Any] = Field(
        None,
        description="Domain or URL to scan",
        examples=["example.com"]
    )


class CompareRequest(BaseModel):
    """Request model for the /compare endpoint."""
    domain1: Optional[Any] = Field(None, examples=["acme.com"])
    domain2: Optional[Any] = Field(None, examples=["competitor.com"])


class ScanResponse(CamelModel):
    """Response model for the /scan endpoint."""
    domain: str
    results: List[PlatformResult]
    summary: ScanSummary
    report_id: Optional[str] = None
    content_preview: Optional[ContentPreview] = None


class DomainComparisonEntry(CamelModel):
    """One side of a head-to-head comparison."""
    domain: str
    score: int
    platform_scores: Dict[str, int]
    business_summary: str
    message: str
    mentioned_count: int
    cited_count: int
    report_url: str
    report_id: Optional[str] = None


class ComparisonVerdict(CamelModel):
    """Derived head-to-head outcome."""
    winner: str
    score_delta: int = Field(..., ge=0)
    platform_winners: Dict[str, str]
    verdict: str
    recommendations: Optional[List[str]] = None


class UpgradeOffer(CamelModel):
    message: str
    gated_features: List[str]
    url: str


class CompareResponse(CamelModel):
    """Response model for the /compare endpoint."""
    domain1: DomainComparisonEntry
    domain2: DomainComparisonEntry
    comparison: ComparisonVerdict
    upgrade: UpgradeOffer


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(
        ...,
        description="Health status of the system",
        examples=["healthy", "degraded"]
    )
    version: str = Field(
        ...,
        description="Application version",
        examples=["1.0.0"]
    )
