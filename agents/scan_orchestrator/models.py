"""
State model for the scan workflow.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, TypedDict

from agents.platform_tester_agent.runner import PlatformRunOutcome
from models.schemas import (
    ContentPreview,
    PlatformResult,
    QuerySet,
    SiteContext,
    VisibilityScoring,
)


class ScanState(TypedDict, total=False):
    """
    State for one scan.

    Flow: site context → queries → [platform calls | content preview] → score
    """
    # Input
    domain: str
    include_preview: bool

    # Sequential stages
    site_context: SiteContext
    queries: QuerySet

    # Parallel branches
    platform_outcome: PlatformRunOutcome
    content_preview: Optional[ContentPreview]

    # Output
    scoring: VisibilityScoring
    platform_scores: Dict[str, int]


@dataclass
class ScanOutcome:
    """Everything a completed scan produced, before report assembly."""
    domain: str
    site_context: SiteContext
    queries: QuerySet
    results: List[PlatformResult]
    scoring: VisibilityScoring
    platform_scores: Dict[str, int]
    platforms_attempted: int
    queries_sent: int
    platform_errors: List[str] = field(default_factory=list)
    error_details: Dict[str, str] = field(default_factory=dict)
    content_preview: Optional[ContentPreview] = None

    @property
    def score(self) -> int:
        return self.scoring.score

    @property
    def mentioned_count(self) -> int:
        return sum(1 for r in self.results if r.mentioned_you)

    @property
    def cited_count(self) -> int:
        return sum(1 for r in self.results if r.in_citations)
