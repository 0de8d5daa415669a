"""
Visibility scoring.

Reduces merged platform results to a 0-100 score. Every factor is
normalized by the number of platforms *attempted*, so a platform that failed
counts as zero evidence instead of shrinking the denominator.

Weights are policy: they live in ScoringWeights and the strategy is selected
by version, so a new weighting scheme is a new strategy, not an edit.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from config.settings import settings
from models.schemas import PlatformResult, ScoreBreakdown, VisibilityScoring

logger = logging.getLogger(__name__)

NO_RESPONSE_EXPLANATION = "No AI platforms responded."


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScoringWeights:
    """Maximum points per factor. Must sum to 100."""
    citation_presence: int = 40
    domain_visibility: int = 25
    brand_recognition: int = 15
    mention_prominence: int = 12
    mention_depth: int = 8
    depth_saturation: float = 3.0

    def __post_init__(self):
        total = (
            self.citation_presence
            + self.domain_visibility
            + self.brand_recognition
            + self.mention_prominence
            + self.mention_depth
        )
        if total != 100:
            raise ValueError(f"Scoring weights must sum to 100, got {total}")


class ScoringStrategy:
    """Interface for a versioned scoring scheme."""

    version: str = ""

    def score(self, results: List[PlatformResult], platforms_attempted: int) -> VisibilityScoring:
        raise NotImplementedError


class FiveFactorScoring(ScoringStrategy):
    """
    Citation presence, domain visibility, brand recognition, mention
    prominence and mention depth.

    Citation outweighs an exact domain match, which outweighs a bare brand
    mention.
    """

    version = "v3"

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def score(self, results: List[PlatformResult], platforms_attempted: int) -> VisibilityScoring:
        """
        Score merged platform results.

        Args:
            results: One PlatformResult per platform that answered
            platforms_attempted: Number of platforms queried, including failures

        Returns:
            VisibilityScoring with score, breakdown and explanation
        """
        if not results:
            return VisibilityScoring(
                score=0,
                breakdown=ScoreBreakdown(),
                explanation=NO_RESPONSE_EXPLANATION,
                version=self.version,
            )

        w = self.weights
        denominator = max(platforms_attempted, len(results))

        cited = sum(1 for r in results if r.in_citations)
        domain_found = sum(1 for r in results if r.domain_found)
        mentioned = [r for r in results if r.mentioned_you]

        positions = [r.mention_position for r in mentioned if r.mention_position >= 0]
        prominence = 0
        if positions:
            prominence = round_half_up(w.mention_prominence * (1 - sum(positions) / len(positions)))

        total_mentions = sum(r.mention_count for r in mentioned)
        depth = round_half_up(w.mention_depth * (1 - math.exp(-total_mentions / w.depth_saturation)))

        breakdown = ScoreBreakdown(
            citation_presence=round_half_up(w.citation_presence * cited / denominator),
            domain_visibility=round_half_up(w.domain_visibility * domain_found / denominator),
            brand_recognition=round_half_up(w.brand_recognition * len(mentioned) / denominator),
            mention_prominence=prominence,
            mention_depth=depth,
        )
        score = min(100, breakdown.total)

        return VisibilityScoring(
            score=score,
            breakdown=breakdown,
            explanation=build_explanation(score, cited, domain_found, len(mentioned), denominator),
            version=self.version,
        )


def build_explanation(score: int, cited: int, domain_found: int, mentioned: int, denominator: int) -> str:
    """Deterministic, human-readable justification built from the counts."""
    parts = []
    if cited > 0:
        parts.append(f"Cited as a source by {cited} of {denominator} platforms")
    if domain_found > 0:
        parts.append(f"Domain referenced in {domain_found} of {denominator} responses")
    if mentioned > 0 and cited == 0 and domain_found == 0:
        parts.append(f"Brand recognized by {mentioned} of {denominator} platforms")
    if mentioned == 0:
        parts.append("Not recognized by any AI platform tested")

    if score < 15:
        parts.append("AI has no knowledge of your brand yet")
    elif score < 40:
        parts.append("AI has limited awareness of your brand")
    elif score < 60:
        parts.append("AI recognizes your brand but could cite you more")

    return ". ".join(parts) + "."


_STRATEGIES = {
    FiveFactorScoring.version: FiveFactorScoring,
}


def get_scoring_strategy(version: Optional[str] = None) -> ScoringStrategy:
    """
    Get the scoring strategy for a version.

    Raises:
        ValueError: If the version is unknown
    """
    version = version or settings.SCORING_VERSION
    if version not in _STRATEGIES:
        raise ValueError(f"Unknown scoring version: {version}")
    return _STRATEGIES[version]()


def platform_scores(
    results: List[PlatformResult],
    strategy: Optional[ScoringStrategy] = None
) -> Dict[str, int]:
    """
    Per-platform 0-100 scores, using the same strategy as the aggregate
    evaluated on one platform at a time.
    """
    strategy = strategy or get_scoring_strategy()
    return {r.platform: strategy.score([r], platforms_attempted=1).score for r in results}


def summary_message(score: int) -> str:
    """Tiered headline for a visibility score."""
    if score < 15:
        return "AI doesn't know your brand yet. You need to build your presence."
    if score < 40:
        return "AI has limited awareness of your brand. There's room to grow."
    if score < 60:
        return "AI recognizes you but doesn't consistently cite you yet."
    return "AI actively recommends you. Keep building on this momentum."
