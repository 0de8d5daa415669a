"""
Comparison Controller

Runs two full scans concurrently and derives a head-to-head verdict.
"""

import asyncio
import logging
from typing import Dict, List, Optional
from urllib.parse import urlencode

from fastapi.concurrency import run_in_threadpool

from agents.scan_orchestrator.models import ScanOutcome
from agents.scorer import summary_message
from config.settings import settings
from models.schemas import (
    CompareResponse,
    ComparisonVerdict,
    DomainComparisonEntry,
    UpgradeOffer,
)
from src.controllers.scan_controller import build_report, execute_scan, persist_report

logger = logging.getLogger(__name__)

TIE = "tie"

GATED_FEATURES = [
    "Detailed recommendations to close the gap",
    "AI-generated fix pages for missing citations",
    "Weekly comparison tracking",
    "Alert when competitor scores change",
]


def build_verdict(
    domain1: str,
    score1: int,
    domain2: str,
    score2: int,
    platform_winners: Dict[str, str]
) -> ComparisonVerdict:
    """
    Overall winner, score delta and tiered verdict text.

    Swapping the two domains yields the same delta and the inverted winner.
    """
    delta = abs(score1 - score2)
    if score1 > score2:
        winner, loser = domain1, domain2
    elif score2 > score1:
        winner, loser = domain2, domain1
    else:
        winner, loser = TIE, None

    if winner == TIE:
        verdict = "Dead heat. Both domains have equal AI visibility. First to optimize wins."
    else:
        wins = sum(1 for w in platform_winners.values() if w == winner)
        if delta >= 40:
            verdict = (
                f"AI overwhelmingly prefers {winner}, {delta} points ahead, winning on "
                f"{wins}/{len(platform_winners)} platforms. {loser} is nearly invisible in comparison."
            )
        elif delta >= 20:
            verdict = f"{winner} has a strong lead, {delta} points ahead. {loser} needs significant work to catch up."
        else:
            verdict = f"Close match, but {winner} edges ahead by {delta} points. A few strategic fixes could flip this."

    return ComparisonVerdict(
        winner=winner,
        score_delta=delta,
        platform_winners=platform_winners,
        verdict=verdict,
        recommendations=None,
    )


def platform_winners(
    domain1: str,
    scores1: Dict[str, int],
    domain2: str,
    scores2: Dict[str, int],
    platforms: Optional[List[str]] = None
) -> Dict[str, str]:
    """Per-platform winner by platform score; a missing platform scores 0."""
    winners = {}
    for platform in platforms or settings.PLATFORMS:
        s1 = scores1.get(platform, 0)
        s2 = scores2.get(platform, 0)
        if s1 > s2:
            winners[platform] = domain1
        elif s2 > s1:
            winners[platform] = domain2
        else:
            winners[platform] = TIE
    return winners


def _entry(outcome: ScanOutcome, report_id: Optional[str]) -> DomainComparisonEntry:
    return DomainComparisonEntry(
        domain=outcome.domain,
        score=outcome.score,
        platform_scores=outcome.platform_scores,
        business_summary=outcome.queries.business_summary,
        message=summary_message(outcome.score),
        mentioned_count=outcome.mentioned_count,
        cited_count=outcome.cited_count,
        report_url=f"{settings.PUBLIC_BASE_URL.rstrip('/')}/r/{outcome.domain}",
        report_id=report_id,
    )


def build_upgrade(domain1: str, score1: int, domain2: str, score2: int) -> UpgradeOffer:
    """Upsell payload aimed at the lower-scoring domain."""
    upsell_domain = domain1 if score1 <= score2 else domain2
    upsell_score = min(score1, score2)
    delta = abs(score1 - score2)

    if delta >= 20:
        message = f"{upsell_domain} is falling behind. See exactly what to fix to close the {delta}-point gap."
    else:
        message = f"It's close. Targeted fix pages and gap analysis can give {upsell_domain} the edge."

    query = urlencode({"domain": upsell_domain, "score": upsell_score})
    return UpgradeOffer(
        message=message,
        gated_features=list(GATED_FEATURES),
        url=f"{settings.PUBLIC_BASE_URL.rstrip('/')}/signup?{query}",
    )


def build_comparison(
    scan1: ScanOutcome,
    scan2: ScanOutcome,
    report_id1: Optional[str] = None,
    report_id2: Optional[str] = None
) -> CompareResponse:
    """
    Derive the head-to-head result from two completed scans.

    Args:
        scan1: Outcome for the first domain
        scan2: Outcome for the second domain
        report_id1: Stored report id for the first domain, if any
        report_id2: Stored report id for the second domain, if any

    Returns:
        CompareResponse
    """
    winners = platform_winners(scan1.domain, scan1.platform_scores, scan2.domain, scan2.platform_scores)

    return CompareResponse(
        domain1=_entry(scan1, report_id1),
        domain2=_entry(scan2, report_id2),
        comparison=build_verdict(scan1.domain, scan1.score, scan2.domain, scan2.score, winners),
        upgrade=build_upgrade(scan1.domain, scan1.score, scan2.domain, scan2.score),
    )


async def compare_domains(domain1: str, domain2: str) -> CompareResponse:
    """
    Scan two validated domains concurrently and compare them.

    Content previews are skipped; both reports are persisted best-effort.
    """
    logger.info(f"⚔️  Comparing {domain1} vs {domain2}")

    scan1, scan2 = await asyncio.gather(
        run_in_threadpool(execute_scan, domain1, False),
        run_in_threadpool(execute_scan, domain2, False),
    )

    report_id1, report_id2 = await asyncio.gather(
        run_in_threadpool(persist_report, build_report(scan1)),
        run_in_threadpool(persist_report, build_report(scan2)),
    )

    comparison = build_comparison(scan1, scan2, report_id1, report_id2)
    logger.info(f"✅ Comparison complete: winner={comparison.comparison.winner}, delta={comparison.comparison.score_delta}")
    return comparison
