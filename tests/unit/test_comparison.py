"""
Tests for the head-to-head comparison logic.
"""

from agents.scan_orchestrator.models import ScanOutcome
from config.settings import settings
from models.schemas import PlatformResult, QuerySet, ScoreBreakdown, SiteContext, VisibilityScoring
from src.controllers.comparison_controller import build_comparison, build_verdict, platform_winners


def outcome(domain, score, scores, mentioned=0, cited=0):
    results = [
        PlatformResult(
            platform=platform,
            query_shown="q",
            mentioned_you=i < mentioned,
            in_citations=i < cited,
            domain_found=i < cited,
        )
        for i, platform in enumerate(scores)
    ]
    return ScanOutcome(
        domain=domain,
        site_context=SiteContext(),
        queries=QuerySet(
            discovery=f"what is {domain}",
            brand="tell me about it",
            decision="reviews",
            business_summary=f"{domain} summary",
        ),
        results=results,
        scoring=VisibilityScoring(score=score, breakdown=ScoreBreakdown(), explanation="", version="v3"),
        platform_scores=scores,
        platforms_attempted=3,
        queries_sent=6,
    )


def test_platform_winners_with_ties_and_missing_platforms():
    winners = platform_winners(
        "a.com", {"perplexity": 50, "gemini": 10},
        "b.com", {"perplexity": 20, "gemini": 10, "chatgpt": 5},
    )
    assert winners == {"perplexity": "a.com", "gemini": "tie", "chatgpt": "b.com"}


def test_swapping_inputs_inverts_winner_and_keeps_delta():
    a = outcome("a.com", 70, {"perplexity": 90, "gemini": 60, "chatgpt": 40})
    b = outcome("b.com", 25, {"perplexity": 10, "gemini": 60, "chatgpt": 50})

    ab = build_comparison(a, b).comparison
    ba = build_comparison(b, a).comparison

    assert ab.score_delta == ba.score_delta == 45
    assert ab.winner == ba.winner == "a.com"
    assert ab.platform_winners == ba.platform_winners
    assert ab.platform_winners == {"perplexity": "a.com", "gemini": "tie", "chatgpt": "b.com"}


def test_inverted_winner_when_scores_swap():
    first = build_verdict("a.com", 30, "b.com", 10, {})
    second = build_verdict("a.com", 10, "b.com", 30, {})
    assert first.winner == "a.com"
    assert second.winner == "b.com"
    assert first.score_delta == second.score_delta == 20


def test_verdict_tiers():
    winners = {"perplexity": "a.com", "gemini": "a.com", "chatgpt": "tie"}
    assert build_verdict("a.com", 50, "b.com", 50, winners).verdict.startswith("Dead heat")
    assert build_verdict("a.com", 50, "b.com", 50, winners).winner == "tie"

    overwhelming = build_verdict("a.com", 80, "b.com", 30, winners).verdict
    assert "overwhelmingly prefers a.com" in overwhelming
    assert "2/3 platforms" in overwhelming
    assert "b.com is nearly invisible" in overwhelming

    assert "strong lead" in build_verdict("a.com", 45, "b.com", 20, winners).verdict
    assert build_verdict("a.com", 45, "b.com", 40, winners).verdict.startswith("Close match, but a.com")


def test_comparison_payload(monkeypatch):
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "https://scan.example.org/")
    a = outcome("a.com", 12, {"perplexity": 12}, mentioned=1)
    b = outcome("b.com", 64, {"perplexity": 100, "gemini": 92}, mentioned=2, cited=1)

    response = build_comparison(a, b, report_id1="r1", report_id2=None)

    assert response.domain1.report_url == "https://scan.example.org/r/a.com"
    assert response.domain1.report_id == "r1"
    assert response.domain2.report_id is None
    assert response.domain2.mentioned_count == 2
    assert response.domain2.cited_count == 1
    assert response.domain1.business_summary == "a.com summary"
    assert response.comparison.recommendations is None

    assert response.upgrade.url == "https://scan.example.org/signup?domain=a.com&score=12"
    assert "a.com is falling behind" in response.upgrade.message
    assert len(response.upgrade.gated_features) == 4

    body = response.model_dump(by_alias=True)
    assert body["comparison"]["scoreDelta"] == 52
    assert body["domain2"]["platformScores"] == {"perplexity": 100, "gemini": 92}
    assert body["upgrade"]["gatedFeatures"][0] == "Detailed recommendations to close the gap"
