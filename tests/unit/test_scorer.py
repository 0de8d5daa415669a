"""
Tests for visibility scoring.
"""

import itertools

import pytest

from agents.scorer import (
    FiveFactorScoring,
    ScoringWeights,
    get_scoring_strategy,
    platform_scores,
    round_half_up,
    summary_message,
)
from models.schemas import PlatformResult


def result(platform="perplexity", cited=False, domain=False, mentioned=False, position=-1.0, count=0):
    """Build a PlatformResult respecting cited => domain => mentioned."""
    domain = domain or cited
    mentioned = mentioned or domain
    return PlatformResult(
        platform=platform,
        query_shown="tell me about acme",
        mentioned_you=mentioned,
        in_citations=cited,
        domain_found=domain,
        mention_position=position if mentioned else -1.0,
        mention_count=count if mentioned else 0,
    )


@pytest.fixture
def scorer():
    return FiveFactorScoring()


def test_no_results_scores_zero(scorer):
    scoring = scorer.score([], platforms_attempted=3)
    assert scoring.score == 0
    assert scoring.breakdown.total == 0
    assert scoring.explanation == "No AI platforms responded."


def test_invisible_domain_scores_zero(scorer):
    results = [result(p) for p in ("perplexity", "gemini", "chatgpt")]
    scoring = scorer.score(results, platforms_attempted=3)
    assert scoring.score == 0
    assert scoring.explanation == "Not recognized by any AI platform tested. AI has no knowledge of your brand yet."


def test_full_visibility_scores_100(scorer):
    results = [
        result(p, cited=True, position=0.0, count=3)
        for p in ("perplexity", "gemini", "chatgpt")
    ]
    scoring = scorer.score(results, platforms_attempted=3)
    assert scoring.breakdown.citation_presence == 40
    assert scoring.breakdown.domain_visibility == 25
    assert scoring.breakdown.brand_recognition == 15
    assert scoring.breakdown.mention_prominence == 12
    assert scoring.breakdown.mention_depth == 8
    assert scoring.score == 100


def test_normalizes_by_platforms_attempted(scorer):
    lone = [result("gemini", mentioned=True, position=0.5, count=1)]
    full = [result(p, mentioned=True, position=0.5, count=1) for p in ("perplexity", "gemini", "chatgpt")]

    degraded = scorer.score(lone, platforms_attempted=3).score
    assert degraded < scorer.score(full, platforms_attempted=3).score
    assert degraded < scorer.score(lone, platforms_attempted=1).score


def test_failure_never_increases_score(scorer):
    positive = result("perplexity", mentioned=True, position=0.2, count=2)
    with_failures = scorer.score([positive], platforms_attempted=3).score
    with_empty_answers = scorer.score(
        [positive, result("gemini"), result("chatgpt")], platforms_attempted=3
    ).score
    assert with_failures <= with_empty_answers


def test_citation_dominates_brand_mention(scorer):
    cited = scorer.score([result(cited=True, position=0.3, count=1)], platforms_attempted=3)
    mentioned = scorer.score([result(mentioned=True, position=0.3, count=1)], platforms_attempted=3)
    domain_only = scorer.score([result(domain=True, position=0.3, count=1)], platforms_attempted=3)
    assert cited.score > domain_only.score > mentioned.score


def test_mixed_scenario(scorer):
    results = [
        result("perplexity", cited=True, position=0.1, count=2),
        result("gemini", mentioned=True, position=0.6, count=1),
        result("chatgpt"),
    ]
    scoring = scorer.score(results, platforms_attempted=3)
    assert 0 < scoring.score < 100
    assert scoring.breakdown.citation_presence == 13
    assert scoring.breakdown.domain_visibility == 8
    assert scoring.breakdown.brand_recognition == 10
    assert scoring.explanation.startswith(
        "Cited as a source by 1 of 3 platforms. Domain referenced in 1 of 3 responses."
    )

    scores = platform_scores(results, scorer)
    assert scores["perplexity"] > scores["gemini"] > scores["chatgpt"] == 0


def test_prominence_ignores_unmentioned_results(scorer):
    results = [result("perplexity", mentioned=True, position=0.0, count=1), result("gemini")]
    assert scorer.score(results, platforms_attempted=3).breakdown.mention_prominence == 12


def test_depth_saturates():
    scorer = FiveFactorScoring()
    depths = [
        scorer.score([result(mentioned=True, position=0.5, count=n)], platforms_attempted=1).breakdown.mention_depth
        for n in (1, 3, 10, 50)
    ]
    assert depths == sorted(depths)
    assert depths[-1] == 8


def test_score_bounds_over_all_flag_combinations(scorer):
    levels = ["none", "mentioned", "domain", "cited"]
    for combo in itertools.product(levels, repeat=3):
        results = [
            result(
                p,
                cited=level == "cited",
                domain=level == "domain",
                mentioned=level == "mentioned",
                position=0.4,
                count=2,
            )
            for p, level in zip(("perplexity", "gemini", "chatgpt"), combo)
        ]
        for attempted in (1, 3, 5):
            score = scorer.score(results, platforms_attempted=attempted).score
            assert 0 <= score <= 100


def test_platform_scores_use_same_strategy(scorer):
    r = result("gemini", cited=True, position=0.0, count=3)
    assert platform_scores([r], scorer) == {"gemini": scorer.score([r], platforms_attempted=1).score}


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_weights_must_sum_to_100():
    with pytest.raises(ValueError):
        ScoringWeights(citation_presence=50)


def test_get_scoring_strategy():
    assert isinstance(get_scoring_strategy("v3"), FiveFactorScoring)
    assert get_scoring_strategy("v3").version == "v3"
    with pytest.raises(ValueError):
        get_scoring_strategy("v1")


@pytest.mark.parametrize("score,fragment", [
    (0, "doesn't know your brand"),
    (20, "limited awareness"),
    (45, "doesn't consistently cite"),
    (80, "actively recommends"),
])
def test_summary_message_tiers(score, fragment):
    assert fragment in summary_message(score)
