"""
Concurrent platform dispatch and per-platform merge.

Each platform is asked two queries (the brand query plus one naturalistic
query). All calls run at once on a thread pool and the runner waits for every
one of them to settle; a failing call never cancels the others.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from agents.platform_tester_agent.utils import ask_platform
from config.settings import settings
from models.exceptions import PlatformError
from models.schemas import PlatformResponse, PlatformResult, QueryIntent, QuerySet
from utils.signals import extract_response_signals, is_own_domain

logger = logging.getLogger(__name__)

# Platform -> (naturalistic intent, baseline intent)
QUERY_PLAN: Dict[str, Tuple[QueryIntent, QueryIntent]] = {
    "perplexity": (QueryIntent.DISCOVERY, QueryIntent.BRAND),
    "gemini": (QueryIntent.DECISION, QueryIntent.BRAND),
    "chatgpt": (QueryIntent.DECISION, QueryIntent.BRAND),
}
DEFAULT_PLAN = (QueryIntent.DECISION, QueryIntent.BRAND)

SNIPPET_LENGTH = 300
MAX_RECOMMENDED_OTHERS = 5
SETTLE_GRACE_SECONDS = 5.0


@dataclass
class PlatformRunOutcome:
    """Merged results of one scan's platform calls."""
    results: List[PlatformResult] = field(default_factory=list)
    platform_errors: List[str] = field(default_factory=list)
    error_details: Dict[str, str] = field(default_factory=dict)
    platforms_attempted: int = 0
    queries_sent: int = 0


def plan_queries(queries: QuerySet, platforms: List[str]) -> List[Tuple[str, QueryIntent, str]]:
    """List the (platform, intent, query text) calls for a scan."""
    calls = []
    for platform in platforms:
        for intent in QUERY_PLAN.get(platform, DEFAULT_PLAN):
            calls.append((platform, intent, queries.for_intent(intent)))
    return calls


def merge_platform_responses(
    platform: str,
    responses: List[PlatformResponse],
    domain: str,
    queries: QuerySet
) -> PlatformResult:
    """
    Merge a platform's successful responses into one PlatformResult.

    The platform recognizes the brand if either response shows a signal.
    The query shown is the naturalistic one when it produced a signal,
    otherwise the brand query.

    Args:
        platform: Platform name
        responses: Successful responses for this platform (at least one)
        domain: Normalized target domain
        queries: The scan's QuerySet

    Returns:
        PlatformResult
    """
    mentioned_you = in_citations = domain_found = False
    positions = []
    mention_count = 0
    others: List[str] = []
    shown: Optional[PlatformResponse] = None

    for response in responses:
        signals = extract_response_signals(response.text, response.citations, domain)

        cited = signals.in_citations
        found = cited or signals.domain_in_text
        mentioned = found or signals.brand_mentioned

        in_citations = in_citations or cited
        domain_found = domain_found or found
        mentioned_you = mentioned_you or mentioned

        if signals.mention_position >= 0:
            positions.append(signals.mention_position)
        mention_count = max(mention_count, signals.mention_count)

        for host in signals.mentioned_domains:
            if not is_own_domain(host, domain) and host not in others:
                others.append(host)

        if mentioned and response.intent != QueryIntent.BRAND:
            shown = response

    if shown is None:
        shown = next((r for r in responses if r.intent == QueryIntent.BRAND), responses[0])
        query_shown = queries.brand
    else:
        query_shown = shown.query

    return PlatformResult(
        platform=platform,
        query_shown=query_shown,
        mentioned_you=mentioned_you,
        in_citations=in_citations,
        domain_found=domain_found,
        mention_position=min(positions) if positions else -1.0,
        mention_count=mention_count,
        recommended_others=others[:MAX_RECOMMENDED_OTHERS],
        snippet=shown.text[:SNIPPET_LENGTH],
    )


def run_platform_queries(
    domain: str,
    queries: QuerySet,
    platforms: Optional[List[str]] = None,
    timeout: Optional[float] = None
) -> PlatformRunOutcome:
    """
    Ask every platform its two queries concurrently and merge the answers.

    Args:
        domain: Normalized target domain
        queries: The scan's QuerySet
        platforms: Platforms to query (default settings.PLATFORMS)
        timeout: Per-call timeout in seconds (default PLATFORM_TIMEOUT_SECONDS)

    Returns:
        PlatformRunOutcome with results in platform order
    """
    platforms = list(platforms or settings.PLATFORMS)
    timeout = timeout or settings.PLATFORM_TIMEOUT_SECONDS
    calls = plan_queries(queries, platforms)

    logger.info(f"🧪 Sending {len(calls)} queries to {len(platforms)} platforms...")

    successes: Dict[str, List[PlatformResponse]] = {p: [] for p in platforms}
    failures: Dict[str, List[str]] = {p: [] for p in platforms}

    executor = ThreadPoolExecutor(max_workers=max(len(calls), 1))
    try:
        future_to_call = {
            executor.submit(ask_platform, platform, text, intent, timeout): (platform, intent)
            for platform, intent, text in calls
        }
        done, not_done = wait(future_to_call, timeout=timeout + SETTLE_GRACE_SECONDS)

        for future in done:
            platform, intent = future_to_call[future]
            try:
                successes[platform].append(future.result())
                logger.info(f"  ✓ {platform} ({intent.value})")
            except PlatformError as e:
                failures[platform].append(e.code)
                logger.warning(f"  ✗ {platform} ({intent.value}): {e.message}")
            except Exception as e:
                failures[platform].append("error")
                logger.warning(f"  ✗ {platform} ({intent.value}): {e}")

        for future in not_done:
            platform, intent = future_to_call[future]
            failures[platform].append("timeout")
            logger.warning(f"  ✗ {platform} ({intent.value}): did not settle within {timeout}s")
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    outcome = PlatformRunOutcome(platforms_attempted=len(platforms), queries_sent=len(calls))
    for platform in platforms:
        responses = successes[platform]
        if responses:
            order = QUERY_PLAN.get(platform, DEFAULT_PLAN)
            responses.sort(key=lambda r: order.index(r.intent) if r.intent in order else len(order))
            outcome.results.append(merge_platform_responses(platform, responses, domain, queries))
        else:
            outcome.platform_errors.append(platform)
            outcome.error_details[platform] = failures[platform][0] if failures[platform] else "error"

    logger.info(f"✓ {len(outcome.results)}/{len(platforms)} platforms responded")
    return outcome
