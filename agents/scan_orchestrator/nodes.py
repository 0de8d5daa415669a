"""
Node functions for the scan LangGraph workflow.

Nodes return only the keys they produce so the two parallel branches can
write to the state independently.
"""

import logging

from agents.content_preview import generate_content_preview
from agents.platform_tester_agent.runner import run_platform_queries
from agents.query_generator import generate_queries
from agents.scan_orchestrator.models import ScanState
from agents.scorer import get_scoring_strategy, platform_scores
from agents.site_context import classify_category, fetch_site_context

logger = logging.getLogger(__name__)


def fetch_context(state: ScanState) -> dict:
    """Node: Fetch homepage context and (optionally) a business category."""
    domain = state["domain"]
    logger.info(f"🌐 Fetching site context for {domain}...")

    context = fetch_site_context(domain)
    category = classify_category(domain, context)
    if category:
        context = context.model_copy(update={"category": category})

    return {"site_context": context}


def generate_scan_queries(state: ScanState) -> dict:
    """Node: Generate the discovery, brand and decision queries."""
    return {"queries": generate_queries(state["domain"], state["site_context"])}


def query_platforms(state: ScanState) -> dict:
    """Node: Ask every platform its two queries concurrently."""
    return {"platform_outcome": run_platform_queries(state["domain"], state["queries"])}


def generate_preview(state: ScanState) -> dict:
    """Node: Best-effort content preview, in parallel with the platform calls."""
    if not state.get("include_preview", True):
        return {"content_preview": None}
    return {
        "content_preview": generate_content_preview(
            state["domain"], state["queries"].business_summary
        )
    }


def score_results(state: ScanState) -> dict:
    """Node: Score merged platform results."""
    outcome = state["platform_outcome"]
    strategy = get_scoring_strategy()

    scoring = strategy.score(outcome.results, outcome.platforms_attempted)
    logger.info(f"📊 {state['domain']}: score {scoring.score} ({scoring.version})")

    return {
        "scoring": scoring,
        "platform_scores": platform_scores(outcome.results, strategy),
    }
