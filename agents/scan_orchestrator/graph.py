"""
LangGraph workflow definition for a visibility scan.

START → fetch_context → generate_queries → ┬ query_platforms  ┬ → score_results → END
                                            └ generate_preview ┘
"""

import logging

from langgraph.graph import StateGraph, START, END

from agents.scan_orchestrator.models import ScanOutcome, ScanState
from agents.scan_orchestrator.nodes import (
    fetch_context,
    generate_scan_queries,
    query_platforms,
    generate_preview,
    score_results,
)

logger = logging.getLogger(__name__)


# Singleton graph instance
_graph = None


def create_scan_graph():
    """Create the LangGraph workflow for one scan."""
    workflow = StateGraph(ScanState)

    workflow.add_node("fetch_context", fetch_context)
    workflow.add_node("generate_queries", generate_scan_queries)
    workflow.add_node("query_platforms", query_platforms)
    workflow.add_node("generate_preview", generate_preview)
    workflow.add_node("score_results", score_results)

    workflow.add_edge(START, "fetch_context")
    workflow.add_edge("fetch_context", "generate_queries")

    # Fan out: platform calls and content preview run in the same step
    workflow.add_edge("generate_queries", "query_platforms")
    workflow.add_edge("generate_queries", "generate_preview")

    # Fan in: scoring waits for both branches
    workflow.add_edge(["query_platforms", "generate_preview"], "score_results")
    workflow.add_edge("score_results", END)

    return workflow.compile()


def get_scan_graph():
    """Get or create the scan graph."""
    global _graph
    if _graph is None:
        _graph = create_scan_graph()
    return _graph


def run_scan_workflow(domain: str, include_preview: bool = True) -> ScanOutcome:
    """
    Run a full scan for an already validated domain.

    Args:
        domain: Normalized, DNS-validated domain
        include_preview: Generate the content preview branch

    Returns:
        ScanOutcome
    """
    logger.info(f"🚀 Starting scan for {domain}")

    graph = get_scan_graph()
    state = graph.invoke({"domain": domain, "include_preview": include_preview})

    platform_outcome = state["platform_outcome"]
    outcome = ScanOutcome(
        domain=domain,
        site_context=state["site_context"],
        queries=state["queries"],
        results=platform_outcome.results,
        scoring=state["scoring"],
        platform_scores=state["platform_scores"],
        platforms_attempted=platform_outcome.platforms_attempted,
        queries_sent=platform_outcome.queries_sent,
        platform_errors=platform_outcome.platform_errors,
        error_details=platform_outcome.error_details,
        content_preview=state.get("content_preview"),
    )

    logger.info(f"✅ Scan complete for {domain}: {outcome.score}/100")
    return outcome
