"""
Scan Controller

Runs the scan pipeline for a validated domain, assembles the immutable
VisibilityReport and persists it best-effort.
"""

import logging
from typing import Optional

from agents.scan_orchestrator import run_scan_workflow
from agents.scan_orchestrator.models import ScanOutcome
from agents.scorer import summary_message
from models.schemas import ScanResponse, ScanSummary, VisibilityReport
from storage.report_store import get_report_store
from utils.helpers import best_effort

logger = logging.getLogger(__name__)


def execute_scan(domain: str, include_preview: bool = True) -> ScanOutcome:
    """
    Run the full pipeline for an already validated domain.

    Args:
        domain: Normalized, DNS-validated domain
        include_preview: Generate the content preview

    Returns:
        ScanOutcome
    """
    return run_scan_workflow(domain, include_preview=include_preview)


def build_summary(outcome: ScanOutcome) -> ScanSummary:
    """Aggregate numbers shown with a report."""
    mentioned_count = outcome.mentioned_count
    return ScanSummary(
        total_queries=outcome.queries_sent,
        mentioned_count=mentioned_count,
        is_invisible=mentioned_count == 0,
        visibility_score=outcome.score,
        platform_scores=outcome.platform_scores,
        score_breakdown=outcome.scoring.breakdown,
        score_explanation=outcome.scoring.explanation,
        business_summary=outcome.queries.business_summary,
        message=summary_message(outcome.score),
        platforms_checked=len(outcome.results),
        platform_errors=outcome.platform_errors or None,
        platform_error_details=outcome.error_details or None,
    )


def build_report(outcome: ScanOutcome) -> VisibilityReport:
    """Create the immutable report for a completed scan."""
    summary = build_summary(outcome)
    return VisibilityReport(
        domain=outcome.domain,
        visibility_score=summary.visibility_score,
        is_invisible=summary.is_invisible,
        results=outcome.results,
        summary=summary,
        content_preview=outcome.content_preview,
    )


def persist_report(report: VisibilityReport) -> Optional[str]:
    """
    Save a report for its shareable link.

    Returns:
        The report id, or None if the store failed (the scan still succeeds)
    """
    return best_effort(
        f"Saving report for {report.domain}",
        lambda: get_report_store().save(report),
        default=None,
    )


def run_scan(domain: str) -> ScanResponse:
    """
    Scan a domain and return the API response.

    Args:
        domain: Normalized, DNS-validated domain

    Returns:
        ScanResponse with reportId (None if persistence failed)
    """
    outcome = execute_scan(domain)
    report = build_report(outcome)
    report_id = persist_report(report)

    return ScanResponse(
        domain=report.domain,
        results=report.results,
        summary=report.summary,
        report_id=report_id,
        content_preview=report.content_preview,
    )


def get_report(report_id: str) -> Optional[VisibilityReport]:
    return get_report_store().get(report_id)


def get_latest_report(domain: str) -> Optional[VisibilityReport]:
    return get_report_store().latest_for_domain(domain)
