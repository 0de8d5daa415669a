"""
Report Routes

Read-only access to stored scan reports for shareable links.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from models.exceptions import DomainValidationError, ReportStoreError
from models.schemas import VisibilityReport
from src.controllers.scan_controller import get_latest_report, get_report
from utils.domain import normalize_domain

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/report", tags=["Reports"])


@router.get("/{report_id}", response_model=VisibilityReport)
async def get_report_by_id(report_id: str) -> VisibilityReport:
    """Get a stored report by its id."""
    try:
        report = await run_in_threadpool(get_report, report_id)
    except ReportStoreError as e:
        logger.warning(f"Report lookup failed for {report_id}: {e.message}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Report storage unavailable")

    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


@router.get("/domain/{domain}", response_model=VisibilityReport)
async def get_report_by_domain(domain: str) -> VisibilityReport:
    """Get the latest stored report for a domain."""
    try:
        normalized = normalize_domain(domain)
        report = await run_in_threadpool(get_latest_report, normalized)
    except DomainValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ReportStoreError as e:
        logger.warning(f"Report lookup failed for {domain}: {e.message}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Report storage unavailable")

    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No report found for {domain}")
    return report
