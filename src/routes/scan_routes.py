"""
Scan Routes

Public scan and head-to-head comparison endpoints.

Order of checks for every request: input validation (syntax, then DNS), then
rate-limit consumption, then the pipeline. A caller is never charged for a
request rejected as invalid.
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool

from config.settings import settings
from models.exceptions import DomainResolutionError, DomainValidationError
from models.schemas import CompareRequest, CompareResponse, ScanRequest, ScanResponse
from src.controllers.comparison_controller import compare_domains
from src.controllers.scan_controller import run_scan
from utils.domain import normalize_domain, resolve_domain, validate_domain
from utils.rate_limiter import get_rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Scan"])

COMPARE_SLOTS = 2


def get_caller_id(request: Request) -> str:
    """
    Caller identity for rate limiting.

    With TRUSTED_PROXY_COUNT proxies in front of the app, the client address is
    the entry that many hops from the right of X-Forwarded-For. Entries further
    left are supplied by the client and ignored.
    """
    hops = settings.TRUSTED_PROXY_COUNT
    if hops > 0:
        forwarded = [
            ip.strip() for ip in request.headers.get("x-forwarded-for", "").split(",") if ip.strip()
        ]
        if forwarded:
            return forwarded[-hops] if len(forwarded) >= hops else forwarded[0]
        real_ip = request.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _rate_limit_message(slots: int) -> str:
    message = (
        f"Rate limit exceeded. Free scans are limited to {settings.RATE_LIMIT_MAX} "
        f"scans per hour. Please try again later."
    )
    if slots > 1:
        message += f" A comparison uses {slots} scans."
    return message


@router.post("/scan", response_model=ScanResponse)
async def scan_domain(payload: ScanRequest, request: Request) -> ScanResponse:
    """
    Scan a domain across AI platforms.

    Validates and resolves the domain, consumes one rate-limit slot, runs the
    full pipeline and returns the scored report.

    Returns:
        ScanResponse with results, summary and reportId
    """
    try:
        domain = await run_in_threadpool(validate_domain, payload.domain)

        caller_id = get_caller_id(request)
        if not get_rate_limiter().try_consume(caller_id, 1):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=_rate_limit_message(1)
            )

        return await asyncio.wait_for(
            run_in_threadpool(run_scan, domain),
            timeout=settings.SCAN_TIMEOUT_SECONDS
        )

    except (DomainValidationError, DomainResolutionError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except HTTPException:
        raise
    except asyncio.TimeoutError:
        logger.error(f"Scan exceeded {settings.SCAN_TIMEOUT_SECONDS}s budget")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Scan timed out. Please try again."
        )
    except Exception as e:
        logger.error(f"Scan failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to scan. Please try again."
        )


@router.post("/compare", response_model=CompareResponse)
async def compare(payload: CompareRequest, request: Request) -> CompareResponse:
    """
    Compare the AI visibility of two domains head-to-head.

    Costs two rate-limit slots, charged atomically before either scan starts.

    Returns:
        CompareResponse with both summaries, verdict and upgrade payload
    """
    try:
        if not payload.domain1 or not payload.domain2:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Both domain1 and domain2 are required"
            )

        domain1 = normalize_domain(payload.domain1)
        domain2 = normalize_domain(payload.domain2)
        if domain1 == domain2:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please enter two different domains to compare"
            )

        await asyncio.gather(
            run_in_threadpool(resolve_domain, domain1),
            run_in_threadpool(resolve_domain, domain2),
        )

        caller_id = get_caller_id(request)
        if not get_rate_limiter().try_consume(caller_id, COMPARE_SLOTS):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=_rate_limit_message(COMPARE_SLOTS)
            )

        return await asyncio.wait_for(
            compare_domains(domain1, domain2),
            timeout=settings.SCAN_TIMEOUT_SECONDS
        )

    except (DomainValidationError, DomainResolutionError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except HTTPException:
        raise
    except asyncio.TimeoutError:
        logger.error(f"Comparison exceeded {settings.SCAN_TIMEOUT_SECONDS}s budget")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Comparison timed out. Please try again."
        )
    except Exception as e:
        logger.error(f"Comparison failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compare domains. Please try again."
        )
