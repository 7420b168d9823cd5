"""
Impact Outcomes - API Endpoints.

REST API exposing the outcomes report. Inputs are validated here; the report
engine receives typed values and the caller identity unchanged.

Architecture Layer: Infrastructure (API)
Principles: Clean API Design, Request Validation
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import AwareDatetime
import structlog

from .exceptions import ImpactError
from .models import CallerIdentity, ReportWindow
from .observability import set_correlation_id
from .reports import OutcomeReportService, Report

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/outcomes", tags=["outcomes"])


_report_service: OutcomeReportService | None = None


def get_report_service() -> OutcomeReportService:
    """Dependency to get report service."""
    if _report_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Report service not initialized",
        )
    return _report_service


def set_dependencies(report_service: OutcomeReportService | None) -> None:
    """Set global dependencies for API routes."""
    global _report_service
    _report_service = report_service


async def get_caller_identity(
    x_user_id: str = Header(min_length=1),
    x_organisation_id: str = Header(min_length=1),
    x_correlation_id: str | None = Header(default=None),
) -> CallerIdentity:
    """Dependency resolving the caller identity forwarded by the gateway."""
    if x_correlation_id:
        set_correlation_id(x_correlation_id)
    return CallerIdentity(user_id=x_user_id, organisation_id=x_organisation_id)


@router.get("/reports/{outcome_set_id}", response_model=Report)
async def get_outcomes_report(
    outcome_set_id: str,
    start: AwareDatetime = Query(description="Start of the reporting window (inclusive)"),
    end: AwareDatetime = Query(description="End of the reporting window (inclusive)"),
    identity: CallerIdentity = Depends(get_caller_identity),
    report_service: OutcomeReportService = Depends(get_report_service),
) -> Report:
    """Compute the first/last/delta outcomes report for an outcome set."""
    logger.info("outcomes_report_request", outcome_set_id=outcome_set_id, user_id=identity.user_id)
    try:
        window = ReportWindow(start=start, end=end)
        return await report_service.compute_report(window, outcome_set_id, identity)
    except ImpactError as e:
        raise HTTPException(status_code=e.http_status, detail=e.to_dict()["error"])


@router.get("/stats")
async def get_service_stats(
    report_service: OutcomeReportService = Depends(get_report_service),
) -> dict[str, Any]:
    """Get report service statistics."""
    return {
        "report_service": await report_service.get_statistics(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
