"""
Admin Router - Operator views and report verification
"""
from fastapi import APIRouter, Depends, Query

from kiosk_status.config import settings
from kiosk_status.dependencies import get_admin_service, verify_api_key
from kiosk_status.schemas import VerifyReportRequest
from kiosk_status.services.admin_service import AdminService

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/stats")
async def get_stats(service: AdminService = Depends(get_admin_service)):
    """
    Totals across all kiosks with reports.

    status_counts is built from each kiosk's freshly aggregated status.
    """
    return service.stats()


@router.get("/reports")
async def get_recent_reports(
    limit: int = Query(settings.ADMIN_REPORTS_LIMIT, ge=1, description="Maximum reports to return"),
    service: AdminService = Depends(get_admin_service)
):
    """Newest reports first, with each device's current trust score"""
    return service.recent_reports(limit)


@router.get("/devices")
async def get_devices(service: AdminService = Depends(get_admin_service)):
    """Device trust entries, most active first"""
    return service.devices()


@router.post("/verify-report")
async def verify_report(
    request: VerifyReportRequest,
    service: AdminService = Depends(get_admin_service)
):
    """
    Mark a report as accurate or inaccurate.

    This is the only path that changes a device's trust score.
    """
    service.verify_report(request.report_id, request.is_accurate)
    return {"ok": True, "message": "Device trust updated"}
