"""
Kiosks Router - Nearby search and status reports
"""
from fastapi import APIRouter, Depends, Query
from typing import List

from kiosk_status.config import settings
from kiosk_status.dependencies import get_kiosk_service
from kiosk_status.schemas import KioskView, ReportSubmission
from kiosk_status.services.kiosk_service import KioskService

router = APIRouter()

ANONYMOUS_DEVICE = "anonymous"


@router.get("/atms/nearby", response_model=List[KioskView])
async def get_nearby_kiosks(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lng: float = Query(..., ge=-180, le=180, description="Longitude"),
    radius: int = Query(settings.DEFAULT_SEARCH_RADIUS_M, gt=0, description="Search radius in meters"),
    service: KioskService = Depends(get_kiosk_service)
):
    """
    Kiosks around a point with their current status.

    Metadata (location, name, bank, address) may come from a short-lived
    cache; status, confidence and report_count are always recomputed from
    the latest reports.
    """
    return await service.nearby(lat, lng, radius)


@router.post("/report")
async def submit_report(
    request: ReportSubmission,
    service: KioskService = Depends(get_kiosk_service)
):
    """
    Submit a status observation for a kiosk.

    Status must be one of working, no_cash, out_of_service. A new report
    from the same device for the same kiosk replaces its previous one.

    Returns:
    - report: The stored report with its trust snapshot
    - weighted_status / confidence: The kiosk's status after this report
    """
    return service.submit_report(
        kiosk_id=request.kiosk_id,
        status=request.status,
        device_hash=request.device_hash or ANONYMOUS_DEVICE
    )


@router.get("/reports/{kiosk_id}")
async def get_kiosk_reports(
    kiosk_id: str,
    service: KioskService = Depends(get_kiosk_service)
):
    """
    Aggregated status of a kiosk and all of its live reports, each annotated
    with the reporting device's current trust.
    """
    return service.reports_for_kiosk(kiosk_id)
