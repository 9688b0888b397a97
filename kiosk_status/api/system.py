"""
System Router - Health checks and monitoring
"""
from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from kiosk_status.dependencies import get_report_store, get_result_cache, get_trust_ledger
from kiosk_status.services.cache_service import ResultCache
from kiosk_status.services.report_service import ReportStore
from kiosk_status.services.trust_service import TrustLedger

router = APIRouter()


@router.get("/health")
async def health_check(
    store: ReportStore = Depends(get_report_store),
    ledger: TrustLedger = Depends(get_trust_ledger),
    cache: ResultCache = Depends(get_result_cache)
):
    """
    Health check endpoint with in-memory component sizes.
    No status aggregation is done here.
    """
    return {
        "status": "healthy",
        "kiosks_with_reports": len(store.kiosk_ids()),
        "reports": store.total_reports(),
        "devices": ledger.population(),
        "cache": cache.stats(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
