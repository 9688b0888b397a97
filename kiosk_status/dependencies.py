"""
FastAPI dependencies for the Kiosk Status Service
"""
from typing import Optional
from fastapi import Header, HTTPException, status
from kiosk_status.config import settings
from kiosk_status.services import (
    AdminService,
    KioskService,
    ReportStore,
    ResultCache,
    TrustLedger,
    admin_service,
    kiosk_service,
    report_store,
    result_cache,
    trust_ledger,
)


def get_kiosk_service() -> KioskService:
    """Get the shared kiosk service"""
    return kiosk_service


def get_admin_service() -> AdminService:
    """Get the shared admin service"""
    return admin_service


def get_result_cache() -> ResultCache:
    return result_cache


def get_report_store() -> ReportStore:
    return report_store


def get_trust_ledger() -> TrustLedger:
    return trust_ledger


async def verify_api_key(x_api_key: Optional[str] = Header(None)) -> Optional[str]:
    """Verify API key for admin endpoints when one is configured"""
    if settings.ADMIN_API_KEY and x_api_key != settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key"
        )
    return x_api_key
