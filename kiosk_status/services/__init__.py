"""
Services package - Business logic layer
"""
from kiosk_status.services.trust_service import TrustLedger, trust_ledger
from kiosk_status.services.report_service import ReportStore, report_store
from kiosk_status.services.aggregation_service import aggregate
from kiosk_status.services.cache_service import ResultCache, result_cache
from kiosk_status.services.overpass_service import OverpassService, overpass_service
from kiosk_status.services.kiosk_service import KioskService, kiosk_service
from kiosk_status.services.admin_service import AdminService, admin_service

__all__ = [
    "TrustLedger",
    "ReportStore",
    "ResultCache",
    "OverpassService",
    "KioskService",
    "AdminService",
    "aggregate",
    "trust_ledger",
    "report_store",
    "result_cache",
    "overpass_service",
    "kiosk_service",
    "admin_service"
]
