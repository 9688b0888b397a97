"""
Admin Service - Operational view over reports and device trust
"""
import logging
from typing import Any, Dict, List

from kiosk_status.clock import Clock, utcnow
from kiosk_status.config import settings
from kiosk_status.schemas import DeviceTrust, KioskStatus, ReportView
from kiosk_status.services.aggregation_service import aggregate
from kiosk_status.services.report_service import ReportStore, report_store
from kiosk_status.services.trust_service import TrustLedger, trust_ledger

logger = logging.getLogger(__name__)


class AdminService:
    """Read-only admin views plus report verification"""

    def __init__(self, trust_ledger: TrustLedger, report_store: ReportStore, clock: Clock = utcnow):
        self.trust_ledger = trust_ledger
        self.report_store = report_store
        self._clock = clock

    def stats(self) -> Dict[str, Any]:
        status_counts = {status.value: 0 for status in KioskStatus}
        now = self._clock()

        kiosk_ids = self.report_store.kiosk_ids()
        for kiosk_id in kiosk_ids:
            result = aggregate(self.report_store.reports_for(kiosk_id), now)
            status_counts[result.status.value] += 1

        return {
            "total_kiosks_with_reports": len(kiosk_ids),
            "total_reports": self.report_store.total_reports(),
            "status_counts": status_counts,
            "active_devices": self.trust_ledger.population(),
        }

    def recent_reports(self, limit: int = settings.ADMIN_REPORTS_LIMIT) -> List[ReportView]:
        """Newest reports across all kiosks, with each device's current trust"""
        reports = sorted(self.report_store.all_reports(), key=lambda r: r.submitted_at, reverse=True)
        return [
            ReportView(**report.model_dump(), device_trust=self.trust_ledger.score_for(report.device_hash))
            for report in reports[:max(0, limit)]
        ]

    def devices(self) -> List[DeviceTrust]:
        return sorted(self.trust_ledger.devices(), key=lambda d: d.total_reports, reverse=True)

    def verify_report(self, report_id: str, was_accurate: bool) -> DeviceTrust:
        """
        Feed an operator verdict back into the reporting device's trust.

        Raises:
            NotFound: if no live report has this id
        """
        report = self.report_store.find_by_report_id(report_id)
        trust = self.trust_ledger.record_outcome(report.device_hash, was_accurate)
        logger.info(f"Report {report_id} verified as {'accurate' if was_accurate else 'inaccurate'}")
        return trust


# Singleton instance
admin_service = AdminService(trust_ledger, report_store)
