"""
Report Service - Latest observation per device per kiosk
"""
import logging
import uuid
from typing import Dict, List, Union

from kiosk_status.clock import Clock, utcnow
from kiosk_status.errors import InvalidArgument, NotFound
from kiosk_status.schemas import KioskStatus, Report, REPORTABLE_STATUSES
from kiosk_status.services.trust_service import TrustLedger, trust_ledger

logger = logging.getLogger(__name__)


class ReportStore:
    """
    In-memory store of kiosk reports.

    Holds at most one live report per (kiosk_id, device_hash). Reports are
    immutable; a re-submission replaces the stored one at the same position.
    All access goes through the ledger's lock so that the trust snapshot read
    during submit cannot race a trust update.
    """

    def __init__(self, trust_ledger: TrustLedger, clock: Clock = utcnow):
        self._ledger = trust_ledger
        self._clock = clock
        self._lock = trust_ledger.lock
        self._reports: Dict[str, List[Report]] = {}

    @staticmethod
    def _validate_status(status: Union[KioskStatus, str]) -> KioskStatus:
        try:
            value = KioskStatus(status)
        except ValueError:
            raise InvalidArgument(f"Invalid status value: {status!r}")
        if value not in REPORTABLE_STATUSES:
            raise InvalidArgument(f"Status {value.value!r} cannot be reported")
        return value

    def submit(
        self,
        kiosk_id: str,
        status: Union[KioskStatus, str],
        device_hash: str
    ) -> Report:
        """Record a device's observation, replacing its previous one for the kiosk"""
        if not kiosk_id or not str(kiosk_id).strip():
            raise InvalidArgument("kiosk_id is required")
        if not device_hash:
            raise InvalidArgument("device_hash is required")
        value = self._validate_status(status)

        with self._lock:
            self._ledger.register(device_hash)
            report = Report(
                id=uuid.uuid4().hex,
                kiosk_id=kiosk_id,
                status=value,
                device_hash=device_hash,
                submitted_at=self._clock(),
                trust_at_submission=self._ledger.score_for(device_hash),
            )

            existing = self._reports.setdefault(kiosk_id, [])
            for index, stored in enumerate(existing):
                if stored.device_hash == device_hash:
                    existing[index] = report
                    break
            else:
                existing.append(report)

        logger.debug(f"Stored report {report.id} for kiosk {kiosk_id}")
        return report

    def reports_for(self, kiosk_id: str) -> List[Report]:
        """Live reports for a kiosk, most recent first"""
        with self._lock:
            reports = list(self._reports.get(kiosk_id, ()))
        reports.sort(key=lambda r: r.submitted_at, reverse=True)
        return reports

    def find_by_report_id(self, report_id: str) -> Report:
        with self._lock:
            for reports in self._reports.values():
                for report in reports:
                    if report.id == report_id:
                        return report
        raise NotFound(f"Report {report_id} not found")

    def kiosk_ids(self) -> List[str]:
        """Kiosks with at least one report"""
        with self._lock:
            return [kiosk_id for kiosk_id, reports in self._reports.items() if reports]

    def all_reports(self) -> List[Report]:
        with self._lock:
            return [report for reports in self._reports.values() for report in reports]

    def total_reports(self) -> int:
        with self._lock:
            return sum(len(reports) for reports in self._reports.values())


# Singleton instance
report_store = ReportStore(trust_ledger)
