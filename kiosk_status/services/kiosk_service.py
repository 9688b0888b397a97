"""
Kiosk Service - Nearby search and status reporting

Flow:
1. Nearby: metadata from the cache or the provider, status from reports
2. Report: store the observation, return the new weighted status
3. Kiosk reports: aggregated status plus every live report
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List

from kiosk_status.clock import Clock, utcnow
from kiosk_status.schemas import KioskMetadata, KioskView, ReportView
from kiosk_status.services.aggregation_service import aggregate
from kiosk_status.services.cache_service import ResultCache, result_cache
from kiosk_status.services.overpass_service import OverpassService, overpass_service
from kiosk_status.services.report_service import ReportStore, report_store
from kiosk_status.services.trust_service import TrustLedger, trust_ledger

logger = logging.getLogger(__name__)


class KioskService:
    """Composes the cache, provider, report store and aggregator"""

    def __init__(
        self,
        trust_ledger: TrustLedger,
        report_store: ReportStore,
        cache: ResultCache,
        provider: OverpassService,
        clock: Clock = utcnow,
    ):
        self.trust_ledger = trust_ledger
        self.report_store = report_store
        self.cache = cache
        self.provider = provider
        self._clock = clock
        self._inflight: Dict[str, "asyncio.Task[List[KioskMetadata]]"] = {}

    async def nearby(self, lat: float, lng: float, radius: int) -> List[KioskView]:
        """Kiosks around a point with freshly computed status"""
        kiosks = self.cache.lookup(lat, lng, radius)
        if kiosks is None:
            kiosks = await self._fetch_shared(lat, lng, radius)

        now = self._clock()
        return [self._with_status(kiosk, now) for kiosk in kiosks]

    async def _fetch_shared(self, lat: float, lng: float, radius: int) -> List[KioskMetadata]:
        """
        One provider fetch per cache key at a time.

        The fetch runs as its own task and is shielded from caller
        cancellation so it still populates the cache.
        """
        key = self.cache.key_for(lat, lng, radius)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(lat, lng, radius))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._fetch_done(key, done))
        return await asyncio.shield(task)

    async def _fetch_and_store(self, lat: float, lng: float, radius: int) -> List[KioskMetadata]:
        kiosks = await self.provider.fetch_kiosks(lat, lng, radius)
        self.cache.store(lat, lng, radius, kiosks)
        return kiosks

    def _fetch_done(self, key: str, task: "asyncio.Task[List[KioskMetadata]]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Kiosk fetch for {key} failed: {task.exception()}")

    def _with_status(self, kiosk: KioskMetadata, now: datetime) -> KioskView:
        reports = self.report_store.reports_for(kiosk.id)
        result = aggregate(reports, now)
        return KioskView(
            **kiosk.model_dump(),
            status=result.status,
            confidence=result.confidence,
            report_count=result.report_count,
            last_reported_at=reports[0].submitted_at if reports else None,
        )

    def submit_report(self, kiosk_id: str, status: str, device_hash: str) -> Dict[str, Any]:
        """Store a report and return the kiosk's new weighted status"""
        report = self.report_store.submit(kiosk_id, status, device_hash)
        result = aggregate(self.report_store.reports_for(kiosk_id), self._clock())

        logger.info(
            f"Kiosk report received: kiosk={kiosk_id} status={report.status.value} "
            f"trust={report.trust_at_submission:.2f} -> "
            f"weighted_status={result.status.value} confidence={result.confidence:.2f}"
        )

        return {
            "ok": True,
            "report": report,
            "weighted_status": result.status,
            "confidence": result.confidence,
        }

    def reports_for_kiosk(self, kiosk_id: str) -> Dict[str, Any]:
        reports = self.report_store.reports_for(kiosk_id)
        result = aggregate(reports, self._clock())
        return {
            "status": result.status,
            "confidence": result.confidence,
            "report_count": result.report_count,
            "reports": [
                ReportView(**report.model_dump(), device_trust=self.trust_ledger.score_for(report.device_hash))
                for report in reports
            ],
        }


# Singleton instance
kiosk_service = KioskService(trust_ledger, report_store, result_cache, overpass_service)
