"""
Trust Service - Per-device reputation ledger

Devices are anonymous, so trust is earned from operator-verified outcomes:
- Unseen devices get the default score
- Scores stay at the default until enough outcomes are verified (cold start)
- Once eligible, observed accuracy is blended toward the default
"""
import logging
import threading
from typing import Dict, List, Optional

from kiosk_status.clock import Clock, utcnow
from kiosk_status.config import settings
from kiosk_status.schemas import DeviceTrust

logger = logging.getLogger(__name__)


class TrustLedger:
    """In-memory ledger of DeviceTrust records, one per device."""

    def __init__(
        self,
        clock: Clock = utcnow,
        min_trust: float = settings.MIN_TRUST_SCORE,
        max_trust: float = settings.MAX_TRUST_SCORE,
        default_trust: float = settings.DEFAULT_TRUST_SCORE,
        min_outcomes: int = settings.TRUST_MIN_OUTCOMES,
        accuracy_weight: float = settings.TRUST_ACCURACY_WEIGHT,
    ):
        self._clock = clock
        self.min_trust = min_trust
        self.max_trust = max_trust
        self.default_trust = default_trust
        self.min_outcomes = min_outcomes
        self.accuracy_weight = accuracy_weight
        self._devices: Dict[str, DeviceTrust] = {}
        # Shared with ReportStore: trust lookups span kiosks
        self.lock = threading.RLock()

    def score_for(self, device_hash: str) -> float:
        """Current trust of a device, or the default if it was never scored"""
        with self.lock:
            trust = self._devices.get(device_hash)
        return trust.trust_score if trust else self.default_trust

    def get(self, device_hash: str) -> Optional[DeviceTrust]:
        with self.lock:
            return self._devices.get(device_hash)

    def register(self, device_hash: str) -> DeviceTrust:
        """Create a default-score entry for a device on its first submission"""
        with self.lock:
            trust = self._devices.get(device_hash)
            if trust is None:
                trust = DeviceTrust(
                    device_hash=device_hash,
                    trust_score=self.default_trust,
                    last_report_at=self._clock(),
                )
                self._devices[device_hash] = trust
            return trust

    def record_outcome(self, device_hash: str, was_accurate: bool) -> DeviceTrust:
        """
        Record an operator verdict for one of the device's reports.

        The score is recomputed only once total_reports reaches min_outcomes:
            clamp(accuracy * accuracy_weight + default * (1 - accuracy_weight))
        """
        with self.lock:
            current = self._devices.get(device_hash)
            total = (current.total_reports if current else 0) + 1
            accurate = (current.accurate_reports if current else 0) + (1 if was_accurate else 0)
            score = current.trust_score if current else self.default_trust

            if total >= self.min_outcomes:
                accuracy = accurate / total
                blended = accuracy * self.accuracy_weight + self.default_trust * (1 - self.accuracy_weight)
                score = self._clamp(blended)

            updated = DeviceTrust(
                device_hash=device_hash,
                total_reports=total,
                accurate_reports=accurate,
                trust_score=score,
                last_report_at=self._clock(),
            )
            self._devices[device_hash] = updated

        logger.info(
            f"Trust updated for device {device_hash[:12]}: "
            f"{accurate}/{total} accurate, score={score:.3f}"
        )
        return updated

    def devices(self) -> List[DeviceTrust]:
        """Snapshot of all ledger entries"""
        with self.lock:
            return list(self._devices.values())

    def population(self) -> int:
        with self.lock:
            return len(self._devices)

    def _clamp(self, score: float) -> float:
        return max(self.min_trust, min(self.max_trust, score))


# Singleton instance
trust_ledger = TrustLedger()
