"""
Aggregation Service - Derives a kiosk's status from its reports

Each report votes for its status with weight:
    weight = exp(-hours_ago / tau) * trust_at_submission

Reports older than the decay horizon do not vote and are not counted.
Confidence is the winning status' share of the total weight.
"""
import math
from datetime import datetime
from typing import Dict, Iterable

from kiosk_status.config import settings
from kiosk_status.schemas import KioskStatus, Report, StatusResult, REPORTABLE_STATUSES

UNKNOWN_RESULT = StatusResult(status=KioskStatus.unknown, confidence=0.0, report_count=0)


def aggregate(
    reports: Iterable[Report],
    now: datetime,
    horizon_hours: float = settings.REPORT_DECAY_HOURS,
    tau_hours: float = settings.REPORT_DECAY_TAU_HOURS,
) -> StatusResult:
    """
    Compute the weighted status of a kiosk at instant `now`.

    Pure: the same reports and `now` always give the same result. Ties go
    to the first status in REPORTABLE_STATUSES order.
    """
    weights: Dict[KioskStatus, float] = {status: 0.0 for status in REPORTABLE_STATUSES}
    total_weight = 0.0
    report_count = 0

    for report in reports:
        # Future timestamps (clock skew) count as fresh
        hours_ago = max(0.0, (now - report.submitted_at).total_seconds() / 3600.0)
        if hours_ago > horizon_hours:
            continue

        weight = math.exp(-hours_ago / tau_hours) * report.trust_at_submission
        weights[report.status] += weight
        total_weight += weight
        report_count += 1

    if total_weight <= 0:
        return UNKNOWN_RESULT

    best_status = KioskStatus.unknown
    best_weight = 0.0
    for status in REPORTABLE_STATUSES:
        if weights[status] > best_weight:
            best_status = status
            best_weight = weights[status]

    confidence = max(0.0, min(1.0, best_weight / total_weight))
    return StatusResult(status=best_status, confidence=confidence, report_count=report_count)
