"""
Pydantic schemas for the Kiosk Status Service.
Domain records held in memory plus request models for the API.
"""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum


# ============================================
# ENUMS
# ============================================
class KioskStatus(str, Enum):
    working = "working"
    no_cash = "no_cash"
    out_of_service = "out_of_service"
    unknown = "unknown"


# Statuses a device may report; unknown is only ever derived
REPORTABLE_STATUSES = (
    KioskStatus.working,
    KioskStatus.no_cash,
    KioskStatus.out_of_service,
)


# ============================================
# DOMAIN RECORDS
# ============================================
class Report(BaseModel):
    """A device's latest observation of one kiosk."""
    model_config = ConfigDict(frozen=True)

    id: str
    kiosk_id: str
    status: KioskStatus
    device_hash: str
    submitted_at: datetime
    trust_at_submission: float


class DeviceTrust(BaseModel):
    """Reputation of one anonymous device."""
    model_config = ConfigDict(frozen=True)

    device_hash: str
    total_reports: int = 0
    accurate_reports: int = 0
    trust_score: float
    last_report_at: datetime


class KioskMetadata(BaseModel):
    """Static kiosk data from the geodata provider. Never carries status."""
    model_config = ConfigDict(frozen=True)

    id: str
    lat: float
    lng: float
    name: Optional[str] = None
    bank: Optional[str] = None
    address: Optional[str] = None


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    cache_key: str
    kiosks: List[KioskMetadata]
    fetched_at: datetime


class StatusResult(BaseModel):
    """Aggregated status of a kiosk at a given instant."""
    model_config = ConfigDict(frozen=True)

    status: KioskStatus
    confidence: float
    report_count: int


class KioskView(KioskMetadata):
    """Kiosk metadata joined with its freshly computed status."""
    status: KioskStatus
    confidence: float
    report_count: int
    last_reported_at: Optional[datetime] = None


class ReportView(Report):
    """Stored report annotated with the device's current trust."""
    device_trust: float


# ============================================
# REQUESTS
# ============================================
class ReportSubmission(BaseModel):
    """Request to submit a kiosk status observation."""
    kiosk_id: str = Field(
        ...,
        validation_alias=AliasChoices("kiosk_id", "atm_id"),
        description="Kiosk identifier (provider id)"
    )
    status: str = Field(..., description="working | no_cash | out_of_service")
    device_hash: Optional[str] = Field(None, description="Opaque device identifier")

    @field_validator("kiosk_id", mode="before")
    @classmethod
    def _coerce_kiosk_id(cls, value: Union[int, str]) -> str:
        # Provider ids are numeric OSM node ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class VerifyReportRequest(BaseModel):
    """Operator verdict on a stored report."""
    report_id: str
    is_accurate: bool
