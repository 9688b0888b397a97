"""Shared test fixtures.

Services are built fresh per test around a controllable clock. The geodata
provider is replaced by an in-memory fake; no network access.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from kiosk_status.dependencies import (
    get_admin_service,
    get_kiosk_service,
    get_report_store,
    get_result_cache,
    get_trust_ledger,
)
from kiosk_status.errors import UpstreamUnavailable
from kiosk_status.main import app
from kiosk_status.schemas import KioskMetadata
from kiosk_status.services import AdminService, KioskService, ReportStore, ResultCache, TrustLedger

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeProvider:
    """Stands in for OverpassService.fetch_kiosks"""

    def __init__(self, kiosks: Optional[List[KioskMetadata]] = None):
        self.kiosks = kiosks if kiosks is not None else list(SAMPLE_KIOSKS)
        self.calls = 0
        self.fail = False
        self.gate: Optional[asyncio.Event] = None

    async def fetch_kiosks(self, lat, lng, radius):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise UpstreamUnavailable("Kiosk provider timed out")
        return list(self.kiosks)


SAMPLE_KIOSKS = [
    KioskMetadata(id="1001", lat=52.5200, lng=13.4050, name="Alexanderplatz ATM",
                  bank="Deutsche Bank", address="Alexanderplatz 1, Berlin"),
    KioskMetadata(id="1002", lat=52.5210, lng=13.4100, name=None, bank="Sparkasse", address=None),
]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger(clock) -> TrustLedger:
    return TrustLedger(clock=clock)


@pytest.fixture
def store(ledger, clock) -> ReportStore:
    return ReportStore(ledger, clock=clock)


@pytest.fixture
def cache(clock) -> ResultCache:
    return ResultCache(clock=clock, ttl_seconds=300, precision=3)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def kiosk_service(ledger, store, cache, provider, clock) -> KioskService:
    return KioskService(ledger, store, cache, provider, clock=clock)


@pytest.fixture
def admin_service(ledger, store, clock) -> AdminService:
    return AdminService(ledger, store, clock=clock)


@pytest.fixture
def client(kiosk_service, admin_service, cache, store, ledger):
    app.dependency_overrides[get_kiosk_service] = lambda: kiosk_service
    app.dependency_overrides[get_admin_service] = lambda: admin_service
    app.dependency_overrides[get_result_cache] = lambda: cache
    app.dependency_overrides[get_report_store] = lambda: store
    app.dependency_overrides[get_trust_ledger] = lambda: ledger
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
