"""Tests for the nearby/report composition."""

import asyncio

import pytest

from kiosk_status.errors import InvalidArgument, UpstreamUnavailable
from kiosk_status.schemas import KioskStatus


class TestNearby:

    @pytest.mark.asyncio
    async def test_miss_fetches_and_caches(self, kiosk_service, provider, cache):
        kiosks = await kiosk_service.nearby(52.52, 13.405, 15000)

        assert [k.id for k in kiosks] == ["1001", "1002"]
        assert all(k.status == KioskStatus.unknown for k in kiosks)
        assert all(k.last_reported_at is None for k in kiosks)
        assert provider.calls == 1
        assert cache.lookup(52.52, 13.405, 15000) is not None

        await kiosk_service.nearby(52.52, 13.405, 15000)
        assert provider.calls == 1

    @pytest.mark.asyncio
    async def test_status_is_fresh_on_cache_hit(self, kiosk_service, provider, clock):
        before = await kiosk_service.nearby(52.52, 13.405, 15000)

        clock.advance(seconds=30)
        kiosk_service.submit_report("1001", "no_cash", "dev-a")
        after = await kiosk_service.nearby(52.52, 13.405, 15000)

        assert provider.calls == 1
        assert [(k.id, k.name, k.bank, k.address) for k in after] == \
            [(k.id, k.name, k.bank, k.address) for k in before]
        assert after[0].status == KioskStatus.no_cash
        assert after[0].confidence == 1.0
        assert after[0].report_count == 1
        assert after[0].last_reported_at == clock.now
        assert after[1].status == KioskStatus.unknown

    @pytest.mark.asyncio
    async def test_expired_entry_is_refetched(self, kiosk_service, provider, clock):
        await kiosk_service.nearby(52.52, 13.405, 15000)
        clock.advance(minutes=6)
        await kiosk_service.nearby(52.52, 13.405, 15000)
        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_upstream_failure_is_not_cached(self, kiosk_service, provider, cache):
        provider.fail = True
        with pytest.raises(UpstreamUnavailable):
            await kiosk_service.nearby(52.52, 13.405, 15000)
        assert cache.lookup(52.52, 13.405, 15000) is None

        provider.fail = False
        kiosks = await kiosk_service.nearby(52.52, 13.405, 15000)
        assert len(kiosks) == 2
        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self, kiosk_service, provider):
        provider.gate = asyncio.Event()
        first = asyncio.ensure_future(kiosk_service.nearby(52.52, 13.405, 15000))
        second = asyncio.ensure_future(kiosk_service.nearby(52.5201, 13.4049, 15000))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        provider.gate.set()

        results = await asyncio.gather(first, second)
        assert provider.calls == 1
        assert [k.id for k in results[0]] == [k.id for k in results[1]]

    @pytest.mark.asyncio
    async def test_cancelled_caller_still_warms_cache(self, kiosk_service, provider, cache):
        provider.gate = asyncio.Event()
        caller = asyncio.ensure_future(kiosk_service.nearby(52.52, 13.405, 15000))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        fetch = next(iter(kiosk_service._inflight.values()))

        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller

        provider.gate.set()
        await fetch
        assert cache.lookup(52.52, 13.405, 15000) is not None
        assert kiosk_service._inflight == {}


class TestReports:

    def test_submit_returns_weighted_status(self, kiosk_service):
        result = kiosk_service.submit_report("1001", "out_of_service", "dev-a")
        assert result["ok"] is True
        assert result["report"].status == KioskStatus.out_of_service
        assert result["weighted_status"] == KioskStatus.out_of_service
        assert result["confidence"] == 1.0

    def test_submit_reflects_competing_reports(self, kiosk_service, ledger):
        for _ in range(3):
            ledger.record_outcome("trusted", True)
        kiosk_service.submit_report("1001", "working", "trusted")
        result = kiosk_service.submit_report("1001", "no_cash", "newcomer")

        assert result["weighted_status"] == KioskStatus.working
        assert result["confidence"] == pytest.approx(0.85 / 1.35)

    def test_invalid_submission_leaves_no_trace(self, kiosk_service, store):
        with pytest.raises(InvalidArgument):
            kiosk_service.submit_report("1001", "unknown", "dev-a")
        assert store.total_reports() == 0

    def test_reports_for_kiosk_uses_current_trust(self, kiosk_service, ledger, clock):
        kiosk_service.submit_report("1001", "working", "dev-a")
        clock.advance(minutes=1)
        kiosk_service.submit_report("1001", "working", "dev-b")
        for _ in range(3):
            ledger.record_outcome("dev-a", False)

        result = kiosk_service.reports_for_kiosk("1001")
        assert result["status"] == KioskStatus.working
        assert result["report_count"] == 2
        by_device = {r.device_hash: r for r in result["reports"]}
        assert by_device["dev-a"].trust_at_submission == 0.5
        assert by_device["dev-a"].device_trust == pytest.approx(0.3)
        assert by_device["dev-b"].device_trust == 0.5
        assert result["reports"][0].device_hash == "dev-b"

    def test_reports_for_unreported_kiosk(self, kiosk_service):
        result = kiosk_service.reports_for_kiosk("9999")
        assert result["status"] == KioskStatus.unknown
        assert result["reports"] == []
