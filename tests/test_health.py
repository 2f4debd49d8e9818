"""Tests for the health and metrics server."""

import pytest

from sinkingyachts.monitoring.health import HealthServer, health_status, render_metrics


def test_health_status_ok_without_feed():
    assert health_status({"mode": "on_demand", "cache_entries": 3}) == "ok"


def test_health_status_degraded_when_feed_down():
    assert health_status({"feed_state": "connecting"}) == "degraded"
    assert health_status({"feed_state": "connected"}) == "ok"


def test_health_status_degraded_after_refresh_error():
    assert health_status({"last_refresh": None, "last_refresh_error": "API error 503"}) == "degraded"


def test_render_metrics_skips_non_numeric_values():
    text = render_metrics(
        {
            "mode": "polling",
            "cache_entries": 12,
            "feed_connected": True,
            "refresh_runs": 4,
        }
    )

    assert text.splitlines() == [
        "sinkingyachts_cache_entries 12",
        "sinkingyachts_refresh_runs 4",
    ]


def test_render_metrics_empty():
    assert render_metrics({}) == 'sinkingyachts_status{state="empty"} 1\n'


@pytest.mark.asyncio
async def test_healthz_endpoint():
    from aiohttp.test_utils import TestClient, TestServer

    server = HealthServer("127.0.0.1", 0, lambda: {"mode": "polling_feed", "feed_state": "connected"})

    async with TestClient(TestServer(server.build_app())) as client:
        resp = await client.get("/healthz")
        assert resp.status == 200
        data = await resp.json()
        assert data["status"] == "ok"
        assert data["mode"] == "polling_feed"


@pytest.mark.asyncio
async def test_metrics_endpoint():
    from aiohttp.test_utils import TestClient, TestServer

    server = HealthServer("127.0.0.1", 0, lambda: {"cache_entries": 7, "inflight_lookups": 0})

    async with TestClient(TestServer(server.build_app())) as client:
        resp = await client.get("/metrics")
        assert resp.status == 200
        text = await resp.text()
        assert "sinkingyachts_cache_entries 7" in text
        assert "sinkingyachts_inflight_lookups 0" in text


@pytest.mark.asyncio
async def test_failing_status_provider_reports_error():
    from aiohttp.test_utils import TestClient, TestServer

    def broken():
        raise RuntimeError("cache gone")

    server = HealthServer("127.0.0.1", 0, broken)

    async with TestClient(TestServer(server.build_app())) as client:
        resp = await client.get("/healthz")
        data = await resp.json()
        assert data["status"] == "error"
        assert data["message"] == "cache gone"


@pytest.mark.asyncio
async def test_disabled_server_does_not_bind():
    server = HealthServer("127.0.0.1", 0, dict, enabled=False)
    await server.start()

    assert server._runner is None
    await server.stop()
