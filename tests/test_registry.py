"""Tests for dependency status checks, signals and aggregation."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from jetwatch.config.models import WatchConfig
from jetwatch.registry.health import NO_ENDPOINT_MESSAGE, ServiceStatusChecker, interpret_response
from jetwatch.registry.models import ServiceState, ServiceStatus, StatusSummary
from jetwatch.registry.registry import ServiceStatusAggregator
from jetwatch.registry.signals import JsonFileSignals, LocalSignalProvider, MappingSignals, signals_from_path

# ─── Model tests ───


class TestServiceState:
    def test_rank_order(self):
        assert ServiceState.CONNECTED.rank < ServiceState.LIMITED.rank < ServiceState.DISCONNECTED.rank

    def test_unknown_has_no_rank(self):
        assert ServiceState.UNKNOWN.rank is None


class TestServiceStatus:
    def test_connected(self):
        s = ServiceStatus(name="Stripe", state=ServiceState.CONNECTED)
        assert s.connected
        assert s.message is None

    def test_limited_is_not_connected(self):
        assert not ServiceStatus(name="Stripe", state=ServiceState.LIMITED).connected

    def test_to_dict(self):
        s = ServiceStatus(name="Stripe", state=ServiceState.UNKNOWN, message="?")
        assert s.to_dict() == {"name": "Stripe", "state": "Unknown", "message": "?"}


class TestStatusSummary:
    def test_from_statuses(self):
        statuses = {
            "a": ServiceStatus(name="a", state=ServiceState.CONNECTED),
            "b": ServiceStatus(name="b", state=ServiceState.DISCONNECTED),
            "c": ServiceStatus(name="c", state=ServiceState.UNKNOWN),
        }
        summary = StatusSummary.from_statuses(statuses)
        assert summary.to_dict() == {
            "connected": ["a"],
            "limited": [],
            "disconnected": ["b"],
            "unknown": ["c"],
        }


# ─── Signal providers ───


class TestSignals:
    def test_mapping_signals(self):
        signals = MappingSignals({"firebase_initialized": "true"})
        assert signals.get("firebase_initialized") == "true"
        assert signals.get("missing") is None
        assert isinstance(signals, LocalSignalProvider)

    def test_json_file_signals(self, tmp_path: Path):
        path = tmp_path / "signals.json"
        path.write_text(json.dumps({"firebase_initialized": True, "recent_ai_responses": "[1]"}))
        signals = JsonFileSignals(path)
        assert signals.get("firebase_initialized") == "true"
        assert signals.get("recent_ai_responses") == "[1]"
        assert signals.get("missing") is None

    def test_json_file_missing(self, tmp_path: Path):
        assert JsonFileSignals(tmp_path / "nope.json").get("anything") is None

    def test_json_file_not_object(self, tmp_path: Path):
        path = tmp_path / "signals.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            JsonFileSignals(path).get("x")

    def test_signals_from_path(self, tmp_path: Path):
        assert isinstance(signals_from_path(""), MappingSignals)
        assert isinstance(signals_from_path(str(tmp_path / "s.json")), JsonFileSignals)


# ─── interpret_response ───


class TestInterpretResponse:
    def test_ok(self):
        s = interpret_response("Stripe", httpx.Response(200, json={"status": "ok", "message": "fine"}))
        assert s.state is ServiceState.CONNECTED
        assert s.message == "fine"

    def test_ok_default_message(self):
        s = interpret_response("Stripe", httpx.Response(200, json={"status": "ok"}))
        assert s.message == "API is connected and functional"

    def test_limited(self):
        s = interpret_response("Stripe", httpx.Response(200, json={"status": "limited"}))
        assert s.state is ServiceState.LIMITED

    def test_other_status(self):
        s = interpret_response("Stripe", httpx.Response(200, json={"status": "degraded"}))
        assert s.state is ServiceState.DISCONNECTED

    def test_unparseable_success_body(self):
        s = interpret_response("Stripe", httpx.Response(200, text="<html>"))
        assert s.state is ServiceState.DISCONNECTED

    def test_error_with_status_body(self):
        s = interpret_response("Stripe", httpx.Response(503, json={"status": "ok", "message": "maintenance"}))
        assert s.state is ServiceState.DISCONNECTED
        assert s.message == "maintenance"

    def test_error_without_body_fails(self):
        from jetwatch.registry.health import ProbeFailed

        with pytest.raises(ProbeFailed):
            interpret_response("Stripe", httpx.Response(502, text="Bad gateway"))


# ─── ServiceStatusChecker ───


class TestServiceStatusChecker:
    @pytest.mark.asyncio
    async def test_unregistered_dependency(self, sample_config: WatchConfig):
        with patch("jetwatch.registry.health.httpx.AsyncClient") as mock_cls:
            checker = ServiceStatusChecker(sample_config)
            result = await checker.check("Unregistered-XYZ")
            mock_cls.assert_not_called()
        assert result == ServiceStatus(
            name="Unregistered-XYZ",
            state=ServiceState.UNKNOWN,
            message=NO_ENDPOINT_MESSAGE,
        )
        assert result.message == "no verification endpoint defined for this API"

    @pytest.mark.asyncio
    async def test_connected(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/stripe/status": (200, {"status": "ok"})})
        result = await ServiceStatusChecker(sample_config, transport=transport).check("Stripe")
        assert result.state is ServiceState.CONNECTED

    @pytest.mark.asyncio
    async def test_requests_base_url_plus_endpoint(self, sample_config: WatchConfig):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"status": "ok"})

        checker = ServiceStatusChecker(sample_config, transport=httpx.MockTransport(handler))
        await checker.check("Firebase")
        assert seen == ["http://jetai.test/api/firebase/status"]

    @pytest.mark.asyncio
    async def test_limited(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/stripe/status": (200, {"status": "limited", "message": "quota"})})
        result = await ServiceStatusChecker(sample_config, transport=transport).check("Stripe")
        assert result.state is ServiceState.LIMITED
        assert result.message == "quota"

    @pytest.mark.asyncio
    async def test_timeout_without_fallback(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/stripe/status": httpx.ReadTimeout("timed out")})
        result = await ServiceStatusChecker(sample_config, transport=transport).check("Stripe")
        assert result.state is ServiceState.DISCONNECTED
        assert result.message == "Failed to connect to API: Timeout"

    @pytest.mark.asyncio
    async def test_connect_error(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/stripe/status": httpx.ConnectError("refused")})
        result = await ServiceStatusChecker(sample_config, transport=transport).check("Stripe")
        assert result.state is ServiceState.DISCONNECTED
        assert result.message.startswith("Failed to connect to API: Connection refused")

    @pytest.mark.asyncio
    async def test_non_2xx_without_body_uses_fallback(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/firebase/status": (500, "boom")})
        signals = MappingSignals({"firebase_initialized": "true"})
        result = await ServiceStatusChecker(sample_config, signals=signals, transport=transport).check("Firebase")
        assert result.state is ServiceState.CONNECTED
        assert result.message == "Firebase detected in local storage"

    @pytest.mark.asyncio
    async def test_fallback_signal_mismatch(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/firebase/status": httpx.ConnectError("refused")})
        signals = MappingSignals({"firebase_initialized": "false"})
        result = await ServiceStatusChecker(sample_config, signals=signals, transport=transport).check("Firebase")
        assert result.state is ServiceState.DISCONNECTED
        assert "refused" in result.message

    @pytest.mark.asyncio
    async def test_presence_fallback(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/gemini/status": httpx.ReadTimeout("slow")})
        signals = MappingSignals({"recent_ai_responses": "[...]"})
        result = await ServiceStatusChecker(sample_config, signals=signals, transport=transport).check("Gemini AI")
        assert result.state is ServiceState.CONNECTED
        assert result.message == "Recent AI activity detected"

    @pytest.mark.asyncio
    async def test_fallback_not_used_when_probe_answers(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory({"/api/firebase/status": (200, {"status": "down"})})
        signals = MappingSignals({"firebase_initialized": "true"})
        result = await ServiceStatusChecker(sample_config, signals=signals, transport=transport).check("Firebase")
        assert result.state is ServiceState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_fallback_error_is_captured(self, sample_config: WatchConfig, transport_factory):
        class BrokenSignals:
            def get(self, key: str) -> str | None:
                raise OSError("storage unavailable")

        transport = transport_factory({"/api/firebase/status": httpx.ConnectError("refused")})
        result = await ServiceStatusChecker(sample_config, signals=BrokenSignals(), transport=transport).check(
            "Firebase"
        )
        assert result.state is ServiceState.DISCONNECTED
        assert "refused" in result.message

    @pytest.mark.asyncio
    async def test_unexpected_client_error_is_captured(self, sample_config: WatchConfig):
        with patch("jetwatch.registry.health.httpx.AsyncClient") as mock_cls:
            mock_client = AsyncMock()
            mock_client.get.side_effect = RuntimeError("event loop closed")
            mock_client.__aenter__ = AsyncMock(return_value=mock_client)
            mock_client.__aexit__ = AsyncMock(return_value=False)
            mock_cls.return_value = mock_client

            result = await ServiceStatusChecker(sample_config).check("Stripe")
        assert result.state is ServiceState.DISCONNECTED
        assert result.message == "Failed to connect to API: event loop closed"

    def test_registry_is_read_only(self, sample_config: WatchConfig):
        checker = ServiceStatusChecker(sample_config)
        assert checker.endpoint_for("Stripe") == "/api/stripe/status"
        with pytest.raises(TypeError):
            checker._endpoints["Stripe"] = "/elsewhere"  # type: ignore[index]


# ─── ServiceStatusAggregator ───


class TestServiceStatusAggregator:
    @pytest.mark.asyncio
    async def test_check_all(self, sample_config: WatchConfig, all_ok_transport):
        aggregator = ServiceStatusAggregator(ServiceStatusChecker(sample_config, transport=all_ok_transport))
        results = await aggregator.check_all(["Firebase", "Stripe", "Nope"])
        assert list(results) == ["Firebase", "Stripe", "Nope"]
        assert results["Firebase"].state is ServiceState.CONNECTED
        assert results["Nope"].state is ServiceState.UNKNOWN

    @pytest.mark.asyncio
    async def test_duplicates_checked_once(self, sample_config: WatchConfig):
        checker = ServiceStatusChecker(sample_config)
        with patch.object(checker, "check", new_callable=AsyncMock) as mock_check:
            mock_check.side_effect = lambda name: ServiceStatus(name=name, state=ServiceState.CONNECTED)
            results = await ServiceStatusAggregator(checker).check_all(["Stripe", "Stripe"])
        assert list(results) == ["Stripe"]
        assert mock_check.await_count == 1

    @pytest.mark.asyncio
    async def test_one_check_raising_does_not_abort_batch(self, sample_config: WatchConfig):
        checker = ServiceStatusChecker(sample_config)

        async def flaky(name: str) -> ServiceStatus:
            if name == "Stripe":
                raise RuntimeError("bug in checker")
            return ServiceStatus(name=name, state=ServiceState.CONNECTED)

        with patch.object(checker, "check", side_effect=flaky):
            results = await ServiceStatusAggregator(checker).check_all(["Firebase", "Stripe"])
        assert results["Firebase"].state is ServiceState.CONNECTED
        assert results["Stripe"] == ServiceStatus(
            name="Stripe", state=ServiceState.UNKNOWN, message="error during verification"
        )

    @pytest.mark.asyncio
    async def test_checks_run_concurrently(self, sample_config: WatchConfig):
        checker = ServiceStatusChecker(sample_config)
        running = 0
        peak = 0

        async def slow(name: str) -> ServiceStatus:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return ServiceStatus(name=name, state=ServiceState.CONNECTED)

        with patch.object(checker, "check", side_effect=slow):
            await ServiceStatusAggregator(checker).check_all(["a", "b", "c"])
        assert peak == 3

    @pytest.mark.asyncio
    async def test_summarize(self, sample_config: WatchConfig, transport_factory):
        transport = transport_factory(
            {
                "/api/firebase/status": (200, {"status": "ok"}),
                "/api/stripe/status": (200, {"status": "limited"}),
                "/api/gemini/status": httpx.ConnectError("refused"),
            }
        )
        aggregator = ServiceStatusAggregator(ServiceStatusChecker(sample_config, transport=transport))
        summary = await aggregator.summarize(["Firebase", "Stripe", "Gemini AI", "Unregistered"])
        assert summary.connected == ["Firebase"]
        assert summary.limited == ["Stripe"]
        assert summary.disconnected == ["Gemini AI"]
        assert summary.unknown == ["Unregistered"]
