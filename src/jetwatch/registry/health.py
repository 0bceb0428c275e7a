"""Async status probe for a single dependency, with local-signal fallback."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any

import httpx

from jetwatch.config.models import FallbackRule, WatchConfig
from jetwatch.registry.models import ServiceState, ServiceStatus
from jetwatch.registry.signals import LocalSignalProvider, MappingSignals

logger = logging.getLogger(__name__)

NO_ENDPOINT_MESSAGE = "no verification endpoint defined for this API"
PROBE_FAILED_PREFIX = "Failed to connect to API"

_DEFAULT_MESSAGES = {
    ServiceState.CONNECTED: "API is connected and functional",
    ServiceState.LIMITED: "API is connected but with limitations",
    ServiceState.DISCONNECTED: "API responded but indicated disconnected status",
}


class ProbeFailed(Exception):
    """The status request did not produce a usable answer."""


def _parse_body(resp: httpx.Response) -> dict[str, Any] | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def interpret_response(name: str, resp: httpx.Response) -> ServiceStatus:
    """Map a completed status response to a ServiceStatus.

    Raises ProbeFailed for a non-2xx response without a status body.
    """
    body = _parse_body(resp)
    if not resp.is_success and (body is None or "status" not in body):
        raise ProbeFailed(f"HTTP {resp.status_code} from status endpoint")

    reported = body.get("status") if body else None
    if resp.is_success and reported == "ok":
        state = ServiceState.CONNECTED
    elif resp.is_success and reported == "limited":
        state = ServiceState.LIMITED
    else:
        state = ServiceState.DISCONNECTED

    message = body.get("message") if body else None
    if not isinstance(message, str) or not message:
        message = _DEFAULT_MESSAGES[state]
    return ServiceStatus(name=name, state=state, message=message)


class ServiceStatusChecker:
    """Checks one named dependency. ``check`` never raises."""

    def __init__(
        self,
        config: WatchConfig,
        signals: LocalSignalProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = config.probe.base_url.rstrip("/")
        self._timeout = config.probe.timeout
        self._endpoints = MappingProxyType({key: entry.endpoint for key, entry in config.services.items()})
        self._fallbacks: MappingProxyType[str, FallbackRule] = MappingProxyType(dict(config.fallbacks))
        self._signals = signals if signals is not None else MappingSignals()
        self._transport = transport

    def endpoint_for(self, name: str) -> str | None:
        return self._endpoints.get(name)

    async def _probe(self, name: str, endpoint: str) -> ServiceStatus:
        url = self._base_url + endpoint
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(url)
        return interpret_response(name, resp)

    def infer_from_signals(self, name: str) -> ServiceStatus:
        """Guess a dependency's state from local signals.

        Yields Connected or Unknown; lets provider errors propagate.
        """
        rule = self._fallbacks.get(name)
        if rule is None:
            return ServiceStatus(
                name=name,
                state=ServiceState.UNKNOWN,
                message="No alternative verification method available",
            )
        value = self._signals.get(rule.signal)
        matched = bool(value) if rule.expect is None else value == rule.expect
        if matched:
            return ServiceStatus(
                name=name,
                state=ServiceState.CONNECTED,
                message=rule.message or f"Local signal {rule.signal!r} present",
            )
        return ServiceStatus(
            name=name,
            state=ServiceState.UNKNOWN,
            message=f"Local signal {rule.signal!r} not set",
        )

    async def check(self, name: str) -> ServiceStatus:
        """Check a dependency: registered endpoint, then fallback heuristic."""
        logger.info("Checking status for API: %s", name)
        endpoint = self.endpoint_for(name)
        if endpoint is None:
            return ServiceStatus(name=name, state=ServiceState.UNKNOWN, message=NO_ENDPOINT_MESSAGE)

        try:
            return await self._probe(name, endpoint)
        except httpx.TimeoutException:
            error = "Timeout"
        except httpx.ConnectError as exc:
            error = f"Connection refused: {exc}"
        except Exception as exc:
            error = str(exc) or type(exc).__name__
        logger.warning("Status probe for %s failed: %s", name, error)

        try:
            fallback = self.infer_from_signals(name)
        except Exception:
            logger.exception("Error in alternative status check for %s", name)
        else:
            if fallback.state is ServiceState.CONNECTED:
                return fallback

        return ServiceStatus(name=name, state=ServiceState.DISCONNECTED, message=f"{PROBE_FAILED_PREFIX}: {error}")
