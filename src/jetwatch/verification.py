"""Public entry points: dependency status checks and tab audits.

Every coroutine here builds its collaborators from a :class:`WatchConfig`
(the built-in registries when none is given) and never raises for any tab or
dependency name.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Dict, List

import httpx

from jetwatch.audit.auditor import TabAuditor
from jetwatch.audit.components import ComponentInspector, ComponentIntegrityVerifier
from jetwatch.audit.models import TabAuditResult
from jetwatch.audit.report import format_audit_results
from jetwatch.config.models import WatchConfig
from jetwatch.registry.health import ServiceStatusChecker
from jetwatch.registry.models import ServiceStatus, StatusSummary
from jetwatch.registry.registry import ServiceStatusAggregator
from jetwatch.registry.signals import LocalSignalProvider, signals_from_path

__all__ = [
    "audit_all_tabs",
    "audit_tab",
    "build_aggregator",
    "build_auditor",
    "check_api_status",
    "check_multiple_api_status",
    "format_audit_results",
    "get_api_status_summary",
]


def _checker(
    config: WatchConfig | None,
    signals: LocalSignalProvider | None,
    transport: httpx.AsyncBaseTransport | None,
) -> ServiceStatusChecker:
    config = config or WatchConfig()
    if signals is None:
        signals = signals_from_path(config.signals_file)
    return ServiceStatusChecker(config, signals=signals, transport=transport)


def build_aggregator(
    config: WatchConfig | None = None,
    signals: LocalSignalProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceStatusAggregator:
    return ServiceStatusAggregator(_checker(config, signals, transport))


def build_auditor(
    config: WatchConfig | None = None,
    signals: LocalSignalProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    inspector: ComponentInspector | None = None,
) -> TabAuditor:
    config = config or WatchConfig()
    return TabAuditor(
        config,
        verifier=ComponentIntegrityVerifier(config, inspector=inspector),
        aggregator=build_aggregator(config, signals, transport),
    )


async def check_api_status(
    name: str,
    config: WatchConfig | None = None,
    signals: LocalSignalProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceStatus:
    return await _checker(config, signals, transport).check(name)


async def check_multiple_api_status(
    names: Iterable[str],
    config: WatchConfig | None = None,
    signals: LocalSignalProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Dict[str, ServiceStatus]:
    return await build_aggregator(config, signals, transport).check_all(names)


async def get_api_status_summary(
    config: WatchConfig | None = None,
    signals: LocalSignalProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> StatusSummary:
    """Check every registered dependency and bucket the names by state."""
    config = config or WatchConfig()
    return await build_aggregator(config, signals, transport).summarize(config.services.keys())


async def audit_tab(
    tab: str,
    config: WatchConfig | None = None,
    signals: LocalSignalProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    inspector: ComponentInspector | None = None,
) -> TabAuditResult:
    return await build_auditor(config, signals, transport, inspector).audit(tab)


async def audit_all_tabs(
    config: WatchConfig | None = None,
    signals: LocalSignalProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    inspector: ComponentInspector | None = None,
) -> List[TabAuditResult]:
    return await build_auditor(config, signals, transport, inspector).audit_all()
