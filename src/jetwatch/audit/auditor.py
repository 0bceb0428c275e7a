"""Tab auditor: visibility, components, dependencies, then chat integration."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from types import MappingProxyType

from jetwatch.audit.components import ComponentIntegrityVerifier
from jetwatch.audit.models import AuditSeverity, TabAuditResult
from jetwatch.config.models import WatchConfig
from jetwatch.registry.registry import ServiceStatusAggregator

logger = logging.getLogger(__name__)


class TabAuditor:
    """Runs the audit pipeline for one tab at a time.

    Each sub-check may only raise the result's severity. An unexpected error
    anywhere in the pipeline replaces the result with a single critical issue
    at ``Broken``; ``audit`` itself never raises.
    """

    def __init__(
        self,
        config: WatchConfig,
        verifier: ComponentIntegrityVerifier,
        aggregator: ServiceStatusAggregator,
    ) -> None:
        self._requirements = MappingProxyType(
            {tab: tuple(dict.fromkeys(entry.dependencies)) for tab, entry in config.tabs.items()}
        )
        self._chat_audited = frozenset(config.chat.audited_tabs)
        self._verifier = verifier
        self._aggregator = aggregator

    def required_services(self, tab: str) -> tuple[str, ...]:
        return self._requirements.get(tab, ())

    async def audit(self, tab: str) -> TabAuditResult:
        logger.info("Starting audit for tab: %s", tab)
        result = TabAuditResult(tab=tab)
        try:
            self._check_visibility(result)
            self._check_components(result)
            await self._check_dependencies(result)
            if tab in self._chat_audited:
                self._check_chatbot(result)
        except Exception as exc:
            logger.exception("Audit failed for tab: %s", tab)
            return TabAuditResult(
                tab=tab,
                status=AuditSeverity.BROKEN,
                issues=[f"Critical error during audit: {str(exc) or type(exc).__name__}"],
            )
        logger.info("Audit completed for tab %s: %s", tab, result.status.value)
        return result

    async def audit_all(self, tabs: Iterable[str] | None = None) -> list[TabAuditResult]:
        """Audit several tabs concurrently (default: every registered tab)."""
        names = list(tabs) if tabs is not None else self._verifier.known_tabs
        return list(await asyncio.gather(*(self.audit(name) for name in names)))

    def _check_visibility(self, result: TabAuditResult) -> None:
        status = self._verifier.verify_visibility(result.tab)
        if not status.is_visible:
            result.escalate(AuditSeverity.BROKEN, "Tab is not visible in the sidebar/menu")
        elif not status.is_interactive:
            result.escalate(AuditSeverity.PARTIAL, "Tab is visible but not interactive")

    def _check_components(self, result: TabAuditResult) -> None:
        for component in self._verifier.verify_components(result.tab):
            if component.has_errors:
                detail = component.error_detail or "Unknown error"
                result.escalate(AuditSeverity.PARTIAL, f'Component "{component.name}" failed: {detail}')

    async def _check_dependencies(self, result: TabAuditResult) -> None:
        required = self.required_services(result.tab)
        if not required:
            return
        statuses = await self._aggregator.check_all(required)
        # Walk the registry order, not settle order, so the outcome is stable.
        for name in required:
            if statuses[name].connected:
                result.services_used.append(name)
            else:
                result.services_missing.append(name)
        if result.services_missing:
            result.escalate(
                AuditSeverity.PARTIAL,
                f"APIs not connected: {', '.join(result.services_missing)}",
            )

    def _check_chatbot(self, result: TabAuditResult) -> None:
        chatbot = self._verifier.verify_chatbot(result.tab)
        if not chatbot.is_visible:
            result.escalate(AuditSeverity.PARTIAL, "Chatbot is not visible in this tab")
        elif not chatbot.is_interactive:
            result.escalate(AuditSeverity.PARTIAL, "Chatbot is visible but not interactive")
        if chatbot.has_errors:
            result.escalate(AuditSeverity.BROKEN, f"Chatbot error: {chatbot.error_detail or 'Unknown error'}")
