"""Visibility and component checks for tabs."""

from __future__ import annotations

from types import MappingProxyType
from typing import Protocol

from jetwatch.config.models import TabEntry, WatchConfig
from jetwatch.audit.models import ComponentStatus

CHATBOT_COMPONENT = "Chatbot"


class ComponentInspector(Protocol):
    """Inspects a rendered component and reports what it actually sees.

    Receives the baseline status derived from the registries and returns the
    observed status, which may add errors or clear visibility.
    """

    def inspect(self, tab: str, baseline: ComponentStatus) -> ComponentStatus: ...


class RegistryInspector:
    """Trusts the registries: every registered component is healthy."""

    def inspect(self, tab: str, baseline: ComponentStatus) -> ComponentStatus:
        return baseline


class ComponentIntegrityVerifier:
    """Checks a tab and its components against the static tab registry.

    Tabs missing from the registry fail closed: not visible, not interactive.
    """

    def __init__(self, config: WatchConfig, inspector: ComponentInspector | None = None) -> None:
        self._tabs: MappingProxyType[str, TabEntry] = MappingProxyType(dict(config.tabs))
        self._chat_enabled = frozenset(config.chat.enabled_tabs)
        self._inspector = inspector or RegistryInspector()

    @property
    def known_tabs(self) -> list[str]:
        return list(self._tabs)

    def verify_visibility(self, tab: str) -> ComponentStatus:
        entry = self._tabs.get(tab)
        baseline = ComponentStatus(
            name=tab,
            is_visible=entry is not None and entry.visible,
            is_interactive=entry is not None and entry.visible and entry.interactive,
        )
        return self._inspector.inspect(tab, baseline)

    def verify_components(self, tab: str) -> list[ComponentStatus]:
        entry = self._tabs.get(tab)
        if entry is None:
            return []
        return [
            self._inspector.inspect(tab, ComponentStatus(name=name, is_visible=True, is_interactive=True))
            for name in entry.components
        ]

    def verify_chatbot(self, tab: str) -> ComponentStatus:
        enabled = tab in self._chat_enabled
        baseline = ComponentStatus(name=CHATBOT_COMPONENT, is_visible=enabled, is_interactive=enabled)
        return self._inspector.inspect(tab, baseline)
