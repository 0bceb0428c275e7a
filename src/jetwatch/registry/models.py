"""Data models for dependency status."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional


class ServiceState(enum.Enum):
    """Reachability of one dependency."""

    CONNECTED = "Connected"
    LIMITED = "Limited"
    DISCONNECTED = "Disconnected"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int | None:
        """Severity rank; ``None`` for Unknown, which is informational only."""
        return _STATE_RANKS.get(self)


_STATE_RANKS = {
    ServiceState.CONNECTED: 0,
    ServiceState.LIMITED: 1,
    ServiceState.DISCONNECTED: 2,
}


@dataclass
class ServiceStatus:
    """Result of a single dependency check."""

    name: str
    state: ServiceState
    message: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.state is ServiceState.CONNECTED

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "state": self.state.value, "message": self.message}


@dataclass
class StatusSummary:
    """Dependency names partitioned by state."""

    connected: list[str] = field(default_factory=list)
    limited: list[str] = field(default_factory=list)
    disconnected: list[str] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)

    @classmethod
    def from_statuses(cls, statuses: Mapping[str, ServiceStatus]) -> StatusSummary:
        summary = cls()
        for key, status in statuses.items():
            summary.bucket(status.state).append(key)
        return summary

    def bucket(self, state: ServiceState) -> list[str]:
        return {
            ServiceState.CONNECTED: self.connected,
            ServiceState.LIMITED: self.limited,
            ServiceState.DISCONNECTED: self.disconnected,
            ServiceState.UNKNOWN: self.unknown,
        }[state]

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "connected": list(self.connected),
            "limited": list(self.limited),
            "disconnected": list(self.disconnected),
            "unknown": list(self.unknown),
        }
