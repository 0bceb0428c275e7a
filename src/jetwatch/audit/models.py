"""Data models for tab audits."""

from __future__ import annotations

import enum
import functools
from dataclasses import dataclass, field
from typing import Any, Optional


@functools.total_ordering
class AuditSeverity(enum.Enum):
    """Overall health of a tab, ordered OK < Partial < Broken."""

    OK = "OK"
    PARTIAL = "Partial"
    BROKEN = "Broken"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AuditSeverity):
            return NotImplemented
        return self.rank < other.rank


_SEVERITY_ORDER = (AuditSeverity.OK, AuditSeverity.PARTIAL, AuditSeverity.BROKEN)


@dataclass
class ComponentStatus:
    """Observed state of one element of a tab."""

    name: str
    is_visible: bool
    is_interactive: bool
    has_errors: bool = False
    error_detail: Optional[str] = None


@dataclass
class TabAuditResult:
    """Outcome of one audit pass over a tab."""

    tab: str
    status: AuditSeverity = AuditSeverity.OK
    issues: list[str] = field(default_factory=list)
    services_used: list[str] = field(default_factory=list)
    services_missing: list[str] = field(default_factory=list)

    def escalate(self, severity: AuditSeverity, issue: str | None = None) -> None:
        """Raise status to at least *severity*; never lowers it."""
        self.status = max(self.status, severity)
        if issue is not None:
            self.issues.append(issue)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tab": self.tab,
            "status": self.status.value,
            "issues": list(self.issues),
            "services_used": list(self.services_used),
            "services_missing": list(self.services_missing),
        }
