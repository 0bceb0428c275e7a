"""Rendering of audit results for logs, APIs and the terminal."""

from __future__ import annotations

import json
from collections.abc import Iterable

from rich.table import Table

from jetwatch.audit.models import AuditSeverity, TabAuditResult

SEVERITY_STYLES = {
    AuditSeverity.OK: "green",
    AuditSeverity.PARTIAL: "yellow",
    AuditSeverity.BROKEN: "red",
}


def format_audit_results(result: TabAuditResult) -> str:
    """Serialize one audit result as indented JSON with a fixed key order."""
    return json.dumps(result.to_dict(), indent=2)


def format_audit_table(results: Iterable[TabAuditResult]) -> Table:
    table = Table(title="Tab Audit")
    table.add_column("Tab", style="bold")
    table.add_column("Status")
    table.add_column("Connected APIs")
    table.add_column("Issues")

    for r in results:
        style = SEVERITY_STYLES[r.status]
        table.add_row(
            r.tab,
            f"[{style}]{r.status.value}[/{style}]",
            ", ".join(r.services_used) or "—",
            "\n".join(r.issues) or "—",
        )
    return table
