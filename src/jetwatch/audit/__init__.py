"""Tab audit engine."""

from jetwatch.audit.auditor import TabAuditor
from jetwatch.audit.components import ComponentInspector, ComponentIntegrityVerifier, RegistryInspector
from jetwatch.audit.models import AuditSeverity, ComponentStatus, TabAuditResult
from jetwatch.audit.report import format_audit_results, format_audit_table

__all__ = [
    "AuditSeverity",
    "ComponentInspector",
    "ComponentIntegrityVerifier",
    "ComponentStatus",
    "RegistryInspector",
    "TabAuditResult",
    "TabAuditor",
    "format_audit_results",
    "format_audit_table",
]
