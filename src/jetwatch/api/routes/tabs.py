"""Tab listing and audit endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from jetwatch.audit.auditor import TabAuditor
from jetwatch.config.models import WatchConfig

router = APIRouter(tags=["tabs"])


@router.get("/tabs")
async def list_tabs(request: Request) -> list[dict[str, Any]]:
    config: WatchConfig = request.app.state.config
    return [
        {
            "tab": name,
            "components": list(entry.components),
            "dependencies": list(entry.dependencies),
            "chat_audited": name in config.chat.audited_tabs,
        }
        for name, entry in config.tabs.items()
    ]


@router.get("/tabs/{name}/audit")
async def audit_tab(request: Request, name: str) -> dict[str, Any]:
    """Audit any tab name; unregistered tabs come back Broken rather than 404."""
    auditor: TabAuditor = request.app.state.auditor
    result = await auditor.audit(name)
    return result.to_dict()


@router.get("/audit")
async def audit_all(request: Request) -> list[dict[str, Any]]:
    auditor: TabAuditor = request.app.state.auditor
    results = await auditor.audit_all()
    return [r.to_dict() for r in results]
