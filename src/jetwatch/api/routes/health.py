"""Dependency status endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from jetwatch.config.models import WatchConfig
from jetwatch.registry.models import StatusSummary
from jetwatch.registry.registry import ServiceStatusAggregator

router = APIRouter(tags=["services"])


@router.get("/services")
async def list_services(request: Request) -> Dict[str, Any]:
    config: WatchConfig = request.app.state.config
    aggregator: ServiceStatusAggregator = request.app.state.aggregator
    statuses = await aggregator.check_all(config.services.keys())
    summary = StatusSummary.from_statuses(statuses)
    return {
        "summary": summary.to_dict(),
        "services": [
            {
                **status.to_dict(),
                "endpoint": config.services[key].endpoint,
                "description": config.services[key].description,
            }
            for key, status in statuses.items()
        ],
    }


@router.get("/services/{name}/status")
async def service_status(request: Request, name: str) -> Dict[str, Any]:
    """Check one dependency; a name with no endpoint reports Unknown."""
    aggregator: ServiceStatusAggregator = request.app.state.aggregator
    statuses = await aggregator.check_all([name])
    return statuses[name].to_dict()
