"""FastAPI application factory for jetwatch."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jetwatch.api.routes import health, tabs
from jetwatch.config.loader import resolve_config
from jetwatch.config.models import WatchConfig
from jetwatch.verification import build_aggregator, build_auditor


def create_app(config: WatchConfig | None = None, config_path: Path | None = None) -> FastAPI:
    if config is None:
        config = resolve_config(config_path)

    app = FastAPI(
        title=config.app.name,
        version=config.app.version,
        description="Service health verification and tab audits",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Built once per app; each check still opens its own short-lived client.
    app.state.config = config
    app.state.aggregator = build_aggregator(config)
    app.state.auditor = build_auditor(config)

    @app.get("/health", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(health.router, prefix="/api")
    app.include_router(tabs.router, prefix="/api")

    return app
