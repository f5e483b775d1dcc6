from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from mocks.genai_api.app.services import ServiceContainer
from shared.common.serialization import isoformat_z, utc_now


def build_index_context(services: ServiceContainer) -> dict[str, Any]:
    return {
        "app_name": services.settings.app_name,
        "uptime_seconds": round(services.uptime_seconds(), 1),
        "vertex_models": services.vertex_catalog.models,
        "direct_models": services.direct_catalog.models,
        "presets": services.presets.list(),
        "request_stats": services.stats.snapshot(),
        "cache_stats": services.caches.stats(),
        "batch_stats": services.batch.stats(),
        "live_stats": services.live_sessions.stats(),
    }


def register_routes(app: FastAPI, templates: Jinja2Templates) -> None:
    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/health")
    def health() -> dict[str, Any]:
        services: ServiceContainer = app.state.services
        return {
            "status": "healthy",
            "timestamp": isoformat_z(utc_now()),
            "uptime": round(services.uptime_seconds(), 3),
            "supportedAPIs": ["vertex-ai", "google-ai"],
        }

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request) -> HTMLResponse:
        context = build_index_context(app.state.services)
        return templates.TemplateResponse(request=request, name="index.html", context=context)
