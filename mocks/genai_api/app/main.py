from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.templating import Jinja2Templates

from mocks.genai_api.app import (
    admin_routes,
    batch_routes,
    cache_routes,
    direct_routes,
    file_routes,
    live_routes,
    publisher_routes,
    vertex_routes,
)
from mocks.genai_api.app.error_handlers import register_error_handlers
from mocks.genai_api.app.services import ServiceContainer, build_services
from mocks.genai_api.app.views import register_routes
from shared.common.config import Settings
from shared.common.logging import configure_logging


async def sweep_forever(services: ServiceContainer) -> None:
    interval = services.settings.cache_sweep_interval_seconds
    while True:
        await asyncio.sleep(interval)
        removed = services.caches.sweep_expired()
        idle = services.live_sessions.cleanup_inactive()
        if removed or idle:
            services.logger.info("Sweep removed %s expired caches and %s idle live sessions", removed, idle)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logger = configure_logging(settings.app_name, settings.log_level)
    app = FastAPI(title="Mock Gemini API", version="1.0.0")
    app.state.settings = settings
    app.state.logger = logger
    app.state.services = build_services(settings, logger)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_origin.split(",")],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_error_handlers(app, logger)
    templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
    register_routes(app, templates)
    for prefix in ("/v1", ""):
        app.include_router(vertex_routes.router, prefix=prefix)
        app.include_router(file_routes.router, prefix=prefix)
        app.include_router(cache_routes.router, prefix=prefix)
        app.include_router(batch_routes.router, prefix=prefix)
    app.include_router(direct_routes.router)
    app.include_router(publisher_routes.router)
    app.include_router(admin_routes.router)
    app.include_router(live_routes.router)

    @app.on_event("startup")
    async def startup() -> None:
        services: ServiceContainer = app.state.services
        app.state.sweeper = asyncio.create_task(sweep_forever(services))
        logger.info(
            "Mock Gemini API ready: %s presets, %s vertex models, %s direct models",
            len(services.presets.list()),
            len(services.vertex_catalog.models),
            len(services.direct_catalog.models),
        )

    @app.on_event("shutdown")
    async def shutdown() -> None:
        sweeper = getattr(app.state, "sweeper", None)
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        await app.state.services.batch.shutdown()

    return app


app = create_app()


def main() -> None:
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)


if __name__ == "__main__":
    main()
