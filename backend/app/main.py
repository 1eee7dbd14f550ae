from __future__ import annotations

from fastapi import FastAPI

from app.core.logging import configure_logging
from app.core.middleware.request_id import RequestIdMiddleware
from app.domain.real_world_assets.routes.portfolios import router as portfolios_router
from app.domain.real_world_assets.routes.strands import router as strands_router


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="RWA Read Model - Backend", version="0.1.0")
    app.add_middleware(RequestIdMiddleware)

    @app.get("/health", tags=["admin"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(strands_router)
    app.include_router(portfolios_router)

    # /api aliases for reverse proxies that forward under /api/*.
    app.include_router(strands_router, prefix="/api")
    app.include_router(portfolios_router, prefix="/api")

    return app


app = create_app()
