"""FastAPI application entrypoint for Prospect Radar."""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prospect_radar.api.routes_intel import router as intel_router
from prospect_radar.api.routes_prospects import router as prospects_router
from prospect_radar.services.board_service import health_payload


def _cors_origins_from_env() -> list[str]:
    raw = os.getenv("PROSPECT_API_CORS_ORIGINS", "*").strip()
    if not raw or raw == "*":
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


logger = logging.getLogger(__name__)


app = FastAPI(title="Prospect Radar API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_from_env(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(prospects_router)
app.include_router(intel_router)


@app.get("/", summary="API index")
def root() -> dict:
    """Provide a lightweight index instead of a 404 on '/'."""
    return {
        "service": "prospect_radar_api",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "prospects_base": "/prospects",
        "intel_base": "/intel",
    }


@app.get("/health", summary="Global API health")
def health() -> dict:
    """Return API health plus source and board readiness."""
    payload = health_payload()
    logger.info("Health check | status=%s | players=%s", payload["status"], payload.get("player_count"))
    return payload


__all__ = ["app"]
