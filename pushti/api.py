# -*- coding: utf-8 -*-
"""
Pushti API

Profiles, daily calorie and health logs, AI food/exercise/health guidance,
chart aggregation and a WebSocket feed of storage changes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .ai import AIGateway, GatewaySettings
from .ai.api import router as ai_router
from .analytics.api import router as analytics_router
from .config import Settings, settings
from .profiles.api import exercise_router, logs_router
from .profiles.api import router as profiles_router
from .profiles.store import ProfileStore
from .storage import LocalStorage
from .sync.websocket import SyncHub, websocket_endpoint

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Optional[Settings] = None,
    *,
    storage: Optional[LocalStorage] = None,
    gateway: Optional[AIGateway] = None,
) -> FastAPI:
    cfg = app_settings or settings

    app = FastAPI(
        title="Pushti",
        description="Bengali/English nutrition and health tracker",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    storage = storage or LocalStorage(cfg.db_path)
    app.state.settings = cfg
    app.state.storage = storage
    app.state.profile_store = ProfileStore(storage)
    app.state.ai_gateway = gateway or AIGateway(GatewaySettings.from_settings(cfg))
    app.state.sync_hub = SyncHub(storage.channel)
    logger.info("storage ready at %s (AI model %s)", cfg.db_path, app.state.ai_gateway.model)

    app.include_router(profiles_router)
    app.include_router(logs_router)
    app.include_router(exercise_router)
    app.include_router(ai_router)
    app.include_router(analytics_router)

    @app.get("/api/health")
    def health() -> dict:
        store: ProfileStore = app.state.profile_store
        return {
            "ok": True,
            "version": __version__,
            "ai_configured": bool(cfg.ai_api_key),
            "profiles": len(store.profiles),
            "needs_onboarding": store.needs_onboarding,
        }

    @app.websocket("/api/sync/ws")
    async def sync_websocket(websocket: WebSocket):
        await websocket_endpoint(websocket)

    return app


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    try:
        port = int(settings.port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("pushti.api:create_app", factory=True, host=settings.host, port=port, reload=False)
