"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bastion.api.dependencies import set_engine_manager
from bastion.api.engine_manager import EngineManager
from bastion.api.routes import api_router
from bastion.config import GameConfig
from bastion.systems.theme import GeminiThemeProvider
from bastion.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: GameConfig | None = None, theme: str | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = GameConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        provider = GeminiThemeProvider(model=_config.theme_model, timeout=_config.theme_timeout_seconds)
        manager = EngineManager(_config, theme_provider=provider)
        if theme:
            manager.reset(theme)
        set_engine_manager(manager)
        manager.start()
        logger.info("API server started, game running.")
        yield
        manager.stop()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Bastion TD",
        description=(
            "Deterministic tower-defense engine with a real-time API.\n\n"
            "## API Groups\n\n"
            "- **State**: Live game state: economy, entities, events\n"
            "- **Map**: Terrain grid (re-fetch after build/sell)\n"
            "- **Control**: Game lifecycle: start, pause, resume, step, reset\n"
            "- **Actions**: Build, sell, upgrade, abilities, waves\n"
            "- **Config**: Read-only game configuration\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live game state polled by the frontend: gold, lives, wave, enemies, towers, events."},
            {"name": "Map", "description": "Terrain grid, RLE-encoded, with an optional flow-field debug overlay."},
            {"name": "Control", "description": "Game lifecycle controls: start, pause, resume, single-step, reset and speed."},
            {"name": "Actions", "description": "Player actions. Each answers with whether it was accepted."},
            {"name": "Config", "description": "Read-only game configuration parameters (map size, costs, cooldowns)."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app
