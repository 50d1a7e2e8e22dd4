from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from auto_recall.api import hooks as hooks_api
from auto_recall.api import runtime_settings as runtime_settings_api
from auto_recall.core.config import get_settings
from auto_recall.core.logging import setup_logging
from auto_recall.services.plugin import create_plugin


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    setup_logging(settings.log_level)

    plugin = create_plugin(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.plugin.start()
        yield
        app.state.plugin.stop()

    app = FastAPI(title="memory-auto-recall", lifespan=lifespan)
    app.state.settings = settings
    app.state.plugin = plugin

    app.include_router(hooks_api.router)
    app.include_router(runtime_settings_api.router)

    return app
