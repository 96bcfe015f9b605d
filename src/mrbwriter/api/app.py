"""FastAPI application factory and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mrbwriter import __version__
from mrbwriter.config.preferences import Preferences
from mrbwriter.config.store import JsonFileConfigStore
from mrbwriter.settings import Settings, find_preferences_path, load_settings
from mrbwriter.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown."""
    setup_logging(level=app.state.log_level, json_output=app.state.json_logs)
    logger.info("mrbwriter_api_starting", compiler_url=app.state.settings.compiler_url)
    yield
    logger.info("mrbwriter_api_stopped")


def create_app(
    enable_ui: bool = True,
    settings: Settings | None = None,
    preferences: Preferences | None = None,
    log_level: str = "INFO",
    json_logs: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        enable_ui: Whether to mount the NiceGUI writer page.
        settings: Runtime settings; read from the environment when omitted.
        preferences: Preference view; backed by the JSON preference file when omitted.
        log_level: Log level applied when the app starts.
        json_logs: Render log events as JSON lines.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or load_settings()
    if preferences is None:
        path = settings.preferences_path or find_preferences_path()
        preferences = Preferences(JsonFileConfigStore(path))

    app = FastAPI(
        title="mrbwriter API",
        description="Compile mruby programs remotely and flash them to a board",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.preferences = preferences
    app.state.log_level = log_level
    app.state.json_logs = json_logs

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from mrbwriter.api.routes import device
    app.include_router(device.router, prefix="/api")

    if enable_ui:
        try:
            from mrbwriter.ui.main import setup_ui
            setup_ui(app, settings, preferences)
        except ImportError:
            logger.warning("nicegui_not_available", msg="Web UI disabled")

    return app
