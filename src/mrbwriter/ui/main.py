"""NiceGUI web UI setup and page registration."""

from __future__ import annotations

import os
import secrets

from fastapi import FastAPI
from nicegui import ui

from mrbwriter.config.preferences import Preferences
from mrbwriter.settings import Settings


def setup_ui(fastapi_app: FastAPI, settings: Settings, preferences: Preferences) -> None:
    """Register NiceGUI pages with the FastAPI application."""

    @ui.page("/")
    async def index(id: str | None = None):
        from mrbwriter.ui.pages.writer import writer_page
        await writer_page(
            id,
            preferences,
            compiler_url=settings.compiler_url,
            http_timeout=settings.http_timeout,
        )

    storage_secret = os.environ.get("MRBWRITER_STORAGE_SECRET") or secrets.token_hex(32)

    ui.run_with(
        fastapi_app,
        title="mrbwriter",
        storage_secret=storage_secret,
    )
