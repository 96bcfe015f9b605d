"""Unit tests for the device API routes."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from mrbwriter.api.app import create_app
from mrbwriter.config.preferences import Preferences
from mrbwriter.config.store import MemoryConfigStore
from mrbwriter.models.target import Target
from mrbwriter.settings import Settings


@pytest.fixture
def prefs() -> Preferences:
    return Preferences(MemoryConfigStore())


@pytest.fixture
def client(prefs) -> TestClient:
    return TestClient(create_app(enable_ui=False, settings=Settings(), preferences=prefs))


class TestTargets:
    def test_lists_both_boards(self, client):
        response = client.get("/api/targets")

        assert response.status_code == 200
        assert response.json() == [
            {"name": "RBoard", "baud_rate": 19200},
            {"name": "ESP32", "baud_rate": 115200},
        ]


class TestPorts:
    def test_marks_authorized(self, client, prefs, monkeypatch):
        monkeypatch.setattr(
            "mrbwriter.transport.uart.comports",
            lambda: [SimpleNamespace(device="/dev/ttyACM0", description="ESP32-S3", hwid="")],
        )
        prefs.authorize_port("/dev/ttyACM0")

        response = client.get("/api/ports")

        assert response.json() == [
            {"device": "/dev/ttyACM0", "description": "ESP32-S3", "authorized": True}
        ]

    def test_scan_failure(self, client, monkeypatch):
        def broken():
            raise OSError("udev unavailable")

        monkeypatch.setattr("mrbwriter.transport.uart.comports", broken)

        response = client.get("/api/ports")

        assert response.status_code == 502


class TestPreferences:
    def test_get_defaults(self, client):
        assert client.get("/api/preferences").json() == {"target": "RBoard", "autoConnect": False}

    def test_partial_update(self, client, prefs):
        response = client.put("/api/preferences", json={"autoConnect": True})

        assert response.json() == {"target": "RBoard", "autoConnect": True}
        assert prefs.auto_connect is True

        client.put("/api/preferences", json={"target": "ESP32"})
        assert prefs.target == Target.ESP32
        assert prefs.auto_connect is True

    def test_invalid_target(self, client):
        response = client.put("/api/preferences", json={"target": "Arduino"})

        assert response.status_code == 422


class TestLifespan:
    def test_applies_configured_logging(self, prefs, monkeypatch):
        setup = MagicMock()
        monkeypatch.setattr("mrbwriter.api.app.setup_logging", setup)
        app = create_app(
            enable_ui=False,
            settings=Settings(),
            preferences=prefs,
            log_level="DEBUG",
            json_logs=True,
        )

        with TestClient(app):
            pass

        setup.assert_called_once_with(level="DEBUG", json_output=True)
