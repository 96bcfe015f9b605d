"""Unit tests for preference stores and the typed Preferences view."""

from __future__ import annotations

import json
from pathlib import Path

from mrbwriter.config.preferences import Preferences
from mrbwriter.config.store import JsonFileConfigStore, MemoryConfigStore
from mrbwriter.models.target import Target


class TestPreferences:
    def test_defaults(self):
        prefs = Preferences(MemoryConfigStore())

        assert prefs.target == Target.RBOARD
        assert prefs.auto_connect is False
        assert prefs.authorized_ports == []

    def test_unknown_target_falls_back(self):
        prefs = Preferences(MemoryConfigStore({"target": "Arduino"}))

        assert prefs.target == Target.RBOARD

    def test_values_are_stored_as_strings(self):
        store = MemoryConfigStore()
        prefs = Preferences(store)

        prefs.target = Target.ESP32
        prefs.auto_connect = True

        assert store.get("target") == "ESP32"
        assert store.get("autoConnect") == "true"

        prefs.auto_connect = False
        assert store.get("autoConnect") == "false"

    def test_only_literal_true_enables_auto_connect(self):
        assert Preferences(MemoryConfigStore({"autoConnect": "True"})).auto_connect is False
        assert Preferences(MemoryConfigStore({"autoConnect": "true"})).auto_connect is True

    def test_authorize_port_moves_to_front(self):
        prefs = Preferences(MemoryConfigStore())

        prefs.authorize_port("/dev/ttyUSB0")
        prefs.authorize_port("/dev/ttyUSB1")
        prefs.authorize_port("/dev/ttyUSB0")

        assert prefs.authorized_ports == ["/dev/ttyUSB0", "/dev/ttyUSB1"]

    def test_corrupt_authorized_ports_ignored(self):
        prefs = Preferences(MemoryConfigStore({"authorizedPorts": "{not json"}))

        assert prefs.authorized_ports == []


class TestJsonFileConfigStore:
    def test_survives_reload(self, tmp_path: Path):
        path = tmp_path / "nested" / "preferences.json"
        Preferences(JsonFileConfigStore(path)).target = Target.ESP32

        reloaded = Preferences(JsonFileConfigStore(path))

        assert reloaded.target == Target.ESP32
        assert json.loads(path.read_text()) == {"target": "ESP32"}
        assert not path.with_suffix(".json.tmp").exists()

    def test_missing_file_is_empty(self, tmp_path: Path):
        store = JsonFileConfigStore(tmp_path / "absent.json")

        assert store.get("target") is None

    def test_unreadable_file_is_empty(self, tmp_path: Path):
        path = tmp_path / "preferences.json"
        path.write_text("[1, 2")

        assert JsonFileConfigStore(path).get("target") is None

    def test_hand_edited_booleans_are_read(self, tmp_path: Path):
        path = tmp_path / "preferences.json"
        path.write_text('{"autoConnect": true, "target": "ESP32", "retries": 3}')

        store = JsonFileConfigStore(path)
        prefs = Preferences(store)

        assert prefs.auto_connect is True
        assert prefs.target == Target.ESP32
        assert store.get("retries") is None

        path.write_text('{"autoConnect": false}')
        assert Preferences(JsonFileConfigStore(path)).auto_connect is False

    def test_non_object_file_is_empty(self, tmp_path: Path):
        path = tmp_path / "preferences.json"
        path.write_text("[1, 2]")

        assert JsonFileConfigStore(path).get("target") is None
