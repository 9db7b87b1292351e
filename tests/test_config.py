"""Tests for panel configuration and endpoint preferences."""

import json

from freecad_ai_chat.config import (
    MemoryPreferences,
    PanelConfig,
    default_preferences,
    load_config,
    save_config,
)


def test_defaults_when_file_missing(tmp_path):
    cfg = load_config(str(tmp_path / "chat_panel.json"))
    assert cfg.response_mode == "simulated"
    assert cfg.response_delay_ms == 1000


def test_save_and_load(tmp_path):
    path = str(tmp_path / "sub" / "chat_panel.json")
    save_config(PanelConfig(response_mode="api", response_delay_ms=250, model="m"), path)

    cfg = load_config(path)
    assert cfg.response_mode == "api"
    assert cfg.response_delay_ms == 250
    assert cfg.model == "m"


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "chat_panel.json"
    path.write_text(json.dumps({"response_delay_ms": 10, "theme": "dark"}))
    assert load_config(str(path)).response_delay_ms == 10


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "chat_panel.json"
    path.write_text("{not json")
    assert load_config(str(path)) == PanelConfig()


def test_unknown_response_mode_falls_back_to_simulated():
    assert PanelConfig.from_dict({"response_mode": "magic"}).response_mode == "simulated"


def test_memory_preferences():
    prefs = MemoryPreferences()
    assert prefs.get_endpoint() == ""
    prefs.set_endpoint("http://x")
    assert prefs.get_endpoint() == "http://x"


def test_default_preferences_outside_freecad():
    assert isinstance(default_preferences(), MemoryPreferences)
