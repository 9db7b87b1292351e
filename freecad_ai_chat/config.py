"""Configuration for the FreeCAD AI chat panel.

Panel settings are stored as JSON at
~/.config/FreeCAD/FreeCADAI/chat_panel.json (overridable with the
FREECAD_AI_CHAT_DIR environment variable).

The API endpoint lives in FreeCAD's own parameter store, under
"User parameter:BaseApp/Preferences/Mod/AI" key "ApiEndpoint". Sessions
receive it through the small EndpointStore interface below so the model
can run without a FreeCAD instance.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from typing import Protocol

logger = logging.getLogger(__name__)

CONFIG_DIR = os.environ.get(
    "FREECAD_AI_CHAT_DIR",
    os.path.join(os.path.expanduser("~"), ".config", "FreeCAD", "FreeCADAI"),
)
CONFIG_FILE = os.path.join(CONFIG_DIR, "chat_panel.json")
CONVERSATIONS_DIR = os.path.join(CONFIG_DIR, "conversations")

PARAM_PATH = "User parameter:BaseApp/Preferences/Mod/AI"
ENDPOINT_KEY = "ApiEndpoint"

RESPONSE_MODES = ("simulated", "api")


@dataclass
class PanelConfig:
    response_mode: str = "simulated"  # "simulated" or "api"
    response_delay_ms: int = 1000
    request_timeout: float = 60.0
    model: str = ""
    log_level: str = "INFO"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PanelConfig":
        known = {f.name for f in fields(cls)}
        cfg = cls(**{k: v for k, v in data.items() if k in known})
        if cfg.response_mode not in RESPONSE_MODES:
            logger.warning("Unknown response mode %r, using 'simulated'", cfg.response_mode)
            cfg.response_mode = "simulated"
        return cfg


def load_config(path: str = CONFIG_FILE) -> PanelConfig:
    """Load configuration from disk. Returns defaults if the file is missing or broken."""
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return PanelConfig.from_dict(data)
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
    return PanelConfig()


def save_config(config: PanelConfig, path: str = CONFIG_FILE):
    """Save configuration to disk."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)


_config: PanelConfig | None = None


def get_config() -> PanelConfig:
    """Get the current configuration (lazy-loaded singleton)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def save_current_config():
    if _config is not None:
        save_config(_config)


def reload_config():
    """Force reload configuration from disk."""
    global _config
    _config = load_config()


# ── Endpoint preference store ───────────────────────────────


class EndpointStore(Protocol):
    def get_endpoint(self) -> str: ...

    def set_endpoint(self, endpoint: str) -> None: ...


class MemoryPreferences:
    """In-process endpoint store, used outside FreeCAD and in tests."""

    def __init__(self, endpoint: str = ""):
        self._endpoint = endpoint

    def get_endpoint(self) -> str:
        return self._endpoint

    def set_endpoint(self, endpoint: str) -> None:
        self._endpoint = endpoint


class FreeCADPreferences:
    """Endpoint store backed by FreeCAD's parameter groups."""

    def __init__(self, param_path: str = PARAM_PATH):
        import FreeCAD as App
        self._group = App.ParamGet(param_path)

    def get_endpoint(self) -> str:
        return self._group.GetString(ENDPOINT_KEY, "")

    def set_endpoint(self, endpoint: str) -> None:
        self._group.SetString(ENDPOINT_KEY, endpoint)


def default_preferences() -> EndpointStore:
    """FreeCAD's parameter store when running inside FreeCAD, else an in-memory one."""
    try:
        return FreeCADPreferences()
    except ImportError:
        logger.debug("FreeCAD not available, endpoint kept in memory")
        return MemoryPreferences()
