"""Persistent JSON config helpers.

Stores the highlight style plus extraction and listing preferences.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "hpiview"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH
DEFAULT_STYLE = "monokai"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored to keep the CLI usable when the config
    directory is read-only.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _load_bool(key: str, default: bool) -> bool:
    """Only explicit booleans are accepted; anything else yields ``default``."""
    value = load_config().get(key)
    return value if isinstance(value, bool) else default


def load_style() -> str:
    """Load persisted Pygments style name, falling back to ``monokai``."""
    value = load_config().get("style")
    if not isinstance(value, str):
        return DEFAULT_STYLE
    stripped = value.strip()
    return stripped if stripped else DEFAULT_STYLE


def save_style(style: str) -> None:
    stripped = str(style).strip()
    if not stripped:
        return
    config = load_config()
    config["style"] = stripped
    save_config(config)


def load_strict_size() -> bool:
    """Whether a recorded/decoded size mismatch fails extraction."""
    return _load_bool("strict_size", False)


def load_packed_chunks() -> bool:
    """Whether chunks are addressed back to back by their stored sizes."""
    return _load_bool("packed_chunks", False)


def load_show_size_labels() -> bool:
    return _load_bool("show_size_labels", True)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_STYLE",
    "load_config",
    "save_config",
    "load_style",
    "save_style",
    "load_strict_size",
    "load_packed_chunks",
    "load_show_size_labels",
]
