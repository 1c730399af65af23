# src/tasktree/utils/config.py
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict

from .paths import CONFIG_DIR

SETTINGS_FILE = CONFIG_DIR / "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "database": {
        "path": None,
        "journal_mode": "WAL",
        "busy_timeout_ms": 5000,
    },
    "logging": {
        "level": "INFO",
        "max_bytes": 5_000_000,
        "backup_count": 7,
    },
    "action_log": {
        "enabled": True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def default_settings() -> Dict[str, Any]:
    return copy.deepcopy(_DEFAULTS)


def load_settings(path: Path = SETTINGS_FILE) -> Dict[str, Any]:
    path = Path(path)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logging.getLogger("tasktree.config").warning(
                "Unreadable settings file %s; using defaults", path, exc_info=True
            )
            return default_settings()
        if not isinstance(data, dict):
            return default_settings()
        return _merge(_DEFAULTS, data)
    return default_settings()


def save_settings(data: Dict[str, Any], path: Path = SETTINGS_FILE) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
