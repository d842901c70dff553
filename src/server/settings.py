from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict

from shopify_translations.config import options_from_env


log = logging.getLogger(__name__)

SETTINGS_PATH: Path | None = None


def init_settings(path: Path) -> None:
    global SETTINGS_PATH
    SETTINGS_PATH = path
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        save_settings(default_settings())


def default_settings() -> Dict:
    # Env (STITCH_*) supplies the first-run defaults
    return options_from_env().model_dump()


def get_settings() -> Dict:
    assert SETTINGS_PATH is not None
    base = default_settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        log.warning(f"Ignoring unreadable settings file {SETTINGS_PATH}: {e}")
        return base
    base.update({k: v for k, v in (data or {}).items() if k in base})
    return base


def save_settings(data: Dict) -> None:
    assert SETTINGS_PATH is not None
    SETTINGS_PATH.write_text(json.dumps(data, indent=2), encoding="utf-8")
