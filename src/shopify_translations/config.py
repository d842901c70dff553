from __future__ import annotations
import os
from typing import Dict

from pydantic import BaseModel, Field

from .describe import FRAGMENT_SEPARATOR, SIZE_TABLE_MARKER
from .io import LINE_BREAK


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes")


class StitchOptions(BaseModel):
    separator: str = Field(";", min_length=1, max_length=1)
    locale: str = "fi"
    marker: str = SIZE_TABLE_MARKER
    loose_marker: bool = False
    line_break: str = LINE_BREAK
    fragment_separator: str = FRAGMENT_SEPARATOR
    fill_translations: bool = True
    replace_size_charts: bool = True
    title_case: bool = False
    strict_keys: bool = False


def options_from_env(**overrides) -> StitchOptions:
    """Build options from STITCH_* environment variables; explicit overrides win."""
    values: Dict = {
        "separator": os.getenv("STITCH_SEPARATOR", ";") or ";",
        "locale": os.getenv("STITCH_LOCALE", "fi") or "fi",
        "marker": os.getenv("STITCH_MARKER", SIZE_TABLE_MARKER) or SIZE_TABLE_MARKER,
        "loose_marker": _env_bool("STITCH_LOOSE_MARKER", False),
        "fill_translations": _env_bool("STITCH_FILL_TRANSLATIONS", True),
        "replace_size_charts": _env_bool("STITCH_REPLACE_SIZE_CHARTS", True),
        "title_case": _env_bool("STITCH_TITLE_CASE", False),
        "strict_keys": _env_bool("STITCH_STRICT_KEYS", False),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return StitchOptions(**values)
