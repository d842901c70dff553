from __future__ import annotations
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional

from .io import DEFAULT_CONTENT, FIELD, IDENTIFICATION, LOCALE, TRANSLATED_CONTENT, LogicalRow
from .normalize import strip_identification


log = logging.getLogger(__name__)


class DuplicateKeyError(ValueError):
    def __init__(self, key: str, field_name: str) -> None:
        super().__init__(f"duplicate key {key!r} for field {field_name!r}")
        self.key = key
        self.field_name = field_name


@dataclass(frozen=True)
class TranslationEntry:
    title: str = ""
    body_html: str = ""


def build_lookup(
    rows: Iterable[LogicalRow],
    field_name: str,
    value_index: int = DEFAULT_CONTENT,
    key_fn: Callable[[str], Optional[str]] = strip_identification,
    key_index: int = IDENTIFICATION,
    strict: bool = False,
) -> Mapping[str, str]:
    """Map product key -> value for every row whose Field column is ``field_name``.

    Later rows overwrite earlier ones for the same key unless ``strict`` is set,
    in which case a repeated key raises DuplicateKeyError. The returned mapping
    is read-only.
    """
    out: Dict[str, str] = {}
    duplicates = 0
    for row in rows:
        if row.is_short or row.fields[FIELD] != field_name:
            continue
        key = key_fn(row.fields[key_index])
        if not key:
            continue
        value = row.fields[value_index]
        if key in out:
            if strict:
                raise DuplicateKeyError(key, field_name)
            duplicates += 1
            log.debug(f"build_lookup: {field_name} key={key} seen again at line {row.line_no}, keeping last")
        out[key] = value
    if duplicates:
        log.info(f"build_lookup: {duplicates} duplicate {field_name} keys overwritten")
    return MappingProxyType(out)


def build_handle_map(rows: Iterable[LogicalRow], strict: bool = False) -> Mapping[str, str]:
    return build_lookup(rows, "handle", value_index=DEFAULT_CONTENT, strict=strict)


def build_translation_map(
    rows: Iterable[LogicalRow],
    locale: str = "fi",
    strict: bool = False,
) -> Mapping[str, TranslationEntry]:
    """Collect translated title and body_html per product code for ``locale``."""
    rows = [r for r in rows if not r.is_short and r.fields[LOCALE] == locale]
    titles = build_lookup(rows, "title", value_index=TRANSLATED_CONTENT, strict=strict)
    bodies = build_lookup(rows, "body_html", value_index=TRANSLATED_CONTENT, strict=strict)
    out: Dict[str, TranslationEntry] = {}
    for code in list(titles) + [c for c in bodies if c not in titles]:
        out[code] = TranslationEntry(title=titles.get(code, ""), body_html=bodies.get(code, ""))
    return MappingProxyType(out)
