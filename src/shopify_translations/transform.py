from __future__ import annotations
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .config import StitchOptions
from .describe import embed_fragment, extract_fragment, find_marker
from .io import (
    DEFAULT_CONTENT,
    FIELD,
    IDENTIFICATION,
    LOCALE,
    TRANSLATED_CONTENT,
    LogicalRow,
    read_any_rows,
    serialize_row,
    write_rows,
)
from .mapping import TranslationEntry, build_handle_map, build_translation_map
from .normalize import clean_title, product_code_from_handle, strip_identification


log = logging.getLogger(__name__)


@dataclass
class StitchStats:
    rows: int = 0
    passthrough: int = 0
    titles_filled: int = 0
    bodies_filled: int = 0
    fragments_relocated: int = 0
    size_charts_replaced: int = 0
    missing_handle: int = 0
    missing_source: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def _source_entry(
    row: LogicalRow,
    handles: Mapping[str, str],
    translations: Mapping[str, TranslationEntry],
    stats: StitchStats,
) -> Optional[TranslationEntry]:
    product_id = strip_identification(row.fields[IDENTIFICATION])
    handle = handles.get(product_id)
    if not handle:
        stats.missing_handle += 1
        log.debug(f"line {row.line_no}: no handle for product {product_id}")
        return None
    code = product_code_from_handle(handle)
    entry = translations.get(code) if code else None
    if entry is None:
        stats.missing_source += 1
        log.debug(f"line {row.line_no}: no source translation for handle {handle} (code={code})")
    return entry


def _stitch_body(text: str, opts: StitchOptions, replacement: Optional[str], stats: StitchStats) -> str:
    if find_marker(text, opts.marker, opts.loose_marker) == -1:
        return text
    out = embed_fragment(
        text,
        marker=opts.marker,
        separator=opts.fragment_separator,
        replacement=replacement,
        loose=opts.loose_marker,
    )
    if out != text:
        stats.fragments_relocated += 1
    return out


def transform_rows(
    rows: Sequence[LogicalRow],
    handles: Mapping[str, str],
    translations: Mapping[str, TranslationEntry],
    opts: StitchOptions,
    stats: Optional[StitchStats] = None,
) -> List[str]:
    """Rewrite target rows against frozen lookup maps, one output line per row."""
    stats = stats if stats is not None else StitchStats()
    out: List[str] = []
    for row in rows:
        stats.rows += 1
        if row.is_header or row.is_short:
            stats.passthrough += 1
            out.append(row.raw)
            continue

        fields = list(row.fields)
        field_name = fields[FIELD]
        in_locale = fields[LOCALE] == opts.locale

        entry = None
        if in_locale and field_name in ("title", "body_html") and translations:
            entry = _source_entry(row, handles, translations, stats)

        if field_name == "title" and entry and entry.title and opts.fill_translations:
            fields[TRANSLATED_CONTENT] = clean_title(entry.title) if opts.title_case else entry.title
            stats.titles_filled += 1

        if field_name == "body_html":
            replacement = None
            if entry and entry.body_html:
                if opts.fill_translations:
                    fields[TRANSLATED_CONTENT] = entry.body_html
                    stats.bodies_filled += 1
                if opts.replace_size_charts:
                    replacement = extract_fragment(entry.body_html, opts.marker, opts.loose_marker) or None
            for idx in (DEFAULT_CONTENT, TRANSLATED_CONTENT):
                fields[idx] = _stitch_body(
                    fields[idx],
                    opts,
                    replacement if idx == TRANSLATED_CONTENT else None,
                    stats,
                )
            if replacement and find_marker(fields[TRANSLATED_CONTENT], opts.marker, opts.loose_marker) != -1:
                stats.size_charts_replaced += 1

        out.append(serialize_row(fields, opts.separator, opts.line_break))
    return out


def stitch(
    target_rows: Sequence[LogicalRow],
    source_rows: Optional[Sequence[LogicalRow]] = None,
    opts: Optional[StitchOptions] = None,
) -> tuple:
    """Two phases: freeze the lookup maps, then rewrite the target rows.

    Returns ``(lines, stats)``.
    """
    opts = opts or StitchOptions()
    handles = build_handle_map(target_rows, strict=opts.strict_keys)
    translations: Mapping[str, TranslationEntry] = {}
    if source_rows:
        translations = build_translation_map(source_rows, locale=opts.locale, strict=opts.strict_keys)
    log.info(f"Mapped {len(handles)} handles, {len(translations)} source translations")
    stats = StitchStats()
    lines = transform_rows(target_rows, handles, translations, opts, stats)
    return lines, stats


def transform(
    input_path: Path,
    source_path: Optional[Path] = None,
    opts: Optional[StitchOptions] = None,
) -> tuple:
    opts = opts or StitchOptions()
    target_rows = read_any_rows(input_path, opts.separator)
    source_rows = read_any_rows(source_path, opts.separator) if source_path else None
    return stitch(target_rows, source_rows, opts)


def write_output(output_path: Path, lines: List[str]) -> None:
    write_rows(output_path, lines)
