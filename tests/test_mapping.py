import pytest

from shopify_translations.io import iter_logical_rows
from shopify_translations.mapping import (
    DuplicateKeyError,
    TranslationEntry,
    build_handle_map,
    build_lookup,
    build_translation_map,
)
from shopify_translations.normalize import leading_digits

from samples import SOURCE_CSV, TARGET_CSV


def _rows(text):
    return list(iter_logical_rows(text))


def test_last_row_wins_for_duplicate_keys():
    rows = _rows(
        "PRODUCT;'1;handle;fi;;;first-handle;\n"
        "PRODUCT;'1;handle;fi;;;second-handle;\n"
    )
    assert build_handle_map(rows) == {"1": "second-handle"}


def test_strict_mode_rejects_duplicates():
    rows = _rows(
        "PRODUCT;'1;handle;fi;;;first-handle;\n"
        "PRODUCT;'1;handle;fi;;;second-handle;\n"
    )
    with pytest.raises(DuplicateKeyError) as exc:
        build_handle_map(rows, strict=True)
    assert exc.value.key == "1"


def test_lookup_is_read_only():
    m = build_handle_map(_rows(TARGET_CSV))
    assert m["111"] == "10360-t-shirt-unisex"
    with pytest.raises(TypeError):
        m["111"] = "other"


def test_short_rows_and_header_are_ignored():
    rows = _rows(TARGET_CSV + "PRODUCT;'9;handle\n")
    assert set(build_handle_map(rows)) == {"111", "222"}


def test_custom_key_function():
    rows = _rows("PRODUCT;'1;handle;fi;;;10440-hoodie;x\n")
    m = build_lookup(rows, "handle", value_index=7, key_fn=leading_digits, key_index=6)
    assert m == {"10440": "x"}


def test_translation_map_collects_title_and_body():
    m = build_translation_map(_rows(SOURCE_CSV), locale="fi")
    entry = m["10360"]
    assert isinstance(entry, TranslationEntry)
    assert entry.title == "<b>T-PAITA UNISEX</b>"
    assert entry.body_html.startswith("Pehmeä puuvillainen t-paita.\n\n<div class=\"size-table\">")


def test_translation_map_filters_locale():
    assert build_translation_map(_rows(SOURCE_CSV), locale="sv") == {}
