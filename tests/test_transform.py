import pytest
from pydantic import ValidationError

from shopify_translations.config import StitchOptions, options_from_env
from shopify_translations.io import iter_logical_rows, read_rows
from shopify_translations.transform import stitch, transform, write_output

from samples import HEADER, SOURCE_CSV, TARGET_CSV


COMPLETE_TABLE = '<div class=""size-table""><h3>Kokotaulukko</h3><div>S M L XL</div></div>'


def _lines_by_field(lines):
    out = {}
    for line in lines[1:]:
        parts = line.split(";")
        out[(parts[1], parts[2])] = line
    return out


def test_relocates_fragments_without_source():
    lines, stats = stitch(list(iter_logical_rows(TARGET_CSV)))
    assert lines[0] == HEADER
    body = _lines_by_field(lines)[("'111", "body_html")]
    assert body == (
        "PRODUCT;'111;body_html;fi;;;"
        '"Soft cotton tee.<br>Machine washable.<br><br><div class=""size-table"">S M L</div>";'
        '"Pehmeä t-paita.<br><br><div class=""size-table"">S M</div>"'
    )
    assert stats.fragments_relocated == 2
    assert stats.titles_filled == 0
    assert all("\n" not in line for line in lines)


def test_fills_from_source_and_replaces_size_chart():
    lines, stats = stitch(list(iter_logical_rows(TARGET_CSV)), list(iter_logical_rows(SOURCE_CSV)))
    by_field = _lines_by_field(lines)
    assert by_field[("'111", "title")] == "PRODUCT;'111;title;fi;;;\"T-shirt unisex\";\"<b>T-PAITA UNISEX</b>\""
    assert by_field[("'111", "body_html")].endswith(
        ';"Pehmeä puuvillainen t-paita.<br><br>' + COMPLETE_TABLE + '"'
    )
    # handle without a product code stays untouched
    assert by_field[("'222", "title")] == "PRODUCT;'222;title;fi;;;\"Polo\";"
    assert stats.titles_filled == 1
    assert stats.bodies_filled == 1
    assert stats.size_charts_replaced == 1
    assert stats.missing_source == 1


def test_size_chart_replacement_without_fill():
    opts = StitchOptions(fill_translations=False)
    lines, stats = stitch(list(iter_logical_rows(TARGET_CSV)), list(iter_logical_rows(SOURCE_CSV)), opts)
    body = _lines_by_field(lines)[("'111", "body_html")]
    assert body.endswith(';"Pehmeä t-paita.<br><br>' + COMPLETE_TABLE + '"')
    assert stats.bodies_filled == 0
    assert _lines_by_field(lines)[("'111", "title")].endswith(';"Vanha otsikko"')


def test_title_case_option():
    opts = StitchOptions(title_case=True)
    lines, _ = stitch(list(iter_logical_rows(TARGET_CSV)), list(iter_logical_rows(SOURCE_CSV)), opts)
    assert _lines_by_field(lines)[("'111", "title")].endswith(';"T-Paita Unisex"')


def test_other_locale_is_not_filled_but_still_relocated():
    target = TARGET_CSV.replace(";fi;", ";sv;")
    opts = StitchOptions(locale="fi")
    lines, stats = stitch(list(iter_logical_rows(target)), list(iter_logical_rows(SOURCE_CSV)), opts)
    assert stats.titles_filled == 0
    assert stats.bodies_filled == 0
    assert stats.fragments_relocated == 2


def test_short_rows_pass_through_unchanged():
    target = TARGET_CSV + "PRODUCT;'333;title\n"
    lines, stats = stitch(list(iter_logical_rows(target)))
    assert lines[-1] == "PRODUCT;'333;title"
    assert stats.passthrough == 2


def test_transform_is_idempotent(tmp_path, target_path, source_path):
    first_out = tmp_path / "first.csv"
    second_out = tmp_path / "second.csv"
    lines, _ = transform(target_path, source_path)
    write_output(first_out, lines)
    lines, _ = transform(first_out, source_path)
    write_output(second_out, lines)
    assert first_out.read_text(encoding="utf-8") == second_out.read_text(encoding="utf-8")

    # and without a source, on the already stitched file
    lines, stats = transform(first_out)
    assert "\n".join(lines) + "\n" == first_out.read_text(encoding="utf-8")
    assert stats.fragments_relocated == 0


def test_output_reparses_to_same_row_count(tmp_path, target_path, source_path):
    out = tmp_path / "out.csv"
    lines, stats = transform(target_path, source_path)
    write_output(out, lines)
    rows = read_rows(out)
    assert len(rows) == stats.rows == 6
    assert all(len(r.fields) == 8 for r in rows)


def test_options_from_env(monkeypatch):
    monkeypatch.setenv("STITCH_LOCALE", "sv")
    monkeypatch.setenv("STITCH_TITLE_CASE", "yes")
    opts = options_from_env(locale=None, strict_keys=True)
    assert opts.locale == "sv"
    assert opts.title_case is True
    assert opts.strict_keys is True
    assert opts.separator == ";"


def test_replacement_takes_only_the_size_table_div():
    target = "\n".join([
        HEADER,
        "PRODUCT;'111;handle;fi;;;10360-t-shirt-unisex;",
        'PRODUCT;\'111;body_html;fi;;;"Desc";"Kuvaus<div class=""size-table"">S</div>"',
        "",
    ])
    source = "\n".join([
        HEADER,
        'PRODUCT;\'10360;body_html;fi;;;"x";"Muu<div class=""size-table"">S M L</div><p>Valmistettu Suomessa</p>"',
        "",
    ])
    opts = StitchOptions(fill_translations=False)
    lines, stats = stitch(list(iter_logical_rows(target)), list(iter_logical_rows(source)), opts)
    body = _lines_by_field(lines)[("'111", "body_html")]
    assert "Valmistettu" not in body
    assert body.endswith(';"Kuvaus<br><br><div class=""size-table"">S M L</div>"')
    assert stats.size_charts_replaced == 1


def test_separator_must_be_one_character():
    with pytest.raises(ValidationError):
        StitchOptions(separator=";;")
    with pytest.raises(ValidationError):
        StitchOptions(separator="")
    assert StitchOptions(separator=",").separator == ","
