from __future__ import annotations
import csv
import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List


log = logging.getLogger(__name__)

COLUMNS = [
    "Type",
    "Identification",
    "Field",
    "Locale",
    "Market",
    "Status",
    "Default content",
    "Translated content",
]

TYPE, IDENTIFICATION, FIELD, LOCALE, MARKET, STATUS, DEFAULT_CONTENT, TRANSLATED_CONTENT = range(8)
CONTENT_COLUMNS = (DEFAULT_CONTENT, TRANSLATED_CONTENT)
MIN_FIELDS = len(COLUMNS)

LINE_BREAK = "<br>"

_NEWLINE_RE = re.compile(r"\r?\n")
_PHYSICAL_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")

# body_html cells of large catalogs exceed the default 128 KiB field limit
csv.field_size_limit(min(sys.maxsize, 2147483647))


class CsvParseError(ValueError):
    """Raised when a file cannot be split into logical rows."""

    def __init__(self, message: str, line_no: int) -> None:
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no


@dataclass
class LogicalRow:
    raw: str
    fields: List[str] = field(default_factory=list)
    line_no: int = 0

    @property
    def is_short(self) -> bool:
        return len(self.fields) < MIN_FIELDS

    @property
    def is_header(self) -> bool:
        return bool(self.fields) and self.fields[0].strip().lstrip("\ufeff") == COLUMNS[0]

    def get(self, index: int) -> str:
        return self.fields[index] if index < len(self.fields) else ""


def _physical_lines(text: str) -> Iterator[str]:
    for m in _PHYSICAL_LINE_RE.finditer(text):
        yield m.group(0)


class _LineTap:
    """Feed physical lines to ``csv.reader`` and keep what it has consumed."""

    def __init__(self, text: str) -> None:
        self._lines = _physical_lines(text)
        self.consumed: List[str] = []

    def __iter__(self) -> "_LineTap":
        return self

    def __next__(self) -> str:
        line = next(self._lines)
        self.consumed.append(line)
        return line

    def take(self) -> str:
        raw = "".join(self.consumed).rstrip("\r\n")
        self.consumed = []
        return raw


def _reader(lines, separator: str):
    return csv.reader(lines, delimiter=separator, quotechar='"', doublequote=True, strict=True)


def _parse_error(exc: csv.Error, line_no: int) -> CsvParseError:
    message = str(exc)
    if "unexpected end of data" in message:
        return CsvParseError("unterminated quoted field", line_no)
    return CsvParseError(message, line_no)


def split_fields(raw: str, separator: str = ";") -> List[str]:
    """Split one logical row on ``separator`` outside quoted spans.

    A doubled ``""`` inside a quoted span is a literal quote. Delimiting
    quotes are dropped from the value.
    """
    try:
        fields = next(_reader(_physical_lines(raw), separator), None)
    except csv.Error as exc:
        raise _parse_error(exc, 1) from exc
    return fields if fields else [""]


def iter_logical_rows(text: str, separator: str = ";") -> Iterator[LogicalRow]:
    """Yield logical rows from raw text, joining physical lines inside quotes.

    Blank physical lines outside a quoted field are skipped. ``line_no`` is
    the physical line the row starts on.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    tap = _LineTap(text)
    reader = _reader(tap, separator)
    consumed_lines = 0
    while True:
        start_line = consumed_lines + 1
        try:
            fields = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            raise _parse_error(exc, start_line) from exc
        consumed_lines = reader.line_num
        raw = tap.take()
        if not any(f.strip() for f in fields):
            continue
        yield LogicalRow(raw=raw, fields=fields, line_no=start_line)


def escape_cell(value: str, line_break: str = LINE_BREAK) -> str:
    if not value:
        return ""
    out = _NEWLINE_RE.sub(line_break, value)
    out = out.replace('"', '""')
    return f'"{out}"'


def format_cell(value: str, separator: str = ";", line_break: str = LINE_BREAK) -> str:
    if any(ch in value for ch in (separator, '"', "\n", "\r")):
        return escape_cell(value, line_break)
    return value


def serialize_row(fields: List[str], separator: str = ";", line_break: str = LINE_BREAK) -> str:
    cells = []
    for i, value in enumerate(fields):
        if i in CONTENT_COLUMNS:
            cells.append(escape_cell(value, line_break))
        else:
            cells.append(format_cell(value, separator, line_break))
    return separator.join(cells)


def read_rows(input_path: Path, separator: str = ";") -> List[LogicalRow]:
    """Read a translation export and return its logical rows."""
    text = input_path.read_text(encoding="utf-8-sig")
    rows = list(iter_logical_rows(text, separator))
    log.debug(f"read_rows: path={input_path} rows={len(rows)}")
    return rows


def _read_rows_xlsx(input_path: Path, separator: str = ";") -> List[LogicalRow]:
    from openpyxl import load_workbook

    def _val_to_str(v) -> str:
        # Excel stores numeric ids as floats: 10360.0 -> '10360'
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return "" if v is None else str(v)

    wb = load_workbook(filename=str(input_path), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows: List[LogicalRow] = []
        for line_no, values in enumerate(ws.iter_rows(values_only=True), start=1):
            cells = [_val_to_str(v) for v in values]
            if not any(c.strip() for c in cells):
                continue
            # trailing empty cells are not stored in the sheet
            cells += [""] * (MIN_FIELDS - len(cells))
            raw = separator.join(format_cell(c, separator) for c in cells)
            rows.append(LogicalRow(raw=raw, fields=cells, line_no=line_no))
    finally:
        wb.close()
    log.debug(f"read_rows_xlsx: path={input_path} rows={len(rows)}")
    return rows


def read_any_rows(input_path: Path, separator: str = ";") -> List[LogicalRow]:
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    ext = input_path.suffix.lower()
    if ext in (".xlsx", ".xlsm", ".xltx", ".xltm"):
        return _read_rows_xlsx(input_path, separator)
    # default: delimited text
    return read_rows(input_path, separator)


def write_rows(output_path: Path, lines: List[str]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as f:
        f.write("\n".join(lines))
        if lines:
            f.write("\n")
