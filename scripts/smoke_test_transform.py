#!/usr/bin/env python3
"""Basic smoke test for the stitcher on a real export.

Runs a transform on data/input samples when present and checks that every
output row re-parses to the full column set. No network involved.
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'src'))

from shopify_translations.io import read_rows, MIN_FIELDS  # type: ignore
from shopify_translations.transform import transform, write_output  # type: ignore


def main() -> int:
    sample = ROOT / 'data' / 'input' / 'KH-Print_Oy_translations.csv'
    source = ROOT / 'data' / 'input' / 'finnish-translations.csv'
    if not sample.exists():
        print(f"Sample input not found: {sample}")
        return 0

    lines, stats = transform(sample, source if source.exists() else None)
    if not lines:
        print("Smoke test failed: no rows produced")
        return 1
    out_path = ROOT / 'data' / 'output' / 'smoke_test_output.csv'
    write_output(out_path, lines)

    short = [r.line_no for r in read_rows(out_path) if len(r.fields) < MIN_FIELDS and not r.is_header]
    if short:
        print(f"Smoke test warning: {len(short)} short rows, first at lines {short[:5]}")
    print(f"Smoke test ok: wrote {len(lines)} rows to {out_path}")
    print("Stats:", stats.as_dict())
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
