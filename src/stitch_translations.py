#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from shopify_translations.config import options_from_env
from shopify_translations.transform import transform, write_output


log = logging.getLogger("stitch_translations")


def load_env(env_file: Optional[str]) -> None:
    """Load .env from the project root and CWD, then an explicit --env-file on top."""
    project_env = Path(__file__).resolve().parent.parent / ".env"
    for p in (project_env, Path.cwd() / ".env"):
        if p.exists():
            load_dotenv(p)
    if env_file:
        p = Path(env_file)
        if not p.exists():
            raise FileNotFoundError(f"Env file not found: {p}")
        load_dotenv(p, override=True)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    # Early parse to pick up --env-file so env-driven defaults apply below
    env_only = argparse.ArgumentParser(add_help=False)
    env_only.add_argument("--env-file", default="")
    early_args, _ = env_only.parse_known_args(argv)
    load_env(early_args.env_file or None)

    p = argparse.ArgumentParser(
        description="Rebuild a Shopify translation export: one line per row, size tables after descriptions, Finnish content merged in.",
        parents=[env_only],
    )
    p.add_argument("--input", required=True, help="Translation export to fix (.csv or .xlsx)")
    p.add_argument("--output", required=True, help="Where to write the rebuilt export")
    p.add_argument("--source", default="", help="Secondary translations file keyed by product code (e.g. finnish-translations.csv)")
    p.add_argument("--locale", default=None, help="Locale to fill from the source (default: STITCH_LOCALE or 'fi')")
    p.add_argument("--separator", default=None, help="Field separator (default: STITCH_SEPARATOR or ';')")
    p.add_argument("--marker", default=None, help="Opening tag of the size table fragment")
    p.add_argument("--loose-marker", action="store_true", default=None, help="Match any <div> with a size-table class instead of the exact marker")
    p.add_argument("--no-fill", dest="fill_translations", action="store_false", default=None, help="Do not copy titles/descriptions from --source")
    p.add_argument("--no-size-charts", dest="replace_size_charts", action="store_false", default=None, help="Do not replace size tables with the complete one from --source")
    p.add_argument("--title-case", action="store_true", default=None, help="Strip <b> tags and title-case filled titles")
    p.add_argument("--strict-keys", action="store_true", default=None, help="Fail on duplicate product keys instead of keeping the last one")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v for INFO, -vv for DEBUG)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    opts = options_from_env(
        separator=args.separator,
        locale=args.locale,
        marker=args.marker,
        loose_marker=args.loose_marker,
        fill_translations=args.fill_translations,
        replace_size_charts=args.replace_size_charts,
        title_case=args.title_case,
        strict_keys=args.strict_keys,
    )
    input_path = Path(args.input)
    source_path = Path(args.source) if args.source else None
    output_path = Path(args.output)
    log.info(f"Stitching {input_path} (source={source_path}, locale={opts.locale})")

    lines, stats = transform(input_path, source_path, opts)
    write_output(output_path, lines)
    print(f"Wrote {len(lines)} rows to {output_path}")
    for key, value in stats.as_dict().items():
        log.info(f"{key}: {value}")
    return 0


def run() -> None:
    try:
        sys.exit(main())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
