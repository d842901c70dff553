"""
Shopify translation export stitcher.

This package provides modular building blocks for:
- Reconstructing logical rows from a semicolon-delimited translation export
- Locating and re-embedding the size-table fragment in body_html cells
- Merging Finnish titles/descriptions from a second export by product code
- Writing every row back on a single line with consistent escaping

Public API:
- io.iter_logical_rows, io.split_fields, io.escape_cell, io.serialize_row, io.read_any_rows
- describe.split_fragment, describe.embed_fragment, describe.extract_fragment, describe.complete_fragment,
  describe.strip_trailing_breaks, describe.is_balanced
- normalize.strip_identification, normalize.product_code_from_handle, normalize.clean_title
- mapping.build_lookup, mapping.build_handle_map, mapping.build_translation_map
- config.StitchOptions, config.options_from_env
- transform.stitch, transform.transform, transform.write_output
"""

from . import io, describe, normalize, mapping, config, transform  # re-export modules

__all__ = [
    "io",
    "describe",
    "normalize",
    "mapping",
    "config",
    "transform",
]
