from __future__ import annotations
import logging
import re
from typing import Optional, Tuple


log = logging.getLogger(__name__)

SIZE_TABLE_MARKER = '<div class="size-table">'
FRAGMENT_SEPARATOR = "<br><br>"

# Any opening div carrying the size-table class, whatever the quoting or extra attributes.
SIZE_TABLE_PATTERN = re.compile(r"<div[^>]*size-table[^>]*>", re.IGNORECASE)

_BR_TAG_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_DIV_TOKEN_RE = re.compile(r"<div\b|</div\s*>", re.IGNORECASE)


def find_marker(text: str, marker: str = SIZE_TABLE_MARKER, loose: bool = False) -> int:
    if not text:
        return -1
    if loose:
        m = SIZE_TABLE_PATTERN.search(text)
        return m.start() if m else -1
    return text.find(marker)


def strip_trailing_breaks(text: str) -> str:
    """Drop trailing whitespace and ``<br>`` tags, peeling one tag at a time."""
    text = text.rstrip()
    while text.endswith(">"):
        i = text.rfind("<")
        if i == -1 or not _BR_TAG_RE.fullmatch(text, i):
            break
        text = text[:i].rstrip()
    return text


def split_fragment(text: str, marker: str = SIZE_TABLE_MARKER, loose: bool = False) -> Optional[Tuple[str, str]]:
    """Return ``(description, fragment)`` around the first marker, or None."""
    start = find_marker(text, marker, loose)
    if start == -1:
        return None
    description = strip_trailing_breaks(text[:start]).strip()
    fragment = text[start:].strip()
    return description, fragment


def complete_fragment(text: str, start: int = 0) -> str:
    """Cut the div opened at ``start`` at its matching ``</div>``.

    Nested divs are tracked by depth. An unclosed fragment runs to the end.
    """
    depth = 0
    for m in _DIV_TOKEN_RE.finditer(text, start):
        if m.group(0).lower().startswith("</"):
            depth -= 1
            if depth == 0:
                return text[start:m.end()]
        else:
            depth += 1
    return text[start:]


def is_balanced(fragment: str, tag: str = "div") -> bool:
    opening = len(re.findall(rf"<{tag}\b", fragment, flags=re.IGNORECASE))
    closing = len(re.findall(rf"</{tag}\s*>", fragment, flags=re.IGNORECASE))
    return opening == closing


def extract_fragment(text: str, marker: str = SIZE_TABLE_MARKER, loose: bool = False) -> str:
    """Return the size table div alone, without whatever markup follows it."""
    start = find_marker(text, marker, loose)
    if start == -1:
        return ""
    return complete_fragment(text, start).strip()


def embed_fragment(
    text: str,
    marker: str = SIZE_TABLE_MARKER,
    separator: str = FRAGMENT_SEPARATOR,
    replacement: Optional[str] = None,
    loose: bool = False,
) -> str:
    """Place the size table right after the description.

    Trailing line breaks are trimmed off the description before joining it
    to the fragment with ``separator``. With ``replacement`` the located
    fragment is swapped for it. Text without the marker comes back as is.
    Running this again on its own output is a no-op.
    """
    parts = split_fragment(text, marker, loose)
    if parts is None:
        log.debug("embed_fragment: marker not found")
        return text
    description, fragment = parts
    if replacement:
        fragment = replacement.strip()
    if not is_balanced(fragment):
        log.warning(f"embed_fragment: unbalanced <div> tags in fragment ({len(fragment)} chars)")
    if not description:
        return fragment
    return f"{description}{separator}{fragment}"
