import re
from typing import Optional


_LEADING_DIGITS_RE = re.compile(r"^(\d+)")
_BOLD_TAG_RE = re.compile(r"</?b>", flags=re.IGNORECASE)
_WORD_START_RE = re.compile(r"\b\w")


def strip_identification(value: str) -> str:
    """'10360 -> 10360. Spreadsheet exports force text ids with a leading apostrophe."""
    if not value:
        return ""
    return value.strip().strip('"').lstrip("'").strip()


def leading_digits(value: str) -> Optional[str]:
    m = _LEADING_DIGITS_RE.match((value or "").strip())
    return m.group(1) if m else None


def product_code_from_handle(handle: str, fallback_digits: int = 5) -> Optional[str]:
    """Derive the supplier product code from a Shopify handle.

    ``10360-t-shirt-unisex`` -> ``10360``. Handles that do not start with a
    digit fall back to the first ``fallback_digits`` digits found anywhere.
    """
    if not handle:
        return None
    handle = handle.strip().strip('"')
    code = leading_digits(handle)
    if code:
        return code
    digits = re.sub(r"\D", "", handle)[:fallback_digits]
    return digits or None


def clean_title(title: str) -> str:
    if not title:
        return ""
    cleaned = _BOLD_TAG_RE.sub("", title).strip()
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), cleaned.lower())
