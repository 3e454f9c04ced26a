"""Value normalizers for spreadsheet cells.

All functions here are total: they accept any loosely-typed cell value
(str, int, float, bool, None) and never raise for malformed input.
"""

import re
import unicodedata
from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from .constants import FALSE_TOKENS, TRUE_TOKENS

_WHITESPACE_RE = re.compile(r"\s+")
_INTEGER_RE = re.compile(r"-?\d+")
_PRICE_STRIP_RE = re.compile(r"[^\d,.\-]")

# Look-alike characters folded together when matching headers
_HEADER_CONFUSABLES = str.maketrans({"ё": "е"})

# WHATWG parsing and serialization (default ports dropped, dot segments resolved)
_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _cell_to_str(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        # openpyxl hands back 2019.0 for integral numeric cells
        return str(int(raw))
    return str(raw)


def normalize_text(raw: Any) -> str:
    """Coerce a cell to text: NFKC, trimmed, internal whitespace collapsed."""
    text = unicodedata.normalize("NFKC", _cell_to_str(raw))
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_header(raw: Any) -> str:
    """Normalize a header cell (or alias) for exact comparison."""
    text = normalize_text(raw).lower().translate(_HEADER_CONFUSABLES)
    text = text.replace(":", "")
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_boolean(raw: Any) -> bool | None:
    """Parse a yes/no cell in Russian or English.

    Returns None for empty or unrecognized values.
    """
    token = normalize_text(raw).lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    return None


def parse_integer(raw: Any) -> int | None:
    """Parse an integer cell, ignoring digit-group spaces ("12 345").

    Only an optional leading minus and digits are accepted: no decimals,
    no exponent, no comma/period grouping.
    """
    text = _WHITESPACE_RE.sub("", normalize_text(raw))
    if not _INTEGER_RE.fullmatch(text):
        return None
    return int(text)


def parse_price(raw: Any) -> float | None:
    """Parse a price using either comma or period as decimal separator.

    When both separators appear the comma is a thousands separator
    ("1,234.56"); a lone comma is the decimal separator ("1 234,56").
    """
    text = _WHITESPACE_RE.sub("", normalize_text(raw))
    cleaned = _PRICE_STRIP_RE.sub("", text)
    if not cleaned:
        return None

    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".")

    try:
        return float(cleaned)
    except ValueError:
        return None


def normalize_url(raw: Any) -> str | None:
    """Normalize a link cell, assuming https:// when no scheme is given.

    Text that cannot be parsed as a URL is returned normalized but
    otherwise untouched, so a malformed link is never silently dropped.
    """
    text = normalize_text(raw)
    if not text:
        return None

    lowered = text.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        candidate = text
    else:
        candidate = f"https://{text}"

    try:
        return str(_HTTP_URL.validate_python(candidate))
    except ValidationError:
        return text


def build_title(brand: Any, model: Any, modification: Any, offer_code: Any) -> str:
    """Build a display title from brand/model/modification.

    Falls back to the offer code when all three are empty.
    """
    parts = [normalize_text(value) for value in (brand, model, modification)]
    title = " ".join(part for part in parts if part)
    return title or normalize_text(offer_code)
