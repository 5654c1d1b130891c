# variant_engine/sku/sku_codes.py
# --------------------------------------------------------------------------------------
# SKU code allocation: sanitized prefixes from free text and the next unused
# sequential suffix over a snapshot of the product's existing codes.
# --------------------------------------------------------------------------------------
from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from variant_engine.config import settings
from variant_engine.util import sku_codes

DEFAULT_BASE_CODE = "SKU-DEFAULT"

_WHITESPACE_RE = re.compile(r"\s+")
_FORBIDDEN_RE = re.compile(r"[^A-Z0-9-]")
_HYPHENS_RE = re.compile(r"-+")
_SUFFIX_RE = re.compile(r"-(\d+)$")


def strip_code(text: str) -> str:
    """Uppercase, drop anything outside [A-Z0-9-], collapse and trim hyphens."""
    out = _FORBIDDEN_RE.sub("", (text or "").upper())
    return _HYPHENS_RE.sub("-", out).strip("-")


def sanitize_code_part(text: str, limit: Optional[int] = None) -> str:
    out = _WHITESPACE_RE.sub("-", (text or "").strip().upper())
    out = strip_code(out)
    if limit is not None:
        out = out[:limit]
    return out


def generate_base_code(name: str) -> str:
    """
    Code prefix from a product name.

        >>> generate_base_code("Minican 4 Plus")
        'MINICAN-4-PLUS'
    """
    return sanitize_code_part(name, settings.SKU_CODE_MAX_LENGTH) or DEFAULT_BASE_CODE


def format_sequence(number: int) -> str:
    return str(number).zfill(3)


def extract_sequence_number(code: str) -> Optional[int]:
    m = _SUFFIX_RE.search(code or "")
    if not m:
        return None
    n = int(m.group(1))
    return n if n > 0 else None


def next_sequence_number(existing: Iterable[Any] | None) -> int:
    """
    Global max suffix + 1 across every code, whatever its prefix, so a renamed
    product never reissues a number.
    """
    numbers = [n for n in (extract_sequence_number(c) for c in sku_codes(existing)) if n]
    return max(numbers) + 1 if numbers else 1


def generate_next_code(name: str, existing: Iterable[Any] | None = None) -> str:
    """
    Next free code for a product. `existing` must be a current snapshot of the
    product's SKUs (records, dicts with 'sku', or plain codes); collisions
    against codes missing from that snapshot are the caller's problem.
    """
    prefix = generate_base_code(name)
    existing = list(existing or [])
    if not existing:
        return f"{prefix}-001"
    return f"{prefix}-{format_sequence(next_sequence_number(existing))}"
