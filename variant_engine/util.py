# variant_engine/util.py
from __future__ import annotations

import inspect
import math
from typing import Any, Iterable, List


async def maybe_await(x):
    if inspect.isawaitable(x):
        return await x
    return x


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; percentages and scores round .5 up
    return int(math.floor(value + 0.5))


def sku_code_of(item: Any) -> str:
    """Accepts a SkuRecord, a mapping with a 'sku' key, or a bare code string."""
    if item is None:
        return ""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return str(item.get("sku") or "")
    return str(getattr(item, "sku", "") or "")


def sku_codes(items: Iterable[Any] | None) -> List[str]:
    return [c for c in (sku_code_of(i) for i in (items or [])) if c]
