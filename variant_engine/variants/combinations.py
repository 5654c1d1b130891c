# variant_engine/variants/combinations.py
# --------------------------------------------------------------------------------------
# Selection of (primary, secondary) axis-value pairs for variant generation.
# A CombinationSelection is an immutable value; every operation returns a new one.
# With an empty secondary axis the selection is one-dimensional and each
# selected pair has secondary == "".
# --------------------------------------------------------------------------------------
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence

from variant_engine.models.sku_models import SkuRecord
from variant_engine.models.variant_models import (
    AxisValue,
    Combination,
    CombinationSelection,
    SelectionStats,
)
from variant_engine.util import round_half_up

logger = logging.getLogger("variant_engine.variants")


def _axis(values: Iterable[Any] | None) -> List[AxisValue]:
    out: List[AxisValue] = []
    seen = set()
    for v in values or []:
        if isinstance(v, str):
            v = AxisValue(value=v, display_name=v)
        elif isinstance(v, dict):
            v = AxisValue.model_validate(v)
        if v.value in seen:
            continue
        seen.add(v.value)
        out.append(v)
    return out


def _values(axis: Sequence[AxisValue]) -> List[str]:
    return [v.value for v in axis]


def is_one_dimensional(selection: CombinationSelection) -> bool:
    return not selection.secondary_values


def _dedupe(pairs: Iterable[Combination]) -> List[Combination]:
    seen = set()
    out = []
    for c in pairs:
        key = (c.primary, c.secondary)
        if key not in seen:
            seen.add(key)
            out.append(c)
    return out


def _valid(selection: CombinationSelection, c: Combination) -> bool:
    if c.primary not in _values(selection.primary_values):
        return False
    if is_one_dimensional(selection):
        return c.secondary == ""
    return c.secondary in _values(selection.secondary_values)


def _with(selection: CombinationSelection, pairs: Iterable[Combination]) -> CombinationSelection:
    return selection.model_copy(update={"selected": _dedupe(pairs)})


def build_selection(
    primary_values: Iterable[Any],
    secondary_values: Iterable[Any] | None = None,
    selected: Iterable[Any] | None = None,
) -> CombinationSelection:
    """
    Axis values may be AxisValue objects, dicts or plain strings. Pairs that do
    not fit the axes are dropped; duplicates are collapsed.
    """
    selection = CombinationSelection(
        primary_values=_axis(primary_values),
        secondary_values=_axis(secondary_values),
    )
    pairs = []
    for c in selected or []:
        if isinstance(c, (tuple, list)):
            c = Combination(primary=c[0], secondary=c[1] if len(c) > 1 else "")
        elif isinstance(c, dict):
            c = Combination.model_validate(c)
        if is_one_dimensional(selection):
            c = Combination(primary=c.primary, secondary="")
        if _valid(selection, c):
            pairs.append(c)
    return _with(selection, pairs)


def is_selected(selection: CombinationSelection, primary: str, secondary: str = "") -> bool:
    if is_one_dimensional(selection):
        secondary = ""
    return Combination(primary=primary, secondary=secondary) in selection.selected


def toggle(selection: CombinationSelection, primary: str, secondary: str = "") -> CombinationSelection:
    if is_one_dimensional(selection):
        secondary = ""
    pair = Combination(primary=primary, secondary=secondary)
    if not _valid(selection, pair):
        logger.debug("Ignoring toggle of unknown pair (%r, %r)", primary, secondary)
        return selection
    if pair in selection.selected:
        return _with(selection, [c for c in selection.selected if c != pair])
    return _with(selection, list(selection.selected) + [pair])


def all_combinations(selection: CombinationSelection) -> List[Combination]:
    """The full cartesian product, primary-major, in axis order."""
    if is_one_dimensional(selection):
        return [Combination(primary=p, secondary="") for p in _values(selection.primary_values)]
    return [
        Combination(primary=p, secondary=s)
        for p in _values(selection.primary_values)
        for s in _values(selection.secondary_values)
    ]


def select_all(selection: CombinationSelection) -> CombinationSelection:
    return _with(selection, all_combinations(selection))


def clear_all(selection: CombinationSelection) -> CombinationSelection:
    return _with(selection, [])


def _row(selection: CombinationSelection, primary: str) -> List[Combination]:
    if is_one_dimensional(selection):
        return [Combination(primary=primary, secondary="")]
    return [Combination(primary=primary, secondary=s) for s in _values(selection.secondary_values)]


def _column(selection: CombinationSelection, secondary: str) -> List[Combination]:
    return [Combination(primary=p, secondary=secondary) for p in _values(selection.primary_values)]


def _toggle_unit(selection: CombinationSelection, unit: List[Combination]) -> CombinationSelection:
    current = set((c.primary, c.secondary) for c in selection.selected)
    unit_keys = set((c.primary, c.secondary) for c in unit)
    rest = [c for c in selection.selected if (c.primary, c.secondary) not in unit_keys]
    if unit_keys <= current:
        return _with(selection, rest)
    return _with(selection, rest + unit)


def select_row(selection: CombinationSelection, primary: str) -> CombinationSelection:
    """Fully selected row -> cleared; otherwise the whole row is selected."""
    if primary not in _values(selection.primary_values):
        return selection
    return _toggle_unit(selection, _row(selection, primary))


def select_column(selection: CombinationSelection, secondary: str) -> CombinationSelection:
    if is_one_dimensional(selection) or secondary not in _values(selection.secondary_values):
        return selection
    return _toggle_unit(selection, _column(selection, secondary))


def _count_in(selection: CombinationSelection, unit: List[Combination]) -> int:
    selected = set((c.primary, c.secondary) for c in selection.selected)
    return sum(1 for c in unit if (c.primary, c.secondary) in selected)


def is_row_fully_selected(selection: CombinationSelection, primary: str) -> bool:
    unit = _row(selection, primary)
    return bool(unit) and _count_in(selection, unit) == len(unit)


def is_row_partially_selected(selection: CombinationSelection, primary: str) -> bool:
    unit = _row(selection, primary)
    return 0 < _count_in(selection, unit) < len(unit)


def is_column_fully_selected(selection: CombinationSelection, secondary: str) -> bool:
    unit = _column(selection, secondary)
    return bool(unit) and _count_in(selection, unit) == len(unit)


def is_column_partially_selected(selection: CombinationSelection, secondary: str) -> bool:
    unit = _column(selection, secondary)
    return 0 < _count_in(selection, unit) < len(unit)


def stats(selection: CombinationSelection) -> SelectionStats:
    if is_one_dimensional(selection):
        total = len(selection.primary_values)
    else:
        total = len(selection.primary_values) * len(selection.secondary_values)
    selected = len(selection.selected)
    percentage = round_half_up(selected / total * 100) if total > 0 else 0
    return SelectionStats(total=total, selected=selected, percentage=percentage)


def _matches(value: Optional[str], axis_value: AxisValue) -> bool:
    return bool(value) and value in (axis_value.value, axis_value.display_name, axis_value.hex)


def selection_from_skus(
    primary_values: Iterable[Any],
    secondary_values: Iterable[Any] | None,
    skus: Iterable[SkuRecord],
    secondary_key: str = "size",
) -> CombinationSelection:
    """
    Rebuild the selection that an existing SKU list corresponds to, so a
    product being edited opens with its current variants ticked.
    """
    selection = build_selection(primary_values, secondary_values)
    pairs = []
    for sku in skus or []:
        primary = next(
            (pv.value for pv in selection.primary_values
             if _matches(sku.variant_name, pv) or _matches(sku.color, pv) or _matches(sku.color_hex, pv)),
            None,
        )
        if primary is None:
            continue
        if is_one_dimensional(selection):
            pairs.append(Combination(primary=primary, secondary=""))
            continue
        raw = sku.sub_variant_name or sku.attributes.get(secondary_key)
        secondary = next((sv.value for sv in selection.secondary_values if _matches(raw, sv)), None)
        if secondary is not None:
            pairs.append(Combination(primary=primary, secondary=secondary))
    return _with(selection, pairs)
