# variant_engine/catalog/attribute_loader.py
# --------------------------------------------------------------------------------------
# Attribute axes and color families from exported catalog files.
#   - color families: JSON list  [{family, displayName, variants: [{name, hex}]}]
#   - attribute axes: Excel/CSV sheet, one row per axis value
# The engine itself never reads files; these feed it immutable snapshots.
# --------------------------------------------------------------------------------------
from __future__ import annotations

import json
import logging
import os
from typing import Dict, List, Optional

import pandas as pd

from variant_engine.config import settings
from variant_engine.models.color_models import ColorFamily
from variant_engine.models.variant_models import AttributeAxis, AxisValue

logger = logging.getLogger("variant_engine.catalog")


def load_color_families(filepath: Optional[str] = None) -> List[ColorFamily]:
    """
    Invalid hex codes raise pydantic.ValidationError here, so every family
    handed to the detector is well formed.
    """
    filepath = filepath or settings.COLOR_FAMILIES_PATH
    if not os.path.isfile(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        # {"colorFamilies": [...]} wrapper used by some exports
        data = data.get("colorFamilies") or data.get("families") or []
    families = [ColorFamily.model_validate(row) for row in data]
    logger.info(f"Loaded {len(families)} color families from '{filepath}'")
    return families


def _cell(row, col: Optional[str]) -> str:
    if not col:
        return ""
    v = row.get(col, "")
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return ""
    return str(v).strip()


def _find_column(columns, *needles: str) -> Optional[str]:
    for candidate in columns:
        low = str(candidate).lower()
        if all(n in low for n in needles):
            return candidate
    return None


def load_attribute_axes(filepath: str) -> List[AttributeAxis]:
    """
    Reads an attribute sheet (.xlsx via openpyxl, or .csv) into axes.
    Columns are matched loosely: Attribute, Value, Display Name, Hex, Family
    (an optional Label column gives the axis display label).
    """
    if not os.path.isfile(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")

    if filepath.lower().endswith(".csv"):
        df = pd.read_csv(filepath, dtype=str)
    else:
        df = pd.read_excel(filepath, engine="openpyxl", dtype=str)

    cols = list(df.columns)
    display_col = _find_column(cols, "display")
    attr_col = _find_column(cols, "attribute") or "Attribute"
    value_col = next(
        (c for c in cols if "value" in str(c).lower() and c not in (attr_col, display_col)),
        "Value",
    )
    hex_col = _find_column(cols, "hex")
    family_col = _find_column(cols, "family")
    label_col = _find_column(cols, "label")

    axes: Dict[str, Dict] = {}
    for _, row in df.iterrows():
        attr = _cell(row, attr_col)
        value = _cell(row, value_col)
        if not attr or not value:
            continue
        axis = axes.setdefault(attr, {"key": attr, "display_label": _cell(row, label_col) or attr, "values": {}})
        if value in axis["values"]:
            continue
        axis["values"][value] = AxisValue(
            value=value,
            display_name=_cell(row, display_col) or value,
            hex=_cell(row, hex_col) or None,
            family=_cell(row, family_col) or None,
        )

    return [
        AttributeAxis(key=a["key"], display_label=a["display_label"], values=list(a["values"].values()))
        for a in axes.values()
    ]


def axis_value_map(axis: AttributeAxis) -> Dict[str, AxisValue]:
    """value -> AxisValue, the lookup shape VariantGenerationRequest expects."""
    return {v.value: v for v in axis.values}
