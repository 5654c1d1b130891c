# variant_engine/colors/color_defaults.py
# --------------------------------------------------------------------------------------
# Display fallbacks for color groups whose SKUs carry no explicit name or hex.
# --------------------------------------------------------------------------------------
from __future__ import annotations

from typing import Dict, Optional

from variant_engine.colors.color_math import is_hex_color

FALLBACK_HEX = "#808080"
FALLBACK_NAME = "Color"

COLOR_FAMILY_DEFAULTS: Dict[str, Dict[str, str]] = {
    "red": {"hex": "#FF0000", "name": "Red"},
    "blue": {"hex": "#0000FF", "name": "Blue"},
    "green": {"hex": "#00FF00", "name": "Green"},
    "yellow": {"hex": "#FFFF00", "name": "Yellow"},
    "orange": {"hex": "#FFA500", "name": "Orange"},
    "purple": {"hex": "#800080", "name": "Purple"},
    "pink": {"hex": "#FFC0CB", "name": "Pink"},
    "brown": {"hex": "#8B4513", "name": "Brown"},
    "gray": {"hex": "#808080", "name": "Gray"},
    "grey": {"hex": "#808080", "name": "Gray"},
    "black": {"hex": "#000000", "name": "Black"},
    "white": {"hex": "#FFFFFF", "name": "White"},
    "beige": {"hex": "#F5F5DC", "name": "Beige"},
    "navy": {"hex": "#000080", "name": "Navy"},
    "teal": {"hex": "#008080", "name": "Teal"},
    "gold": {"hex": "#FFD700", "name": "Gold"},
    "silver": {"hex": "#C0C0C0", "name": "Silver"},
}


def generate_default_color_hex(color_name: Optional[str] = None, color_family: Optional[str] = None) -> str:
    """
    Swatch color for a group without colorHex:
      1) the family's default hex
      2) the name itself when it is a hex code
      3) a family word contained in the name ("dark red" -> red)
      4) neutral gray
    """
    if color_family and color_family.lower() in COLOR_FAMILY_DEFAULTS:
        return COLOR_FAMILY_DEFAULTS[color_family.lower()]["hex"]

    if color_name and is_hex_color(color_name):
        name = color_name.strip()
        return name if name.startswith("#") else f"#{name}"

    if color_name:
        lower = color_name.lower()
        for family, defaults in COLOR_FAMILY_DEFAULTS.items():
            if family in lower:
                return defaults["hex"]

    return FALLBACK_HEX


def generate_default_color_name(color_family: Optional[str] = None, existing_name: Optional[str] = None) -> str:
    if existing_name and existing_name.strip():
        return existing_name.strip()
    if color_family and color_family.lower() in COLOR_FAMILY_DEFAULTS:
        return COLOR_FAMILY_DEFAULTS[color_family.lower()]["name"]
    return FALLBACK_NAME
