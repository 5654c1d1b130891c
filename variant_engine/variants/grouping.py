# variant_engine/variants/grouping.py
# --------------------------------------------------------------------------------------
# Flat SKU list <-> color groups.
# The flat list is the real data; groups are a display convenience:
#   group_skus(skus)              -> color groups for editing
#   (pure edits on the groups)
#   flatten_color_groups(groups)  -> flat SKUs for submission
# flatten_color_groups(group_skus(skus)) gives back the same records.
# --------------------------------------------------------------------------------------
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from variant_engine.colors.color_defaults import (
    generate_default_color_hex,
    generate_default_color_name,
)
from variant_engine.colors.color_math import is_hex_color
from variant_engine.colors.family_detector import detect_color_family
from variant_engine.models.color_models import ColorFamily
from variant_engine.models.sku_models import ColorGroup, ColorSizeEntry, Image, SkuRecord
from variant_engine.sku.sku_codes import format_sequence, next_sequence_number
from variant_engine.variants.pricing import COLOR_HEX_ATTRIBUTE_KEY

logger = logging.getLogger("variant_engine.variants")

DEFAULT_GROUP_KEY = "default"

_EDITABLE_ENTRY_FIELDS = {
    "size", "sku", "name", "price", "stock_quantity", "is_active", "attributes",
    "variant_name", "sub_variant_name", "color_family_source",
}


def _norm(s: Optional[str]) -> str:
    return "" if s is None else str(s).strip()


def normalize_color_key(color: Optional[str]) -> str:
    c = _norm(color).lower()
    if not c:
        return DEFAULT_GROUP_KEY
    return "-".join(c.split())


def _group_key(color_hex: Optional[str], color_name: Optional[str]) -> str:
    hex_part = _norm(color_hex).lower()
    name_part = normalize_color_key(color_name) if _norm(color_name) else ""
    if hex_part and name_part:
        # shared or fallback swatches must not merge different colors
        return f"{hex_part}|{name_part}"
    return hex_part or name_part or DEFAULT_GROUP_KEY


def color_group_key(sku: SkuRecord) -> str:
    """"<colorHex lower>|<color name>", or whichever of the two exists, else 'default'."""
    return _group_key(sku.color_hex, sku.color)


def _copy_images(images: Iterable[Image] | None) -> List[Image]:
    return [img.model_copy(deep=True) for img in (images or [])]


def _row_value(sku: SkuRecord, attribute_key: str) -> str:
    # color carried by the secondary axis: the row is the primary value
    if COLOR_HEX_ATTRIBUTE_KEY in sku.attributes and sku.variant_name:
        return sku.variant_name
    return (
        sku.sub_variant_name
        or sku.attributes.get(attribute_key)
        or sku.attributes.get("size")
        or ""
    )


def _entry_from_sku(sku: SkuRecord, attribute_key: str) -> ColorSizeEntry:
    return ColorSizeEntry(
        size=_row_value(sku, attribute_key),
        sku=sku.sku,
        name=sku.name,
        price=sku.price,
        stock_quantity=sku.stock_quantity,
        is_active=sku.is_active,
        images=_copy_images(sku.images),
        attributes=dict(sku.attributes),
        color=sku.color,
        color_hex=sku.color_hex,
        color_family=sku.color_family,
        variant_name=sku.variant_name,
        sub_variant_name=sku.sub_variant_name,
        color_family_source=sku.color_family_source,
    )


def group_skus(
    skus: Iterable[SkuRecord],
    attribute_key: str = "size",
    families: Optional[Iterable[ColorFamily]] = None,
    distance_threshold: Optional[float] = None,
) -> List[ColorGroup]:
    """
    Partition SKUs by color. The group's images come from the first SKU seen
    for each color and its family from the first SKU that has one; both are
    for display, every row keeps its own. When `families` is given, groups
    without an explicit family get `detected_family` (never written back).
    """
    families = list(families or [])
    order: List[str] = []
    groups: Dict[str, Dict[str, Any]] = {}

    for sku in skus or []:
        key = color_group_key(sku)
        g = groups.get(key)
        if g is None:
            g = {
                "color_key": key,
                "color_name": sku.color,
                "color_hex": sku.color_hex,
                "color_family": sku.color_family,
                "images": _copy_images(sku.images),
                "sizes": [],
            }
            groups[key] = g
            order.append(key)
        if not g["color_family"] and sku.color_family:
            g["color_family"] = sku.color_family
        if g["color_name"] is None and sku.color is not None:
            g["color_name"] = sku.color
        g["sizes"].append(_entry_from_sku(sku, attribute_key))

    out: List[ColorGroup] = []
    for key in order:
        g = groups[key]
        if families and not g["color_family"] and key != DEFAULT_GROUP_KEY:
            match = detect_color_family(
                g["color_hex"] or g["color_name"], families, distance_threshold=distance_threshold
            )
            g["detected_family"] = match.family
        out.append(ColorGroup(**g))

    return sorted(
        out,
        key=lambda grp: (grp.color_key == DEFAULT_GROUP_KEY, grp.display_name.casefold()),
    )


def flatten_color_groups(color_groups: Iterable[ColorGroup]) -> List[SkuRecord]:
    skus: List[SkuRecord] = []
    for group in color_groups or []:
        for entry in group.sizes:
            skus.append(SkuRecord(
                sku=entry.sku,
                name=entry.name,
                price=entry.price,
                stock_quantity=entry.stock_quantity,
                is_active=entry.is_active,
                images=_copy_images(entry.images),
                attributes=dict(entry.attributes),
                color=entry.color,
                color_hex=entry.color_hex,
                color_family=entry.color_family,
                variant_name=entry.variant_name,
                sub_variant_name=entry.sub_variant_name,
                color_family_source=entry.color_family_source,
            ))
    return skus


# ---- Pure group editors ------------------------------------------------------------

def create_new_color_group(
    color_name: str,
    default_sizes: List[str],
    sku_prefix: str,
    existing_skus: Iterable[Any],
    *,
    color_hex: Optional[str] = None,
    base_price: Optional[float] = None,
    initial_quantity: int = 0,
    color_family: Optional[str] = None,
    attribute_key: str = "size",
) -> ColorGroup:
    """
    New color with one row per default size, numbered after the highest
    suffix among `existing_skus`. No sizes -> a single color-only SKU.
    """
    next_number = next_sequence_number(existing_skus)
    final_name = generate_default_color_name(color_family, color_name)
    final_hex = color_hex or (final_name if is_hex_color(final_name) else None) \
        or generate_default_color_hex(final_name, color_family)

    source = "manual" if color_family else "auto"
    rows = [(size, f"{final_name} - {size}", {attribute_key: size}) for size in default_sizes] \
        or [("", final_name, {})]
    sizes = [
        ColorSizeEntry(
            size=size,
            sku=f"{sku_prefix}-{format_sequence(next_number + i)}",
            name=name,
            price=base_price,
            stock_quantity=initial_quantity,
            is_active=True,
            attributes=attributes,
            color=final_name,
            color_hex=final_hex,
            color_family=color_family,
            variant_name=final_name,
            sub_variant_name=size,
            color_family_source=source,
        )
        for i, (size, name, attributes) in enumerate(rows)
    ]

    return ColorGroup(
        color_key=_group_key(final_hex, final_name),
        color_name=final_name,
        color_hex=final_hex,
        color_family=color_family,
        images=[],
        sizes=sizes,
    )


def add_size_to_color_group(
    group: ColorGroup,
    size: str,
    sku_code: str,
    *,
    base_price: Optional[float] = None,
    initial_quantity: int = 0,
    attribute_key: str = "size",
) -> ColorGroup:
    """New row carrying the group's color and images."""
    name = group.display_name
    entry = ColorSizeEntry(
        size=size,
        sku=sku_code,
        name=f"{name} - {size}",
        price=base_price,
        stock_quantity=initial_quantity,
        is_active=True,
        images=_copy_images(group.images),
        attributes={attribute_key: size},
        color=group.color_name,
        color_hex=group.color_hex,
        color_family=group.color_family,
        variant_name=group.color_name,
        sub_variant_name=size,
        color_family_source="manual" if group.color_family else "auto",
    )
    return group.model_copy(update={"sizes": list(group.sizes) + [entry]})


def remove_size_from_color_group(group: ColorGroup, size_index: int) -> ColorGroup:
    if not 0 <= size_index < len(group.sizes):
        return group
    return group.model_copy(update={"sizes": [s for i, s in enumerate(group.sizes) if i != size_index]})


def update_size_in_color_group(group: ColorGroup, size_index: int, field: str, value: Any) -> ColorGroup:
    """Replace one field of one row; unknown fields or indexes leave the group unchanged."""
    if field not in _EDITABLE_ENTRY_FIELDS or not 0 <= size_index < len(group.sizes):
        logger.debug("Ignoring update of %r at row %s", field, size_index)
        return group
    old = group.sizes[size_index]
    # re-validate so attributes etc. keep their shape
    new = ColorSizeEntry.model_validate({**old.model_dump(), field: value})
    sizes = list(group.sizes)
    sizes[size_index] = new
    return group.model_copy(update={"sizes": sizes})


def fill_all_sizes_in_color_group(group: ColorGroup, quantity: int) -> ColorGroup:
    sizes = [s.model_copy(update={"stock_quantity": quantity}) for s in group.sizes]
    return group.model_copy(update={"sizes": sizes})


def update_color_group_images(group: ColorGroup, images: Iterable[Any] | None) -> ColorGroup:
    """Set the images of the group and of every row in it."""
    imgs = [i.model_copy(deep=True) if isinstance(i, Image) else Image.model_validate(i) for i in (images or [])]
    sizes = [s.model_copy(update={"images": _copy_images(imgs)}) for s in group.sizes]
    return group.model_copy(update={"images": imgs, "sizes": sizes})


def replace_color_group(groups: Iterable[ColorGroup], group: ColorGroup) -> List[ColorGroup]:
    """Swap in `group` for the one with the same color_key (appended when new)."""
    out = []
    replaced = False
    for g in groups or []:
        if g.color_key == group.color_key and not replaced:
            out.append(group)
            replaced = True
        else:
            out.append(g)
    if not replaced:
        out.append(group)
    return out


def remove_color_group(groups: Iterable[ColorGroup], color_key: str) -> List[ColorGroup]:
    return [g for g in groups or [] if g.color_key != color_key]


def calculate_color_groups_stats(color_groups: Iterable[ColorGroup]) -> Dict[str, int]:
    groups = list(color_groups or [])
    return {
        "total_colors": len(groups),
        "total_sizes": sum(len(g.sizes) for g in groups),
        "total_stock": sum(g.total_stock for g in groups),
    }
