# variant_engine/variants/pricing.py
# --------------------------------------------------------------------------------------
# Turn selected combinations into SKU records: code from a template, display
# name, price (inherit / custom / per-axis-value), stock, status and color
# metadata, with per-cell overrides winning field by field.
# --------------------------------------------------------------------------------------
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set

from variant_engine.models.sku_models import SkuRecord
from variant_engine.models.variant_models import (
    AxisValue,
    CellOverride,
    Combination,
    PricingConfig,
    VariantGenerationRequest,
)
from variant_engine.sequences.sequence_client import SequenceReserver
from variant_engine.sku.sku_codes import format_sequence, sanitize_code_part, strip_code
from variant_engine.util import maybe_await

logger = logging.getLogger("variant_engine.variants")

# Where color lives in `attributes` when the secondary axis is the color axis
COLOR_ATTRIBUTE_KEY = "color"
COLOR_HEX_ATTRIBUTE_KEY = "colorHex"
COLOR_FAMILY_ATTRIBUTE_KEY = "colorFamily"

PRIMARY_COLOR_FALLBACK_HEX = "#cccccc"
FALLBACK_COLOR_FAMILY = "other"

PRODUCT_CODE_LIMIT = 20
PRIMARY_CODE_LIMIT = 15
SECONDARY_CODE_LIMIT = 10

_SECONDARY_PLACEHOLDER_RE = re.compile(r"-?\{(secondary|size)\}")


def override_key(primary: str, secondary: str = "") -> str:
    """Key of the per-cell override map: '<primary>-<secondary>'."""
    return f"{primary}-{secondary}"


def compose_sku_code(template: str, product_name: str, primary: str, secondary: str, index: int) -> str:
    """
    Fill {product} {primary} {secondary} (aliases {color} {size}) and clean the
    result; an empty result falls back to SKU-<index + 1>.
    """
    product_code = sanitize_code_part(product_name, PRODUCT_CODE_LIMIT)
    primary_code = sanitize_code_part(primary, PRIMARY_CODE_LIMIT)
    secondary_code = sanitize_code_part(secondary, SECONDARY_CODE_LIMIT)
    filled = (
        (template or "")
        .replace("{product}", product_code)
        .replace("{primary}", primary_code)
        .replace("{secondary}", secondary_code)
        .replace("{color}", primary_code)
        .replace("{size}", secondary_code)
    )
    code = strip_code(filled)
    if not code:
        logger.debug("Template %r produced no code for (%r, %r); using index fallback", template, primary, secondary)
        return f"SKU-{index + 1}"
    return code


def effective_template(template: str, one_dimensional: bool) -> str:
    return _SECONDARY_PLACEHOLDER_RE.sub("", template or "") if one_dimensional else (template or "")


def resolve_price(pricing: PricingConfig, combination: Combination, one_dimensional: bool = False) -> Optional[float]:
    """
    Mode price for one combination. In surcharge mode the configured amount IS
    the price (not base + amount); a missing or zero amount means inherit (None).
    """
    if pricing.mode == "custom":
        return pricing.custom_price
    if pricing.mode == "surcharge":
        if one_dimensional or pricing.surcharge_axis == "primary":
            axis_value = combination.primary
        else:
            axis_value = combination.secondary
        amount = pricing.surcharges.get(axis_value)
        if amount:
            return amount
        return None
    return None


def _unique(code: str, used: Set[str]) -> str:
    if code not in used:
        return code
    n = 2
    while f"{code}-{n}" in used:
        n += 1
    logger.debug("SKU code %s already taken; using %s-%s", code, code, n)
    return f"{code}-{n}"


def _info(values: Dict[str, AxisValue], value: str) -> Optional[AxisValue]:
    return values.get(value) if value else None


def _build_record(
    request: VariantGenerationRequest,
    combo: Combination,
    code: str,
    one_dimensional: bool,
) -> SkuRecord:
    primary_info = _info(request.primary_values, combo.primary)
    secondary_info = _info(request.secondary_values, combo.secondary)
    primary_name = primary_info.label if primary_info else combo.primary
    secondary_name = secondary_info.label if secondary_info else combo.secondary

    override = request.overrides.get(override_key(combo.primary, combo.secondary)) or CellOverride()
    price = override.price if override.has("price") else resolve_price(request.pricing, combo, one_dimensional)
    stock = override.stock if override.has("stock") and override.stock is not None else request.initial_stock
    status = override.status if override.has("status") and override.status is not None else request.is_active

    if one_dimensional:
        attributes = {request.primary_label.lower(): combo.primary}
    else:
        attributes = {request.secondary_label.lower(): combo.secondary}

    fields = dict(
        sku=code,
        name=primary_name if one_dimensional else f"{primary_name} - {secondary_name}",
        price=price,
        stock_quantity=stock,
        is_active=status,
        images=[],
        variant_name=combo.primary,
        sub_variant_name="" if one_dimensional else combo.secondary,
        color_family_source="auto",
    )

    if request.variant_type == "color":
        fields.update(
            color=primary_name,
            color_hex=(primary_info.hex if primary_info else None) or PRIMARY_COLOR_FALLBACK_HEX,
            color_family=(primary_info.family if primary_info else None) or FALLBACK_COLOR_FAMILY,
        )
    elif not one_dimensional and secondary_info is not None and secondary_info.hex:
        fields.update(
            color=secondary_name,
            color_hex=secondary_info.hex,
            color_family=secondary_info.family or FALLBACK_COLOR_FAMILY,
        )
        attributes.update({
            COLOR_ATTRIBUTE_KEY: secondary_name,
            COLOR_HEX_ATTRIBUTE_KEY: secondary_info.hex,
            COLOR_FAMILY_ATTRIBUTE_KEY: secondary_info.family,
        })

    return SkuRecord(attributes=attributes, **fields)


def resolve_skus(
    request: VariantGenerationRequest,
    sequence_numbers: Optional[Sequence[int]] = None,
) -> List[SkuRecord]:
    """
    One SkuRecord per combination, in input order. Reserved sequence numbers
    are appended as -NNN only when there is one for every combination.
    """
    combos = request.combinations
    one_dimensional = request.one_dimensional
    template = effective_template(request.template, one_dimensional)

    sequences = list(sequence_numbers or [])
    if sequences and len(sequences) < len(combos):
        logger.warning(
            "Got %s sequence numbers for %s combinations; generating codes without sequence suffix",
            len(sequences), len(combos),
        )
        sequences = []

    used: Set[str] = set(request.existing_skus)
    records: List[SkuRecord] = []
    for index, combo in enumerate(combos):
        code = compose_sku_code(template, request.product_name, combo.primary, combo.secondary, index)
        if sequences:
            code = f"{code}-{format_sequence(sequences[index])}"
        code = _unique(code, used)
        used.add(code)
        records.append(_build_record(request, combo, code, one_dimensional))
    return records


async def resolve_skus_with_reservation(
    request: VariantGenerationRequest,
    reserver: Optional[SequenceReserver],
) -> List[SkuRecord]:
    """
    Reserve one global sequence number per combination, then resolve. The
    reservation is optional: any failure degrades to codes without the suffix.
    """
    sequences: List[int] = []
    count = len(request.combinations)
    if reserver is not None and count:
        try:
            sequences = list(await maybe_await(reserver.reserve(count)) or [])
        except Exception as e:
            logger.warning("Sequence reservation failed, continuing without suffix: %s", e)
            sequences = []
    return resolve_skus(request, sequences)


# ---- Bulk edit of existing SKUs ------------------------------------------------------

def _sku_matches(sku: SkuRecord, combo: Combination, request: VariantGenerationRequest, one_dimensional: bool) -> bool:
    if request.variant_type == "color":
        info = request.primary_values.get(combo.primary)
        color_match = sku.color == (info.label if info else combo.primary) or (
            info is not None and info.hex is not None and sku.color_hex == info.hex
        )
        if one_dimensional:
            return color_match
        return color_match and sku.attributes.get(request.secondary_label.lower()) == combo.secondary
    if sku.variant_name != combo.primary:
        return False
    return one_dimensional or sku.sub_variant_name == combo.secondary


def _matched_combination(sku: SkuRecord, request: VariantGenerationRequest) -> Optional[Combination]:
    one_dimensional = request.one_dimensional
    return next((c for c in request.combinations if _sku_matches(sku, c, request, one_dimensional)), None)


def match_existing_skus(existing: Iterable[SkuRecord], request: VariantGenerationRequest) -> List[SkuRecord]:
    """Existing SKUs that correspond to one of the request's selected combinations."""
    return [sku for sku in existing or [] if _matched_combination(sku, request) is not None]


def apply_bulk_update(
    existing: Iterable[SkuRecord],
    request: VariantGenerationRequest,
    *,
    update_price: bool = True,
    update_stock: bool = False,
    update_status: bool = False,
    overrides_by_code: Optional[Dict[str, CellOverride]] = None,
) -> List[SkuRecord]:
    """
    Re-apply pricing / stock / status from `request` to the existing SKUs that
    match its combinations; everything else is returned as is, in order.
    Overrides here are keyed by SKU code.
    """
    overrides_by_code = overrides_by_code or {}
    one_dimensional = request.one_dimensional
    out: List[SkuRecord] = []
    for sku in existing or []:
        combo = _matched_combination(sku, request)
        if combo is None:
            out.append(sku)
            continue
        override = overrides_by_code.get(sku.sku) or CellOverride()
        update = {}
        if update_price:
            update["price"] = (
                override.price if override.has("price")
                else resolve_price(request.pricing, combo, one_dimensional)
            )
        if update_stock:
            update["stock_quantity"] = override.stock if override.stock is not None else request.initial_stock
        if update_status:
            update["is_active"] = override.status if override.status is not None else request.is_active
        out.append(sku.model_copy(update=update) if update else sku)
    return out
