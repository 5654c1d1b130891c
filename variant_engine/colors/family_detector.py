# variant_engine/colors/family_detector.py
# --------------------------------------------------------------------------------------
# Classify any color (hex code or free-text name) into one of the curated color
# families. First match wins:
#   1) exact   - hex / variant name / resolved English name equals a variant
#   2) name    - first word of the English name appears in a variant name
#   3) fuzzy   - CIE76 distance to each family's representative (hex input only)
#   4) none
# The detector never raises; unusable input simply yields method 'none'.
# --------------------------------------------------------------------------------------
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from variant_engine.colors.color_math import delta_e, hex_to_lab, normalize_hex
from variant_engine.colors.color_names import ColorNameLexicon, default_lexicon
from variant_engine.config import settings
from variant_engine.models.color_models import ColorFamily, ColorMatch
from variant_engine.models.sku_models import SkuRecord
from variant_engine.util import round_half_up

logger = logging.getLogger("variant_engine.colors")

NO_MATCH = ColorMatch()

_TOKEN_RE = re.compile(r"[a-z]+")


def _english_candidate(value: str, hex_value: Optional[str], lexicon: ColorNameLexicon) -> Optional[str]:
    try:
        name = lexicon.english_name(hex_value or value)
    except Exception as e:
        logger.warning("Color name lookup failed for %r: %s", value, e)
        name = None
    if name:
        return name.lower()
    # free text the lexicon does not know is taken as already being English
    return None if hex_value else value.lower()


def detect_color_family(
    color_value: str | None,
    color_families: Iterable[ColorFamily] | None,
    *,
    distance_threshold: float | None = None,
    lexicon: ColorNameLexicon | None = None,
) -> ColorMatch:
    if not color_value or not isinstance(color_value, str):
        return NO_MATCH
    families: List[ColorFamily] = list(color_families or [])
    if not families:
        return NO_MATCH

    threshold = settings.COLOR_DISTANCE_THRESHOLD if distance_threshold is None else distance_threshold
    value = color_value.strip()
    if not value:
        return NO_MATCH
    value_lower = value.lower()
    hex_value = normalize_hex(value)
    eng = _english_candidate(value, hex_value, lexicon or default_lexicon)

    # 1) exact: hex over every family first, then names
    if hex_value:
        for family in families:
            for variant in family.variants:
                if normalize_hex(variant.hex) == hex_value:
                    return ColorMatch(family=family.family, variant=variant, method="exact", score=0)
    for family in families:
        for variant in family.variants:
            name_lower = (variant.name or "").lower()
            if name_lower and (name_lower == value_lower or name_lower == eng):
                return ColorMatch(family=family.family, variant=variant, method="exact", score=0)

    # 2) name token
    token = next(iter(_TOKEN_RE.findall(eng or "")), None)
    if token:
        for family in families:
            for variant in family.variants:
                if token in (variant.name or "").lower():
                    return ColorMatch(family=family.family, variant=variant, method="name", score=None)

    # 3) fuzzy, against each family's representative only
    if hex_value:
        input_lab = hex_to_lab(hex_value)
        best_family, best_dist = None, None
        for family in families:
            rep = family.representative
            rep_lab = hex_to_lab(rep.hex) if rep else None
            if rep_lab is None:
                continue
            dist = delta_e(input_lab, rep_lab)
            if best_dist is None or dist < best_dist:
                best_family, best_dist = family, dist
        if best_family is not None and best_dist <= threshold:
            return ColorMatch(
                family=best_family.family,
                variant=best_family.representative,
                method="fuzzy",
                score=round_half_up(best_dist),
            )
        logger.debug("No family within deltaE %s of %s (closest %.1f)", threshold, value, best_dist or -1)

    return NO_MATCH


def auto_assign_color_family(
    sku: SkuRecord,
    color_families: Iterable[ColorFamily] | None,
    *,
    distance_threshold: float | None = None,
    lexicon: ColorNameLexicon | None = None,
) -> SkuRecord:
    """
    Fill colorFamily from the SKU's color (hex preferred). A family chosen by
    hand (source 'manual') is never replaced.
    """
    if sku.color_family_source == "manual":
        return sku
    color = sku.color_hex or sku.color
    if not color:
        return sku
    match = detect_color_family(
        color, color_families, distance_threshold=distance_threshold, lexicon=lexicon
    )
    if not match.family:
        return sku
    return sku.model_copy(update={"color_family": match.family, "color_family_source": "auto"})
