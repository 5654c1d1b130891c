# variant_engine/colors/color_names.py
# --------------------------------------------------------------------------------------
# Name-to-English color lookup used by the family detector.
# Hex codes resolve to the nearest CSS3 named color (webcolors); names resolve
# to their CSS3 spelling. Compound CSS names are re-spaced ("dodgerblue" ->
# "Dodger Blue") so the first word can be used as a lexical token.
# --------------------------------------------------------------------------------------
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional, Protocol, Tuple

import webcolors

from variant_engine.colors.color_math import hex_to_rgb, is_hex_color, normalize_hex

# Words that make up the CSS3 color keywords, used to split compounds.
_CSS_WORDS = frozenset("""
    alice almond antique aqua aquamarine azure beige bisque black blanched blue blush
    brick brown burly cadet chartreuse chiffon chocolate coral cornflower cornsilk cream
    crimson cyan dark deep dim dodger drab fire floral forest fuchsia gainsboro ghost gold
    goldenrod gray green grey honeydew hot indian indigo ivory khaki lace lavender lawn
    lemon light lime linen magenta maroon medium midnight mint misty moccasin navajo navy
    old olive orange orchid pale papaya peach peru pink plum powder puff purple rebecca
    red rose rosy royal saddle salmon sandy sea seashell shell sienna silver sky slate
    smoke snow spring steel tan teal thistle tomato turquoise violet wheat whip white
    wood yellow
""".split())


class ColorNameLexicon(Protocol):
    def english_name(self, value: str) -> Optional[str]:
        ...


def split_compound_name(name: str) -> str:
    """'lightgoldenrodyellow' -> 'Light Goldenrod Yellow'; unknown words are left whole."""
    raw = (name or "").strip().lower()

    def _split(s: str) -> Optional[List[str]]:
        if not s:
            return []
        # longest word first so "goldenrod" beats "gold"
        for end in range(len(s), 0, -1):
            head = s[:end]
            if head in _CSS_WORDS:
                rest = _split(s[end:])
                if rest is not None:
                    return [head] + rest
        return None

    words = _split(raw)
    if not words:
        return raw.title()
    return " ".join(w.capitalize() for w in words)


@lru_cache(maxsize=1)
def _css3_table() -> Tuple[Tuple[str, Tuple[int, int, int]], ...]:
    rows = []
    for name in webcolors.names("css3"):
        rgb = hex_to_rgb(webcolors.name_to_hex(name, spec="css3"))
        if rgb is not None:
            rows.append((name, rgb))
    return tuple(rows)


def nearest_css_name(hex_value: str) -> Optional[str]:
    rgb = hex_to_rgb(hex_value)
    if rgb is None:
        return None
    best_name, best_dist = None, None
    for name, (r, g, b) in _css3_table():
        dist = (rgb[0] - r) ** 2 + (rgb[1] - g) ** 2 + (rgb[2] - b) ** 2
        if best_dist is None or dist < best_dist:
            best_name, best_dist = name, dist
            if dist == 0:
                break
    return best_name


def resolve_color_hex(value: str | None) -> Optional[str]:
    """Hex or CSS color name -> '#RRGGBB'; None when unrecognised."""
    if not value:
        return None
    if is_hex_color(value):
        return normalize_hex(value).upper()
    key = "".join(value.split()).lower()
    try:
        return webcolors.name_to_hex(key, spec="css3").upper()
    except ValueError:
        return None


class CssColorLexicon:
    """Default lexicon built on the CSS3 named colors."""

    def english_name(self, value: str) -> Optional[str]:
        if not value:
            return None
        if is_hex_color(value):
            name = nearest_css_name(value)
            return split_compound_name(name) if name else None
        key = "".join(value.split()).lower()
        try:
            webcolors.name_to_hex(key, spec="css3")
        except ValueError:
            return None
        return split_compound_name(key)


default_lexicon = CssColorLexicon()
