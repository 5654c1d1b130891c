import pytest
from pydantic import ValidationError

from variant_engine.colors.color_math import delta_e, hex_to_lab, normalize_hex
from variant_engine.colors.color_names import CssColorLexicon, resolve_color_hex, split_compound_name
from variant_engine.colors.family_detector import auto_assign_color_family, detect_color_family
from variant_engine.models.color_models import ColorFamily, ColorVariant
from variant_engine.models.sku_models import SkuRecord

FAMILIES = [
    ColorFamily(family="red", display_name="Red", variants=[
        ColorVariant(name="Red", hex="#FF0000"),
        ColorVariant(name="Crimson", hex="#DC143C"),
    ]),
    ColorFamily(family="blue", display_name="Blue", variants=[
        ColorVariant(name="Navy", hex="#000080"),
        ColorVariant(name="Sky Blue", hex="#87CEEB"),
    ]),
]

# names the lexicon cannot relate to English, so only distance can match
UNNAMED = [
    ColorFamily(family="red", variants=[ColorVariant(name="אדום", hex="#FF0000")]),
    ColorFamily(family="green", variants=[ColorVariant(name="ירוק", hex="#008000")]),
]


def test_exact_hex_match_ignores_case_and_short_form():
    m = detect_color_family("#ff0000", FAMILIES)
    assert (m.family, m.method, m.score) == ("red", "exact", 0)
    assert m.variant.name == "Red"
    assert detect_color_family("f00", FAMILIES).method == "exact"


def test_exact_name_match():
    m = detect_color_family("  navy ", FAMILIES)
    assert (m.family, m.method) == ("blue", "exact")


def test_exact_match_through_english_name_of_hex():
    # #DC143D is nearest to CSS crimson
    m = detect_color_family("#DC143D", FAMILIES)
    assert (m.family, m.method) == ("red", "exact")
    assert m.variant.name == "Crimson"


def test_name_token_match():
    m = detect_color_family("#0000FE", FAMILIES)
    assert (m.family, m.method, m.score) == ("blue", "name", None)
    assert m.variant.name == "Sky Blue"


def test_fuzzy_match_against_representative():
    m = detect_color_family("#F00000", UNNAMED)
    assert m.family == "red"
    assert m.method == "fuzzy"
    assert 0 < m.score <= 20
    assert m.variant.name == "אדום"


def test_fuzzy_respects_threshold():
    assert detect_color_family("#F00000", UNNAMED, distance_threshold=1).method == "none"


def test_far_color_is_unmatched():
    m = detect_color_family("#FFFF00", UNNAMED)
    assert not m.matched
    assert (m.family, m.variant, m.method) == (None, None, "none")


@pytest.mark.parametrize("value", ["", "   ", None])
def test_empty_input_is_unmatched(value):
    assert detect_color_family(value, FAMILIES).method == "none"


def test_no_families_is_unmatched():
    assert detect_color_family("#FF0000", []).method == "none"


def test_unknown_name_does_not_fuzzy_match():
    assert detect_color_family("sunset", UNNAMED).method == "none"


class _BrokenLexicon:
    def english_name(self, value):
        raise RuntimeError("lexicon offline")


def test_lexicon_failure_still_allows_fuzzy():
    m = detect_color_family("#F00000", UNNAMED, lexicon=_BrokenLexicon())
    assert m.method == "fuzzy"


def test_invalid_hex_rejected_at_construction():
    with pytest.raises(ValidationError):
        ColorVariant(name="Bad", hex="#GG0000")
    assert ColorVariant(name="Ok", hex="abc").hex == "#abc"


def test_auto_assign_fills_family():
    sku = SkuRecord(sku="A", color="Navy")
    out = auto_assign_color_family(sku, FAMILIES)
    assert out.color_family == "blue"
    assert out.color_family_source == "auto"
    assert sku.color_family is None


def test_auto_assign_keeps_manual_choice():
    sku = SkuRecord(sku="A", color_hex="#FF0000", color_family="blue", color_family_source="manual")
    assert auto_assign_color_family(sku, FAMILIES) is sku


def test_auto_assign_without_match_leaves_sku():
    sku = SkuRecord(sku="A", color="sunset")
    assert auto_assign_color_family(sku, UNNAMED) is sku


def test_lab_distance_basics():
    assert delta_e(hex_to_lab("#123456"), hex_to_lab("#123456")) == 0
    white = hex_to_lab("#FFFFFF")
    assert white[0] == pytest.approx(100, abs=0.1)
    assert normalize_hex("#ABC") == "#aabbcc"
    assert hex_to_lab("nope") is None


def test_css_lexicon_names():
    lex = CssColorLexicon()
    assert lex.english_name("#1E90FF") == "Dodger Blue"
    assert lex.english_name("light goldenrod yellow") == "Light Goldenrod Yellow"
    assert lex.english_name("sunset") is None
    assert split_compound_name("navy") == "Navy"
    assert resolve_color_hex("Dodger Blue") == "#1E90FF"
    assert resolve_color_hex("#abc") == "#AABBCC"


def test_near_red_is_fuzzy_or_unmatched_by_threshold():
    m = detect_color_family("#FE0100", UNNAMED, distance_threshold=20)
    assert m.method == "fuzzy" and isinstance(m.score, int)
    far = [ColorFamily(family="green", variants=[ColorVariant(name="ירוק", hex="#008000")])]
    assert detect_color_family("#FE0100", far, distance_threshold=20).method == "none"


def test_hex_match_beats_earlier_family_name_match():
    # "#FF0000" is named "Red" by the lexicon, which the first family also uses
    families = [
        ColorFamily(family="warm", variants=[ColorVariant(name="Red", hex="#EE1111")]),
        ColorFamily(family="primary", variants=[ColorVariant(name="Signal", hex="#FF0000")]),
    ]
    m = detect_color_family("#ff0000", families)
    assert (m.family, m.method) == ("primary", "exact")
    assert m.variant.name == "Signal"
