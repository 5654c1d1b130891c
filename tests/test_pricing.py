import asyncio

import pytest
from pydantic import ValidationError

from variant_engine.models.sku_models import SkuRecord
from variant_engine.models.variant_models import (
    AxisValue,
    CellOverride,
    Combination,
    PricingConfig,
    VariantGenerationRequest,
)
from variant_engine.variants.pricing import (
    apply_bulk_update,
    compose_sku_code,
    match_existing_skus,
    resolve_price,
    resolve_skus,
    resolve_skus_with_reservation,
)

COLORS = [
    AxisValue(value="Red", display_name="Red", hex="#FF0000", family="red"),
    AxisValue(value="Blue", display_name="Blue", hex="#0000FF", family="blue"),
]


def _request(**kw):
    base = dict(
        combinations=[
            Combination(primary="Red", secondary="S"),
            Combination(primary="Red", secondary="M"),
            Combination(primary="Blue", secondary="S"),
            Combination(primary="Blue", secondary="M"),
        ],
        product_name="Tee",
        primary_values=COLORS,
        secondary_values=["S", "M"],
        template="{primary}-{secondary}",
    )
    base.update(kw)
    return VariantGenerationRequest(**base)


def test_custom_price_with_sequence_suffixes():
    req = _request(pricing=PricingConfig(mode="custom", custom_price=150))
    skus = resolve_skus(req, [1, 2, 3, 4])

    assert [s.sku for s in skus] == ["RED-S-001", "RED-M-002", "BLUE-S-003", "BLUE-M-004"]
    assert all(s.price == 150 for s in skus)
    first = skus[0]
    assert first.name == "Red - S"
    assert first.attributes == {"size": "S"}
    assert (first.color, first.color_hex, first.color_family) == ("Red", "#FF0000", "red")
    assert (first.variant_name, first.sub_variant_name) == ("Red", "S")
    assert first.color_family_source == "auto"
    assert first.stock_quantity == 0 and first.is_active is True


def test_inherit_pricing_leaves_price_unset():
    skus = resolve_skus(_request())
    assert all(s.price is None for s in skus)
    assert [s.sku for s in skus][:2] == ["RED-S", "RED-M"]


def test_short_sequence_list_drops_all_suffixes():
    skus = resolve_skus(_request(), [9])
    assert [s.sku for s in skus] == ["RED-S", "RED-M", "BLUE-S", "BLUE-M"]


def test_override_none_price_beats_custom_mode():
    req = _request(
        pricing=PricingConfig(mode="custom", custom_price=150),
        overrides={"Red-S": CellOverride(price=None), "Blue-M": CellOverride(stock=5, status=False)},
    )
    skus = {s.sku: s for s in resolve_skus(req)}
    assert skus["RED-S"].price is None
    assert skus["RED-M"].price == 150
    assert skus["BLUE-M"].price == 150
    assert skus["BLUE-M"].stock_quantity == 5
    assert skus["BLUE-M"].is_active is False


def test_surcharge_amount_is_the_price():
    pricing = PricingConfig(mode="surcharge", surcharges={"M": 120, "S": 0})
    assert resolve_price(pricing, Combination(primary="Red", secondary="M")) == 120
    assert resolve_price(pricing, Combination(primary="Red", secondary="S")) is None
    assert resolve_price(pricing, Combination(primary="Red", secondary="XL")) is None


def test_surcharge_on_primary_axis():
    pricing = PricingConfig(mode="surcharge", surcharges={"Blue": 80}, surcharge_axis="primary")
    assert resolve_price(pricing, Combination(primary="Blue", secondary="S")) == 80
    assert resolve_price(pricing, Combination(primary="Red", secondary="S")) is None


def test_custom_mode_requires_price():
    with pytest.raises(ValidationError):
        PricingConfig(mode="custom")


def test_one_dimensional_strips_secondary_placeholder():
    req = VariantGenerationRequest(
        combinations=[Combination(primary="Red")],
        product_name="T Shirt",
        primary_values=COLORS,
        template="{product}-{primary}-{secondary}",
    )
    (sku,) = resolve_skus(req)
    assert sku.sku == "T-SHIRT-RED"
    assert sku.name == "Red"
    assert sku.attributes == {"color": "Red"}
    assert sku.sub_variant_name == ""


def test_empty_code_falls_back_to_index():
    assert compose_sku_code("{primary}", "", "!!!", "", 0) == "SKU-1"
    assert compose_sku_code("{color}/{size}", "", "navy", "xl", 3) == "NAVYXL"


def test_codes_never_collide_with_existing_or_each_other():
    req = _request(
        combinations=[Combination(primary="Red", secondary="S"), Combination(primary="Red", secondary="S ")],
        existing_skus=["RED-S", {"sku": "RED-S-2"}],
    )
    assert [s.sku for s in resolve_skus(req)] == ["RED-S-3", "RED-S-4"]


def test_missing_color_metadata_uses_fallbacks():
    req = _request(combinations=[Combination(primary="Teal", secondary="S")])
    (sku,) = resolve_skus(req)
    assert sku.color == "Teal"
    assert sku.color_hex == "#cccccc"
    assert sku.color_family == "other"


def test_color_on_secondary_axis_is_mirrored_into_attributes():
    req = VariantGenerationRequest(
        combinations=[Combination(primary="Cotton", secondary="Black")],
        product_name="Tee",
        primary_values=["Cotton"],
        secondary_values=[AxisValue(value="Black", hex="#000000", family="black")],
        primary_label="Material",
        secondary_label="Shade",
        variant_type="custom",
        template="{primary}-{secondary}",
    )
    (sku,) = resolve_skus(req)
    assert sku.sku == "COTTON-BLACK"
    assert (sku.color, sku.color_hex, sku.color_family) == ("Black", "#000000", "black")
    assert sku.attributes == {"shade": "Black", "color": "Black", "colorHex": "#000000", "colorFamily": "black"}


def test_custom_variant_without_color_has_no_color_fields():
    req = VariantGenerationRequest(
        combinations=[Combination(primary="Cotton", secondary="S")],
        primary_values=["Cotton"],
        secondary_values=["S"],
        variant_type="custom",
        template="{primary}-{secondary}",
    )
    (sku,) = resolve_skus(req)
    assert sku.color is None and sku.color_hex is None and sku.color_family is None


class _Reserver:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def reserve(self, count):
        self.calls.append(count)
        if self.error:
            raise self.error
        return self.result


def test_reservation_appends_numbers():
    reserver = _Reserver(result=[41, 42, 43, 44])
    skus = asyncio.run(resolve_skus_with_reservation(_request(), reserver))
    assert reserver.calls == [4]
    assert skus[-1].sku == "BLUE-M-044"


def test_reservation_failure_degrades_to_plain_codes():
    reserver = _Reserver(error=RuntimeError("counter down"))
    skus = asyncio.run(resolve_skus_with_reservation(_request(), reserver))
    assert [s.sku for s in skus] == ["RED-S", "RED-M", "BLUE-S", "BLUE-M"]


def test_reservation_is_optional():
    skus = asyncio.run(resolve_skus_with_reservation(_request(), None))
    assert len(skus) == 4


def test_bulk_update_touches_only_matching_skus():
    existing = [
        SkuRecord(sku="A", color="Red", attributes={"size": "S"}, price=10, stock_quantity=3),
        SkuRecord(sku="B", color="Green", attributes={"size": "S"}, price=10),
        SkuRecord(sku="C", color_hex="#0000FF", attributes={"size": "M"}, price=10),
    ]
    req = _request(
        combinations=[Combination(primary="Red", secondary="S"), Combination(primary="Blue", secondary="M")],
        pricing=PricingConfig(mode="custom", custom_price=99),
        initial_stock=7,
    )
    assert [s.sku for s in match_existing_skus(existing, req)] == ["A", "C"]

    out = apply_bulk_update(
        existing, req, update_stock=True, overrides_by_code={"C": CellOverride(price=None)}
    )
    assert [s.sku for s in out] == ["A", "B", "C"]
    assert (out[0].price, out[0].stock_quantity) == (99, 7)
    assert out[1] is existing[1]
    assert out[2].price is None
