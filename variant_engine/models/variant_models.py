from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from variant_engine.config import settings
from variant_engine.models.base import EngineModel
from variant_engine.util import sku_codes

PricingMode = Literal["inherit", "custom", "surcharge"]
AxisSide = Literal["primary", "secondary"]
VariantType = Literal["color", "custom"]


class AxisValue(EngineModel):
    value: str
    display_name: str = ""
    hex: Optional[str] = None
    family: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.value


class AttributeAxis(EngineModel):
    key: str
    display_label: str = ""
    values: List[AxisValue] = []


class Combination(EngineModel):
    primary: str
    secondary: str = ""


class SelectionStats(EngineModel):
    total: int
    selected: int
    percentage: int


class CombinationSelection(EngineModel):
    """Chosen (primary, secondary) pairs over one or two axes. Empty secondary axis = 1D."""
    primary_values: List[AxisValue] = []
    secondary_values: List[AxisValue] = []
    selected: List[Combination] = []


class CellOverride(EngineModel):
    """
    Per-combination override. Only fields passed explicitly count, so
    CellOverride(price=None) forces "inherit" while CellOverride() overrides nothing.
    """
    price: Optional[float] = None
    stock: Optional[int] = None
    status: Optional[bool] = None

    def has(self, field: str) -> bool:
        return field in self.model_fields_set


class PricingConfig(EngineModel):
    mode: PricingMode = "inherit"
    custom_price: Optional[float] = None
    # axis value -> literal price for combinations carrying that value
    surcharges: Dict[str, float] = {}
    surcharge_axis: AxisSide = "secondary"

    @model_validator(mode="after")
    def check_custom_price(self) -> "PricingConfig":
        if self.mode == "custom" and self.custom_price is None:
            raise ValueError("custom pricing requires custom_price")
        return self


def _as_value_map(v: Any) -> Dict[str, Any]:
    if v is None:
        return {}
    if isinstance(v, (list, tuple)):
        out = {}
        for item in v:
            if isinstance(item, str):
                item = {"value": item}
            key = item.value if isinstance(item, AxisValue) else item.get("value")
            out[key] = item
        return out
    return v


class VariantGenerationRequest(EngineModel):
    combinations: List[Combination] = []
    product_name: str = ""
    primary_values: Dict[str, AxisValue] = {}
    secondary_values: Dict[str, AxisValue] = {}
    primary_label: str = "color"
    secondary_label: str = "size"
    variant_type: Optional[VariantType] = "color"
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    overrides: Dict[str, CellOverride] = {}
    template: str = Field(default_factory=lambda: settings.SKU_TEMPLATE)
    initial_stock: int = Field(default_factory=lambda: settings.DEFAULT_INITIAL_STOCK)
    is_active: bool = Field(default_factory=lambda: settings.DEFAULT_IS_ACTIVE)
    # codes already used by the product; generated codes never collide with these
    existing_skus: List[str] = []

    @field_validator("primary_values", "secondary_values", mode="before")
    @classmethod
    def index_axis_values(cls, v: Any) -> Dict[str, Any]:
        return _as_value_map(v)

    @field_validator("existing_skus", mode="before")
    @classmethod
    def existing_codes(cls, v: Any) -> List[str]:
        return sku_codes(v)

    @property
    def one_dimensional(self) -> bool:
        return all(c.secondary == "" for c in self.combinations)
