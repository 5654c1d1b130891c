from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import ConfigDict, Field, field_validator

from variant_engine.colors.color_defaults import (
    generate_default_color_hex,
    generate_default_color_name,
)
from variant_engine.models.base import EngineModel

ColorFamilySource = Literal["auto", "manual", "import"]


def clean_attributes(v: Any) -> Dict[str, str]:
    """Coerce an attributes bag into {str: str}: keys stripped, empty keys and None values dropped."""
    if v is None:
        return {}
    if not isinstance(v, dict):
        raise ValueError("attributes must be a mapping")
    out: Dict[str, str] = {}
    for key, val in v.items():
        k = str(key).strip()
        if not k or val is None:
            continue
        out[k] = str(val)
    return out


class Image(EngineModel):
    model_config = ConfigDict(extra="allow")

    url: str
    alt: Optional[str] = None
    public_id: Optional[str] = None


class SkuRecord(EngineModel):
    """
    One sellable variant. price=None means "use the product base price";
    it is a value in its own right and must never be collapsed into 0.
    """
    sku: str
    name: str = ""
    price: Optional[float] = None
    stock_quantity: int = 0
    is_active: bool = True
    images: List[Image] = []
    attributes: Dict[str, str] = {}
    color: Optional[str] = None
    color_hex: Optional[str] = None
    color_family: Optional[str] = None
    variant_name: Optional[str] = None
    sub_variant_name: Optional[str] = None
    color_family_source: Optional[ColorFamilySource] = None

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize_attributes(cls, v: Any) -> Dict[str, str]:
        return clean_attributes(v)


class ColorSizeEntry(EngineModel):
    """
    A single row (secondary-axis value) inside a color group. The row keeps
    its own SKU's color fields and images; the group's copies are for display.
    """
    size: str = ""
    sku: str
    name: str = ""
    price: Optional[float] = None
    stock_quantity: int = 0
    is_active: bool = True
    images: List[Image] = []
    attributes: Dict[str, str] = {}
    color: Optional[str] = None
    color_hex: Optional[str] = None
    color_family: Optional[str] = None
    variant_name: Optional[str] = None
    sub_variant_name: Optional[str] = None
    color_family_source: Optional[ColorFamilySource] = None

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize_attributes(cls, v: Any) -> Dict[str, str]:
        return clean_attributes(v)


class ColorGroup(EngineModel):
    """
    Display-only grouping of SKUs that share one color. The flat SKU list
    stays the source of truth: flatten writes back each row's own values,
    while color_name / color_hex / images here describe the group on screen
    and seed rows added by the editors.
    """
    color_key: str
    color_name: Optional[str] = None
    color_hex: Optional[str] = None
    color_family: Optional[str] = None
    detected_family: Optional[str] = None
    images: List[Image] = []
    sizes: List[ColorSizeEntry] = Field(default_factory=list)

    @property
    def total_stock(self) -> int:
        return sum(s.stock_quantity or 0 for s in self.sizes)

    @property
    def display_name(self) -> str:
        return generate_default_color_name(self.color_family or self.detected_family, self.color_name)

    @property
    def display_hex(self) -> str:
        if self.color_hex:
            return self.color_hex
        return generate_default_color_hex(self.color_name, self.color_family or self.detected_family)
