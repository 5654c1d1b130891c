from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import field_validator

from variant_engine.colors.color_math import is_hex_color
from variant_engine.models.base import EngineModel

MatchMethod = Literal["exact", "name", "fuzzy", "none"]


class ColorVariant(EngineModel):
    name: str
    hex: str

    @field_validator("hex")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        if not is_hex_color(v):
            raise ValueError(f"'{v}' is not a 3 or 6 digit hex color")
        v = v.strip()
        return v if v.startswith("#") else f"#{v}"


class ColorFamily(EngineModel):
    """A curated bucket of named shades, e.g. family 'blue' with Navy, Sky, ..."""
    family: str
    display_name: str = ""
    variants: List[ColorVariant] = []

    @property
    def representative(self) -> Optional[ColorVariant]:
        # the first variant stands for the whole family in distance matching
        return self.variants[0] if self.variants else None


class ColorMatch(EngineModel):
    family: Optional[str] = None
    variant: Optional[ColorVariant] = None
    method: MatchMethod = "none"
    score: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.family is not None
