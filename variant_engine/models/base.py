# variant_engine/models/base.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EngineModel(BaseModel):
    """
    Base for every engine record: immutable, snake_case in Python,
    camelCase on the wire (either spelling accepted on input).
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
