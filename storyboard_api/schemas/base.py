from decimal import Decimal
from typing import Annotated, ClassVar, Tuple

from pydantic import BaseModel, ConfigDict, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel

# Amounts are Decimal in Python and plain JSON numbers on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

TIME_REGEX = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
        validate_default=True,
    )


class Pagination(CamelModel):
    current: int
    pages: int
    total: int


class PartialUpdate(CamelModel):
    """
    Body of a partial update. Every field is optional, but the ones named in
    ``non_nullable`` back NOT NULL columns: they may be omitted, not sent as null.
    """
    non_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulls = [
            name for name in self.non_nullable
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self
