from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel


# Money goes over the wire as a two-decimal string, e.g. "2500.00"
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: f"{value:.2f}", return_type=str, when_used="json"),
]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; accepts both on input"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ErrorResponse(BaseModel):
    detail: str
    error: str
