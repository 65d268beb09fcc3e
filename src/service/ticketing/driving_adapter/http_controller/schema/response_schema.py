"""
Response envelope shared by every endpoint except the payment webhook

    {"status": "Success" | "Error", "message": "...", "data": ...}
"""

from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


T = TypeVar('T')


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    status: Literal['Success', 'Error']
    message: str
    data: Optional[T] = None


class DeletedCountResponse(CamelModel):
    deleted: int
