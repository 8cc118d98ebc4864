"""Response envelope and shared schema base."""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel, Generic[T]):
    """Standard success envelope: ``{success, data?, message?}``."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class UserResponse(CamelModel):
    """Public user information."""

    id: int
    username: str
    email: str
    created_at: datetime


