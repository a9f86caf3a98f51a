"""Common schema utilities."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class CamelSchema(BaseSchema):
    """Schema serialized with camelCase keys."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ListResponse(BaseModel, Generic[T]):
    """Success envelope around a list of records."""

    success: bool = True
    count: int
    data: list[T]


class DataResponse(BaseModel, Generic[T]):
    """Success envelope around a single record."""

    success: bool = True
    data: T
    message: str | None = None


class MessageResponse(BaseModel):
    """Informational response, e.g. when a period has no data."""

    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""

    success: bool = False
    error: str


class SuccessResponse(BaseModel):
    """Simple success response."""

    success: bool = True
    message: str
