"""Shared schema bases. Everything goes over the wire in camelCase."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(CamelModel, Generic[T]):
    """``{success, data}`` wrapper used by the enterprise/document/indicator routes."""

    success: bool = True
    data: T


class UserSummary(CamelModel):
    id: str
    name: str
    email: str


class MessageResponse(CamelModel):
    """``{success, message}`` returned by deletions."""

    success: bool = True
    message: str
