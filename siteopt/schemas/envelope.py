"""Success envelope shared by every endpoint. Errors are rendered in core.errors."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


def ok(data) -> dict:
    return {"success": True, "data": data}
