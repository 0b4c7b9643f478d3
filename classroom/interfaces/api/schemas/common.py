"""Response envelope shared by every endpoint."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """``{success, data, message}`` wrapper returned to the client."""

    success: bool = True
    data: DataT | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class CountRead(BaseModel):
    count: int


__all__ = ["CountRead", "Envelope", "ErrorResponse"]
