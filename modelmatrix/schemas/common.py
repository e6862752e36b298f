# modelmatrix/schemas/common.py
import uuid
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """
    Success envelope shared by every JSON route:

        {"success": true, "result": ...}
    """

    success: bool = True
    result: T


class ErrorEnvelope(BaseModel):
    """
    Error envelope produced by the exception handlers:

        {"error": true, "message": "..."}
    """

    error: bool = True
    message: str


class DeleteResult(BaseModel):
    id: uuid.UUID
    deleted_count: int


def ok(result) -> Envelope:
    """Wrap a payload in the success envelope."""
    return Envelope(result=result)
