"""
Handler outcomes and their translation to HTTP responses.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class OutcomeKind(str, Enum):
    """Internal result classification produced by the book handlers."""
    OK = "ok"
    CREATED = "created"
    NO_CONTENT = "no_content"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE_FAILURE = "storage_failure"


class Outcome(BaseModel):
    """Result of a handler call, before it is rendered as a response."""
    kind: OutcomeKind = Field(..., description="Outcome classification")
    value: Any = Field(None, description="Mapped view(s) for successful reads and creates")
    message: Optional[str] = Field(None, description="Generic error message for server failures")

    @classmethod
    def ok(cls, value: Any) -> "Outcome":
        return cls(kind=OutcomeKind.OK, value=value)

    @classmethod
    def created(cls, value: Any) -> "Outcome":
        return cls(kind=OutcomeKind.CREATED, value=value)

    @classmethod
    def no_content(cls) -> "Outcome":
        return cls(kind=OutcomeKind.NO_CONTENT)

    @classmethod
    def invalid(cls) -> "Outcome":
        return cls(kind=OutcomeKind.INVALID)

    @classmethod
    def not_found(cls) -> "Outcome":
        return cls(kind=OutcomeKind.NOT_FOUND)

    @classmethod
    def conflict(cls, message: str) -> "Outcome":
        return cls(kind=OutcomeKind.CONFLICT, message=message)

    @classmethod
    def storage_failure(cls, message: str) -> "Outcome":
        return cls(kind=OutcomeKind.STORAGE_FAILURE, message=message)


STATUS_CODES: Dict[OutcomeKind, int] = {
    OutcomeKind.OK: status.HTTP_200_OK,
    OutcomeKind.CREATED: status.HTTP_201_CREATED,
    OutcomeKind.NO_CONTENT: status.HTTP_204_NO_CONTENT,
    OutcomeKind.INVALID: status.HTTP_400_BAD_REQUEST,
    OutcomeKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # An unresolved write conflict is reported as a server error, not 409.
    OutcomeKind.CONFLICT: status.HTTP_500_INTERNAL_SERVER_ERROR,
    OutcomeKind.STORAGE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_response(outcome: Outcome, location: Optional[str] = None) -> Response:
    """
    Render an outcome as an HTTP response.

    Args:
        outcome: Handler outcome
        location: Location header value for created resources

    Returns:
        Response with the mapped status code and body
    """
    status_code = STATUS_CODES[outcome.kind]

    if outcome.kind in (OutcomeKind.OK, OutcomeKind.CREATED):
        headers = {"Location": location} if location else None
        return JSONResponse(
            status_code=status_code,
            content=jsonable_encoder(outcome.value, by_alias=True),
            headers=headers,
        )

    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return JSONResponse(status_code=status_code, content=outcome.message)

    return Response(status_code=status_code)
