"""Response Mapper - converts dispatcher outcomes and failures into HTTP responses.

Invariants:
    - Found -> 200 with body; an empty collection -> 404 but still body []
    - Created -> 201 with body
    - NotFound -> 404 with an empty body (distinct from the empty collection)
    - Deleted -> 200 with an empty body, whatever matched
    - MalformedQuery -> 400 envelope naming the key, value and diagnostic
    - Failures -> status inferred from the error category; unknown failures -> 500,
      never leaking internal details

Design Decisions:
    - jsonable_encoder before JSONResponse: serialized entities carry datetimes and UUIDs
    - error_response shared with the global exception handlers (ADR: one error shape)
"""

from fastapi import Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from autorest.core.domain_types import (
    Created, Deleted, Found, NotFound, OperationOutcome,
)
from autorest.core.errors import AutorestError, ErrorSeverity, MalformedQueryError
from autorest.core.query_translator import MalformedQuery


def to_response(outcome: OperationOutcome) -> Response:
    """Map a dispatcher outcome to its HTTP response."""
    if isinstance(outcome, Created):
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=jsonable_encoder(outcome.value),
        )
    if isinstance(outcome, Found):
        code = status.HTTP_200_OK
        if isinstance(outcome.value, list) and not outcome.value:
            code = status.HTTP_404_NOT_FOUND
        return JSONResponse(
            status_code=code, content=jsonable_encoder(outcome.value),
        )
    if isinstance(outcome, NotFound):
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    if isinstance(outcome, Deleted):
        return Response(status_code=status.HTTP_200_OK)
    raise TypeError(f"Unknown operation outcome: {outcome!r}")


def malformed_query_response(failure: MalformedQuery) -> JSONResponse:
    """400 for a query string that failed to parse."""
    return error_response(
        MalformedQueryError(failure.key, failure.value, failure.reason),
    )


def error_response(exc: Exception) -> JSONResponse:
    """Generic responder: status from the failure's declared category."""
    if isinstance(exc, AutorestError):
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )
