"""Error Handlers - global exception handlers for the generated API.

Invariants:
    - AutorestError -> structured JSON with status inferred from its category
    - RequestValidationError -> field-level error details, 400
    - Exception (catch-all) -> never leaks internal details, 500

Design Decisions:
    - Three-layer handler: domain (AutorestError), validation (Pydantic), catch-all (Exception)
    - Rendering delegated to response_mapper.error_response so in-route and
      global failures share one envelope
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from autorest.api.response_mapper import error_response
from autorest.core.errors import AutorestError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_autorest_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_autorest_error_handler(app: FastAPI) -> None:

    @app.exception_handler(AutorestError)
    async def autorest_error_handler(request: Request, exc: AutorestError):
        """Handle model-layer and request errors."""
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"AutorestError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return error_response(exc)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return error_response(exc)


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
