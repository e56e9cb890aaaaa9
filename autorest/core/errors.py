"""Error Hierarchy - typed, categorized exceptions for every autorest failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - http_status is derived from the category, never chosen at the raise site
    - to_response() produces the REST envelope shared by all error responses
    - ConfigurationError is raised at startup only, never while serving a request

Design Decisions:
    - Single hierarchy with AutorestError base: one FastAPI handler catches all (ADR: uniform error shape)
    - Category -> status table lives here so the generic responder and the
      exception agree on the mapping
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.RESOURCE_NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.DATABASE: 503,
}


def status_for_category(category: ErrorCategory | None) -> int:
    """Nearest HTTP status for a failure category (500 when unrecognized)."""
    return CATEGORY_STATUS.get(category, 500)


class AutorestError(Exception):
    """Base exception for all autorest errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.details = details
        self.timestamp = datetime.now(timezone.utc)

    @property
    def http_status(self) -> int:
        return status_for_category(self.category)

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        error = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.details:
            error["details"] = self.details
        return {"error": error}


# ─── Startup Errors ─────────────────────────────────────────────

class ConfigurationError(AutorestError):
    """Exposed model configuration is invalid. Fatal: the app refuses to start."""
    def __init__(self, message: str):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL,
        )


# ─── Request Errors (400-level) ─────────────────────────────────

class MalformedQueryError(AutorestError):
    """A query-string value could not be decoded."""
    def __init__(self, key: str, value: str, reason: str):
        super().__init__(
            f'Query parameter "{key}" has invalid value {value!r}: {reason}',
            "MALFORMED_QUERY", ErrorCategory.VALIDATION,
            details={"key": key, "value": value, "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class MalformedBodyError(AutorestError):
    """Request body is not valid JSON."""
    def __init__(self, reason: str):
        super().__init__(
            f"Request body is not valid JSON: {reason}",
            "MALFORMED_BODY", ErrorCategory.VALIDATION,
            details={"reason": reason},
        )


class ModelValidationError(AutorestError):
    """The model layer rejected a predicate, option or payload."""
    def __init__(self, message: str, model: str, field: str | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            details={"model": model, "field": field},
        )
        self.model = model
        self.field = field


class ConstraintViolationError(AutorestError):
    """Persisting an entity violated a database constraint."""
    def __init__(self, model: str, operation: str):
        super().__init__(
            f"{model} {operation} violates a database constraint",
            "CONSTRAINT_VIOLATION", ErrorCategory.VALIDATION,
            details={"model": model, "operation": operation},
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(AutorestError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL,
        )
        self.operation = operation
