"""Domain Types / Errors tests - write classification and category -> status mapping.

Tests:
    - classify_write: empty predicate -> Create, otherwise TargetedUpdate
    - Error categories map to the nearest HTTP status, 500 when unrecognized
    - to_response envelope carries code, category and details
"""

from autorest.core.domain_types import Create, TargetedUpdate, classify_write
from autorest.core.errors import (
    ConfigurationError, ConstraintViolationError, DatabaseError, ErrorCategory,
    MalformedQueryError, ModelValidationError, status_for_category,
)


def test_empty_predicate_classifies_as_create():
    assert classify_write({}, {"name": "a"}) == Create({"name": "a"})


def test_non_empty_predicate_classifies_as_targeted_update():
    intent = classify_write({"id": "3"}, {"name": "a"}, {"limit": 1})
    assert intent == TargetedUpdate({"id": "3"}, {"name": "a"}, {"limit": 1})
    assert isinstance(intent, TargetedUpdate)


def test_category_status_table():
    assert status_for_category(ErrorCategory.VALIDATION) == 400
    assert status_for_category(ErrorCategory.RESOURCE_NOT_FOUND) == 404
    assert status_for_category(ErrorCategory.CONFLICT) == 409
    assert status_for_category(ErrorCategory.DATABASE) == 503
    assert status_for_category(ErrorCategory.INTERNAL) == 500
    assert status_for_category(None) == 500


def test_errors_derive_status_from_category():
    assert ModelValidationError("bad", "Author", "age").http_status == 400
    assert ConstraintViolationError("Author", "persist").http_status == 400
    assert DatabaseError("boom", "find").http_status == 503
    assert ConfigurationError("unknown").http_status == 500


def test_malformed_query_error_envelope_names_key_and_value():
    body = MalformedQueryError("foo", "not-json", "invalid JSON").to_response()
    error = body["error"]
    assert error["code"] == "MALFORMED_QUERY"
    assert error["category"] == "validation"
    assert "foo" in error["message"]
    assert "not-json" in error["message"]
    assert error["details"] == {
        "key": "foo", "value": "not-json", "reason": "invalid JSON",
    }
