"""Error Hierarchy — envelopes and HTTP status per error type."""

from aixchange.core.errors import (
    AuthenticationRequiredError, BusinessRuleError, DatabaseError, ImageGenerationError,
    ImportRolledBackError, PayloadValidationError, PermissionDeniedError,
    ResourceNotFoundError,
)


def test_business_rule_envelope():
    body = BusinessRuleError("Event is full", "EVENT_FULL").to_response()
    assert body["error"] == "Bad request"
    assert body["message"] == "Event is full"
    assert body["code"] == "EVENT_FULL"
    assert body["category"] == "business_rule"
    assert "timestamp" in body


def test_status_codes():
    assert PayloadValidationError([]).http_status == 400
    assert AuthenticationRequiredError().http_status == 401
    assert PermissionDeniedError().http_status == 403
    assert ResourceNotFoundError("Event", "x").http_status == 404
    assert DatabaseError("down", "execute").http_status == 503
    assert ImageGenerationError("boom", "timeout").http_status == 503


def test_validation_details_in_envelope():
    details = [{"field": "title", "message": "too short", "type": "string_too_short"}]
    body = PayloadValidationError(details).to_response()
    assert body["details"] == details
    assert body["code"] == "VALIDATION_ERROR"


def test_import_rolled_back_envelope():
    errors = [{"identifier": "#0", "error": "title: Field required"}]
    body = ImportRolledBackError("solutions", errors).to_response()
    assert body["success"] is False
    assert body["imported"] == 0
    assert body["errors"] == errors
    assert body["message"] == "No solutions imported: 1 record(s) failed"


def test_not_found_message():
    err = ResourceNotFoundError("Solution", "abc")
    assert err.message == "Solution 'abc' not found"


def test_image_error_keeps_retry_hint():
    err = ImageGenerationError("slow down", "rate_limit", retry_after_ms=2000)
    assert err.api_error_type == "rate_limit"
    assert err.context.retry_after_ms == 2000
