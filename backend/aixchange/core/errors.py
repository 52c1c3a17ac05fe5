"""Error Hierarchy — typed, categorized exceptions for all AIXchange failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope {error, message, code, ...}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with AIXchangeError base: one FastAPI handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    entity_id: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class AIXchangeError(Exception):
    """Base exception for all AIXchange errors."""

    title = "Request failed"

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def extra_fields(self) -> dict:
        """Subclass hook for additional top-level response fields."""
        return {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "error": self.title,
            "message": self.message,
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        body.update(self.extra_fields())
        return body


# ─── Domain Errors (400-level) ──────────────────────────────────

class PayloadValidationError(AIXchangeError):
    """Request payload failed schema validation outside FastAPI's body parsing."""
    title = "Validation error"

    def __init__(self, details: list[dict], context: ErrorContext | None = None):
        super().__init__(
            "Invalid request data", "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.details = details

    def extra_fields(self) -> dict:
        return {"details": self.details}


class BusinessRuleError(AIXchangeError):
    """Request is well-formed but violates a marketplace rule."""
    title = "Bad request"

    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class AuthenticationRequiredError(AIXchangeError):
    """No valid session accompanies the request."""
    title = "Unauthorized"

    def __init__(
        self, message: str = "Authentication required", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(AIXchangeError):
    """Authenticated user lacks the role the operation needs."""
    title = "Forbidden"

    def __init__(
        self, message: str = "Admin access required", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(AIXchangeError):
    """Requested resource does not exist."""
    title = "Not found"

    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ImportRolledBackError(AIXchangeError):
    """Transaction-mode import aborted; nothing from the batch was persisted."""
    title = "Import rolled back"

    def __init__(
        self, noun: str, failures: list[dict], context: ErrorContext | None = None,
    ):
        super().__init__(
            f"No {noun} imported: {len(failures)} record(s) failed",
            "IMPORT_ROLLED_BACK", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.failures = failures

    def extra_fields(self) -> dict:
        return {"success": False, "imported": 0, "errors": self.failures}


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(AIXchangeError):
    """Database operation failed."""
    title = "Database error"

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ImageGenerationError(AIXchangeError):
    """Image API call failed after retries."""
    title = "Failed to generate image"

    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Image API error ({api_error_type}): {message}",
            "IMAGE_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type
