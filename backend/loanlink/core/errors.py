"""Error Hierarchy — typed, categorized exceptions for all LoanLink failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST error envelope
    - No internal details leaked in user-facing messages
    - Zero-effect updates/deletes and duplicate user creation are NOT errors:
      they are reported through counts and messages in a success body

Design Decisions:
    - Single hierarchy with LoanLinkError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
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
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_email: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class LoanLinkError(Exception):
    """Base exception for all LoanLink errors."""

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

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "resource_type": self.context.resource_type,
                    "resource_id": self.context.resource_id,
                },
            }
        }


# ─── Authentication / Authorization (401, 403) ──────────────────

class SessionTokenError(LoanLinkError):
    """Token signature mismatch, malformed token or expiry — deliberately indistinguishable."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Session token is invalid or expired",
            "SESSION_INVALID_OR_EXPIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class UnauthenticatedError(LoanLinkError):
    """Protected operation called without a valid session."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Unauthorized access",
            "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AccessDeniedError(LoanLinkError):
    """Authenticated caller lacks the capability an operation requires."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Forbidden: caller may not perform '{operation}'",
            "ACCESS_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.operation = operation


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(LoanLinkError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_type = resource_type
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class InvalidTransitionError(LoanLinkError):
    """Application status change not permitted by the transition table."""
    def __init__(
        self, current: str, target: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot move application from '{current}' to '{target}'",
            "INVALID_STATUS_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current = current
        self.target = target


class FeeAlreadyPaidError(LoanLinkError):
    """Checkout requested for an application whose fee is already confirmed."""
    def __init__(self, application_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.resource_type = "Application"
        ctx.resource_id = application_id
        super().__init__(
            f"Application fee for '{application_id}' is already paid",
            "FEE_ALREADY_PAID", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


class PaymentVerificationError(LoanLinkError):
    """Payment confirmation could not be verified against the provider."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Payment could not be verified: {reason}",
            "PAYMENT_NOT_VERIFIED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.reason = reason


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(LoanLinkError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class PaymentProviderError(LoanLinkError):
    """Payment provider call failed (transport or non-2xx response)."""
    def __init__(
        self, message: str, status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Payment provider error: {message}",
            "PAYMENT_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.status_code = status_code
