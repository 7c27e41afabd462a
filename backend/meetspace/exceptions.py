"""
MeetSpace Backend: Custom Exception Hierarchy
===============================================

What:  Application exceptions, one per error class of the API, plus the
       closed classification of provider failures.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) render them as
       JSON with the status code stored on the class.
Who:   Raised by services, the store and the access gate; caught by handlers.

Exception Hierarchy:
    MeetSpaceError (base)
    ├── InvalidArgumentError  → 400 Bad Request
    ├── UnauthenticatedError  → 401 Unauthorized
    ├── ForbiddenError        → 403 Forbidden
    ├── NotFoundError         → 404 Not Found
    ├── ConflictError         → 409 Conflict
    ├── InternalError         → 500 Internal Server Error
    └── UnavailableError      → 503 Service Unavailable

Provider failures:
    Adapters (Firebase Auth, Firestore, Identity Toolkit REST) never leak SDK
    exceptions. They raise ProviderError carrying a ProviderErrorKind, and
    translate_provider_error() turns that into one of the classes above.
    PROVIDER_ERROR_MAP must cover every kind.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type


class MeetSpaceError(Exception):
    """
    Base exception for all MeetSpace application errors.

    Attributes:
        message:     User-facing error description (safe to return in API response)
        context:     Additional debug info (logged, returned only for 400s)
        status_code: HTTP status the global handler responds with
        error_code:  Machine-readable code placed in the response body
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidArgumentError(MeetSpaceError):
    """
    Raised when client input is missing or malformed.

    Detected before any provider call is made.
    """

    status_code = 400
    error_code = "invalid_argument"

    def __init__(
        self,
        message: str = "Invalid request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthenticatedError(MeetSpaceError):
    """
    Raised for a missing, invalid or expired credential, and for bad login
    credentials.

    `reason` is "missing" or "invalid" for bearer credentials, "credentials"
    for a failed password grant.
    """

    status_code = 401
    error_code = "unauthenticated"

    MISSING = "missing"
    INVALID = "invalid"
    CREDENTIALS = "credentials"

    def __init__(
        self,
        message: str = "Authentication required",
        reason: str = "invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.reason = reason


class ForbiddenError(MeetSpaceError):
    """Raised when an authenticated caller acts on a resource it does not own."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have access to this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MeetSpaceError):
    """
    Raised when a requested document does not exist.

    The store returns None for a missing document on reads; services turn
    that into NotFoundError where the operation needs the document.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(MeetSpaceError):
    """Raised when a write collides with existing state (duplicate email, existing id)."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(MeetSpaceError):
    """
    Raised for unexpected provider or store failures.

    The provider's own message is kept in `message` so failures stay
    diagnosable from the response.
    """

    status_code = 500
    error_code = "internal_error"

    def __init__(
        self,
        message: str = "An internal error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnavailableError(MeetSpaceError):
    """Raised when a provider call timed out, was cancelled or could not connect."""

    status_code = 503
    error_code = "service_unavailable"

    def __init__(
        self,
        message: str = "An upstream service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Provider Error Classification
# ══════════════════════════════════════════════════════════════════════════

class ProviderErrorKind(str, Enum):
    """Closed set of failure kinds reported by identity and document providers."""

    INVALID_TOKEN = "invalid_token"
    INVALID_CREDENTIALS = "invalid_credentials"
    SIGN_IN_REJECTED = "sign_in_rejected"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    INVALID_EMAIL = "invalid_email"
    INVALID_ARGUMENT = "invalid_argument"
    ACCOUNT_NOT_FOUND = "account_not_found"
    DOCUMENT_NOT_FOUND = "document_not_found"
    DOCUMENT_EXISTS = "document_exists"
    MISCONFIGURED = "misconfigured"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class ProviderError(Exception):
    """
    A classified failure from an external provider.

    Attributes:
        kind:    ProviderErrorKind the adapter classified the failure as
        message: The provider's own message
        code:    The raw provider code, kept for logging only
    """

    def __init__(self, kind: ProviderErrorKind, message: str = "", code: Optional[str] = None):
        self.kind = kind
        self.message = message or kind.value
        self.code = code
        super().__init__(self.message)


# Every ProviderErrorKind maps to exactly one application error class.
PROVIDER_ERROR_MAP: Dict[ProviderErrorKind, Type[MeetSpaceError]] = {
    ProviderErrorKind.INVALID_TOKEN: UnauthenticatedError,
    ProviderErrorKind.INVALID_CREDENTIALS: UnauthenticatedError,
    ProviderErrorKind.SIGN_IN_REJECTED: UnauthenticatedError,
    ProviderErrorKind.EMAIL_ALREADY_EXISTS: ConflictError,
    ProviderErrorKind.INVALID_EMAIL: InvalidArgumentError,
    ProviderErrorKind.INVALID_ARGUMENT: InvalidArgumentError,
    ProviderErrorKind.ACCOUNT_NOT_FOUND: NotFoundError,
    ProviderErrorKind.DOCUMENT_NOT_FOUND: NotFoundError,
    ProviderErrorKind.DOCUMENT_EXISTS: ConflictError,
    ProviderErrorKind.MISCONFIGURED: InternalError,
    ProviderErrorKind.UNAVAILABLE: UnavailableError,
    ProviderErrorKind.UNKNOWN: InternalError,
}


def translate_provider_error(
    error: ProviderError,
    resource: str = "resource",
    resource_id: Optional[str] = None,
    overrides: Optional[Mapping[ProviderErrorKind, MeetSpaceError]] = None,
    default: Optional[Type[MeetSpaceError]] = None,
) -> MeetSpaceError:
    """
    Convert a ProviderError into the application error to raise.

    Args:
        error:       The classified provider failure
        resource:    Resource name used for NotFoundError messages
        resource_id: Identifier used for NotFoundError context
        overrides:   Ready-made errors for specific kinds (operation-specific
                     messages such as "Invalid credentials")
        default:     When given, every kind not in `overrides` becomes this
                     class instead of the PROVIDER_ERROR_MAP entry

    Returns:
        A MeetSpaceError subclass instance with `provider_kind` in context.
    """
    if overrides and error.kind in overrides:
        return overrides[error.kind]

    context: Dict[str, Any] = {"provider_kind": error.kind.value}
    if error.code:
        context["provider_code"] = error.code

    error_class = default or PROVIDER_ERROR_MAP[error.kind]
    if error_class is NotFoundError:
        return NotFoundError(resource=resource, resource_id=resource_id, context=context)
    if error_class is UnauthenticatedError:
        return UnauthenticatedError(
            message=error.message, reason=UnauthenticatedError.INVALID, context=context
        )
    return error_class(message=error.message, context=context)
