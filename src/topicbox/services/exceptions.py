"""Service error hierarchy for entry integrity and topic administration.

Every error carries the HTTP status it maps to and a stable machine-readable code
that clients can branch on:
- ServiceError: Base for all service errors
- ValidationError / UniquenessConflict / InvalidPlatformUsername: user-facing, 400
- NotFound: referenced topic or entry absent, 404
- Unauthorized: admin operation without authorization, 401
- ExternalCheckFailure / StoreFailure: logged server-side, generic message to clients
"""

from typing import Any


class ServiceError(Exception):
    """Base exception for all service errors."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details


class ValidationError(ServiceError):
    """One or more fields failed validation.

    details maps field name to the reason, e.g. {"email": "Invalid email address"}.
    """

    status_code = 400
    code = "VALIDATION_FAILED"

    def __init__(self, errors: dict[str, str], message: str = "Validation failed"):
        super().__init__(message, details=errors)
        self.errors = errors


class UniquenessConflict(ServiceError):
    """Candidate entry collides with an existing entry."""

    status_code = 400

    def __init__(self, constraint: str, message: str, code: str):
        super().__init__(message, code=code)
        self.constraint = constraint


class InvalidPlatformUsername(ServiceError):
    """External verification rejected the platform username."""

    status_code = 400
    code = "INVALID_PLATFORM_USERNAME"


class ExternalCheckFailure(ServiceError):
    """Platform username verification service unreachable or misbehaving.

    Never conflated with a negative verification result.
    """

    status_code = 502
    code = "EXTERNAL_CHECK_FAILED"


class NotFound(ServiceError):
    """Referenced topic or entry does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class Unauthorized(ServiceError):
    """Caller is not authorized for an admin operation."""

    status_code = 401
    code = "UNAUTHORIZED"


class StoreFailure(ServiceError):
    """Database operation failed."""

    status_code = 500
    code = "STORE_FAILURE"


class TopicInactive(ServiceError):
    """Topic exists but no longer accepts submissions."""

    status_code = 400
    code = "TOPIC_INACTIVE"
