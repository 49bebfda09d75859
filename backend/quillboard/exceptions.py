"""
Quillboard Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the error kinds the API exposes.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       the `{success: false, ...}` envelope with the matching status code.
Who:   Raised by services, dependencies and middleware.

Exception Hierarchy:
    QuillboardError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthenticatedError     → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

    Anything else is an unexpected error: logged with its stack trace and
    reported to the client as a generic 500.
"""

from typing import Any, Dict, Optional


class QuillboardError(Exception):
    """
    Base exception for all Quillboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuillboardError):
    """
    Raised when client input fails validation.

    When:    Field length/required violations, unknown category ids, rejected
             image uploads, duplicate email or category names.
    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "Title must be at most 100 characters",
            "details": {"field": "title"}
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthenticatedError(QuillboardError):
    """
    Raised when a request carries no usable credential.

    When:    Missing bearer token, malformed/expired/badly signed token, token
             for a user that no longer exists, or failed login.
    HTTP:    401 Unauthorized (with `WWW-Authenticate: Bearer`)

    This is distinct from ForbiddenError: an unauthenticated request never
    reaches an authorization decision.
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(QuillboardError):
    """
    Raised when a valid identity lacks the rights for an operation.

    When:    Updating or deleting someone else's post as a non-admin, or
             creating a category without the admin role.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(QuillboardError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /api/posts/{id} with an unknown or malformed id.
    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(QuillboardError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with a Retry-After header)
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class FileStorageError(QuillboardError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error

    The OS error and path go into `context` and are logged server side; the
    client only sees `message`.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(QuillboardError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The response message is always generic; query details stay in the logs.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
