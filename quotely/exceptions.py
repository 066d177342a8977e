"""
Quotely API — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the `{success: false, error}` envelope with the right status code.
Who:   Raised by the store adapters and services; caught by global handlers.

Exception Hierarchy:
    QuotelyError (base)
    ├── ValidationError              → 400 Bad Request (client can fix)
    ├── AuthError                    → 401 Unauthorized
    ├── NotFoundError                → 404 Not Found
    ├── AlreadyExistsError           → 400 Bad Request
    ├── RateLimitExceededError       → 429 Too Many Requests
    └── StoreError                   → 500 Internal Server Error
        ├── StoreUnavailableError    (backend unreachable / timed out)
        ├── ConstraintViolationError (unique / foreign key / check violation)
        └── NoRowsError              (single-row lookup matched nothing)

    500 responses carry the message tagged on the endpoint with
    @failure_message (e.g. "Failed to fetch quotes"), or a generic one.

    NoRowsError is a sentinel: services translate it into a domain answer
    (False, NotFoundError, ...) and it should never reach a handler.
"""

from typing import Any, Callable, Dict, Optional, TypeVar

# SQLSTATE codes shared by PostgreSQL and PostgREST error payloads
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INTEGRITY_VIOLATION = "23000"


class QuotelyError(Exception):
    """
    Base exception for all Quotely application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuotelyError):
    """
    Raised when client input fails validation.

    HTTP: 400 Bad Request. FastAPI's own 422 request validation errors are
    remapped to the same status and envelope in main.py.
    """

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


class AuthError(QuotelyError):
    """Missing, malformed, or expired token, or bad credentials. HTTP 401."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(QuotelyError):
    """
    Raised when a requested resource does not exist.

    HTTP: 404 Not Found. Not logged as a failure.
    """

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


class AlreadyExistsError(QuotelyError):
    """
    Raised by routes whose contract reports duplicates as a client error
    (POST /api/favorites). Services report duplicates as result values instead.
    """

    def __init__(
        self,
        message: str = "Already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(QuotelyError):
    """Client exceeded the per-IP rate limit. HTTP 429 with Retry-After."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


# ══════════════════════════════════════════════════════════════════════════
# Store Errors
# ══════════════════════════════════════════════════════════════════════════


class StoreError(QuotelyError):
    """
    The backing store rejected or failed a request.

    HTTP: 500 Internal Server Error. The message returned to the client is
    always generic; driver messages, SQL and URLs go to `context` and the
    server log only.
    """

    def __init__(
        self,
        message: str = "A data store error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreUnavailableError(StoreError):
    """The store could not be reached (connection refused, timeout, 5xx)."""

    def __init__(
        self,
        message: str = "The data store is temporarily unavailable.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConstraintViolationError(StoreError):
    """
    A write violated a table constraint.

    `code` is the SQLSTATE reported by the backend. Callers check
    `is_duplicate_key` to turn a unique violation into an "already exists"
    outcome instead of a failure.
    """

    def __init__(
        self,
        code: str = INTEGRITY_VIOLATION,
        message: str = "A data constraint was violated.",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["code"] = code
        super().__init__(message=message, context=ctx)
        self.code = code

    @property
    def is_duplicate_key(self) -> bool:
        return self.code == UNIQUE_VIOLATION

    @property
    def is_foreign_key(self) -> bool:
        return self.code == FOREIGN_KEY_VIOLATION


class NoRowsError(StoreError):
    """Raised by StoreAdapter.find_one when no row matches the filters."""

    def __init__(
        self,
        entity: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["entity"] = entity
        super().__init__(message=f"No rows found in '{entity}'", context=ctx)
        self.entity = entity


# ══════════════════════════════════════════════════════════════════════════
# Per-endpoint failure messages
# ══════════════════════════════════════════════════════════════════════════

F = TypeVar("F", bound=Callable[..., Any])

FAILURE_MESSAGE_ATTR = "failure_message"


def failure_message(message: str) -> Callable[[F], F]:
    """
    Tag a route endpoint with the message its 500 responses carry.

    Usage:
        @router.get("")
        @failure_message("Failed to fetch quotes")
        async def list_quotes(...): ...

    The 500 handlers in main.py look the tag up on the matched endpoint;
    untagged endpoints fall back to the generic message.
    """

    def tag(endpoint: F) -> F:
        setattr(endpoint, FAILURE_MESSAGE_ATTR, message)
        return endpoint

    return tag
