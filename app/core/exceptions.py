"""Custom exceptions for the application."""

from fastapi import HTTPException, status


class ApplicationError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class AuthenticationError(ApplicationError):
    """Raised when a bearer token cannot be validated."""

    def __init__(self, detail: str = "Authentication failed"):
        self.detail = detail
        super().__init__(detail)


class IdentityServiceError(ApplicationError):
    """Raised when the identity service responds with an unexpected error."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Identity service error ({status_code}): {detail}")


class NotFoundError(ApplicationError):
    """Raised when a requested record does not exist."""

    def __init__(self, resource: str, identifier: str | None = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")


class ConflictError(ApplicationError):
    """Raised when a record is not in the state an operation requires."""


class PermissionDeniedError(ApplicationError):
    """Raised when the caller may not act on the target record."""


class DuplicateOrderError(ConflictError):
    """Raised when an order number is already taken."""

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__("This order number already exists")


class InvalidTransitionError(ApplicationError):
    """Raised when an order status change leaves a terminal state."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current} to {requested}")


class RateLimitExceededError(ApplicationError):
    """Raised when a caller exceeds the session issuance rate limit."""

    def __init__(self, limit: int, window_minutes: int):
        self.limit = limit
        self.window_minutes = window_minutes
        super().__init__("Too many application sessions. Please try again later.")


class InvalidSessionError(ApplicationError):
    """Raised when an application session is unknown, expired or completed."""

    def __init__(self, detail: str = "Invalid or expired application session"):
        super().__init__(detail)


class UploadRejectedError(ApplicationError):
    """Raised when a file upload fails validation."""

    def __init__(self, error_type: str, user_message: str, correlation_id: str):
        self.error_type = error_type
        self.user_message = user_message
        self.correlation_id = correlation_id
        super().__init__(user_message)


def unauthorized_exception(detail: str = "Not authenticated") -> HTTPException:
    """Return a 401 Unauthorized exception."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden_exception(detail: str = "Not enough permissions") -> HTTPException:
    """Return a 403 Forbidden exception."""
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail,
    )


def not_found_exception(detail: str = "Resource not found") -> HTTPException:
    """Return a 404 Not Found exception."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def conflict_exception(detail: str) -> HTTPException:
    """Return a 409 Conflict exception."""
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    )


def rate_limited_exception(detail: str, retry_after: int) -> HTTPException:
    """Return a 429 Too Many Requests exception."""
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=detail,
        headers={"Retry-After": str(retry_after)},
    )
