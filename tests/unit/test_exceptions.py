"""Tests for custom exceptions."""

from fastapi import status

from app.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    ConflictError,
    DuplicateOrderError,
    IdentityServiceError,
    InvalidSessionError,
    InvalidTransitionError,
    NotFoundError,
    RateLimitExceededError,
    UploadRejectedError,
    conflict_exception,
    forbidden_exception,
    not_found_exception,
    rate_limited_exception,
    unauthorized_exception,
)


class TestApplicationError:
    """Tests for ApplicationError base exception."""

    def test_create_error(self):
        error = ApplicationError("Test error message")
        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_subclasses(self):
        for error in (
            AuthenticationError(),
            IdentityServiceError(503, "down"),
            NotFoundError("Order"),
            InvalidSessionError(),
        ):
            assert isinstance(error, ApplicationError)


class TestDomainErrors:
    """Tests for domain specific errors."""

    def test_duplicate_order_is_conflict(self):
        error = DuplicateOrderError("CV-100")
        assert isinstance(error, ConflictError)
        assert error.order_number == "CV-100"
        assert error.message == "This order number already exists"

    def test_invalid_transition(self):
        error = InvalidTransitionError("COMPLETED", "ACTIVE")
        assert error.message == "Cannot transition from COMPLETED to ACTIVE"

    def test_not_found_message(self):
        error = NotFoundError("User", "abc")
        assert error.identifier == "abc"
        assert error.message == "User not found"

    def test_rate_limit(self):
        error = RateLimitExceededError(5, 60)
        assert error.limit == 5
        assert "Too many application sessions" in error.message

    def test_upload_rejected(self):
        error = UploadRejectedError("FILE_TOO_LARGE", "File is too large", "corr-1")
        assert error.correlation_id == "corr-1"
        assert str(error) == "File is too large"

    def test_identity_service_error(self):
        error = IdentityServiceError(502, "bad gateway")
        assert error.status_code == 502
        assert "502" in error.message


class TestHTTPExceptionHelpers:
    """Tests for HTTP exception factories."""

    def test_unauthorized(self):
        exc = unauthorized_exception()
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc.headers == {"WWW-Authenticate": "Bearer"}

    def test_forbidden(self):
        assert forbidden_exception().status_code == status.HTTP_403_FORBIDDEN

    def test_not_found(self):
        exc = not_found_exception("Order not found")
        assert exc.status_code == status.HTTP_404_NOT_FOUND
        assert exc.detail == "Order not found"

    def test_conflict(self):
        assert conflict_exception("taken").status_code == status.HTTP_409_CONFLICT

    def test_rate_limited(self):
        exc = rate_limited_exception("slow down", retry_after=120)
        assert exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert exc.headers["Retry-After"] == "120"
