"""Unit tests for validation logic."""

from app.core.config import settings
from app.utils.validators import (
    describe_validation_error,
    find_missing_fields,
    validate_purge_request,
    validate_required_fields,
    validate_upload,
)


class TestRequiredFields:
    """Test required field validation."""

    def test_all_fields_present(self):
        """Test validation of a complete payload."""
        result = validate_required_fields(
            {"orderNumber": "CV-1", "pickupAddress": {"id": "a1"}},
            ["orderNumber", "pickupAddress.id"],
        )
        assert result.is_valid
        assert result.error is None

    def test_missing_fields_reported_together(self):
        """Test every missing field is named in one error."""
        result = validate_required_fields(
            {"orderNumber": "", "brokerage": None},
            ["orderNumber", "brokerage", "date"],
        )
        assert not result.is_valid
        assert result.error == "Missing required fields: orderNumber, brokerage, date"
        assert result.error_type == "MISSING_FIELDS"

    def test_nested_path_missing(self):
        """Test dotted paths through absent or non-mapping values."""
        data = {"pickupAddress": None, "deliveryAddress": "oops"}
        assert find_missing_fields(
            data, ["pickupAddress.id", "deliveryAddress.id"]
        ) == ["pickupAddress.id", "deliveryAddress.id"]

    def test_whitespace_counts_as_blank(self):
        assert find_missing_fields({"clientAttention": "   "}, ["clientAttention"]) == [
            "clientAttention"
        ]

    def test_zero_is_a_value(self):
        """Test numeric zero satisfies a required field."""
        assert find_missing_fields({"orderTotal": 0}, ["orderTotal"]) == []


class TestUploadValidation:
    """Test file upload validation."""

    def test_valid_upload(self):
        result = validate_upload("application/pdf", 1024, upload_count=0, max_uploads=10)
        assert result.is_valid
        assert not result.warnings

    def test_session_limit(self):
        result = validate_upload("application/pdf", 1024, upload_count=10, max_uploads=10)
        assert not result.is_valid
        assert result.error_type == "SESSION_LIMIT"

    def test_file_too_large(self):
        result = validate_upload(
            "application/pdf", settings.upload_max_file_size + 1, upload_count=0, max_uploads=10
        )
        assert not result.is_valid
        assert result.error_type == "FILE_TOO_LARGE"

    def test_invalid_type(self):
        result = validate_upload("application/x-msdownload", 10, upload_count=0, max_uploads=10)
        assert not result.is_valid
        assert result.error_type == "INVALID_FILE_TYPE"

    def test_type_check_is_case_insensitive(self):
        assert validate_upload("Application/PDF", 10, upload_count=0, max_uploads=10).is_valid

    def test_last_upload_warning(self):
        """Test warning when the final allowed file is uploaded."""
        result = validate_upload("image/png", 10, upload_count=9, max_uploads=10)
        assert result.is_valid
        assert result.warnings == ["This is the last upload allowed for the session"]


class TestPurgeValidation:
    """Test permanent deletion confirmation."""

    def test_requires_confirmation(self):
        result = validate_purge_request(False, "Requested by the account owner")
        assert not result.is_valid
        assert "confirmed=true" in result.error

    def test_requires_reason(self):
        result = validate_purge_request(True, "  ")
        assert not result.is_valid
        assert "reason is required" in result.error

    def test_reason_too_short(self):
        result = validate_purge_request(True, "gdpr")
        assert not result.is_valid
        assert "at least 10 characters" in result.error

    def test_valid_request(self):
        assert validate_purge_request(True, "GDPR erasure request #42").is_valid


class TestValidationErrorMessage:
    """Test condensing request validation errors."""

    def test_missing_field(self):
        errors = [
            {"type": "missing", "loc": ("body", "lastName"), "msg": "Field required"},
            {"type": "missing", "loc": ("body", "role"), "msg": "Field required"},
        ]
        assert describe_validation_error(errors) == "Missing required field: lastName"

    def test_nested_value_error(self):
        errors = [
            {
                "type": "string_too_short",
                "loc": ("body", "address", "zip"),
                "msg": "String should have at least 1 character",
            }
        ]
        assert (
            describe_validation_error(errors)
            == "address.zip: String should have at least 1 character"
        )

    def test_missing_body(self):
        errors = [{"type": "missing", "loc": ("body",), "msg": "Field required"}]
        assert describe_validation_error(errors) == "Request body is required"

    def test_no_errors(self):
        assert describe_validation_error([]) == "Invalid request"
