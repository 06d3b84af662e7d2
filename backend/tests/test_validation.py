"""
SVG Holder Backend — Upload Validation Unit Tests
===================================================

What:  Tests for SvgValidator (required fields, type, size, content).
How:   Pure function tests; no database or HTTP involved.

Test Strategy:
    ✅ Required fields are trimmed and checked before the file
    ✅ Type accepted by media type OR by .svg extension
    ✅ Size limit enforced at the boundary
    ✅ Content must contain "<svg"
    ✅ Update requires both fields
"""

import pytest

from app.exceptions import ValidationError
from app.services.validation import (
    CREATE_REQUIRED_MESSAGE,
    INVALID_CONTENT_MESSAGE,
    UPDATE_REQUIRED_MESSAGE,
    WRONG_TYPE_MESSAGE,
    SvgValidator,
    UploadCandidate,
)

SVG = b'<svg xmlns="http://www.w3.org/2000/svg"><rect width="1" height="1"/></svg>'


def candidate(filename="icon.svg", content_type="image/svg+xml", content=SVG):
    return UploadCandidate(filename=filename, content_type=content_type, content=content)


class TestCreateValidation:
    """Tests for validate_create()."""

    def setup_method(self):
        self.validator = SvgValidator(max_file_size=1024)

    def test_valid_upload_is_trimmed(self):
        result = self.validator.validate_create("  Logo ", "\tCompany logo\n", candidate())

        assert result.name == "Logo"
        assert result.description == "Company logo"
        assert result.content == SVG.decode()
        assert result.file_size == len(SVG)
        assert result.original_name == "icon.svg"

    @pytest.mark.parametrize(
        "name, description",
        [(None, "desc"), ("", "desc"), ("   ", "desc"), ("Logo", None), ("Logo", "  ")],
    )
    def test_missing_fields_rejected(self, name, description):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate_create(name, description, candidate())
        assert exc_info.value.message == CREATE_REQUIRED_MESSAGE

    def test_missing_file_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate_create("Logo", "desc", None)
        assert exc_info.value.message == CREATE_REQUIRED_MESSAGE
        assert exc_info.value.field == "svgFile"

    def test_fields_checked_before_file_type(self):
        """A blank name wins over a wrong file type."""
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate_create("", "desc", candidate("notes.txt", "text/plain"))
        assert exc_info.value.message == CREATE_REQUIRED_MESSAGE

    # ── Type ─────────────────────────────────────────────────────────────

    def test_svg_media_type_with_other_extension_accepted(self):
        result = self.validator.validate_create("Logo", "desc", candidate("logo.txt", "image/svg+xml"))
        assert result.original_name == "logo.txt"

    def test_svg_extension_with_generic_media_type_accepted(self):
        self.validator.validate_create("Logo", "desc", candidate("LOGO.SVG", "application/octet-stream"))

    def test_media_type_parameters_ignored(self):
        self.validator.validate_create("Logo", "desc", candidate("logo", "image/svg+xml; charset=utf-8"))

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate_create("Logo", "desc", candidate("logo.txt", "text/plain"))
        assert exc_info.value.message == WRONG_TYPE_MESSAGE

    # ── Size ─────────────────────────────────────────────────────────────

    def test_exactly_max_size_accepted(self):
        content = SVG + b" " * (1024 - len(SVG))
        assert len(content) == 1024
        result = self.validator.validate_create("Logo", "desc", candidate(content=content))
        assert result.file_size == 1024

    def test_over_max_size_rejected(self):
        content = SVG + b" " * (1025 - len(SVG))
        with pytest.raises(ValidationError, match="File size too large"):
            self.validator.validate_create("Logo", "desc", candidate(content=content))

    def test_check_size_unknown_size_passes(self):
        self.validator.check_size(None)

    def test_default_cap_message_is_5mb(self):
        validator = SvgValidator(max_file_size=5 * 1024 * 1024)
        assert validator.too_large_message == "File size too large. Maximum size is 5MB."

    # ── Content ──────────────────────────────────────────────────────────

    def test_content_without_svg_element_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate_create("Logo", "desc", candidate(content=b"<html></html>"))
        assert exc_info.value.message == INVALID_CONTENT_MESSAGE

    def test_invalid_utf8_is_decoded_with_replacement(self):
        content = b"\xff\xfe<svg></svg>"
        result = self.validator.validate_create("Logo", "desc", candidate(content=content))
        assert result.content.endswith("<svg></svg>")
        assert result.file_size == len(content)


class TestUpdateValidation:
    """Tests for validate_update()."""

    def setup_method(self):
        self.validator = SvgValidator(max_file_size=1024)

    def test_both_fields_trimmed(self):
        assert self.validator.validate_update(" New ", " Text ") == ("New", "Text")

    @pytest.mark.parametrize("name, description", [(None, "x"), ("x", None), ("  ", "x"), ("x", "")])
    def test_missing_field_rejected(self, name, description):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate_update(name, description)
        assert exc_info.value.message == UPDATE_REQUIRED_MESSAGE
