"""
SVG Holder Backend — Upload Validation
========================================

What:  Enforces upload constraints before any record is created or updated.
How:   Rules run in a fixed order and the first failure raises ValidationError;
       nothing touches the store until every rule has passed.
Who:   Called by SvgService (create/update) and by the upload route for the
       early size check.

Validation order (create):
    1. name present and non-empty after trim
    2. description present and non-empty after trim
    3. file attached, declared as image/svg+xml or named *.svg
    4. file size within the configured maximum
    5. decoded content contains "<svg"
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from app.config import settings
from app.exceptions import ValidationError

logger = logging.getLogger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml"
SVG_EXTENSION = ".svg"
SVG_MARKER = "<svg"

CREATE_REQUIRED_MESSAGE = "Name, description, and SVG file are required"
UPDATE_REQUIRED_MESSAGE = "Name and description are required"
WRONG_TYPE_MESSAGE = "Only SVG files are allowed"
INVALID_CONTENT_MESSAGE = "Invalid SVG file content"


@dataclass(frozen=True)
class UploadCandidate:
    """Raw file part of a create request, fully buffered."""

    filename: str
    content_type: Optional[str]
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ValidatedUpload:
    """Everything needed to build a new record, already normalized."""

    name: str
    description: str
    content: str
    file_size: int
    original_name: str


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


class SvgValidator:
    """
    Stateless rule set, parameterized by the upload size cap.

    Example:
        validator = SvgValidator(max_file_size=5 * 1024 * 1024)
        upload = validator.validate_create("Logo", "A logo", candidate)
    """

    def __init__(self, max_file_size: Optional[int] = None):
        self.max_file_size = max_file_size or settings.max_file_size

    @property
    def too_large_message(self) -> str:
        max_mb = max(1, self.max_file_size // (1024 * 1024))
        return f"File size too large. Maximum size is {max_mb}MB."

    @staticmethod
    def is_svg_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
        """True when the media type says SVG or the filename ends in .svg."""
        media_type = (content_type or "").split(";", 1)[0].strip().lower()
        if media_type == SVG_MEDIA_TYPE:
            return True
        return (filename or "").lower().endswith(SVG_EXTENSION)

    def check_size(self, size: Optional[int]) -> None:
        """Reject sizes above the cap. None means the size is not known yet."""
        if size is not None and size > self.max_file_size:
            raise ValidationError(
                message=self.too_large_message,
                field="svgFile",
                context={"max_size": self.max_file_size, "actual_size": size},
            )

    def _require_fields(
        self,
        name: Optional[str],
        description: Optional[str],
        message: str,
    ) -> Tuple[str, str]:
        clean_name = _clean(name)
        if not clean_name:
            raise ValidationError(message=message, field="name")
        clean_description = _clean(description)
        if not clean_description:
            raise ValidationError(message=message, field="description")
        return clean_name, clean_description

    def validate_create(
        self,
        name: Optional[str],
        description: Optional[str],
        upload: Optional[UploadCandidate],
    ) -> ValidatedUpload:
        """
        Run every create rule in order.

        Returns:
            ValidatedUpload with trimmed fields and the decoded SVG text.

        Raises:
            ValidationError with the first failing rule's message.
        """
        clean_name, clean_description = self._require_fields(
            name, description, CREATE_REQUIRED_MESSAGE
        )

        if upload is None:
            raise ValidationError(message=CREATE_REQUIRED_MESSAGE, field="svgFile")

        if not self.is_svg_upload(upload.filename, upload.content_type):
            raise ValidationError(
                message=WRONG_TYPE_MESSAGE,
                field="svgFile",
                context={"filename": upload.filename, "content_type": upload.content_type},
            )

        self.check_size(upload.size)

        # Undecodable bytes become U+FFFD; well-formed UTF-8 round-trips unchanged
        text = upload.content.decode("utf-8", errors="replace")
        if SVG_MARKER not in text:
            raise ValidationError(message=INVALID_CONTENT_MESSAGE, field="svgFile")

        logger.debug("Upload '%s' passed validation (%d bytes)", upload.filename, upload.size)

        return ValidatedUpload(
            name=clean_name,
            description=clean_description,
            content=text,
            file_size=upload.size,
            original_name=upload.filename,
        )

    def validate_update(
        self,
        name: Optional[str],
        description: Optional[str],
    ) -> Tuple[str, str]:
        """Require both fields; returns them trimmed."""
        return self._require_fields(name, description, UPDATE_REQUIRED_MESSAGE)
