"""
SVG Holder Backend — Custom Exception Hierarchy
=================================================

What:  The closed set of failure classes every operation can end in.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map each class
       to exactly one HTTP status code and a failure envelope.
Who:   Raised by the validation layer and services; caught by global handlers.

Exception Hierarchy:
    SvgHolderError (base)
    ├── ValidationError   → 400 Bad Request (client can fix the input)
    ├── NotFoundError     → 404 Not Found (well-formed reference, no record)
    └── InternalError     → 500 Internal Server Error (storage or unexpected fault)
"""

from typing import Any, Dict, Optional


class SvgHolderError(Exception):
    """
    Base exception for all SVG Holder application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SvgHolderError):
    """
    Raised when client input fails validation.

    When:    Missing name/description/file, wrong file type, file too large,
             file content without an <svg element, missing search query.
    HTTP:    400 Bad Request

    Example response:
        {"success": false, "message": "Only SVG files are allowed"}
    """

    status_code = 400

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


class NotFoundError(SvgHolderError):
    """
    Raised when a referenced record does not exist.

    When:    GET/PUT/DELETE /api/svgs/{id} with an unknown or malformed id.
    HTTP:    404 Not Found

    The store reports absence as None/False; the service turns that into
    this exception so routes stay free of branching.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "SVG",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class InternalError(SvgHolderError):
    """
    Raised when the record store or anything else fails unexpectedly.

    When:    Database unreachable, query failure, driver error.
    HTTP:    500 Internal Server Error

    `cause` keeps the original exception. Its text is only echoed to the
    client (as the envelope's `error` field) outside production.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if cause is not None:
            ctx["error_type"] = type(cause).__name__
        super().__init__(message=message, context=ctx)
        self.cause = cause

    @property
    def detail(self) -> str:
        """Underlying error text, or the message when there is no cause."""
        if self.cause is not None:
            return str(self.cause) or type(self.cause).__name__
        return self.message
