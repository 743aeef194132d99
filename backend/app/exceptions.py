"""
Notewise Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for every failure the actions surface.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       structured JSON error responses with the right HTTP status code.
Who:   Raised by services; caught by the CRUD actions (which fold them into an
       `error_message` result) or by the global handlers.

Exception Hierarchy:
    NotewiseError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── UnauthenticatedError     → 401 Unauthorized (no session)
    ├── NotFoundError            → 404 Not Found
    ├── ConfigurationError       → 500 Internal Server Error (missing API key)
    ├── DatabaseError            → 500 Internal Server Error
    ├── FileStorageError         → 500 Internal Server Error
    └── UpstreamError            → 503 Service Unavailable (provider failed)
"""

from typing import Any, Dict, Optional


class NotewiseError(Exception):
    """
    Base exception for all Notewise application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotewiseError):
    """
    Raised when client input fails validation.

    When:    Missing or non-PDF upload, oversized file, malformed question history.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Only PDF files are supported",
            "details": {"field": "file", "content_type": "image/png"}
        }
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


class UnauthenticatedError(NotewiseError):
    """
    Raised when an action that requires a signed-in user gets none.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "You must be logged in to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotewiseError):
    """
    Raised when a requested resource does not exist (or is not owned by the caller).

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConfigurationError(NotewiseError):
    """
    Raised when a required setting (the Gemini API key) is missing.

    Checked before any other work in the AI-assisted actions.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Gemini API key is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NotewiseError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation (duplicate note id), etc.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Constraint names and SQL are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(NotewiseError):
    """
    Raised when the temporary copy of an uploaded PDF cannot be written.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamError(NotewiseError):
    """
    Raised when the LLM provider (Gemini) fails a generation, upload or lookup.

    Provider failures are not retried; the caller sees this immediately.
    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "The AI service is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
