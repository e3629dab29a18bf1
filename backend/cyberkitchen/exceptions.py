"""
Cyber Kitchen Backend — Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for the different failure scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching HTTP status.
Who:   Raised by services and routes; caught by global handlers.

Exception Hierarchy:
    CyberKitchenError (base)
    ├── ValidationError      → 400 Bad Request (missing file, path, or URL)
    ├── AccessDeniedError    → 403 Forbidden (path escapes the media root)
    ├── NotFoundError        → 404 Not Found (no structured recipe data)
    ├── FileStorageError     → 500 Internal Server Error (local I/O)
    └── RecipeFetchError     → 500 Internal Server Error (upstream page fetch)
"""

from typing import Any, Dict, Optional


class CyberKitchenError(Exception):
    """
    Base exception for all Cyber Kitchen application errors.

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


class ValidationError(CyberKitchenError):
    """
    Raised when client input is missing or unusable.

    When:    No uploaded file, no path in a delete body, no URL to import.
    HTTP:    400 Bad Request
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


class AccessDeniedError(CyberKitchenError):
    """
    Raised when a resolved path does not lie inside the media root.

    When:    Delete/rename requests whose path resolves outside the media
             directory (`..` segments, symlinks, absolute paths).
    HTTP:    403 Forbidden

    The offending path is kept in context for server-side logs only.
    """

    def __init__(
        self,
        message: str = "Access denied",
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if path is not None:
            ctx["path"] = path
        super().__init__(message=message, context=ctx)


class NotFoundError(CyberKitchenError):
    """
    Raised when a requested resource does not exist.

    When:    An imported page carries no JSON-LD block typed `Recipe`.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(
            message=message or f"The requested {resource} was not found",
            context=ctx,
        )


class FileStorageError(CyberKitchenError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RecipeFetchError(CyberKitchenError):
    """
    Raised when the page to import cannot be fetched.

    When:    DNS/connection failure, timeout, non-2xx status, malformed URL.
    HTTP:    500 Internal Server Error

    Image download failures never raise this; they are logged and skipped.
    """

    def __init__(
        self,
        message: str = "Failed to fetch recipe",
        url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if url:
            ctx["url"] = url
        super().__init__(message=message, context=ctx)
