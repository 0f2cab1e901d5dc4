"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Messages never carry plaintext, passwords, key material or password hashes.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    VALIDATION_FAILED = "validation_failed"
    INVALID_REQUEST = "invalid_request"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    DOWNLOAD_LIMIT_REACHED = "download_limit_reached"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_INVALID = "password_invalid"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    SWEEP_IN_PROGRESS = "sweep_in_progress"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.VALIDATION_FAILED: {
        "title": "Invalid Upload",
        "message": "One of the upload parameters is missing or out of range.",
        "action": "Check the file size, download limit and expiry, then try again.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file could not be found or has been deleted.",
        "action": "Ask the sender for a new link.",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "File Expired",
        "message": "This share link has expired and the file is no longer available.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.DOWNLOAD_LIMIT_REACHED: {
        "title": "Download Limit Reached",
        "message": "This file has already been downloaded the maximum number of times.",
        "action": "Ask the sender for a new link.",
    },
    ErrorCategory.PASSWORD_REQUIRED: {
        "title": "Password Required",
        "message": "This file is protected with a password.",
        "action": "Enter the password the sender gave you.",
    },
    ErrorCategory.PASSWORD_INVALID: {
        "title": "Incorrect Password",
        "message": "The password you entered is not correct.",
        "action": "Check the password and try again.",
    },
    ErrorCategory.UNAUTHORIZED: {
        "title": "Sign-in Required",
        "message": "You must be signed in to manage shared files.",
        "action": "Sign in and try again.",
    },
    ErrorCategory.FORBIDDEN: {
        "title": "Not Allowed",
        "message": "You do not have permission to manage this file.",
        "action": "Only the uploader can manage a shared file.",
    },
    ErrorCategory.STORAGE_UNAVAILABLE: {
        "title": "Storage Unavailable",
        "message": "File storage is temporarily unavailable.",
        "action": "Please try again in a few moments.",
    },
    ErrorCategory.SWEEP_IN_PROGRESS: {
        "title": "Cleanup In Progress",
        "message": "An expiration sweep is already running.",
        "action": "Wait for the current sweep to finish.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    category: ErrorCategory = ErrorCategory.SYSTEM_ERROR
    http_status: int = 500

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ValidationError(DomainError):
    """
    Raised when upload parameters fail validation.

    Carries the name of the first failing field. Not retryable.
    """

    category = ErrorCategory.VALIDATION_FAILED
    http_status = 400

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class AccessDeniedError(DomainError):
    """Base class for Access Gate rejections."""

    http_status = 403


class NotFoundError(AccessDeniedError):
    """Raised when no record exists for the requested id."""

    category = ErrorCategory.FILE_NOT_FOUND
    http_status = 404


class ExpiredError(AccessDeniedError):
    """Raised when the record is past its deadline or already swept."""

    category = ErrorCategory.FILE_EXPIRED
    http_status = 410


class LimitReachedError(AccessDeniedError):
    """Raised when every allowed download has been consumed."""

    category = ErrorCategory.DOWNLOAD_LIMIT_REACHED
    http_status = 409


class PasswordRequiredError(AccessDeniedError):
    """Raised when a protected file is requested without a password."""

    category = ErrorCategory.PASSWORD_REQUIRED
    http_status = 401


class PasswordInvalidError(AccessDeniedError):
    """Raised when the supplied password does not match."""

    category = ErrorCategory.PASSWORD_INVALID
    http_status = 403


class UnauthorizedError(DomainError):
    """Raised when an owner-only operation has no identified caller."""

    category = ErrorCategory.UNAUTHORIZED
    http_status = 401


class ForbiddenError(DomainError):
    """Raised when the caller is not the owner of the record."""

    category = ErrorCategory.FORBIDDEN
    http_status = 403


class StorageError(DomainError):
    """
    Raised when the blob, record or log store is unavailable.

    Transient: callers may retry. The sweeper continues past it per record.
    """

    category = ErrorCategory.STORAGE_UNAVAILABLE
    http_status = 503


class IntegrityError(DomainError):
    """
    Raised when authenticated decryption fails.

    Indicates tampering or a wrong key/nonce pair. Never retried.
    """

    category = ErrorCategory.INVALID_REQUEST
    http_status = 400


class KeyFormatError(DomainError):
    """Raised when an exported key blob cannot be imported."""

    category = ErrorCategory.INVALID_REQUEST
    http_status = 400


# ============================================================================
# Application Layer Exceptions (Can have infrastructure concerns)
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    This is an application-layer concern that bridges domain errors
    with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        # Get user-friendly message
        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        payload = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.context:
            payload.update(self.context)
        return payload


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional public fields merged into the body
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code


def domain_error_response(error: DomainError) -> tuple[Dict[str, Any], int]:
    """Map a domain exception to its structured response and status."""
    context = None
    if isinstance(error, ValidationError):
        context = {"field": error.field, "details": str(error)}
    return create_error_response(
        error.category, str(error), context, status_code=error.http_status
    )
