# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a machine-readable code and, where possible, a
# suggestion telling the operator how to fix it.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.supabase_client import SupabaseClientError


class MusicMethodException(Exception):
    """
    Base exception for the MusicMethod API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "MUSICMETHOD_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Generic Exceptions
# =============================================================================

class ResourceNotFoundError(MusicMethodException):
    """Raised when a row looked up by ID doesn't exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource.capitalize()} not found: {resource_id}",
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource} ID is correct",
            details={"resource": resource, "id": resource_id},
        )


class InvalidRequestError(MusicMethodException):
    """Raised when a request is well-formed but can't be acted on."""

    def __init__(self, message: str, suggestion: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class ExternalServiceError(MusicMethodException):
    """Raised when a third-party service (Stripe, SES, RSS host...) fails."""

    def __init__(self, service: str, error: str):
        super().__init__(
            message=f"{service} request failed: {error}",
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"service": service, "error": error},
        )


class ServiceNotConfiguredError(MusicMethodException):
    """Raised when credentials for an integration are missing."""

    def __init__(self, service: str, settings_names: list[str]):
        super().__init__(
            message=f"{service} credentials not configured",
            code="SERVICE_NOT_CONFIGURED",
            status_code=503,
            suggestion=f"Set {', '.join(settings_names)} in your environment",
            details={"service": service},
        )


# =============================================================================
# Auth / User Exceptions
# =============================================================================

class AdminRequiredError(MusicMethodException):
    """Raised when a non-admin calls an admin-only operation."""

    def __init__(self):
        super().__init__(
            message="Unauthorized: Admin access required",
            code="ADMIN_REQUIRED",
            status_code=403,
            suggestion="Sign in with an account that has the admin role",
        )


class DuplicateEmailError(MusicMethodException):
    """Raised when creating a user whose email is already registered."""

    def __init__(self, email: str):
        super().__init__(
            message="A user with this email address already exists",
            code="DUPLICATE_EMAIL",
            status_code=409,
            suggestion="Search for the existing user instead of creating a new one",
            details={"email": email},
        )


class SelfDeletionError(MusicMethodException):
    """Raised when an admin tries to delete their own account."""

    def __init__(self):
        super().__init__(
            message="Cannot delete your own account",
            code="SELF_DELETION",
            status_code=400,
            suggestion="Ask another admin to remove this account",
        )


# =============================================================================
# Media Exceptions
# =============================================================================

class InvalidOrderError(MusicMethodException):
    """Raised when a reorder request isn't a permutation of the current items."""

    def __init__(self, container_id: str, missing: list[str], unexpected: list[str]):
        super().__init__(
            message=f"Reorder request does not match current items of {container_id}",
            code="INVALID_ORDER",
            status_code=400,
            suggestion="Reload the list and send every item ID exactly once",
            details={"missing": missing, "unexpected": unexpected},
        )


class PartialReorderError(MusicMethodException):
    """Raised when a reorder failed after some rows were already written."""

    def __init__(self, container_id: str, applied: int, total: int, error: str):
        super().__init__(
            message=f"Reorder of {container_id} stopped after {applied} of {total} updates: {error}",
            code="PARTIAL_REORDER",
            status_code=500,
            suggestion="Reload the list and apply the order again",
            details={"applied": applied, "total": total, "error": error},
        )


class PodcastFeedError(MusicMethodException):
    """Raised when a podcast RSS feed can't be fetched or parsed."""

    def __init__(self, podcast_id: str, error: str):
        super().__init__(
            message=f"Failed to process RSS feed: {error}",
            code="PODCAST_FEED_ERROR",
            status_code=502,
            suggestion="Check that the podcast's RSS URL is reachable and valid",
            details={"podcast_id": podcast_id, "error": error},
        )


# =============================================================================
# Payment Exceptions
# =============================================================================

class PaymentNotCompletedError(MusicMethodException):
    """Raised when completing a payment whose intent hasn't succeeded."""

    def __init__(self, payment_intent_id: str, status: str):
        super().__init__(
            message=f"Payment not completed. Status: {status}",
            code="PAYMENT_NOT_COMPLETED",
            status_code=400,
            suggestion="Wait for the card payment to be confirmed before completing the order",
            details={"payment_intent_id": payment_intent_id, "status": status},
        )


# =============================================================================
# Import Exceptions
# =============================================================================

class ImportFileError(MusicMethodException):
    """Raised when an uploaded CSV can't be read."""

    def __init__(self, filename: str, error: str):
        super().__init__(
            message=f"Failed to read file: {error}",
            code="IMPORT_FILE_ERROR",
            status_code=400,
            suggestion="Check that the file is a valid UTF-8 CSV with a header row",
            details={"filename": filename, "error": error},
        )


class FileTooLargeError(MusicMethodException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb},
        )


# =============================================================================
# Redirect Exceptions
# =============================================================================

class DuplicateRedirectError(MusicMethodException):
    """Raised when a redirect already exists for a source path."""

    def __init__(self, source_url: str):
        super().__init__(
            message=f"A redirect for this source URL already exists: {source_url}",
            code="DUPLICATE_REDIRECT",
            status_code=409,
            suggestion="Edit the existing redirect instead",
            details={"source_url": source_url},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def musicmethod_exception_handler(
    request: Request,
    exc: MusicMethodException
) -> JSONResponse:
    """
    Convert MusicMethodException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )


async def supabase_exception_handler(
    request: Request,
    exc: SupabaseClientError
) -> JSONResponse:
    """Failed database or auth calls surface as 502 with the store's message."""
    content = {"detail": exc.message, "code": exc.code}
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=502, content=content)
