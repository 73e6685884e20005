# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a machine-readable code and, where possible, a
# suggestion telling the caller how to fix the request.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class NoviqueException(Exception):
    """
    Base exception for the Novique API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "NOVIQUE_ERROR",
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
# Request Exceptions
# =============================================================================

class NotFoundError(NoviqueException):
    """Raised when a record doesn't exist."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource.lower()} identifier is correct",
            details={"resource": resource, "id": identifier}
        )


class ValidationFailedError(NoviqueException):
    """Raised when a request body fails a business rule."""

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class MissingFieldsError(ValidationFailedError):
    """Raised when required fields are absent or empty."""

    def __init__(self, required: list[str], provided: list[str]):
        missing = [field for field in required if field not in provided]
        super().__init__(
            message=f"Missing required fields: {', '.join(missing)}",
            suggestion=f"Include all of: {', '.join(required)}",
            details={"required": required, "provided": provided},
        )

    @classmethod
    def check(cls, data: dict[str, Any], required: list[str]) -> None:
        """
        Raise if any required field is missing or blank in `data`.

        Example:
            MissingFieldsError.check(body, ["title", "slug"])
        """
        provided = [key for key, value in data.items() if value not in (None, "", [])]
        if any(field not in provided for field in required):
            raise cls(required=required, provided=provided)


class SlugConflictError(NoviqueException):
    """Raised when a slug is already taken."""

    def __init__(self, slug: str, suggested_slug: str | None = None):
        super().__init__(
            message=f"A record with slug '{slug}' already exists",
            code="SLUG_CONFLICT",
            status_code=409,
            suggestion=f"Try '{suggested_slug}'" if suggested_slug else "Choose a different slug",
            details={"slug": slug, "suggested_slug": suggested_slug} if suggested_slug else {"slug": slug},
        )


class AlreadyConvertedError(NoviqueException):
    """Raised when converting a lead that already became a customer."""

    def __init__(self, resource: str, customer_id: str | None):
        super().__init__(
            message=f"{resource} already converted",
            code="ALREADY_CONVERTED",
            status_code=400,
            suggestion="Open the existing customer record instead",
            details={"customer_id": customer_id},
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class AuthenticationRequiredError(NoviqueException):
    """Raised when no usable profile is attached to the request."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_REQUIRED",
            status_code=401,
            suggestion="Sign in and send the access token as 'Authorization: Bearer <token>'",
        )


class AccountDisabledError(NoviqueException):
    """Raised when the profile exists but has been deactivated."""

    def __init__(self, user_id: str):
        super().__init__(
            message="Account is disabled",
            code="ACCOUNT_DISABLED",
            status_code=403,
            suggestion="Ask an administrator to re-activate your account",
            details={"user_id": user_id},
        )


class PermissionDeniedError(NoviqueException):
    """Raised when the caller's role doesn't allow the action."""

    def __init__(self, message: str = "You do not have permission to perform this action", required: list[str] | None = None):
        super().__init__(
            message=message,
            code="PERMISSION_DENIED",
            status_code=403,
            details={"required": required} if required else None,
        )


class InvalidApiKeyError(NoviqueException):
    """Raised when an integration bearer key is missing or wrong."""

    def __init__(self):
        super().__init__(
            message="Valid API key required",
            code="UNAUTHORIZED",
            status_code=401,
        )


class InvalidSignatureError(NoviqueException):
    """Raised when a Twilio webhook signature doesn't verify."""

    def __init__(self):
        super().__init__(
            message="Invalid Twilio request signature",
            code="INVALID_SIGNATURE",
            status_code=403,
            suggestion="Check PUBLIC_BASE_URL matches the URL configured in the Twilio console",
        )


# =============================================================================
# Integration Exceptions
# =============================================================================

class ServiceNotConfiguredError(NoviqueException):
    """Raised when an integration is called without its credentials."""

    def __init__(self, service: str, setting: str):
        super().__init__(
            message=f"{service} is not configured",
            code="SERVICE_NOT_CONFIGURED",
            status_code=500,
            suggestion=f"Set {setting} in the environment",
            details={"service": service},
        )


class UpstreamServiceError(NoviqueException):
    """Raised when a third-party API call fails."""

    def __init__(self, service: str, error: str, status_code: int = 502):
        super().__init__(
            message=f"{service} request failed: {error}",
            code="UPSTREAM_ERROR",
            status_code=status_code,
            suggestion="Try again later or contact support if the issue persists",
            details={"service": service, "error": error},
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(NoviqueException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, content_type: str | None, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {content_type}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"content_type": content_type, "allowed_types": allowed}
        )


class FileTooLargeError(NoviqueException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class StorageUploadError(NoviqueException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class DatabaseError(NoviqueException):
    """Raised when a Supabase write or query fails."""

    def __init__(self, action: str, error: str):
        super().__init__(
            message=f"Failed to {action}",
            code="DATABASE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def novique_exception_handler(
    request: Request,
    exc: NoviqueException
) -> JSONResponse:
    """
    Convert NoviqueException to JSON response.

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
