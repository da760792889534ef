# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized error taxonomy for the marketplace API.
# Every service-level failure is one of these; the handlers below turn them
# into structured JSON responses. Internal detail is logged, not returned.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MarketplaceException(Exception):
    """
    Base exception for the marketplace API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "MARKETPLACE_ERROR",
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
# Taxonomy
# =============================================================================

class ValidationError(MarketplaceException):
    """Malformed or missing input."""

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class AuthenticationError(MarketplaceException):
    """No session, or the session token is invalid or expired."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_REQUIRED",
            status_code=401,
            suggestion="Log in with POST /api/auth/login and retry",
        )


class InvalidCredentialsError(AuthenticationError):
    """Login failed. Never says whether the email or the password was wrong."""

    def __init__(self):
        super().__init__(message="Invalid credentials")
        self.code = "INVALID_CREDENTIALS"
        self.suggestion = None


class AuthorizationError(MarketplaceException):
    """Authenticated, but not entitled to act on this resource."""

    def __init__(self, message: str = "Not authorized", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="NOT_AUTHORIZED",
            status_code=403,
            details=details,
        )


class NotFoundError(MarketplaceException):
    """An entity looked up by id or reference does not exist."""

    def __init__(self, entity: str, identifier: str):
        super().__init__(
            message=f"{entity} not found",
            code=f"{entity.upper()}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {entity.lower()} identifier is correct",
            details={"id": identifier},
        )
        self.entity = entity
        self.identifier = identifier


class ConflictError(MarketplaceException):
    """A unique key is already taken or the entity is in a conflicting state."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        status_code: int = 409,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            suggestion=suggestion,
            details=details,
        )


class DeveloperExistsError(ConflictError):
    """Registration with an email that already has an account."""

    def __init__(self):
        # Registration conflicts are reported as 400 to match the client contract
        super().__init__(
            message="Developer already exists with this email",
            code="DEVELOPER_EXISTS",
            status_code=400,
            suggestion="Log in instead, or register with a different email",
        )


class UpstreamError(MarketplaceException):
    """The payment gateway (or another external service) failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="UPSTREAM_ERROR",
            status_code=502,
            suggestion="Try again in a moment",
            details=details,
        )


class StorageError(MarketplaceException):
    """The persistence backend failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details=details,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def marketplace_exception_handler(
    request: Request,
    exc: MarketplaceException
) -> JSONResponse:
    """
    Convert MarketplaceException to JSON response.

    Server-side failures keep their detail in the log and return a generic
    message to the caller.
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message} {exc.details}")
        content = {"detail": "The request could not be completed", "code": exc.code}
        if exc.suggestion:
            content["suggestion"] = exc.suggestion
        return JSONResponse(status_code=exc.status_code, content=content)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request body validation errors.

    Reported as 400 with the offending fields listed.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        }
    )
