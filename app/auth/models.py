# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for session data.
# =============================================================================

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.models import CamelModel, DeveloperResponse


class SessionIdentity(BaseModel):
    """
    Who a verified session token belongs to.

    This is the minimal info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    subject: str
    role: Literal["developer", "admin"]


class LoginResponse(DeveloperResponse):
    """
    The logged-in developer plus the session token.

    The same token is also set as an HttpOnly cookie; API clients that
    can't use cookies send it as `Authorization: Bearer <token>`.
    """
    token: str


class AdminLoginRequest(CamelModel):
    """Body for POST /admin/login."""
    api_key: str = Field(..., min_length=1)


class AdminTokenResponse(CamelModel):
    """Administrator session token (send as a Bearer token)."""
    token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str
