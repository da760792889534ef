# =============================================================================
# core/models/developer.py - Developer Schemas
# =============================================================================
# These models define the API contract for developer accounts:
# - DeveloperCreate: Registration payload
# - DeveloperLogin: Login payload
# - Developer: Stored account (includes the password hash)
# - DeveloperResponse: What clients see (never includes the hash)
# =============================================================================

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, EmailStr, Field

from .base import CamelModel, utc_now


def _normalize_email(value: str) -> str:
    return value.strip().lower()


# Emails are compared case-insensitively, so they are stored lower-cased
NormalizedEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]

# bcrypt only hashes the first 72 bytes and refuses anything longer
BCRYPT_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
    return value


NewPassword = Annotated[str, AfterValidator(_check_password_bytes)]


class DeveloperCreate(CamelModel):
    """
    Schema for registering a developer.

    Example:
        {
            "email": "developer@med-a.com",
            "password": "password123",
            "name": "MED-A Team",
            "company": "Medical Education Solutions"
        }
    """

    email: NormalizedEmail = Field(..., description="Login email, unique per developer")
    password: NewPassword = Field(..., min_length=6, max_length=72, description="Plain-text password (hashed before storage)")
    name: str = Field(..., min_length=2, max_length=120, description="Display name shown on listings")
    company: str | None = Field(default=None, max_length=200)


class DeveloperLogin(CamelModel):
    """Credentials for POST /auth/login."""

    email: NormalizedEmail
    password: str = Field(..., min_length=1, max_length=72)


class Developer(CamelModel):
    """
    A developer account as stored in the `developers` collection.

    Only `is_verified` ever changes after creation.
    """

    id: str
    email: str
    name: str
    company: str | None = None
    password_hash: str
    created_at: datetime = Field(default_factory=utc_now)
    is_verified: bool = False


class DeveloperResponse(CamelModel):
    """Public view of a developer account."""

    id: str
    email: str
    name: str
    company: str | None = None
    created_at: datetime
    is_verified: bool = False

    @classmethod
    def from_developer(cls, developer: Developer) -> "DeveloperResponse":
        return cls.model_validate(developer.model_dump(exclude={"password_hash"}))
