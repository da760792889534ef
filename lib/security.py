# =============================================================================
# lib/security.py - Password Hashing and Session Tokens
# =============================================================================
# - Passwords are stored as bcrypt hashes only.
# - Sessions are HS256 JWTs signed with SECRET_KEY. Claims:
#     sub:  developer id (or "admin")
#     role: "developer" | "admin"
#     exp:  expiry (SESSION_TTL_HOURS after issue)
#
# Usage:
#   from lib.security import hash_password, verify_password, issue_session_token
# =============================================================================

from datetime import datetime, timedelta, timezone
from typing import Literal

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings

TOKEN_ALGORITHM = "HS256"

Role = Literal["developer", "admin"]

# Checked against when the email is unknown so both login failure paths do
# the same amount of work
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt()).decode("utf-8")


class SessionTokenError(Exception):
    """A session token is missing, malformed, tampered with or expired."""

    def __init__(self, message: str, expired: bool = False):
        super().__init__(message)
        self.message = message
        self.expired = expired


def hash_password(password: str) -> str:
    """Return a bcrypt hash of `password` (salted, cost from bcrypt defaults)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Check a password against a stored hash.

    Passing `password_hash=None` still performs a full bcrypt comparison
    (against a dummy hash) and returns False.
    """
    candidate = password_hash or _DUMMY_HASH
    try:
        matches = bcrypt.checkpw(password.encode("utf-8"), candidate.encode("utf-8"))
    except ValueError:
        # Stored value isn't a bcrypt hash
        return False
    return matches and password_hash is not None


def issue_session_token(subject: str, role: Role = "developer") -> str:
    """
    Sign a session token for `subject`.

    Args:
        subject: Developer id, or "admin" for administrator sessions
        role: Which kind of session this is

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    claims = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.session_ttl_seconds)).timestamp()),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def decode_session_token(token: str) -> dict:
    """
    Verify and decode a session token.

    Raises:
        SessionTokenError: If the signature is wrong, the token expired,
            or required claims are missing
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
    except ExpiredSignatureError:
        raise SessionTokenError("Session has expired", expired=True)
    except JWTError as e:
        raise SessionTokenError(f"Invalid session token: {e}")

    if not claims.get("sub") or claims.get("role") not in ("developer", "admin"):
        raise SessionTokenError("Invalid session token: missing claims")
    return claims
