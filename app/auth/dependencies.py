# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Developer sessions: the token from the session cookie, or from an
# `Authorization: Bearer` header.
# Admin sessions: a Bearer token with role=admin, obtained from
# POST /admin/login. Developer tokens never pass the admin check.
#
# Usage:
#   from app.auth import get_current_developer
#
#   @router.get("/protected")
#   def protected(developer: Developer = Depends(get_current_developer)):
#       return {"developer_id": developer.id}
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.dependencies import DeveloperServiceDep
from app.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from app.auth.models import SessionIdentity
from core.models import Developer
from lib.security import SessionTokenError, decode_session_token

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor (cookie sessions don't send a header)
security_optional = HTTPBearer(auto_error=False)


def _read_identity(token: str) -> SessionIdentity:
    try:
        claims = decode_session_token(token)
    except SessionTokenError as e:
        logger.warning(f"Session token rejected: {e.message}")
        raise AuthenticationError("Session has expired" if e.expired else "Invalid session")
    return SessionIdentity(subject=claims["sub"], role=claims["role"])


async def get_session_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> SessionIdentity:
    """
    Resolve the caller's session from the Bearer header or session cookie.

    Raises:
        AuthenticationError: 401 if there is no token or it doesn't verify
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise AuthenticationError()
    return _read_identity(token)


def get_current_developer(
    service: DeveloperServiceDep,
    identity: SessionIdentity = Depends(get_session_identity),
) -> Developer:
    """
    Load the developer behind the session.

    Raises:
        AuthenticationError: 401 if there is no developer session, or the
            account behind it no longer exists
    """
    if identity.role != "developer":
        raise AuthenticationError("Developer session required")

    try:
        developer = service.get(identity.subject)
    except NotFoundError:
        logger.warning(f"Session for unknown developer {identity.subject}")
        raise AuthenticationError("Invalid session")

    logger.debug(f"Authenticated developer: {developer.id}")
    return developer


async def require_admin(
    identity: SessionIdentity = Depends(get_session_identity),
) -> SessionIdentity:
    """
    Gate administrative endpoints.

    Raises:
        AuthenticationError: 401 without a valid session
        AuthorizationError: 403 for a valid developer session
    """
    if identity.role != "admin":
        raise AuthorizationError("Administrator access required")
    return identity
