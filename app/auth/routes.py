# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Developer registration, login, logout and the current-developer lookup.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Response, status

from app.auth.dependencies import get_current_developer
from app.auth.models import LoginResponse, MessageResponse
from app.config import settings
from app.dependencies import DeveloperServiceDep
from app.exceptions import InvalidCredentialsError
from core.models import Developer, DeveloperCreate, DeveloperLogin, DeveloperResponse
from lib.security import issue_session_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=DeveloperResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: DeveloperCreate,
    service: DeveloperServiceDep,
) -> DeveloperResponse:
    """
    Register a developer account.

    Raises:
        400: If the payload is invalid or the email is already registered
    """
    developer = service.register(body)
    return DeveloperResponse.from_developer(developer)


@router.post("/login", response_model=LoginResponse)
def login(
    body: DeveloperLogin,
    response: Response,
    service: DeveloperServiceDep,
) -> LoginResponse:
    """
    Log in and start a session.

    Sets the session cookie and also returns the token for Bearer use.

    Raises:
        401: If the email/password pair doesn't match an account
    """
    developer = service.verify(body.email, body.password)
    if developer is None:
        raise InvalidCredentialsError()

    token = issue_session_token(developer.id, role="developer")
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    logger.info(f"Developer logged in: {developer.id}")

    return LoginResponse(
        **DeveloperResponse.from_developer(developer).model_dump(),
        token=token,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """
    End the cookie session.

    Only the cookie is cleared. Sessions are stateless, so a token the
    client kept for Bearer use stays valid until it expires
    (SESSION_TTL_HOURS); clients should discard it on logout.
    """
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=DeveloperResponse)
def get_current_developer_info(
    developer: Developer = Depends(get_current_developer),
) -> DeveloperResponse:
    """
    Get the logged-in developer's profile.

    Raises:
        401: If not authenticated
    """
    return DeveloperResponse.from_developer(developer)
