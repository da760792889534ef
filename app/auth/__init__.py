# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Signed session tokens for developers and administrators.
#
# Usage:
#   from app.auth import get_current_developer, require_admin
#
#   @router.get("/protected")
#   def protected(developer: Developer = Depends(get_current_developer)):
#       return {"developer_id": developer.id}
# =============================================================================

from app.auth.dependencies import get_current_developer, get_session_identity, require_admin
from app.auth.models import SessionIdentity

__all__ = [
    "get_current_developer",
    "get_session_identity",
    "require_admin",
    "SessionIdentity",
]
