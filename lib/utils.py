# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import secrets
from uuid import uuid4


# =============================================================================
# Identifier Utilities
# =============================================================================

def new_id() -> str:
    """Generate a document id for a developer, app or payment."""
    return str(uuid4())


def new_payment_reference(app_id: str) -> str:
    """
    Generate a unique reference for one payment attempt.

    Format: app-<app id>-<10 hex chars>. Paystack only accepts
    alphanumerics, "-", "." and "=" in references.
    """
    return f"app-{app_id}-{secrets.token_hex(5)}"
