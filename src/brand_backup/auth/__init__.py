"""Caller resolution and role checks.

``SupabaseAuthService`` is only available when the ``supabase`` extra is
installed.

Usage:
    from brand_backup.auth import AuthService, Caller, authorize, extract_bearer
"""

from brand_backup.auth.gate import (
    DEFAULT_ALLOWED_ROLES,
    AuthService,
    Caller,
    authorize,
    extract_bearer,
)

__all__ = [
    "DEFAULT_ALLOWED_ROLES",
    "AuthService",
    "Caller",
    "authorize",
    "extract_bearer",
]

try:
    from brand_backup.auth.supabase import SupabaseAuthService

    __all__.append("SupabaseAuthService")
except ImportError:
    # supabase extra not installed -- SupabaseAuthService unavailable
    pass
