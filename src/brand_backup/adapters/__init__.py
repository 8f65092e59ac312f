"""Store adapters package.

Provides the ``StoreClient`` Protocol and concrete async adapter
implementations for PostgreSQL and (optionally) Supabase.

``AsyncSupabaseAdapter`` is only available when the ``supabase`` extra
is installed.  A missing ``supabase`` dependency does not prevent
importing the rest of the package.

Usage:
    from brand_backup.adapters import StoreClient, AsyncPostgresAdapter

    # With supabase extra installed:
    from brand_backup.adapters import AsyncSupabaseAdapter
"""

from brand_backup.adapters.base import StoreClient
from brand_backup.adapters.postgres import AsyncPostgresAdapter

__all__ = [
    "StoreClient",
    "AsyncPostgresAdapter",
]

try:
    from brand_backup.adapters.supabase import AsyncSupabaseAdapter

    __all__.append("AsyncSupabaseAdapter")
except ImportError:
    # supabase extra not installed -- AsyncSupabaseAdapter unavailable
    pass
