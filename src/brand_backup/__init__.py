"""brand-backup: per-brand export and import for a multi-tenant store.

Exports every table scoped to one brand into a versioned JSON snapshot and
restores it idempotently, in dependency order, with per-row error
reporting.  Ships an HTTP service, an operator CLI, and async adapters for
PostgreSQL (and optionally Supabase).

Usage:
    from brand_backup import default_registry, export_brand, import_brand
    from brand_backup import AsyncPostgresAdapter, get_adapter
    from brand_backup import AuthError, TableReadError, ValidationError
"""

__version__ = "0.1.0"

# Adapters
from brand_backup.adapters.base import StoreClient
from brand_backup.adapters.postgres import AsyncPostgresAdapter

# Auth
from brand_backup.auth.gate import AuthService, Caller, authorize

# Backup
from brand_backup.backup.codec import read_snapshot, validate_snapshot_file, write_snapshot
from brand_backup.backup.export import export_brand, export_to_file
from brand_backup.backup.models import (
    ImportReport,
    RowError,
    Snapshot,
    TableOutcome,
    TableRegistry,
    TableSpec,
)
from brand_backup.backup.registry import default_registry
from brand_backup.backup.restore import import_brand, import_from_file

# Config
from brand_backup.config.loader import load_db_config
from brand_backup.config.models import DatabaseConfig, DatabaseProfile

# Errors
from brand_backup.errors import (
    AuthError,
    BrandBackupError,
    ProfileNotFoundError,
    TableReadError,
    ValidationError,
)

# Factory
from brand_backup.factory import connect_profile, get_adapter, resolve_url

__all__ = [
    # Adapters
    "StoreClient",
    "AsyncPostgresAdapter",
    # Auth
    "AuthService",
    "Caller",
    "authorize",
    # Backup
    "TableSpec",
    "TableRegistry",
    "Snapshot",
    "ImportReport",
    "TableOutcome",
    "RowError",
    "default_registry",
    "export_brand",
    "export_to_file",
    "import_brand",
    "import_from_file",
    "read_snapshot",
    "write_snapshot",
    "validate_snapshot_file",
    # Config
    "load_db_config",
    "DatabaseProfile",
    "DatabaseConfig",
    # Errors
    "BrandBackupError",
    "AuthError",
    "ValidationError",
    "TableReadError",
    "ProfileNotFoundError",
    # Factory
    "get_adapter",
    "connect_profile",
    "resolve_url",
]

# Optional: AsyncSupabaseAdapter (only available with supabase extra)
try:
    from brand_backup.adapters.supabase import AsyncSupabaseAdapter

    __all__.append("AsyncSupabaseAdapter")
except ImportError:
    # supabase extra not installed -- AsyncSupabaseAdapter unavailable
    pass
