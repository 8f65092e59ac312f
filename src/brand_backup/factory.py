"""Store adapter and auth service factory.

Resolves which database to talk to, in priority order:

1. An explicit ``database_url`` (or ``{PREFIX}DATABASE_URL``): direct
   PostgreSQL connection, no profile lookup.
2. An explicit ``profile_name``.
3. ``{PREFIX}DB_PROFILE`` environment variable.
4. ``.db-profile`` lock file written by ``brand-backup connect``.
5. ``default_profile`` in db.toml.

Usage:
    from brand_backup.factory import get_adapter, get_auth_service

    adapter = await get_adapter(profile_name="prod")
    auth = get_auth_service()
"""

import os
from pathlib import Path
from urllib.parse import quote

from brand_backup.adapters.base import StoreClient
from brand_backup.adapters.postgres import AsyncPostgresAdapter
from brand_backup.auth.gate import AuthService
from brand_backup.config.loader import load_db_config
from brand_backup.config.models import ConnectionResult, DatabaseConfig, DatabaseProfile
from brand_backup.errors import ProfileNotFoundError

# Relative path: resolved against the working directory at use time
_PROFILE_LOCK_FILE = Path(".db-profile")


# ============================================================================
# Profile Lock File Operations
# ============================================================================


def read_profile_lock() -> str | None:
    """Read profile name from lock file.

    Returns:
        Profile name if lock file exists, None otherwise.
    """
    if _PROFILE_LOCK_FILE.exists():
        return _PROFILE_LOCK_FILE.read_text().strip() or None
    return None


def write_profile_lock(profile_name: str) -> None:
    """Write profile name to lock file.

    Only call this after a successful connection test.
    """
    _PROFILE_LOCK_FILE.write_text(profile_name)


def clear_profile_lock() -> None:
    """Remove profile lock file."""
    if _PROFILE_LOCK_FILE.exists():
        _PROFILE_LOCK_FILE.unlink()


def get_active_profile_name(
    env_prefix: str = "",
    config: DatabaseConfig | None = None,
) -> str:
    """Get active profile name from env var, lock file, or config default.

    Args:
        env_prefix: Prefix for the environment variable
            (``"APP_"`` reads ``APP_DB_PROFILE``).
        config: Loaded config, consulted for ``default_profile``.

    Raises:
        ProfileNotFoundError: If no profile is configured.
    """
    env_profile = os.environ.get(f"{env_prefix}DB_PROFILE")
    if env_profile:
        return env_profile

    lock_profile = read_profile_lock()
    if lock_profile:
        return lock_profile

    if config is not None and config.default_profile:
        return config.default_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Set {env_prefix}DB_PROFILE=<name>, run: brand-backup connect --profile <name>, "
        "or set default_profile in db.toml"
    )


def get_active_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | None = None,
) -> tuple[str, DatabaseProfile]:
    """Get active profile name and configuration.

    Raises:
        ProfileNotFoundError: If no profile is configured or the profile is
            not in db.toml.
        FileNotFoundError: If db.toml does not exist.
    """
    config = load_db_config(config_path)
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix=env_prefix, config=config)

    if profile_name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    return profile_name, config.profiles[profile_name]


# ============================================================================
# Adapter Factory
# ============================================================================


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    The password is URL-quoted before replacing ``[YOUR-PASSWORD]``.
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


def _adapter_for_profile(profile: DatabaseProfile) -> StoreClient:
    if profile.provider == "supabase":
        # Optional extra; imported only when a supabase profile is used
        from brand_backup.adapters.supabase import AsyncSupabaseAdapter

        if not profile.supabase_key:
            raise ProfileNotFoundError(
                "Supabase profile requires supabase_key (service role key)"
            )
        return AsyncSupabaseAdapter(url=profile.url, key=profile.supabase_key)

    return AsyncPostgresAdapter(database_url=resolve_url(profile))


async def get_adapter(
    profile_name: str | None = None,
    env_prefix: str = "",
    database_url: str | None = None,
    config_path: Path | None = None,
) -> StoreClient:
    """Create a store adapter.  Each call returns a new instance.

    Args:
        profile_name: Profile from db.toml.  Ignored when a database URL is
            given.
        env_prefix: Prefix for environment variable lookup.
        database_url: Direct PostgreSQL URL.
        config_path: Path to db.toml (default: ``./db.toml``).

    Raises:
        ProfileNotFoundError: If no database configuration is found.
    """
    database_url = database_url or os.environ.get(f"{env_prefix}DATABASE_URL")
    if database_url:
        return AsyncPostgresAdapter(database_url=database_url)

    try:
        _, profile = get_active_profile(
            profile_name=profile_name,
            env_prefix=env_prefix,
            config_path=config_path,
        )
    except FileNotFoundError as e:
        raise ProfileNotFoundError(
            f"No database configuration found.\n{e}\n"
            f"Or set {env_prefix}DATABASE_URL."
        ) from e
    return _adapter_for_profile(profile)


async def connect_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | None = None,
) -> ConnectionResult:
    """Test a profile's connection and remember it in the lock file.

    Returns:
        ConnectionResult with success status or error message.
    """
    try:
        profile_name, profile = get_active_profile(
            profile_name=profile_name,
            env_prefix=env_prefix,
            config_path=config_path,
        )
    except (ProfileNotFoundError, FileNotFoundError) as e:
        return ConnectionResult(success=False, profile_name=profile_name, error=str(e))

    try:
        adapter = _adapter_for_profile(profile)
    except (ProfileNotFoundError, ImportError) as e:
        return ConnectionResult(success=False, profile_name=profile_name, error=str(e))

    try:
        if isinstance(adapter, AsyncPostgresAdapter):
            await adapter.test_connection()
        else:
            await adapter.select("stores", "id", filters={"id": "00000000-0000-0000-0000-000000000000"})
    except Exception as e:
        return ConnectionResult(
            success=False,
            profile_name=profile_name,
            error=f"Failed to connect to database: {e}",
        )
    finally:
        await adapter.close()

    write_profile_lock(profile_name)
    return ConnectionResult(success=True, profile_name=profile_name)


# ============================================================================
# Auth Service Factory
# ============================================================================


def get_auth_service(
    config: DatabaseConfig | None = None,
    env_prefix: str = "",
) -> AuthService:
    """Create the Supabase-backed ``AuthService``.

    ``{PREFIX}SUPABASE_URL``, ``{PREFIX}SUPABASE_ANON_KEY`` and
    ``{PREFIX}SUPABASE_SERVICE_ROLE_KEY`` override the ``[auth]`` table.

    Raises:
        ProfileNotFoundError: If the Supabase URL or keys are missing.
    """
    from brand_backup.auth.supabase import SupabaseAuthService

    auth = config.auth if config is not None else None
    url = os.environ.get(f"{env_prefix}SUPABASE_URL") or (auth.supabase_url if auth else "")
    anon_key = os.environ.get(f"{env_prefix}SUPABASE_ANON_KEY") or (auth.anon_key if auth else "")
    service_key = os.environ.get(f"{env_prefix}SUPABASE_SERVICE_ROLE_KEY") or (
        auth.service_key if auth else ""
    )

    if not (url and anon_key and service_key):
        raise ProfileNotFoundError(
            "Auth is not configured: set [auth] supabase_url, anon_key and "
            f"service_key in db.toml or {env_prefix}SUPABASE_URL, "
            f"{env_prefix}SUPABASE_ANON_KEY and {env_prefix}SUPABASE_SERVICE_ROLE_KEY"
        )

    return SupabaseAuthService(
        url=url,
        anon_key=anon_key,
        service_key=service_key,
        profiles_table=auth.profiles_table if auth else "profiles",
    )
