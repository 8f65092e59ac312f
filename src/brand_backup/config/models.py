"""Pydantic models for database and auth configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: str = "postgres"  # "postgres" or "supabase"
    supabase_key: str | None = None  # Service role key, supabase provider only


class AuthSettings(BaseModel):
    """Identity provider settings from the ``[auth]`` table of db.toml."""

    supabase_url: str = ""
    anon_key: str = ""
    service_key: str = ""
    profiles_table: str = "profiles"
    allowed_roles: list[str] = Field(default_factory=lambda: ["admin", "developer"])


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    default_profile: str | None = None
    auth: AuthSettings = Field(default_factory=AuthSettings)


# ============================================================================
# Connection Result
# ============================================================================


class ConnectionResult(BaseModel):
    """Result of connect_profile()."""

    success: bool
    profile_name: str | None = None
    error: str | None = None
