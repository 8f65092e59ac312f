"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from brand_backup.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from brand_backup.config.loader import load_db_config
from brand_backup.config.models import AuthSettings, DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "AuthSettings", "DatabaseConfig", "DatabaseProfile"]
