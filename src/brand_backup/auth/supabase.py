"""Supabase-backed ``AuthService``.

Validates the caller's access token against Supabase Auth, then reads the
caller's role from the ``profiles`` table with the service role key.

Usage:
    from brand_backup.auth.supabase import SupabaseAuthService

    auth = SupabaseAuthService(
        url="https://xyzproject.supabase.co",
        anon_key="eyJ...",
        service_key="eyJ...",
    )
    caller = await auth.resolve_caller(token)
"""

import asyncio
import logging

from supabase import AsyncClient, acreate_client

from brand_backup.auth.gate import Caller
from brand_backup.errors import AuthError

logger = logging.getLogger(__name__)


class SupabaseAuthService:
    """Resolve callers through Supabase Auth and the ``profiles`` table.

    Clients are created lazily, once, under an ``asyncio.Lock``.

    Args:
        url: Supabase project URL.
        anon_key: Public anon key, used to validate user tokens.
        service_key: Service role key, used to read ``profiles``.
        profiles_table: Table holding one row per user with a ``role``.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        service_key: str,
        profiles_table: str = "profiles",
    ) -> None:
        self._url = url
        self._anon_key = anon_key
        self._service_key = service_key
        self._profiles_table = profiles_table
        self._caller_client: AsyncClient | None = None
        self._admin_client: AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _get_clients(self) -> tuple[AsyncClient, AsyncClient]:
        if self._caller_client is None or self._admin_client is None:
            async with self._lock:
                if self._caller_client is None:
                    self._caller_client = await acreate_client(self._url, self._anon_key)
                if self._admin_client is None:
                    self._admin_client = await acreate_client(self._url, self._service_key)
        return self._caller_client, self._admin_client

    async def resolve_caller(self, token: str) -> Caller:
        """Return the caller owning ``token`` with their profile role."""
        caller_client, admin_client = await self._get_clients()

        try:
            response = await caller_client.auth.get_user(token)
        except Exception as e:
            logger.info("Rejected access token: %s", e)
            raise AuthError("Unauthorized", status_code=401) from e
        user = response.user if response else None
        if user is None:
            raise AuthError("Unauthorized", status_code=401)

        try:
            result = await (
                admin_client.table(self._profiles_table)
                .select("role")
                .eq("id", user.id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.warning("Could not read profile for %s: %s", user.id, e)
            raise AuthError("Could not verify permissions", status_code=403) from e

        profile = result.data if result else None
        if not profile:
            raise AuthError("Could not verify permissions", status_code=403)

        return Caller(id=str(user.id), role=profile.get("role"))

    async def close(self) -> None:
        """Close any clients that were created."""
        for client in (self._caller_client, self._admin_client):
            if client is not None:
                await client.aclose()
        self._caller_client = None
        self._admin_client = None
