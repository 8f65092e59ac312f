"""Async Supabase store adapter.

Talks to a Supabase project over PostgREST with the supabase-py async
client.  Used by profiles with ``provider = "supabase"`` when no direct
database connection is available.

Usage:
    from brand_backup.adapters.supabase import AsyncSupabaseAdapter

    adapter = AsyncSupabaseAdapter(
        url="https://xyzproject.supabase.co",
        key="eyJ...",
    )

    rows = await adapter.select("stores", "id, name", filters={"brand_id": "b1"})
    await adapter.close()
"""

import asyncio
from typing import Any

from supabase import AsyncClient, acreate_client


class AsyncSupabaseAdapter:
    """Async Supabase implementation of the ``StoreClient`` protocol.

    Wraps the Supabase Python async client to match the ``StoreClient``
    interface.  The client is initialized lazily on first call using
    ``acreate_client`` protected by an ``asyncio.Lock``.

    PostgREST cannot report whether an upsert inserted or updated, so
    ``upsert`` first inserts with ``ON CONFLICT DO NOTHING``
    (``ignore_duplicates``) -- atomic, returns the row only when it was
    inserted -- and updates by key otherwise.  An update that matches no
    row raises, so the restore records it as a row error.

    Args:
        url: Supabase project URL.
        key: Supabase API key.  Use the service role key: restores write
            across row-level security policies.
    """

    def __init__(self, url: str, key: str) -> None:
        self._url: str = url
        self._key: str = key
        self._client: AsyncClient | None = None
        self._lock: asyncio.Lock = asyncio.Lock()

    async def _get_client(self) -> AsyncClient:
        """Return the shared client, creating it on first use."""
        if self._client is None:
            async with self._lock:
                # Double-check after acquiring lock
                if self._client is None:
                    self._client = await acreate_client(self._url, self._key)
        return self._client

    # ------------------------------------------------------------------
    # Store Methods
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        """Select rows through the PostgREST query builder."""
        client = await self._get_client()
        query = client.table(table).select(columns)

        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)

        if order_by:
            query = query.order(order_by)

        result = await query.execute()
        return result.data or []

    async def upsert(self, table: str, data: dict, conflict: str = "id") -> bool:
        """Insert or update one row keyed by ``conflict``."""
        if conflict not in data:
            raise ValueError(f"Upsert data for {table} has no '{conflict}' value")

        client = await self._get_client()
        inserted = await (
            client.table(table)
            .upsert(data, on_conflict=conflict, ignore_duplicates=True)
            .execute()
        )
        if inserted.data:
            return True

        changes = {k: v for k, v in data.items() if k != conflict}
        if changes:
            updated = await (
                client.table(table)
                .update(changes)
                .eq(conflict, data[conflict])
                .execute()
            )
            if not updated.data:
                raise RuntimeError(
                    f"Update of {table} {conflict}={data[conflict]} affected no rows"
                )
        return False

    async def close(self) -> None:
        """Close the client if one was created."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
