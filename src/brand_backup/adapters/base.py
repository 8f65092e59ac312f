"""Store client protocol definition.

Defines the ``StoreClient`` Protocol that all adapters must implement.
All methods are ``async def`` -- the library is async-first.

Usage:
    from brand_backup.adapters.base import StoreClient

    async def do_work(client: StoreClient) -> None:
        rows = await client.select("stores", "id, name", filters={"brand_id": "b1"})
        inserted = await client.upsert("stores", {"id": "s1", "brand_id": "b1"})
        await client.close()
"""

from typing import Any, Protocol


class StoreClient(Protocol):
    """Relational store interface used by export and import.

    All methods are async -- callers must ``await`` every operation.
    """

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        """Select rows from table.

        Args:
            table: Table name.
            columns: Comma-separated column names (e.g., ``"id, name, status"``).
            filters: Optional dict of field=value filters (all must match via AND).
            order_by: Optional column name to sort by.

        Returns:
            List of dicts, one per row.  Empty list if no matches.

        Example:
            rows = await client.select(
                "stores",
                "id, name",
                filters={"brand_id": "brand-1"},
                order_by="name",
            )
        """
        ...

    async def upsert(self, table: str, data: dict, conflict: str = "id") -> bool:
        """Insert a row, or update it in place when ``conflict`` collides.

        The insert-or-update must be a single atomic statement so that two
        concurrent imports of the same row cannot both insert.

        Args:
            table: Table name.
            data: Dict of field=value pairs, including the ``conflict`` column.
            conflict: Column whose uniqueness decides insert vs. update.

        Returns:
            ``True`` if the row was inserted, ``False`` if an existing row
            was updated.

        Raises:
            Exception: On constraint violations or invalid values.

        Example:
            inserted = await client.upsert("stores", {
                "id": "s1",
                "brand_id": "brand-1",
                "name": "Downtown",
            })
        """
        ...

    async def close(self) -> None:
        """Close database connection and clean up resources."""
        ...
