"""Shared fixtures: an in-memory store and small snapshot helpers."""

from typing import Any

import pytest

from brand_backup.backup.codec import BACKUP_APP_NAME, BACKUP_VERSION
from brand_backup.backup.models import TableRegistry, TableSpec
from brand_backup.backup.registry import default_registry


class FakeStore:
    """In-memory ``StoreClient`` keyed by table and primary key.

    Records every write in ``writes`` as ``(table, id)`` so tests can
    assert ordering and the absence of writes.
    """

    def __init__(
        self,
        fail_ids: set[str] | None = None,
        fail_select_tables: set[str] | None = None,
    ) -> None:
        self.rows: dict[str, dict[Any, dict]] = {}
        self.writes: list[tuple[str, Any]] = []
        self.selects: list[tuple[str, str, dict | None]] = []
        self.order_by: dict[str, str | None] = {}
        self.fail_ids = fail_ids or set()
        self.fail_select_tables = fail_select_tables or set()
        self.closed = False

    def seed(self, table: str, *rows: dict) -> None:
        for row in rows:
            self.rows.setdefault(table, {})[row["id"]] = dict(row)

    def table(self, table: str) -> list[dict]:
        return list(self.rows.get(table, {}).values())

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        self.selects.append((table, columns, filters))
        self.order_by[table] = order_by
        if table in self.fail_select_tables:
            raise RuntimeError(f"relation {table} is unavailable")

        matching = [
            row
            for row in self.rows.get(table, {}).values()
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            matching.sort(key=lambda row: row.get(order_by))
        if columns.strip() == "*":
            return [dict(row) for row in matching]
        names = [c.strip() for c in columns.split(",")]
        return [{name: row.get(name) for name in names} for row in matching]

    async def upsert(self, table: str, data: dict, conflict: str = "id") -> bool:
        key = data[conflict]
        if key in self.fail_ids:
            raise RuntimeError(f"violates foreign key constraint on {table}")
        self.writes.append((table, key))
        existing = self.rows.setdefault(table, {})
        inserted = key not in existing
        existing[key] = {**existing.get(key, {}), **data}
        return inserted

    async def close(self) -> None:
        self.closed = True


def make_snapshot(
    brand_id: str | None,
    payload: dict[str, list[dict]] | None,
    version: str = BACKUP_VERSION,
    app: str = BACKUP_APP_NAME,
) -> dict:
    """Build a snapshot JSON document by hand."""
    doc: dict = {
        "meta": {
            "version": version,
            "exportedAt": "2026-01-02T03:04:05+00:00",
            "brandId": brand_id,
            "app": app,
        },
    }
    if payload is not None:
        doc["payload"] = payload
    return doc


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def registry() -> TableRegistry:
    return default_registry()


@pytest.fixture
def small_registry() -> TableRegistry:
    """Three tables with a dependency chain and actor fields."""
    return TableRegistry(
        tables=(
            TableSpec(
                name="movements",
                rank=2,
                columns=("id", "brand_id", "product_id", "user_id"),
                nullable_actor_fields=("user_id",),
            ),
            TableSpec(name="stores", rank=0, columns=("id", "brand_id", "name")),
            TableSpec(
                name="products",
                rank=1,
                columns=("id", "brand_id", "store_id", "name"),
            ),
        )
    )
