"""Backup models: table catalog, snapshot file, and import report.

The table catalog is declared once as an immutable ``TableRegistry`` and
passed explicitly to the export and import engines.

Usage:
    from brand_backup.backup.models import TableRegistry, TableSpec

    registry = TableRegistry(tables=(
        TableSpec(name="stores", columns=("id", "brand_id", "name"), rank=0),
        TableSpec(name="products", columns=("id", "brand_id", "store_id"), rank=1),
        TableSpec(
            name="movements",
            columns=("id", "brand_id", "product_id", "user_id"),
            rank=2,
            nullable_actor_fields=("user_id",),
        ),
    ))

    for spec in registry.processing_order():
        print(spec.name, registry.columns_for(spec.name))
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

Row = dict[str, Any]


# ============================================================================
# Table Registry
# ============================================================================


class TableSpec(BaseModel):
    """Definition of one backup-eligible table."""

    model_config = ConfigDict(frozen=True)

    name: str                                       # table name
    columns: tuple[str, ...]                        # exported columns, in order
    rank: int                                       # dependency rank (lower first)
    pk: str = "id"                                  # primary key column
    tenant_field: str = "brand_id"                  # tenant-owning column
    actor_fields: tuple[str, ...] = ()              # blank -> importing caller
    nullable_actor_fields: tuple[str, ...] = ()     # blank -> NULL

    @model_validator(mode="after")
    def _check_columns(self) -> "TableSpec":
        required = (self.pk, self.tenant_field)
        for field in required + self.actor_fields + self.nullable_actor_fields:
            if field not in self.columns:
                raise ValueError(f"{self.name}: '{field}' is not an exported column")
        return self


class TableRegistry(BaseModel):
    """Immutable catalog of backup tables.

    Lookups of unknown tables raise ``KeyError`` -- a table name that is
    not registered is a programming error, not a runtime condition.
    """

    model_config = ConfigDict(frozen=True)

    tables: tuple[TableSpec, ...]

    @model_validator(mode="after")
    def _check_unique(self) -> "TableRegistry":
        seen: set[str] = set()
        for spec in self.tables:
            if spec.name in seen:
                raise ValueError(f"Duplicate table in registry: {spec.name}")
            seen.add(spec.name)
        return self

    def get(self, table: str) -> TableSpec:
        """Return the ``TableSpec`` for ``table``."""
        for spec in self.tables:
            if spec.name == table:
                return spec
        raise KeyError(f"Unknown backup table: {table}")

    def columns_for(self, table: str) -> tuple[str, ...]:
        """Return the ordered exported columns of ``table``."""
        return self.get(table).columns

    def processing_order(self) -> list[TableSpec]:
        """Return tables sorted ascending by rank (stable on declaration)."""
        return sorted(self.tables, key=lambda spec: spec.rank)

    def names(self) -> list[str]:
        """Return table names in processing order."""
        return [spec.name for spec in self.processing_order()]

    def __contains__(self, table: object) -> bool:
        return any(spec.name == table for spec in self.tables)


# ============================================================================
# Snapshot File
# ============================================================================


class SnapshotMeta(BaseModel):
    """Snapshot header.

    Fields are optional at parse time so that a malformed header is
    reported by ``check_snapshot`` with a specific message rather than a
    generic parse failure.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str | None = None
    exported_at: str | None = Field(
        default=None,
        validation_alias=AliasChoices("exportedAt", "exported_at"),
        serialization_alias="exportedAt",
    )
    brand_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("brandId", "tenantId", "brand_id"),
        serialization_alias="brandId",
    )
    app: str | None = None


class Snapshot(BaseModel):
    """A versioned export of every registry table for one brand."""

    meta: SnapshotMeta
    payload: dict[str, list[Row]] | None = None

    def rows(self, table: str) -> list[Row]:
        """Return the rows stored for ``table`` (empty when absent)."""
        if not self.payload:
            return []
        return self.payload.get(table) or []


# ============================================================================
# Import Report
# ============================================================================


class RowError(BaseModel):
    """A single row that failed to import."""

    model_config = ConfigDict(populate_by_name=True)

    row_id: str = Field(alias="rowId")
    message: str


class TableOutcome(BaseModel):
    """Result of restoring one table."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[RowError] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        """Rows that reached the store (created + updated)."""
        return self.created + self.updated


class ImportReport(BaseModel):
    """Per-table outcomes of one import call."""

    tables: dict[str, TableOutcome] = Field(default_factory=dict)

    @classmethod
    def merge(cls, outcomes: list[tuple[str, TableOutcome]]) -> "ImportReport":
        """Build a report from ``(table, outcome)`` pairs, in order."""
        return cls(tables=dict(outcomes))

    def __getitem__(self, table: str) -> TableOutcome:
        return self.tables[table]

    @property
    def total_errors(self) -> int:
        """Total failed rows across all tables."""
        return sum(len(outcome.errors) for outcome in self.tables.values())

    @property
    def has_errors(self) -> bool:
        """Whether any table recorded a row failure."""
        return self.total_errors > 0

    @property
    def totals(self) -> dict[str, int]:
        """Summed created/updated/skipped/failed counts."""
        return {
            "created": sum(o.created for o in self.tables.values()),
            "updated": sum(o.updated for o in self.tables.values()),
            "skipped": sum(o.skipped for o in self.tables.values()),
            "failed": self.total_errors,
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize as the wire mapping ``{table: {created, ...}}``."""
        return {
            name: outcome.model_dump(by_alias=True)
            for name, outcome in self.tables.items()
        }

