"""Tests for the table registry and its models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from brand_backup.backup.models import TableRegistry, TableSpec
from brand_backup.backup.registry import BRAND_TABLES, default_registry


class TestDefaultRegistry:
    """The shipped registry of brand-scoped tables."""

    def test_processing_order_starts_with_stores(self) -> None:
        """Stores have no dependencies and are restored first."""
        order = [spec.name for spec in default_registry().processing_order()]
        assert order[0] == "stores"
        assert order[-1] == "checklist_history"
        assert len(order) == 21

    def test_parents_before_children(self) -> None:
        """Every referenced table precedes its referrers."""
        order = [spec.name for spec in default_registry().processing_order()]
        for parent, child in [
            ("stores", "products"),
            ("categories", "products"),
            ("suppliers", "products"),
            ("products", "recipes"),
            ("products", "inventory_items"),
            ("checklist_templates", "checklists"),
            ("checklists", "checklist_executions"),
            ("invoices", "purchase_orders"),
            ("stores", "cash_registers"),
            ("waste_reasons", "waste_records"),
        ]:
            assert order.index(parent) < order.index(child), (parent, child)

    def test_ranks_are_unique(self) -> None:
        """No two tables share a rank, so the order is deterministic."""
        ranks = [spec.rank for spec in BRAND_TABLES]
        assert len(ranks) == len(set(ranks))

    def test_every_table_has_id_and_brand_id(self) -> None:
        """Primary key and tenant column are exported for every table."""
        for spec in BRAND_TABLES:
            assert "id" in spec.columns
            assert "brand_id" in spec.columns

    def test_actor_fields(self) -> None:
        """Owner columns are declared where the data has them."""
        registry = default_registry()
        cash = registry.get("cash_registers")
        assert cash.actor_fields == ("opened_by",)
        assert cash.nullable_actor_fields == ("closed_by",)
        assert registry.get("checklists").nullable_actor_fields == ("completed_by",)
        assert registry.get("waste_records").nullable_actor_fields == ("user_id",)
        assert registry.get("stores").actor_fields == ()

    def test_columns_for(self) -> None:
        """Exported columns come back in declaration order."""
        columns = default_registry().columns_for("categories")
        assert columns == ("id", "brand_id", "name")

    def test_unknown_table_raises_key_error(self) -> None:
        """An unregistered table name is a programming error."""
        with pytest.raises(KeyError):
            default_registry().get("users")
        with pytest.raises(KeyError):
            default_registry().columns_for("users")

    def test_contains(self) -> None:
        registry = default_registry()
        assert "products" in registry
        assert "users" not in registry


class TestRegistryModels:
    """Validation of hand-built registries."""

    def test_processing_order_ignores_declaration_order(self, small_registry) -> None:
        """Tables are sorted by rank, not by position in the tuple."""
        names = [spec.name for spec in small_registry.processing_order()]
        assert names == ["stores", "products", "movements"]

    def test_duplicate_table_rejected(self) -> None:
        """A table may be registered only once."""
        spec = TableSpec(name="stores", rank=0, columns=("id", "brand_id"))
        with pytest.raises(PydanticValidationError, match="Duplicate table"):
            TableRegistry(tables=(spec, spec.model_copy(update={"rank": 1})))

    def test_actor_field_must_be_exported(self) -> None:
        """Actor fields outside the column list are rejected."""
        with pytest.raises(PydanticValidationError, match="not an exported column"):
            TableSpec(
                name="logs",
                rank=0,
                columns=("id", "brand_id"),
                actor_fields=("user_id",),
            )

    def test_spec_is_immutable(self) -> None:
        """Registry entries cannot be changed after construction."""
        spec = TableSpec(name="stores", rank=0, columns=("id", "brand_id"))
        with pytest.raises(PydanticValidationError):
            spec.rank = 5
