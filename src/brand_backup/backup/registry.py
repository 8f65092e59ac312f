"""Default table registry for brand backups.

Tables are declared in dependency order: a table only references tables
with a lower rank (stores before inventory items before inventory
movements).  Columns are the exact set written to -- and accepted from --
a snapshot file.
"""

from brand_backup.backup.models import TableRegistry, TableSpec

BRAND_TABLES: tuple[TableSpec, ...] = (
    TableSpec(
        name="stores",
        rank=0,
        columns=(
            "id", "brand_id", "name", "address", "contact", "manager",
            "is_active", "image_url", "plan", "plan_value",
        ),
    ),
    TableSpec(name="categories", rank=1, columns=("id", "brand_id", "name")),
    TableSpec(
        name="suppliers",
        rank=2,
        columns=("id", "brand_id", "name", "contact", "email"),
    ),
    TableSpec(name="cost_centers", rank=3, columns=("id", "brand_id", "name")),
    TableSpec(name="waste_reasons", rank=4, columns=("id", "brand_id", "name")),
    TableSpec(
        name="waste_variants",
        rank=5,
        columns=("id", "brand_id", "name", "product_ids"),
    ),
    TableSpec(
        name="products",
        rank=6,
        columns=(
            "id", "brand_id", "name", "sku", "supplier_id", "category_id",
            "cost_price", "selling_price", "barcode", "image_url", "unit",
        ),
    ),
    TableSpec(
        name="licenses",
        rank=7,
        columns=(
            "id", "brand_id", "name", "store_ids", "description", "periodicity",
            "alert_days", "status", "renewals", "contacts", "attachments",
            "observations",
        ),
    ),
    TableSpec(
        name="recipes",
        rank=8,
        columns=(
            "id", "brand_id", "name", "final_product_id", "ingredients",
            "expected_yield", "is_active",
        ),
    ),
    TableSpec(
        name="inventory_items",
        rank=9,
        columns=(
            "id", "brand_id", "store_id", "product_id", "current_quantity",
            "min_quantity", "alert_warning", "alert_critical", "last_updated",
        ),
    ),
    TableSpec(
        name="checklist_templates",
        rank=10,
        columns=(
            "id", "brand_id", "name", "description", "type", "items",
            "associated_stores", "frequency", "is_active", "usage_count",
            "last_edited_at",
        ),
    ),
    TableSpec(
        name="checklists",
        rank=11,
        columns=(
            "id", "brand_id", "store_id", "type", "tasks", "completed_at",
            "completed_by",
        ),
        nullable_actor_fields=("completed_by",),
    ),
    TableSpec(
        name="invoices",
        rank=12,
        columns=(
            "id", "brand_id", "supplier_id", "invoice_number", "amount",
            "status", "issue_date", "due_date", "paid_date", "store_id",
            "description", "order_number", "cost_center", "currency",
            "direct_debit", "payment_method", "financial_institution",
            "observations",
        ),
    ),
    TableSpec(
        name="purchase_orders",
        rank=13,
        columns=(
            "id", "brand_id", "supplier_id", "user_id", "store_ids", "items",
            "has_invoice_management", "has_transit_generated", "invoice_id",
            "observation",
        ),
        nullable_actor_fields=("user_id",),
    ),
    TableSpec(
        name="cash_registers",
        rank=14,
        columns=(
            "id", "brand_id", "store_id", "opening_balance", "closing_balance",
            "opened_at", "closed_at", "opened_by", "closed_by", "status",
            "deposited", "closure_details",
        ),
        actor_fields=("opened_by",),
        nullable_actor_fields=("closed_by",),
    ),
    TableSpec(
        name="inventory_movements",
        rank=15,
        columns=(
            "id", "brand_id", "product_id", "from_store_id", "to_store_id",
            "quantity", "status", "user_id", "type", "created_at",
        ),
        nullable_actor_fields=("user_id",),
    ),
    TableSpec(
        name="operation_logs",
        rank=16,
        columns=(
            "id", "brand_id", "product_id", "store_id", "user_id", "quantity",
            "action_type", "notes", "created_at",
        ),
        nullable_actor_fields=("user_id",),
    ),
    TableSpec(
        name="production_records",
        rank=17,
        columns=(
            "id", "brand_id", "recipe_id", "store_id", "user_id",
            "actual_yield", "ingredients_used", "leftovers", "notes",
            "created_at",
        ),
        nullable_actor_fields=("user_id",),
    ),
    TableSpec(
        name="waste_records",
        rank=18,
        columns=(
            "id", "brand_id", "product_id", "variant_id", "store_id",
            "user_id", "user_name", "quantity", "reason_id", "comment",
            "created_at",
        ),
        nullable_actor_fields=("user_id",),
    ),
    TableSpec(
        name="checklist_executions",
        rank=19,
        columns=(
            "id", "brand_id", "template_id", "template_name", "store_id",
            "user_id", "start_time", "end_time", "status", "responses",
            "current_item_index",
        ),
        nullable_actor_fields=("user_id",),
    ),
    TableSpec(
        name="checklist_history",
        rank=20,
        columns=(
            "id", "brand_id", "template_name", "type", "store_name",
            "user_name", "start_time", "end_time", "duration", "total_items",
            "completed_items", "responses",
        ),
    ),
)


def default_registry() -> TableRegistry:
    """Return the registry of every brand-scoped table."""
    return TableRegistry(tables=BRAND_TABLES)
