"""Row sanitization before a snapshot row is written back.

One principle for every table: never write an owner or actor field that
points at an identity guaranteed not to exist in the target brand.

- The tenant field is always rebound to the target brand.
- ``actor_fields`` (e.g. ``cash_registers.opened_by``) are required: a
  missing or blank value becomes the importing caller.
- ``nullable_actor_fields`` (e.g. ``cash_registers.closed_by``) may be
  empty: a blank string becomes a real ``NULL``.
- Keys that are not exported columns of the table are dropped.
"""

from typing import Any

from brand_backup.backup.models import Row, TableSpec


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


def sanitize(
    spec: TableSpec,
    row: Row,
    target_brand_id: str,
    fallback_owner_id: str,
) -> Row:
    """Return a copy of ``row`` that is safe to upsert into ``spec.name``.

    Args:
        spec: Registry entry of the table being restored.
        row: Row from the snapshot payload.  Not modified.
        target_brand_id: Brand the row is restored into.
        fallback_owner_id: Identity of the caller performing the import.

    Returns:
        New row dict restricted to ``spec.columns``.
    """
    clean = {k: v for k, v in row.items() if k in spec.columns}
    clean[spec.tenant_field] = target_brand_id

    for field in spec.actor_fields:
        value = clean.get(field)
        if not isinstance(value, str) or _is_blank(value):
            clean[field] = fallback_owner_id

    for field in spec.nullable_actor_fields:
        if _is_blank(clean.get(field)):
            clean[field] = None

    return clean
