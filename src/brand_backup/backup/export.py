"""Brand export: read every registry table for one brand into a snapshot.

Usage:
    from brand_backup.backup.export import export_brand, export_to_file
    from brand_backup.backup.registry import default_registry

    snapshot = await export_brand(adapter, default_registry(), brand_id="b1")

    path = await export_to_file(adapter, default_registry(), brand_id="b1")
"""

import logging
from datetime import datetime
from pathlib import Path

from brand_backup.adapters.base import StoreClient
from brand_backup.backup.codec import build_snapshot, write_snapshot
from brand_backup.backup.models import Row, Snapshot, TableRegistry
from brand_backup.errors import TableReadError, ValidationError

logger = logging.getLogger(__name__)


async def export_brand(
    adapter: StoreClient,
    registry: TableRegistry,
    brand_id: str,
    exported_at: datetime | None = None,
) -> Snapshot:
    """Export every registry table scoped to ``brand_id``.

    Tables are read one at a time in processing order, selecting exactly
    the registered columns where the table's tenant column equals
    ``brand_id``.  A table with no rows is stored as an empty list.

    Export is all-or-nothing: a partial snapshot cannot be trusted for a
    later restore, so the first failing table aborts the call.  There
    are no retries; callers may retry the whole export.

    Args:
        adapter: Store adapter implementing ``StoreClient``.
        registry: Table catalog.
        brand_id: Brand to export.
        exported_at: Timestamp recorded in the snapshot (default: now, UTC).

    Returns:
        Complete ``Snapshot`` for the brand.

    Raises:
        ValidationError: If ``brand_id`` is empty.
        TableReadError: If reading any table fails.
    """
    if not brand_id:
        raise ValidationError("Missing brandId")

    logger.info("Exporting brand %s (%d tables)", brand_id, len(registry.tables))

    payload: dict[str, list[Row]] = {}
    for spec in registry.processing_order():
        try:
            rows = await adapter.select(
                spec.name,
                ", ".join(spec.columns),
                filters={spec.tenant_field: brand_id},
                order_by=spec.pk,
            )
        except Exception as e:
            logger.error("Export of brand %s failed on %s: %s", brand_id, spec.name, e)
            raise TableReadError(spec.name, e) from e

        payload[spec.name] = list(rows or [])
        logger.debug("Exported %d rows from %s", len(payload[spec.name]), spec.name)

    snapshot = build_snapshot(brand_id, payload, registry, exported_at=exported_at)
    logger.info(
        "Exported brand %s: %d rows",
        brand_id,
        sum(len(rows) for rows in payload.values()),
    )
    return snapshot


async def export_to_file(
    adapter: StoreClient,
    registry: TableRegistry,
    brand_id: str,
    output_path: str | None = None,
) -> str:
    """Export a brand and write the snapshot to a JSON file.

    Args:
        adapter: Store adapter implementing ``StoreClient``.
        registry: Table catalog.
        brand_id: Brand to export.
        output_path: Path to save the snapshot.  When ``None``, generates a
            timestamped path under ``./backups/``.

    Returns:
        Path of the written file.
    """
    if output_path is None:
        timestamp = datetime.now().strftime("%Y-%m-%d-%H%M")
        output_path = str(Path.cwd() / "backups" / f"brand-{brand_id}-{timestamp}.json")

    snapshot = await export_brand(adapter, registry, brand_id)
    return write_snapshot(snapshot, output_path)
