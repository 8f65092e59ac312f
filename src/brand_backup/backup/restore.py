"""Brand import: replay a snapshot into a brand's tables.

Validation happens up front and is fatal (nothing is written).  After
that, restore is best-effort: each row is sanitized and upserted by
``id`` on its own, failures are recorded in the report, and processing
continues.  Re-running an import is safe -- rows that already exist are
updated in place, never duplicated.

Usage:
    from brand_backup.backup.restore import import_brand, import_from_file
    from brand_backup.backup.registry import default_registry

    report = await import_brand(
        adapter,
        default_registry(),
        target_brand_id="b1",
        snapshot=snapshot,
        caller_id="user-1",
    )
    if report.has_errors:
        ...
"""

import logging
from pathlib import Path
from typing import Any

from brand_backup.adapters.base import StoreClient
from brand_backup.backup.codec import check_snapshot, decode_snapshot, read_snapshot
from brand_backup.backup.models import (
    ImportReport,
    Row,
    RowError,
    Snapshot,
    TableOutcome,
    TableRegistry,
    TableSpec,
)
from brand_backup.backup.sanitizer import sanitize

logger = logging.getLogger(__name__)


async def import_brand(
    adapter: StoreClient,
    registry: TableRegistry,
    target_brand_id: str,
    snapshot: Snapshot | dict[str, Any],
    caller_id: str,
    dry_run: bool = False,
) -> ImportReport:
    """Restore a snapshot into ``target_brand_id``.

    Tables are restored strictly one after another in registry order --
    not file order -- so referenced rows exist before their referrers.
    Payload tables the registry does not know are ignored.

    Args:
        adapter: Store adapter implementing ``StoreClient``.
        registry: Table catalog.
        target_brand_id: Brand to restore into; must equal the brand
            recorded in the snapshot.
        snapshot: ``Snapshot`` or its decoded JSON document.
        caller_id: Identity performing the import, used for required
            actor fields that are blank in the file.
        dry_run: When ``True``, validate and sanitize without writing.
            Rows are counted as created or updated based on a read.

    Returns:
        ``ImportReport`` with one ``TableOutcome`` per registry table.

    Raises:
        ValidationError: If the snapshot is malformed, from another
            producer or version, for another brand, or has no payload.
    """
    snapshot = decode_snapshot(snapshot)
    check_snapshot(snapshot, target_brand_id)

    for table in snapshot.payload or {}:
        if table not in registry:
            logger.warning("Ignoring unknown table in backup payload: %s", table)

    logger.info(
        "Importing backup into brand %s (exported %s)%s",
        target_brand_id,
        snapshot.meta.exported_at,
        " [dry run]" if dry_run else "",
    )

    outcomes: list[tuple[str, TableOutcome]] = []
    for spec in registry.processing_order():
        outcome = await restore_table(
            adapter,
            spec,
            snapshot.rows(spec.name),
            target_brand_id=target_brand_id,
            caller_id=caller_id,
            dry_run=dry_run,
        )
        outcomes.append((spec.name, outcome))

    report = ImportReport.merge(outcomes)
    logger.info("Import into brand %s finished: %s", target_brand_id, report.totals)
    return report


async def restore_table(
    adapter: StoreClient,
    spec: TableSpec,
    rows: list[Row],
    target_brand_id: str,
    caller_id: str,
    dry_run: bool = False,
) -> TableOutcome:
    """Restore the rows of a single table.

    Rows without a primary key are skipped.  Any failure while writing a
    row is recorded as a ``RowError`` and the loop moves on.

    Args:
        adapter: Store adapter.
        spec: Registry entry of the table.
        rows: Rows from the snapshot payload.
        target_brand_id: Brand to restore into.
        caller_id: Fallback identity for required actor fields.
        dry_run: Whether to skip actual database writes.

    Returns:
        ``TableOutcome`` for this table.
    """
    outcome = TableOutcome()

    for raw_row in rows:
        row_id = raw_row.get(spec.pk)
        if row_id is None or row_id == "":
            outcome.skipped += 1
            continue

        row = sanitize(spec, raw_row, target_brand_id, caller_id)
        try:
            if dry_run:
                existing = await adapter.select(
                    spec.name, spec.pk, filters={spec.pk: row_id}
                )
                inserted = not existing
            else:
                inserted = await adapter.upsert(spec.name, row, conflict=spec.pk)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning("Failed to restore %s id %s: %s", spec.name, row_id, message)
            outcome.errors.append(RowError(row_id=str(row_id), message=message))
            continue

        if inserted:
            outcome.created += 1
        else:
            outcome.updated += 1

    if rows:
        logger.debug(
            "Restored %s: %d created, %d updated, %d skipped, %d failed",
            spec.name,
            outcome.created,
            outcome.updated,
            outcome.skipped,
            len(outcome.errors),
        )
    return outcome


async def import_from_file(
    adapter: StoreClient,
    registry: TableRegistry,
    backup_path: str | Path,
    target_brand_id: str,
    caller_id: str,
    dry_run: bool = False,
) -> ImportReport:
    """Read a snapshot file and import it.  See ``import_brand``."""
    snapshot = read_snapshot(backup_path)
    return await import_brand(
        adapter,
        registry,
        target_brand_id,
        snapshot,
        caller_id,
        dry_run=dry_run,
    )
