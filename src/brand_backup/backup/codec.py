"""Snapshot file format: build, encode, decode, check, read and write.

A snapshot is a JSON document::

    {
      "meta": {"version": "1.0", "exportedAt": "...", "brandId": "...",
               "app": "operus-backup"},
      "payload": {"stores": [...], "categories": [...], ...}
    }

``payload`` holds one list of rows per registry table.  Files are
produced only by export and consumed only by import; both go through
this module.

Usage:
    from brand_backup.backup.codec import read_snapshot, check_snapshot

    snapshot = read_snapshot("backups/brand-b1.json")
    check_snapshot(snapshot, target_brand_id="b1")
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pydantic

from brand_backup.backup.models import Row, Snapshot, SnapshotMeta, TableRegistry
from brand_backup.errors import ValidationError

BACKUP_VERSION = "1.0"
BACKUP_APP_NAME = "operus-backup"


def build_snapshot(
    brand_id: str,
    payload: dict[str, list[Row]],
    registry: TableRegistry,
    exported_at: datetime | None = None,
) -> Snapshot:
    """Assemble a snapshot holding every registry table.

    Tables missing from ``payload`` are stored as empty lists.
    """
    exported_at = exported_at or datetime.now(timezone.utc)
    return Snapshot(
        meta=SnapshotMeta(
            version=BACKUP_VERSION,
            exported_at=exported_at.isoformat(),
            brand_id=brand_id,
            app=BACKUP_APP_NAME,
        ),
        payload={name: list(payload.get(name, [])) for name in registry.names()},
    )


def encode_snapshot(snapshot: Snapshot) -> dict[str, Any]:
    """Convert a snapshot to its JSON document (camelCase meta keys)."""
    return snapshot.model_dump(mode="json", by_alias=True)


def decode_snapshot(data: Any) -> Snapshot:
    """Parse a JSON document into a ``Snapshot``.

    Only the shape is checked here; version, producer and brand are
    checked by ``check_snapshot``.

    Raises:
        ValidationError: If the document is not a snapshot.
    """
    if isinstance(data, Snapshot):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Backup file must be a JSON object")
    if not isinstance(data.get("meta"), dict):
        raise ValidationError("Backup file missing meta")

    payload = data.get("payload")
    if payload is not None:
        if not isinstance(payload, dict):
            raise ValidationError("Backup payload must be an object of tables")
        for table, rows in payload.items():
            if rows is None:
                continue
            if not isinstance(rows, list):
                raise ValidationError(f"Backup table '{table}' must be a list of rows")
            for row in rows:
                if not isinstance(row, dict):
                    raise ValidationError(f"Backup table '{table}' contains a non-object row")

    try:
        return Snapshot.model_validate(
            {
                "meta": data["meta"],
                "payload": (
                    {t: rows or [] for t, rows in payload.items()}
                    if payload is not None
                    else None
                ),
            }
        )
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid backup file: {e}") from e


def check_snapshot(snapshot: Snapshot, target_brand_id: str) -> None:
    """Reject a snapshot that must not be imported into ``target_brand_id``.

    Raises:
        ValidationError: On unsupported version, foreign producer, brand
            mismatch, or missing payload.
    """
    if not target_brand_id:
        raise ValidationError("Missing required field: brandId")
    meta = snapshot.meta
    if meta.version != BACKUP_VERSION:
        raise ValidationError(
            f"Unsupported backup version. Expected {BACKUP_VERSION}"
        )
    if meta.app != BACKUP_APP_NAME:
        raise ValidationError("Invalid backup file source")
    if meta.brand_id != target_brand_id:
        raise ValidationError("Backup brand does not match selected brand")
    if snapshot.payload is None:
        raise ValidationError("Backup file missing payload")


def write_snapshot(snapshot: Snapshot, path: str | Path) -> str:
    """Write a snapshot as indented JSON, creating parent directories.

    Returns:
        The path written, as a string.
    """
    path_obj = Path(path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    with open(path_obj, "w") as f:
        json.dump(encode_snapshot(snapshot), f, indent=2, default=str)
    return str(path_obj)


def read_snapshot(path: str | Path) -> Snapshot:
    """Read and decode a snapshot file.

    Raises:
        ValidationError: If the file is missing, not JSON, or not a snapshot.
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ValidationError(f"Backup file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return decode_snapshot(data)


def validate_snapshot_file(path: str | Path, registry: TableRegistry) -> dict:
    """Validate a snapshot file without touching the database.

    Checks the header (version, producer, brand present), the payload
    shape, and each row: ids must be strings or integers and unique
    within a table.  Rows without an ``id``, and tables or columns the
    registry does not know, are reported as warnings -- import skips or
    ignores them.

    Returns:
        Dict with ``valid`` (bool), ``errors`` (list[str]),
        ``warnings`` (list[str]) and ``counts`` (rows per table).

    Example:
        report = validate_snapshot_file("backups/brand-b1.json", registry)
        if report["errors"]:
            raise SystemExit(1)
    """
    errors: list[str] = []
    warnings: list[str] = []
    counts: dict[str, int] = {}

    try:
        snapshot = read_snapshot(path)
    except ValidationError as e:
        errors.append(str(e))
        return {"valid": False, "errors": errors, "warnings": warnings, "counts": counts}

    meta = snapshot.meta
    if meta.version != BACKUP_VERSION:
        errors.append(
            f"Unsupported backup version '{meta.version}' (expected '{BACKUP_VERSION}')"
        )
    if meta.app != BACKUP_APP_NAME:
        errors.append(f"Invalid backup file source '{meta.app}'")
    if not meta.brand_id:
        errors.append("Missing metadata field: brandId")
    if not meta.exported_at:
        warnings.append("Missing metadata field: exportedAt")
    if snapshot.payload is None:
        errors.append("Backup file missing payload")
        return {"valid": False, "errors": errors, "warnings": warnings, "counts": counts}

    for table in snapshot.payload:
        if table not in registry:
            warnings.append(f"Unknown table '{table}' will be ignored")

    for spec in registry.processing_order():
        if spec.name not in snapshot.payload:
            warnings.append(f"Missing table '{spec.name}' (treated as empty)")
        rows = snapshot.rows(spec.name)
        counts[spec.name] = len(rows)
        seen: set = set()
        unknown_columns: set[str] = set()
        for index, row in enumerate(rows):
            pk_value = row.get(spec.pk)
            if pk_value is None or pk_value == "":
                warnings.append(
                    f"{spec.name} row {index} missing '{spec.pk}' (will be skipped)"
                )
            elif not isinstance(pk_value, (str, int)):
                errors.append(
                    f"{spec.name} row {index} has an invalid {spec.pk} {pk_value!r}"
                )
            elif pk_value in seen:
                errors.append(f"{spec.name} has duplicate {spec.pk} '{pk_value}'")
            else:
                seen.add(pk_value)
            unknown_columns.update(k for k in row if k not in spec.columns)
        if unknown_columns:
            warnings.append(
                f"{spec.name} has unknown columns (ignored): "
                f"{', '.join(sorted(unknown_columns))}"
            )

    return {"valid": not errors, "errors": errors, "warnings": warnings, "counts": counts}
