"""Brand backup and restore driven by a declarative table registry.

Usage:
    from brand_backup.backup import default_registry, export_brand, import_brand
    from brand_backup.backup import read_snapshot, validate_snapshot_file
"""

from brand_backup.backup.codec import (
    BACKUP_APP_NAME,
    BACKUP_VERSION,
    check_snapshot,
    decode_snapshot,
    encode_snapshot,
    read_snapshot,
    validate_snapshot_file,
    write_snapshot,
)
from brand_backup.backup.export import export_brand, export_to_file
from brand_backup.backup.models import (
    ImportReport,
    RowError,
    Snapshot,
    SnapshotMeta,
    TableOutcome,
    TableRegistry,
    TableSpec,
)
from brand_backup.backup.registry import default_registry
from brand_backup.backup.restore import import_brand, import_from_file, restore_table
from brand_backup.backup.sanitizer import sanitize

__all__ = [
    "BACKUP_APP_NAME",
    "BACKUP_VERSION",
    "ImportReport",
    "RowError",
    "Snapshot",
    "SnapshotMeta",
    "TableOutcome",
    "TableRegistry",
    "TableSpec",
    "check_snapshot",
    "decode_snapshot",
    "default_registry",
    "encode_snapshot",
    "export_brand",
    "export_to_file",
    "import_brand",
    "import_from_file",
    "read_snapshot",
    "restore_table",
    "sanitize",
    "validate_snapshot_file",
    "write_snapshot",
]
