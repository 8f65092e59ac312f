"""Tests for the snapshot file format."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from brand_backup.backup.codec import (
    BACKUP_APP_NAME,
    BACKUP_VERSION,
    build_snapshot,
    check_snapshot,
    decode_snapshot,
    encode_snapshot,
    read_snapshot,
    validate_snapshot_file,
    write_snapshot,
)
from brand_backup.errors import ValidationError

from conftest import make_snapshot


class TestBuildAndEncode:
    """Snapshots produced by export."""

    def test_meta_fields(self, small_registry) -> None:
        """Version, producer, brand and timestamp are recorded."""
        when = datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
        snapshot = build_snapshot("b1", {}, small_registry, exported_at=when)

        doc = encode_snapshot(snapshot)

        assert doc["meta"] == {
            "version": BACKUP_VERSION,
            "exportedAt": "2026-03-04T05:06:07+00:00",
            "brandId": "b1",
            "app": BACKUP_APP_NAME,
        }

    def test_every_registry_table_present(self, small_registry) -> None:
        """Tables without rows are stored as empty lists."""
        snapshot = build_snapshot("b1", {"stores": [{"id": "s1"}]}, small_registry)

        assert snapshot.payload == {
            "movements": [],
            "stores": [{"id": "s1"}],
            "products": [],
        }


class TestDecode:
    """Shape checks on incoming documents."""

    def test_accepts_tenant_id_alias(self) -> None:
        """Older files name the brand ``tenantId``."""
        doc = make_snapshot("b1", {})
        doc["meta"]["tenantId"] = doc["meta"].pop("brandId")

        assert decode_snapshot(doc).meta.brand_id == "b1"

    @pytest.mark.parametrize(
        "doc, message",
        [
            ([], "must be a JSON object"),
            ({"payload": {}}, "missing meta"),
            ({"meta": {}, "payload": []}, "payload must be an object"),
            ({"meta": {}, "payload": {"stores": {}}}, "must be a list"),
            ({"meta": {}, "payload": {"stores": ["s1"]}}, "non-object row"),
        ],
    )
    def test_rejects_malformed(self, doc, message) -> None:
        with pytest.raises(ValidationError, match=message):
            decode_snapshot(doc)

    def test_null_table_treated_as_empty(self) -> None:
        snapshot = decode_snapshot(make_snapshot("b1", {"stores": None}))
        assert snapshot.rows("stores") == []

    def test_missing_table_rows_empty(self) -> None:
        snapshot = decode_snapshot(make_snapshot("b1", {}))
        assert snapshot.rows("products") == []


class TestCheckSnapshot:
    """Rules that decide whether a snapshot may be imported."""

    def test_valid(self) -> None:
        check_snapshot(decode_snapshot(make_snapshot("b1", {})), "b1")

    def test_missing_target_brand(self) -> None:
        with pytest.raises(ValidationError, match="Missing required field: brandId"):
            check_snapshot(decode_snapshot(make_snapshot("b1", {})), "")

    def test_wrong_version(self) -> None:
        snapshot = decode_snapshot(make_snapshot("b1", {}, version="2.0"))
        with pytest.raises(ValidationError, match="Unsupported backup version. Expected 1.0"):
            check_snapshot(snapshot, "b1")

    def test_wrong_app(self) -> None:
        snapshot = decode_snapshot(make_snapshot("b1", {}, app="other-app"))
        with pytest.raises(ValidationError, match="Invalid backup file source"):
            check_snapshot(snapshot, "b1")

    def test_brand_mismatch(self) -> None:
        snapshot = decode_snapshot(make_snapshot("b2", {}))
        with pytest.raises(ValidationError, match="does not match selected brand"):
            check_snapshot(snapshot, "b1")

    def test_missing_payload(self) -> None:
        snapshot = decode_snapshot(make_snapshot("b1", None))
        with pytest.raises(ValidationError, match="missing payload"):
            check_snapshot(snapshot, "b1")


class TestFiles:
    """Reading, writing and offline validation of snapshot files."""

    def test_write_then_read(self, tmp_path: Path, small_registry) -> None:
        """Written files decode to the same snapshot."""
        snapshot = build_snapshot(
            "b1", {"stores": [{"id": "s1", "brand_id": "b1", "name": "Main"}]}, small_registry
        )
        path = write_snapshot(snapshot, tmp_path / "nested" / "b1.json")

        assert Path(path).exists()
        assert read_snapshot(path) == snapshot

    def test_read_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="Backup file not found"):
            read_snapshot(tmp_path / "nope.json")

    def test_read_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError, match="Invalid JSON"):
            read_snapshot(path)

    def test_validate_clean_file(self, tmp_path: Path, small_registry) -> None:
        path = tmp_path / "b1.json"
        path.write_text(json.dumps(make_snapshot(
            "b1",
            {
                "stores": [{"id": "s1", "brand_id": "b1"}],
                "products": [{"id": "p1", "brand_id": "b1"}, {"id": "p2", "brand_id": "b1"}],
                "movements": [],
            },
        )))

        result = validate_snapshot_file(path, small_registry)

        assert result["valid"] is True
        assert result["errors"] == []
        assert result["warnings"] == []
        assert result["counts"] == {"stores": 1, "products": 2, "movements": 0}

    def test_validate_reports_problems(self, tmp_path: Path, small_registry) -> None:
        """Duplicates are errors; missing ids and unknown names are warnings."""
        path = tmp_path / "b1.json"
        path.write_text(json.dumps(make_snapshot(
            "b1",
            {
                "stores": [{"id": "s1"}, {"id": "s1"}],
                "products": [{"name": "no id"}, {"id": "p1", "colour": "red"}],
                "users": [{"id": "u1"}],
            },
        )))

        result = validate_snapshot_file(path, small_registry)

        assert result["valid"] is False
        assert result["errors"] == ["stores has duplicate id 's1'"]
        assert "Unknown table 'users' will be ignored" in result["warnings"]
        assert "Missing table 'movements' (treated as empty)" in result["warnings"]
        assert "products row 0 missing 'id' (will be skipped)" in result["warnings"]
        assert "products has unknown columns (ignored): colour" in result["warnings"]

    def test_validate_reports_structured_ids(self, tmp_path: Path, small_registry) -> None:
        """An id that is a list or object is an error, not a crash."""
        path = tmp_path / "b1.json"
        path.write_text(json.dumps(make_snapshot(
            "b1",
            {"stores": [{"id": ["s1"]}, {"id": {"v": "s2"}}, {"id": "s3"}, {"id": 0}]},
        )))

        result = validate_snapshot_file(path, small_registry)

        assert result["valid"] is False
        assert result["errors"] == [
            "stores row 0 has an invalid id ['s1']",
            "stores row 1 has an invalid id {'v': 's2'}",
        ]
        assert result["counts"]["stores"] == 4

    def test_validate_bad_header(self, tmp_path: Path, small_registry) -> None:
        path = tmp_path / "b1.json"
        path.write_text(json.dumps(make_snapshot(None, None, version="0.9", app="x")))

        result = validate_snapshot_file(path, small_registry)

        assert result["valid"] is False
        assert len(result["errors"]) == 4

    def test_validate_missing_file(self, tmp_path: Path, small_registry) -> None:
        result = validate_snapshot_file(tmp_path / "nope.json", small_registry)
        assert result["valid"] is False
        assert result["errors"][0].startswith("Backup file not found")
