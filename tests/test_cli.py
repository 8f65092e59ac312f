"""Tests for the brand-backup CLI."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from brand_backup.cli import build_parser, main
from brand_backup.errors import ProfileNotFoundError

from conftest import FakeStore, make_snapshot


@pytest.fixture(autouse=True)
def lock_file(tmp_path: Path):
    lock = tmp_path / ".db-profile"
    with patch("brand_backup.factory._PROFILE_LOCK_FILE", lock):
        yield lock


@pytest.fixture
def backup_file(tmp_path: Path) -> Path:
    path = tmp_path / "b1.json"
    path.write_text(json.dumps(make_snapshot("b1", {
        "stores": [{"id": "s1", "brand_id": "b1", "name": "Main"}],
        "categories": [{"id": "c1", "brand_id": "b1", "name": "Drinks"}],
    })))
    return path


class TestParser:
    """Argument parsing."""

    def test_import_requires_brand_and_user(self) -> None:
        parser = build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["import", "b1.json", "--brand", "b1"])
        with pytest.raises(SystemExit):
            parser.parse_args(["import", "b1.json", "--user-id", "u1"])

    def test_global_options(self) -> None:
        args = build_parser().parse_args(
            ["--profile", "prod", "--env-prefix", "APP_", "-v", "export", "--brand", "b1"]
        )
        assert args.profile == "prod"
        assert args.env_prefix == "APP_"
        assert args.verbose is True
        assert args.brand == "b1"
        assert args.output is None

    def test_serve_defaults(self) -> None:
        args = build_parser().parse_args(["serve"])
        assert args.host == "127.0.0.1"
        assert args.port == 8000


class TestLocalCommands:
    """Commands that never touch the database."""

    def test_tables(self, capsys) -> None:
        assert main(["tables"]) == 0
        out = capsys.readouterr().out
        assert "stores" in out
        assert "checklist_history" in out

    def test_validate_good_file(self, backup_file: Path) -> None:
        assert main(["validate", str(backup_file)]) == 0

    def test_validate_bad_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(make_snapshot("b1", {}, app="other")))
        assert main(["validate", str(path)]) == 1

    def test_profiles(self, tmp_path: Path, capsys) -> None:
        config = tmp_path / "db.toml"
        config.write_text('[profiles.prod]\nurl = "postgresql://h/db"\ndescription = "Prod"\n')

        assert main(["--config", str(config), "profiles"]) == 0
        assert "prod" in capsys.readouterr().out

    def test_profiles_missing_config(self, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "none.toml"), "profiles"]) == 1

    def test_status_without_profile(self, capsys) -> None:
        assert main(["status"]) == 0
        assert "No connected profile" in capsys.readouterr().out


class TestDatabaseCommands:
    """Export and import with the store replaced by an in-memory fake."""

    def test_export(self, tmp_path: Path) -> None:
        store = FakeStore()
        store.seed("stores", {"id": "s1", "brand_id": "b1", "name": "Main"})
        output = tmp_path / "out.json"

        with patch("brand_backup.cli.get_adapter", AsyncMock(return_value=store)):
            code = main(["export", "--brand", "b1", "-o", str(output)])

        assert code == 0
        assert json.loads(output.read_text())["payload"]["stores"][0]["id"] == "s1"
        assert store.closed is True

    def test_import(self, backup_file: Path) -> None:
        store = FakeStore()

        with patch("brand_backup.cli.get_adapter", AsyncMock(return_value=store)):
            code = main(["import", str(backup_file), "--brand", "b1",
                         "--user-id", "u1", "--yes"])

        assert code == 0
        assert [table for table, _ in store.writes] == ["stores", "categories"]
        assert store.closed is True

    def test_import_row_errors_exit_1(self, backup_file: Path) -> None:
        store = FakeStore(fail_ids={"c1"})

        with patch("brand_backup.cli.get_adapter", AsyncMock(return_value=store)):
            code = main(["import", str(backup_file), "--brand", "b1",
                         "--user-id", "u1", "--yes"])

        assert code == 1
        assert ("stores", "s1") in store.writes

    def test_import_dry_run(self, backup_file: Path) -> None:
        store = FakeStore()

        with patch("brand_backup.cli.get_adapter", AsyncMock(return_value=store)):
            code = main(["import", str(backup_file), "--brand", "b1",
                         "--user-id", "u1", "--dry-run"])

        assert code == 0
        assert store.writes == []

    def test_import_brand_mismatch(self, backup_file: Path) -> None:
        store = FakeStore()

        with patch("brand_backup.cli.get_adapter", AsyncMock(return_value=store)):
            code = main(["import", str(backup_file), "--brand", "b2",
                         "--user-id", "u1", "--yes"])

        assert code == 1
        assert store.writes == []

    def test_import_cancelled(self, backup_file: Path) -> None:
        store = FakeStore()

        with patch("brand_backup.cli.get_adapter", AsyncMock(return_value=store)), \
             patch("brand_backup.cli.console.input", return_value="n"):
            code = main(["import", str(backup_file), "--brand", "b1", "--user-id", "u1"])

        assert code == 0
        assert store.writes == []

    def test_no_profile_exit_1(self) -> None:
        with patch("brand_backup.cli.get_adapter",
                   AsyncMock(side_effect=ProfileNotFoundError("No database profile configured"))):
            assert main(["export", "--brand", "b1"]) == 1
