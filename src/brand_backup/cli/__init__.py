"""CLI for brand export, import, and database profile management.

Usage:
    brand-backup connect --profile prod
    brand-backup status
    brand-backup profiles
    brand-backup tables
    brand-backup export --brand b1
    brand-backup export --brand b1 -o backups/b1.json
    brand-backup validate backups/b1.json
    brand-backup import backups/b1.json --brand b1 --user-id u1 --dry-run
    brand-backup import backups/b1.json --brand b1 --user-id u1 --yes
    brand-backup serve --port 8000

Commands:
    connect   - Test the active profile and remember it
    status    - Show current connection status
    profiles  - List available profiles
    tables    - Show backup tables in restore order
    export    - Export one brand to a JSON file
    validate  - Check a backup file without touching the database
    import    - Restore a backup file into a brand
    serve     - Run the HTTP export/import service
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from brand_backup.backup.codec import validate_snapshot_file
from brand_backup.backup.export import export_to_file
from brand_backup.backup.models import ImportReport
from brand_backup.backup.registry import default_registry
from brand_backup.backup.restore import import_from_file
from brand_backup.config.loader import load_db_config
from brand_backup.errors import BrandBackupError
from brand_backup.factory import (
    connect_profile,
    get_adapter,
    read_profile_lock,
)

console = Console()


def _setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[
            RichHandler(console=console, rich_tracebacks=True, show_time=False, show_path=False)
        ],
    )


def _config_path(args: argparse.Namespace) -> Path | None:
    config = getattr(args, "config", None)
    return Path(config) if config else None


# ============================================================================
# Report rendering
# ============================================================================


def _report_table(report: ImportReport, title: str) -> Table:
    """Build a rich table with one line per restored table plus totals."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Table")
    table.add_column("Created", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right")

    for name, outcome in report.tables.items():
        if not (outcome.processed or outcome.skipped or outcome.errors):
            continue
        failed = len(outcome.errors)
        table.add_row(
            name,
            str(outcome.created),
            str(outcome.updated),
            str(outcome.skipped),
            f"[red]{failed}[/red]" if failed else "0",
        )

    totals = report.totals
    table.add_row(
        "[bold]Total[/bold]",
        f"[bold]{totals['created']}[/bold]",
        f"[bold]{totals['updated']}[/bold]",
        f"[bold]{totals['skipped']}[/bold]",
        f"[bold]{totals['failed']}[/bold]",
    )
    return table


def _print_row_errors(report: ImportReport, limit: int = 20) -> None:
    shown = 0
    for name, outcome in report.tables.items():
        for error in outcome.errors:
            if shown >= limit:
                console.print(f"  [dim]... and {report.total_errors - shown} more[/dim]")
                return
            console.print(f"  [red]x[/red] {name} [dim]{error.row_id}[/dim]: {error.message}")
            shown += 1


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_connect(args: argparse.Namespace) -> int:
    """Async implementation for connect command.

    Returns:
        0 on success, 1 on failure.
    """
    previous_profile = read_profile_lock()

    console.print("Connecting to database...", style="dim")

    result = await connect_profile(
        profile_name=args.profile,
        env_prefix=args.env_prefix,
        config_path=_config_path(args),
    )

    if result.success:
        console.print()
        console.print(
            f"[bold green]v[/bold green] Connected to profile: "
            f"[bold cyan]{result.profile_name}[/bold cyan]"
        )
        if previous_profile and previous_profile != result.profile_name:
            console.print(
                f"  [dim]Switched from {previous_profile}[/dim]"
            )
        return 0

    console.print()
    console.print(f"[bold red]x[/bold red] {result.error}")
    return 1


async def _async_export(args: argparse.Namespace) -> int:
    """Async implementation for export command."""
    adapter = await get_adapter(
        profile_name=args.profile,
        env_prefix=args.env_prefix,
        config_path=_config_path(args),
    )
    try:
        console.print(f"Exporting brand [bold]{args.brand}[/bold]...", style="dim")
        path = await export_to_file(
            adapter, default_registry(), args.brand, output_path=args.output
        )
    finally:
        await adapter.close()

    console.print(f"[bold green]v[/bold green] Backup written: [cyan]{path}[/cyan]")
    return 0


async def _async_import(args: argparse.Namespace) -> int:
    """Async implementation for import command.

    Returns:
        0 when every row was restored, 1 when any row failed.
    """
    adapter = await get_adapter(
        profile_name=args.profile,
        env_prefix=args.env_prefix,
        config_path=_config_path(args),
    )
    try:
        report = await import_from_file(
            adapter,
            default_registry(),
            args.backup_path,
            target_brand_id=args.brand,
            caller_id=args.user_id,
            dry_run=args.dry_run,
        )
    finally:
        await adapter.close()

    console.print()
    title = "Import Preview" if args.dry_run else "Import Report"
    console.print(_report_table(report, title))

    if report.has_errors:
        console.print()
        console.print(
            f"[bold yellow]![/bold yellow] {report.total_errors} row(s) failed:"
        )
        _print_row_errors(report)
        return 1

    console.print()
    if args.dry_run:
        console.print("[bold yellow]DRY RUN[/bold yellow] - No changes made.")
    else:
        console.print("[bold green]v[/bold green] Import complete.")
    return 0


# ============================================================================
# Command handlers
# ============================================================================


def _run(coro) -> int:
    """Run an async command, turning configuration and validation errors into exit 1."""
    try:
        return asyncio.run(coro)
    except BrandBackupError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1


def cmd_connect(args: argparse.Namespace) -> int:
    """Test the active profile and write the lock file on success."""
    return _run(_async_connect(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config) -- no database calls.

    Returns:
        0 always (informational command).
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".db-profile (connected)")

        try:
            config = load_db_config(_config_path(args))
            if profile in config.profiles:
                p = config.profiles[profile]
                table.add_row("Provider", p.provider)
                if p.description:
                    table.add_row("Description", p.description)
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No connected profile.[/yellow]")
        console.print(
            "[dim]Run:[/dim] [cyan]brand-backup connect --profile <name>[/cyan]"
        )

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    try:
        config = load_db_config(_config_path(args))
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        name_style = "bold cyan" if name == current else ""
        table.add_row(
            marker,
            f"[{name_style}]{name}[/{name_style}]" if name_style else name,
            profile.provider,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")
    if config.default_profile:
        console.print(f"[dim]default_profile = {config.default_profile}[/dim]")

    return 0


def cmd_tables(args: argparse.Namespace) -> int:
    """Print the backup tables in the order they are restored."""
    registry = default_registry()

    table = Table(title="Backup Tables", show_header=True, header_style="bold")
    table.add_column("Rank", justify="right")
    table.add_column("Table")
    table.add_column("Columns", justify="right")
    table.add_column("Owner fields")

    for spec in registry.processing_order():
        owners = [*spec.actor_fields, *(f"{f}?" for f in spec.nullable_actor_fields)]
        table.add_row(
            str(spec.rank),
            spec.name,
            str(len(spec.columns)),
            ", ".join(owners),
        )

    console.print(table)
    console.print("[dim]? = cleared when blank[/dim]")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export one brand to a JSON file."""
    return _run(_async_export(args))


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a backup file offline.

    Returns:
        0 when the file is valid, 1 otherwise.
    """
    result = validate_snapshot_file(args.backup_path, default_registry())

    if result["counts"]:
        table = Table(title="Backup Contents", show_header=True, header_style="bold")
        table.add_column("Table")
        table.add_column("Rows", justify="right")
        for name, count in result["counts"].items():
            table.add_row(name, str(count))
        console.print(table)

    for warning in result["warnings"]:
        console.print(f"  [yellow]![/yellow] {warning}")
    for error in result["errors"]:
        console.print(f"  [red]x[/red] {error}")

    console.print()
    if result["valid"]:
        console.print("[bold green]v[/bold green] Backup file is valid")
        return 0
    console.print("[bold red]x[/bold red] Backup file is invalid")
    return 1


def cmd_import(args: argparse.Namespace) -> int:
    """Restore a backup file into a brand.

    Asks for confirmation unless ``--yes`` or ``--dry-run`` is given.
    """
    if not args.yes and not args.dry_run:
        console.print(f"This will restore [cyan]{args.backup_path}[/cyan] "
                      f"into brand [bold]{args.brand}[/bold].")
        console.print("[yellow]Existing rows with the same id will be overwritten.[/yellow]")
        response = console.input("Continue? [y/N] ")
        if response.strip().lower() not in ("y", "yes"):
            console.print("Cancelled.")
            return 0

    return _run(_async_import(args))


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP service with uvicorn."""
    import uvicorn

    from brand_backup.api import create_app

    app = create_app(
        profile_name=args.profile,
        env_prefix=args.env_prefix,
        config_path=_config_path(args),
    )
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="brand-backup",
        description="Brand export and import toolkit",
    )

    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--profile",
        "-p",
        default=None,
        help="Database profile from db.toml (overrides DB_PROFILE and .db-profile)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to db.toml (default: ./db.toml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_connect = subparsers.add_parser(
        "connect",
        help="Test the active profile and remember it",
    )
    p_connect.set_defaults(func=cmd_connect)

    p_status = subparsers.add_parser(
        "status",
        help="Show current connection status",
    )
    p_status.set_defaults(func=cmd_status)

    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    p_tables = subparsers.add_parser(
        "tables",
        help="Show backup tables in restore order",
    )
    p_tables.set_defaults(func=cmd_tables)

    p_export = subparsers.add_parser(
        "export",
        help="Export one brand to a JSON file",
    )
    p_export.add_argument(
        "--brand",
        "-b",
        required=True,
        help="Brand id to export",
    )
    p_export.add_argument(
        "--output",
        "-o",
        default=None,
        help="Output path (default: backups/brand-<id>-<timestamp>.json)",
    )
    p_export.set_defaults(func=cmd_export)

    p_validate = subparsers.add_parser(
        "validate",
        help="Check a backup file without touching the database",
    )
    p_validate.add_argument("backup_path", help="Path to backup JSON file")
    p_validate.set_defaults(func=cmd_validate)

    p_import = subparsers.add_parser(
        "import",
        help="Restore a backup file into a brand",
    )
    p_import.add_argument("backup_path", help="Path to backup JSON file")
    p_import.add_argument(
        "--brand",
        "-b",
        required=True,
        help="Brand id to restore into (must match the file)",
    )
    p_import.add_argument(
        "--user-id",
        required=True,
        help="User id recorded as owner where the file has none",
    )
    p_import.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be restored without making changes",
    )
    p_import.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    p_import.set_defaults(func=cmd_import)

    p_serve = subparsers.add_parser(
        "serve",
        help="Run the HTTP export/import service",
    )
    p_serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port")
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
