"""CLI module for schema reconciliation.

Provides commands to list database profiles, preview the statements
needed to bring a live schema up to date, and apply them.

Usage:
    DB_PROFILE=local schema-delta plan
    schema-delta plan --profile local --schema-file schema.sql
    schema-delta plan --profile local --scope global
    schema-delta apply --profile local --confirm
    schema-delta profiles

Commands:
    profiles  - List available profiles
    plan      - Show planned statements without executing them
    apply     - Execute planned statements (requires --confirm)
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from schema_delta.config.loader import load_db_config
from schema_delta.config.models import DatabaseConfig
from schema_delta.factory import (
    ProfileNotFoundError,
    build_policy,
    build_schema_provider,
    get_active_profile,
    get_backend,
)
from schema_delta.schema.delta import DeltaEngine
from schema_delta.schema.models import DeltaResult

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(args: argparse.Namespace) -> DatabaseConfig:
    config_path = Path(args.config) if args.config else None
    return load_db_config(config_path)


def _print_result(result: DeltaResult) -> None:
    """Print planned statements, report and dropped input."""
    if not result.statements:
        console.print("[bold green]v[/bold green] Schema is up to date")
    else:
        plan_table = Table(title="Planned Statements", show_header=True, header_style="bold")
        plan_table.add_column("#", justify="right", style="dim")
        plan_table.add_column("Statement")
        plan_table.add_column("Status")

        for step, sql in enumerate(result.statements, start=1):
            outcome = result.results[step - 1] if result.executed else None
            if outcome is None:
                status = "[dim]planned[/dim]"
            elif outcome.success:
                status = "[green]ok[/green]"
            else:
                status = "[red]failed[/red]"
            plan_table.add_row(str(step), sql.strip(), status)

        console.print(plan_table)

    if result.changes:
        console.print()
        console.print("[bold]Changes:[/bold]")
        for message in result.report.values():
            console.print(f"  - {message}")

    if result.skipped_tables:
        console.print(
            f"\n[yellow]Skipped global tables:[/yellow] {', '.join(result.skipped_tables)}"
        )

    if result.unclassified:
        console.print(f"\n[yellow]Unclassified statements ({len(result.unclassified)}):[/yellow]")
        for sql in result.unclassified:
            console.print(f"  - {sql.strip()[:80]}")

    if result.unparseable:
        console.print(f"\n[yellow]Unparseable clauses ({len(result.unparseable)}):[/yellow]")
        for table, clause in result.unparseable:
            console.print(f"  - {table}: {clause}")

    for failed in result.failed:
        console.print(f"\n[bold red]x[/bold red] {failed.sql.strip()}\n  {failed.error}")


def _run_delta(args: argparse.Namespace, execute: bool) -> int:
    """Shared implementation for plan and apply.

    Returns:
        0 on success, 1 on configuration errors or failed statements.
    """
    try:
        config = _load_config(args)
        profile_name, _ = get_active_profile(
            args.profile, env_prefix=args.env_prefix, config=config
        )
        backend = get_backend(profile_name, env_prefix=args.env_prefix, config=config)
    except (FileNotFoundError, ValueError, ProfileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    base_dir = Path(args.config).resolve().parent if args.config else Path.cwd()
    engine = DeltaEngine(
        backend,
        policy=build_policy(config),
        schema_provider=build_schema_provider(config, base_dir=base_dir),
    )

    console.print(f"Reconciling schema for profile: [bold cyan]{profile_name}[/bold cyan]")

    # Introspection suppresses errors, so an unreachable server would
    # otherwise look like an empty database.
    try:
        backend.test_connection()
    except Exception as e:
        backend.close()
        console.print(f"[bold red]Error:[/bold red] Connection failed: {e}")
        return 1

    try:
        if args.schema_file:
            queries = Path(args.schema_file).read_text()
        else:
            queries = args.scope
        result = engine.run(queries, execute=execute)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    finally:
        backend.close()

    console.print()
    _print_result(result)

    if not execute:
        if result.statements:
            console.print()
            console.print("[dim]To apply, run[/dim] [cyan]apply --confirm[/cyan]")
        return 0

    if result.success:
        console.print()
        console.print(f"[bold green]v[/bold green] Applied {len(result.results)} statement(s)")
        return 0

    console.print(f"\n[bold red]x[/bold red] {len(result.failed)} statement(s) failed")
    return 1


# ============================================================================
# Commands
# ============================================================================


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(name, profile.provider, profile.description or "")

    console.print(table)
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Show the statements that would bring the schema up to date."""
    return _run_delta(args, execute=False)


def cmd_apply(args: argparse.Namespace) -> int:
    """Apply planned statements; without --confirm only shows the plan."""
    return _run_delta(args, execute=args.confirm)


# ============================================================================
# Main entry point
# ============================================================================


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--profile",
        default=None,
        help="Profile from db.toml (default: {env-prefix}DB_PROFILE)",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--schema-file",
        default=None,
        help="SQL file with CREATE TABLE statements (overrides [schema] file)",
    )
    source.add_argument(
        "--scope",
        default="",
        choices=["", "all", "blog", "global", "ms_global"],
        help="Schema scope resolved through [schema] / [schema.scopes]",
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="schema-delta",
        description="Non-destructive MySQL schema reconciliation",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help="Prefix for environment variable lookup (e.g., APP_ reads APP_DB_PROFILE)",
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
        help="Log every decision and statement",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    p_plan = subparsers.add_parser("plan", help="Show planned statements")
    _add_source_arguments(p_plan)
    p_plan.set_defaults(func=cmd_plan)

    p_apply = subparsers.add_parser("apply", help="Apply planned statements")
    _add_source_arguments(p_apply)
    p_apply.add_argument(
        "--confirm",
        action="store_true",
        help="Actually execute the statements",
    )
    p_apply.set_defaults(func=cmd_apply)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
