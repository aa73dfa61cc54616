"""CLI for previewing and running record copies.

Usage:
    rowclone profiles
    rowclone contain --model Post
    DB_PROFILE=local rowclone copy --model Post --id 42 --dry-run
    rowclone --config conf/rowclone.toml copy --model Post --id 42 --profile local

Commands:
    profiles  - List configured database profiles
    contain   - Show which associations a copy of a model traverses
    copy      - Copy a record and its dependent subtree
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from rowclone.config.loader import load_config
from rowclone.config.models import RowcloneConfig
from rowclone.copy.contain import generate_contain
from rowclone.copy.copier import Copier
from rowclone.errors import ConfigError, RecordNotFoundError, UnknownModelError
from rowclone.factory import ProfileNotFoundError, get_store

console = Console()


def _load(args: argparse.Namespace) -> RowcloneConfig | None:
    """Load config from ``--config``, printing the error on failure."""
    path = Path(args.config) if args.config else None
    try:
        return load_config(path)
    except (FileNotFoundError, ConfigError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return None


def _add_contain_branch(branch: Tree, contain: dict[str, dict]) -> None:
    for name, nested in contain.items():
        _add_contain_branch(branch.add(name), nested)


def _parse_id(raw: str) -> int | str:
    """Treat numeric ids as integers, anything else (UUIDs, slugs) as text."""
    return int(raw) if raw.isdigit() else raw


# ============================================================================
# Config-only commands
# ============================================================================


def cmd_profiles(args: argparse.Namespace) -> int:
    """List configured profiles.

    Returns:
        0 on success, 1 when the config cannot be loaded.
    """
    config = _load(args)
    if config is None:
        return 1

    if not config.profiles:
        console.print("[yellow]No profiles configured.[/yellow]")
        return 0

    table = Table(title="Profiles", show_header=True, header_style="bold")
    table.add_column("Profile", style="cyan")
    table.add_column("Description")
    for name, profile in config.profiles.items():
        table.add_row(name, profile.description)
    console.print(table)
    return 0


def cmd_contain(args: argparse.Namespace) -> int:
    """Print the contain set for ``--model`` as a tree.

    Returns:
        0 on success, 1 when the config or model is invalid.
    """
    config = _load(args)
    if config is None:
        return 1

    try:
        contain = generate_contain(config.index, config.copy_config, args.model)
    except UnknownModelError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    tree = Tree(f"[bold cyan]{args.model}[/bold cyan]")
    _add_contain_branch(tree, contain)
    console.print(tree)
    return 0


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_copy(args: argparse.Namespace) -> int:
    """Async implementation for copy command.

    Args:
        args: Parsed arguments with model, id, profile, dry_run, env_prefix.

    Returns:
        0 on success, 1 on failure.
    """
    config = _load(args)
    if config is None:
        return 1

    try:
        adapter, store = get_store(config, args.profile, args.env_prefix)
    except ProfileNotFoundError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return 1

    copier = Copier(store, config.index, config.copy_config)
    record_id = _parse_id(args.id)

    try:
        if args.dry_run:
            try:
                prepared = await copier.prepare(args.model, record_id)
            except RecordNotFoundError as e:
                console.print(f"[bold red]x[/bold red] {e}")
                return 1
            console.print(
                f"[dim]Dry run -- {args.model} {record_id} would be saved as:[/dim]"
            )
            console.print_json(json.dumps(prepared.tree, default=str))
            return 0

        console.print(f"Copying {args.model} {record_id}...", style="dim")
        result = await copier.copy(args.model, record_id)
    except UnknownModelError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    finally:
        await adapter.close()

    if result.success:
        console.print(
            f"[bold green]v[/bold green] Copied {args.model} {record_id} "
            f"to [bold cyan]{result.new_id}[/bold cyan]"
        )
        return 0

    console.print(f"[bold red]x[/bold red] {result.error}")
    if result.failed_at is not None:
        console.print(f"  [dim]Failed while {result.failed_at.value}[/dim]")
    return 1


def cmd_copy(args: argparse.Namespace) -> int:
    """Copy a record.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_copy(args))


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="rowclone",
        description="Deep-copy database records with their dependent rows",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to rowclone.toml (default: ./rowclone.toml)",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List configured database profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    # contain command
    p_contain = subparsers.add_parser(
        "contain",
        help="Show which associations a copy traverses",
    )
    p_contain.add_argument("--model", "-m", required=True, help="Root model name")
    p_contain.set_defaults(func=cmd_contain)

    # copy command
    p_copy = subparsers.add_parser(
        "copy",
        help="Copy a record and its dependent subtree",
    )
    p_copy.add_argument("--model", "-m", required=True, help="Root model name")
    p_copy.add_argument("--id", required=True, help="Primary key of the record to copy")
    p_copy.add_argument("--profile", "-p", default=None, help="Database profile to use")
    p_copy.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the converted record tree without saving",
    )
    p_copy.set_defaults(func=cmd_copy)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
