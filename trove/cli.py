"""Trove CLI — the main entry point.

Usage:
    trove init ~/dotfiles
    trove add ~/.vimrc vimrc --categories=editor,shell
    trove deploy --category editor
    trove status
"""

from __future__ import annotations

import functools
import json
import os
import sys

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from trove import __version__
from trove.commands import BatchResult, Commands
from trove.errors import TroveError
from trove.logging_config import setup_logging
from trove.models import EntryState
from trove.paths import PathNormalizer

console = Console()
err_console = Console(stderr=True)

_STATE_STYLES = {
    EntryState.LINKED: "green",
    EntryState.PACKED: "yellow",
    EntryState.CONFLICT: "red",
    EntryState.MISSING: "red",
}


def _handle_errors(func):
    """Report a TroveError as one red line and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TroveError as e:
            err_console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="trove")
@click.option(
    "--registry",
    "registry_path",
    envvar="TROVE_REGISTRY",
    type=click.Path(),
    default=None,
    help="Registry file to use instead of the one ~/.trove points at.",
)
@click.option("--home", envvar="TROVE_HOME", type=click.Path(), default=None, hidden=True)
@click.option("--verbose", "-v", is_flag=True, help="Log each step.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    registry_path: str | None,
    home: str | None,
    verbose: bool,
    debug: bool,
) -> None:
    """Trove — keep dotfiles in one store and symlink them into place."""
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = os.environ.get("TROVE_LOG_LEVEL", "WARNING")
    setup_logging(level, console=err_console)

    ctx.obj = Commands(PathNormalizer.from_environment(home), registry_path=registry_path)


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("path", type=click.Path())
@click.option("--force", is_flag=True, help="Replace a ~/.trove pointer to another registry.")
@click.pass_obj
@_handle_errors
def init(commands: Commands, path: str, force: bool) -> None:
    """Create a trove in PATH, or re-link ~/.trove to an existing one."""
    result = commands.init(path, force=force)

    if result.created:
        console.print(f"[green]Initialized[/] trove at {result.registry_path}")
    else:
        console.print(f"Using existing trove at {result.registry_path}")
    if not result.pointer_created:
        console.print("[yellow]~/.trove already present; left unchanged[/]")


# ── Add / Remove ─────────────────────────────────────────────────────


@main.command()
@click.argument("path", type=click.Path())
@click.argument("name")
@click.option("--categories", "-c", default=None, help="Comma-separated category tags.")
@click.pass_obj
@_handle_errors
def add(commands: Commands, path: str, name: str, categories: str | None) -> None:
    """Move PATH into the store as NAME and link it back."""
    entry = commands.add(path, name, categories)
    console.print(f"[green]Added[/] {entry.name} ({entry.host_path})")


@main.command()
@click.option("--path", "-p", default=None, type=click.Path(), help="Host path of the entry.")
@click.option("--name", "-n", default=None, help="Name of the entry.")
@click.pass_obj
@_handle_errors
def remove(commands: Commands, path: str | None, name: str | None) -> None:
    """Stop tracking an entry and restore the original file."""
    entry = commands.remove(path=path, name=name)
    console.print(f"[green]Removed[/] {entry.name}; restored {entry.host_path}")


# ── Deploy / Pack ────────────────────────────────────────────────────


@main.command()
@click.option("--category", "-c", default=None, help="Only entries tagged CATEGORY.")
@click.option("--name", "-n", default=None, help="Only the entry NAME.")
@click.pass_obj
@_handle_errors
def deploy(commands: Commands, category: str | None, name: str | None) -> None:
    """Create the symlinks for tracked entries."""
    _print_batch("Linked", commands.deploy(category=category, name=name))


@main.command()
@click.option("--category", "-c", default=None, help="Only entries tagged CATEGORY.")
@click.option("--name", "-n", default=None, help="Only the entry NAME.")
@click.pass_obj
@_handle_errors
def pack(commands: Commands, category: str | None, name: str | None) -> None:
    """Remove the symlinks of tracked entries, keeping the store copies."""
    _print_batch("Unlinked", commands.pack(category=category, name=name))


def _print_batch(verb: str, result: BatchResult) -> None:
    for name in result.done:
        console.print(f"  [green]v[/] {verb} {name}")
    for name, reason in result.skipped.items():
        console.print(f"  [yellow]![/] Skipped {name}: {escape(reason)}", highlight=False)
    if not result.done and not result.skipped:
        console.print("[yellow]Nothing to do.[/]")


# ── Status ───────────────────────────────────────────────────────────


@main.command()
@click.option(
    "--format",
    "fmt",
    default="table",
    type=click.Choice(["table", "json", "yaml"]),
    help="Output format.",
)
@click.pass_obj
@_handle_errors
def status(commands: Commands, fmt: str) -> None:
    """Show the registry and the link state of every entry."""
    report = commands.status()
    trove = report.trove

    if fmt in ("json", "yaml"):
        data = {
            "config": {"path": trove.config.path, "store_path": trove.config.store_path},
            "entries": [
                {
                    "name": entry.name,
                    "host_path": entry.host_path,
                    "categories": sorted(entry.categories),
                    "state": report.states[entry.name].value,
                }
                for entry in trove.sorted_entries()
            ],
        }
        if fmt == "json":
            click.echo(json.dumps(data, indent=2))
        else:
            click.echo(yaml.safe_dump(data, sort_keys=False), nl=False)
        return

    console.print(f"Registry: {report.registry_path}", highlight=False)
    console.print(f"Store:    {report.store_dir}", highlight=False)

    if not trove.entries:
        console.print("[yellow]No entries tracked.[/]")
        return

    table = Table(title=f"Entries ({len(trove.entries)})")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Host path")
    table.add_column("Categories")
    table.add_column("State", no_wrap=True)

    for entry in trove.sorted_entries():
        state = report.states[entry.name]
        table.add_row(
            entry.name,
            escape(entry.host_path),
            ", ".join(sorted(entry.categories)),
            f"[{_STATE_STYLES[state]}]{state.value}[/]",
        )

    console.print(table)


if __name__ == "__main__":
    main()
