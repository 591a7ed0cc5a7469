"""Entry CLI commands.

Provides commands for reading, writing, listing, dumping and backing up
entries in a store file.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click
from rich.console import Console
from rich.table import Table

from codersdb.config import CodersDBConfig
from codersdb.errors import CodersDBError
from codersdb.store import CodersDB

console = Console()

T = TypeVar("T")


def parse_value(text: str) -> Any:
    """Parse a command-line value as JSON, falling back to the raw string.

    Args:
        text: Value as typed on the command line

    Returns:
        Decoded JSON value, or the text itself if it is not valid JSON
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def run_with_store(config: CodersDBConfig, operation: Callable[[CodersDB], Awaitable[T]]) -> T:
    """Open the store, run one operation and close it again.

    Args:
        config: Store configuration from the CLI context
        operation: Coroutine function receiving the open store

    Returns:
        The operation's result

    Raises:
        click.ClickException: If the operation fails validation
    """

    async def _run() -> T:
        async with CodersDB(config=config) as db:
            return await operation(db)

    try:
        return asyncio.run(_run())
    except CodersDBError as e:
        raise click.ClickException(e.message) from e


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2))


@click.command(name="get")
@click.argument("key")
@click.pass_obj
def get_entry(config: CodersDBConfig, key: str) -> None:
    """Print the value stored under KEY as JSON."""
    _echo_json(run_with_store(config, lambda db: db.get(key)))


@click.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def set_entry(config: CodersDBConfig, key: str, value: str) -> None:
    """Store VALUE under KEY.

    VALUE is parsed as JSON when possible, so `42`, `true` and `[1, 2]` are
    stored as a number, a boolean and a list. Anything else is stored as a
    string.

    Examples:
        codersdb set user1 '{"name": "Ada"}'
        codersdb set greeting hello
    """
    stored = run_with_store(config, lambda db: db.set(key, parse_value(value)))
    _echo_json(stored)


@click.command(name="delete")
@click.argument("key")
@click.pass_obj
def delete_entry(config: CodersDBConfig, key: str) -> None:
    """Delete the entry stored under KEY."""
    if not run_with_store(config, lambda db: db.delete(key)):
        raise click.ClickException(f"Key '{key}' not found")
    console.print(f"[green]Deleted[/green] {key}")


@click.command(name="add")
@click.argument("key")
@click.argument("amount")
@click.pass_obj
def add_entry(config: CodersDBConfig, key: str, amount: str) -> None:
    """Add AMOUNT to the number stored under KEY (missing counts as 0)."""
    _echo_json(run_with_store(config, lambda db: db.add(key, parse_value(amount))))


@click.command(name="push")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def push_entry(config: CodersDBConfig, key: str, value: str) -> None:
    """Append VALUE to the list stored under KEY."""
    _echo_json(run_with_store(config, lambda db: db.push(key, parse_value(value))))


@click.command(name="type")
@click.argument("key")
@click.pass_obj
def type_entry(config: CodersDBConfig, key: str) -> None:
    """Print the type of the value stored under KEY."""
    click.echo(run_with_store(config, lambda db: db.type(key)))


@click.command(name="list")
@click.option("--prefix", type=str, help="Only keys starting with this prefix")
@click.option("--suffix", type=str, help="Only keys ending with this suffix")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format (table or json)",
)
@click.pass_obj
def list_entries(
    config: CodersDBConfig,
    prefix: Optional[str],
    suffix: Optional[str],
    output_format: str,
) -> None:
    """List entries, optionally filtered by key prefix and suffix.

    Examples:
        codersdb list
        codersdb list --prefix user --format json
    """

    async def _list(db: CodersDB) -> list:
        entries = await db.starts_with(prefix) if prefix is not None else await db.all()
        if suffix is not None:
            suffixed = {entry.id for entry in await db.ends_with(suffix)}
            entries = [entry for entry in entries if entry.id in suffixed]
        return entries

    entries = run_with_store(config, _list)

    if output_format == "json":
        _echo_json([entry.model_dump(by_alias=True) for entry in entries])
        return

    if not entries:
        console.print("[yellow]No entries found[/yellow]")
        return

    table = Table(title=f"Entries ({len(entries)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for entry in entries:
        table.add_row(entry.id, json.dumps(entry.data))
    console.print(table)


@click.command(name="dump")
@click.pass_obj
def dump_entries(config: CodersDBConfig) -> None:
    """Print the whole store as one JSON object."""
    _echo_json(run_with_store(config, lambda db: db.to_json()))


@click.command(name="size")
@click.pass_obj
def size_entries(config: CodersDBConfig) -> None:
    """Print the number of entries."""
    click.echo(run_with_store(config, lambda db: db.size()))


@click.command(name="backup")
@click.argument("filename", required=False)
@click.pass_obj
def backup_entries(config: CodersDBConfig, filename: Optional[str]) -> None:
    """Write the whole store to FILENAME (default: a timestamped file)."""
    result = run_with_store(config, lambda db: db.backup(filename))
    if not result.success:
        raise click.ClickException(f"Backup failed: {result.error}")
    console.print(f"[green]Backed up[/green] {result.size} entries to {result.filename}")


COMMANDS = [
    get_entry,
    set_entry,
    delete_entry,
    add_entry,
    push_entry,
    type_entry,
    list_entries,
    dump_entries,
    size_entries,
    backup_entries,
]
