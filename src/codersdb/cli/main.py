"""Main CLI entry point for codersdb.

Provides command-line access to a store file: reading and writing entries,
listing keys, dumping the store and writing backups.
"""

from typing import Optional

import click

from codersdb.cli import entries
from codersdb.config import CodersDBConfig
from codersdb.observability.logging import bind_store_context, setup_logging
from codersdb.version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="codersdb")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False),
    envvar="CODERSDB_DB_PATH",
    help="SQLite file to open (default: ./db.sqlite or CODERSDB_DB_PATH)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file with a 'codersdb' section",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Override the configured log level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    db_path: Optional[str],
    config_path: Optional[str],
    log_level: Optional[str],
) -> None:
    """codersdb - JSON key-value store on SQLite."""
    try:
        config = CodersDBConfig.from_yaml(config_path) if config_path else CodersDBConfig.from_env()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    updates = {}
    if db_path:
        updates["db_path"] = db_path
    if log_level:
        updates["log_level"] = log_level.upper()
    if updates:
        config = config.model_copy(update=updates)

    setup_logging(log_level=config.log_level, json_logs=config.json_logs)
    bind_store_context(db_path=config.db_path)
    ctx.obj = config


# Register entry commands
for command in entries.COMMANDS:
    cli.add_command(command)


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
