"""
main.py
-------
Command-line entry point: wires configuration, the MySQL connection and
the export/import engine together.

Usage::

    dbtransfer export Configuration -o config.txt
    dbtransfer export Properties --top 100 --binary-format > props.dat
    dbtransfer import Config -i config.txt --drop-existing

Exit status is 0 on success and 1 on any fatal condition.
"""
from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Annotated, Optional

import typer

from config import CONFIG, DatabaseConfig
from logger import apply_verbosity, get_logger
from models.options import (
    Delimiters,
    ExportEvent,
    ExportOptions,
    ExportVariant,
    ImportOptions,
    Verbosity,
)
from transfer.database import DatabaseManager
from transfer.errors import TransferError
from transfer.exporter import Exporter
from transfer.importer import Importer

log = get_logger(__name__)

app = typer.Typer(
    name=CONFIG.app_name,
    help="Export and import delimited table data.",
    no_args_is_help=True,
    add_completion=False,
)


@dataclasses.dataclass
class _RunContext:
    db: DatabaseConfig
    verbosity: Verbosity


def unescape_separator(value: str | None) -> str | None:
    r"""Expand backslash escapes such as ``\t``, ``\n`` and ``\x1f``."""
    if value is None:
        return None
    return value.encode("latin-1", "backslashreplace").decode("unicode_escape")


def _delimiters(binary: bool, column: str | None, row: str | None) -> Delimiters:
    try:
        return Delimiters.resolve(
            binary=binary,
            column=unescape_separator(column),
            row=unescape_separator(row),
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _echo_event(event: ExportEvent) -> None:
    typer.echo(event.message)


def _fail(exc: BaseException) -> typer.Exit:
    log.error("%s", exc)
    return typer.Exit(code=1)


@app.callback()
def main_options(
    ctx: typer.Context,
    hostname: Annotated[Optional[str], typer.Option("--hostname", help="Hostname of database.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", help="Port of database.")] = None,
    database: Annotated[Optional[str], typer.Option("--database", help="Default database.")] = None,
    verbose: Annotated[
        str,
        typer.Option(
            "--verbose",
            "-v",
            help="Set level of output: silent, quiet, normal, detailed, debug.",
        ),
    ] = "normal",
) -> None:
    """Work with the property search database."""
    try:
        verbosity = Verbosity.from_name(verbose)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--verbose") from exc
    apply_verbosity(verbosity)

    overrides = {
        key: value
        for key, value in (("host", hostname), ("port", port), ("database", database))
        if value is not None
    }
    ctx.obj = _RunContext(db=dataclasses.replace(CONFIG.db, **overrides), verbosity=verbosity)


@app.command("export")
def export_command(
    ctx: typer.Context,
    variant: Annotated[
        ExportVariant,
        typer.Argument(help="Which export to run.", case_sensitive=False),
    ],
    outfile: Annotated[
        Optional[Path],
        typer.Option("--outfile", "-o", help="Writes output to the specified file."),
    ] = None,
    top: Annotated[
        Optional[int],
        typer.Option("--top", min=0, help="Export only the top X rows."),
    ] = None,
    binary_format: Annotated[
        bool,
        typer.Option("--binary-format", help="Use \\N to mark nulls and unit/record separators."),
    ] = False,
    column_separator: Annotated[
        Optional[str],
        typer.Option("--column-separator", help="The character or string used to separate columns."),
    ] = None,
    row_separator: Annotated[
        Optional[str],
        typer.Option("--row-separator", help="The character or string used to separate rows."),
    ] = None,
) -> None:
    """Export data from database."""
    run: _RunContext = ctx.obj
    options = ExportOptions(
        variant=variant,
        outfile=outfile,
        top=top,
        delimiters=_delimiters(binary_format, column_separator, row_separator),
        verbosity=run.verbosity,
    )
    try:
        with DatabaseManager.from_config(run.db) as db:
            Exporter(source=db, progress_cb=_echo_event).run(options)
    except (TransferError, OSError) as exc:
        raise _fail(exc) from exc


@app.command("import")
def import_command(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Name of table to import data into.")],
    infile: Annotated[
        Path,
        typer.Option("--infile", "-i", help="The data to import."),
    ],
    binary_format: Annotated[
        bool,
        typer.Option("--binary-format", help="Use \\N to mark nulls and unit/record separators."),
    ] = False,
    column_separator: Annotated[
        Optional[str],
        typer.Option("--column-separator", help="The character or string used to separate columns."),
    ] = None,
    row_separator: Annotated[
        Optional[str],
        typer.Option("--row-separator", help="The character or string used to separate rows."),
    ] = None,
    drop_existing: Annotated[
        bool,
        typer.Option("--drop-existing", help="Drops the existing data before importing."),
    ] = False,
) -> None:
    """Import data into a database."""
    run: _RunContext = ctx.obj
    options = ImportOptions(
        infile=infile,
        table=table_name,
        delimiters=_delimiters(binary_format, column_separator, row_separator),
        drop_existing=drop_existing,
        verbosity=run.verbosity,
    )
    try:
        with DatabaseManager.from_config(run.db) as db:
            Importer(sink=db).run(options)
    except (TransferError, OSError) as exc:
        raise _fail(exc) from exc


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
