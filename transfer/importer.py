"""
transfer/importer.py
--------------------
Loads a delimited text file into an existing table in fixed-size batches
inside a single transaction.

Design Decisions:
    * The target's columns are read from the database before anything
      else happens. A missing table therefore has no side effects, and
      only identifiers the database itself reported are quoted into the
      INSERT statement.
    * Fields map onto columns by position. Short records are padded with
      NULL, extra fields are dropped.
    * One INSERT statement is built per run by the sink and reused for
      every batch.
    * All batches share one transaction with exactly one commit; any
      failure (or interrupt) rolls back every batch already applied.
"""
from __future__ import annotations

import time
from pathlib import Path

from config import CONFIG
from logger import get_logger
from models.options import ImportOptions, ImportResult, Verbosity
from transfer.codec import Field, decode_record, fit_to_width
from transfer.errors import SchemaError
from transfer.interfaces import TableSink
from transfer.streams import read_records

log = get_logger(__name__)


class Importer:
    """
    Import one file per ``run`` call.

    Args:
        sink:            Connected :class:`TableSink` (normally a
                         :class:`~transfer.database.DatabaseManager`).
        batch_size:      Parameter sets per batch execution.
        read_chunk_size: Characters read at a time for non-newline row
                         separators.

    Example::

        importer = Importer(sink=db)
        result = importer.run(ImportOptions(infile="config.txt", table="Config"))
    """

    def __init__(
        self,
        sink: TableSink,
        batch_size: int | None = None,
        read_chunk_size: int | None = None,
    ) -> None:
        self._sink = sink
        self._batch_size = batch_size or CONFIG.transfer.batch_size
        self._read_chunk_size = read_chunk_size or CONFIG.transfer.read_chunk_size

    def run(self, options: ImportOptions) -> ImportResult:
        """
        Execute the import described by *options*.

        Returns:
            :class:`ImportResult` after the single commit.

        Raises:
            SchemaError:   Target table missing or without columns; nothing
                           is truncated or inserted.
            DatabaseError: Truncate/insert/commit failure; nothing from this
                           run is committed.
            OSError:       Input file cannot be opened or read.
        """
        table = options.table
        start = time.monotonic()

        columns = self._sink.column_names(table)
        if not columns:
            log.error("Table '%s' not found or has no columns.", table)
            raise SchemaError(table)
        log.debug("Table '%s' columns: %s", table, ", ".join(columns))

        if not Path(options.infile).is_file():
            raise FileNotFoundError(f"Input file not found: {options.infile}")

        result = ImportResult(table=table)
        if options.drop_existing:
            self._sink.truncate_table(table)
            result.truncated = True

        insert_sql = self._sink.insert_statement(table, columns)
        width = len(columns)
        delimiters = options.delimiters
        batch: list[tuple[Field, ...]] = []

        with self._sink.transaction():
            for record in read_records(options.infile, delimiters.row, self._read_chunk_size):
                batch.append(fit_to_width(decode_record(record, delimiters), width))
                if len(batch) < self._batch_size:
                    continue
                self._flush(insert_sql, batch, result, options.verbosity)
                batch = []

            # leftover rows
            if batch:
                self._flush(insert_sql, batch, result, options.verbosity)

        result.elapsed_seconds = time.monotonic() - start
        if options.verbosity >= Verbosity.NORMAL:
            log.info(
                "Imported %d rows into '%s' in %d batch(es) (%.2fs).",
                result.rows_imported, table, result.batches, result.elapsed_seconds,
            )
        return result

    def _flush(
        self,
        insert_sql: str,
        batch: list[tuple[Field, ...]],
        result: ImportResult,
        verbosity: Verbosity,
    ) -> None:
        self._sink.execute_batch(insert_sql, batch)
        result.rows_imported += len(batch)
        result.batches += 1
        if verbosity >= Verbosity.DETAILED:
            log.debug(
                "Batch %d: %d rows (total %d).", result.batches, len(batch), result.rows_imported
            )
