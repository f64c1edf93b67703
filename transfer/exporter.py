"""
transfer/exporter.py
--------------------
Streams the rows of a named export variant to a delimited text file or
standard output.

Design Decisions:
    * The exporter is a plain class with injected collaborators (a
      ``RowSource`` and an optional progress callback). No global state.
    * Progress is reported via structured ``ExportEvent`` objects so the
      CLI can print them and other callers can collect them, without
      coupling this module to a console.
    * Writes go through one fixed-size buffer that is flushed at every
      progress tick and unconditionally when the stream is closed.
    * The variant is resolved before the stream is opened, so an unknown
      variant produces no output at all.
"""
from __future__ import annotations

import time
from typing import Callable

from config import CONFIG
from logger import get_logger
from models.options import EventKind, ExportEvent, ExportOptions, ExportResult, Verbosity
from transfer.codec import encode_row
from transfer.interfaces import RowSource
from transfer.queries import parse_variant, resolve_query
from transfer.streams import open_output

log = get_logger(__name__)

ProgressCallback = Callable[[ExportEvent], None]

STDOUT_NAME = "<stdout>"


class Exporter:
    """
    Export one variant per ``run`` call.

    Args:
        source:            Connected :class:`RowSource` (normally a
                           :class:`~transfer.database.DatabaseManager`).
        progress_cb:       Optional receiver for progress/summary events;
                           defaults to logging the event message.
        progress_interval: Rows between progress ticks.
        buffer_size:       Output buffer size in bytes.

    Example::

        exporter = Exporter(source=db)
        result = exporter.run(ExportOptions(variant="Configuration", outfile="config.txt"))
    """

    def __init__(
        self,
        source: RowSource,
        progress_cb: ProgressCallback | None = None,
        progress_interval: int | None = None,
        buffer_size: int | None = None,
    ) -> None:
        self._source = source
        self._progress_cb = progress_cb or self._default_progress
        self._progress_interval = progress_interval or CONFIG.transfer.progress_interval
        self._buffer_size = buffer_size or CONFIG.transfer.write_buffer_size

    @staticmethod
    def _default_progress(event: ExportEvent) -> None:
        log.info("%s", event.message)

    def run(self, options: ExportOptions) -> ExportResult:
        """
        Execute the export described by *options*.

        Returns:
            :class:`ExportResult` with the number of records written.

        Raises:
            ConfigurationError: Unknown variant (nothing is opened or written).
            DatabaseError:      Query execution failure.
            OSError:            Output stream cannot be opened or written;
                                a partially written file is left in place.
        """
        variant = parse_variant(options.variant)
        query = resolve_query(variant, options.top)
        destination = str(options.outfile) if options.to_file else STDOUT_NAME
        report_progress = options.to_file and options.verbosity >= Verbosity.NORMAL
        report_summary = options.to_file and options.verbosity >= Verbosity.QUIET
        delimiters = options.delimiters

        log.debug(
            "Exporting %s to %s (binary=%s, top=%s).",
            variant.value, destination, delimiters.binary, options.top,
        )
        start = time.monotonic()
        rows_written = 0

        with open_output(options.outfile if options.to_file else None, self._buffer_size) as out:
            if query.is_empty:
                log.debug("Variant %s has no query; writing no rows.", variant.value)
            else:
                for row in self._source.iter_rows(query.sql, query.params):
                    out.write(encode_row(row, delimiters))
                    rows_written += 1

                    if not report_progress or rows_written % self._progress_interval != 0:
                        continue

                    out.flush()
                    self._progress_cb(ExportEvent(EventKind.PROGRESS, rows_written))

            out.flush()

        if report_summary:
            self._progress_cb(ExportEvent(EventKind.COMPLETE, rows_written, destination))

        result = ExportResult(
            variant=variant.value,
            destination=destination,
            rows_written=rows_written,
            elapsed_seconds=time.monotonic() - start,
        )
        log.debug("Export finished: %s (%.2fs)", result, result.elapsed_seconds)
        return result
