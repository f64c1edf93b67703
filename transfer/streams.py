"""
transfer/streams.py
-------------------
Output stream opening and streaming record readers.

Design Decisions:
    * Output goes through one explicitly sized buffer; callers flush at
      progress points and the context manager flushes unconditionally on
      exit, so an interrupted export never silently loses buffered rows.
    * Standard output is wrapped, flushed and detached but never closed.
    * Input is never read whole. Newline-separated files are iterated line
      by line; any other row separator goes through ``scan_records``,
      which reads fixed-size chunks and keeps only the unterminated tail
      between reads, so memory stays bounded by the chunk size plus the
      longest record.
"""
from __future__ import annotations

import io
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO

from logger import get_logger

log = get_logger(__name__)

ENCODING = "utf-8"


@contextmanager
def open_output(outfile: Path | str | None, buffer_size: int = 1 << 16) -> Iterator[TextIO]:
    """
    Yield a buffered UTF-8 text stream for *outfile*, or for stdout when None.

    The file is created or truncated. Line endings are written untranslated.

    Raises:
        OSError: If the file cannot be opened.
    """
    if outfile is not None and str(outfile) != "":
        stream = open(outfile, "w", encoding=ENCODING, newline="", buffering=buffer_size)
        log.debug("Opened '%s' for writing (buffer %d bytes).", outfile, buffer_size)
        try:
            yield stream
        finally:
            stream.close()
        return

    sys.stdout.flush()
    stream = io.TextIOWrapper(
        io.BufferedWriter(_UnclosableRaw(sys.stdout.buffer), buffer_size),
        encoding=ENCODING,
        newline="",
    )
    try:
        yield stream
    finally:
        stream.flush()
        stream.detach()


class _UnclosableRaw(io.RawIOBase):
    """Raw adapter over stdout's byte stream that leaves it open on close."""

    def __init__(self, target: io.BufferedIOBase) -> None:
        super().__init__()
        self._target = target

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:  # type: ignore[override]
        written = self._target.write(data)
        self._target.flush()
        return len(data) if written is None else written


def iter_lines(stream: TextIO) -> Iterator[str]:
    """Yield newline-terminated records without their ``\\n`` / ``\\r\\n``."""
    for line in stream:
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        yield line


def scan_records(stream: TextIO, separator: str, chunk_size: int = 1 << 16) -> Iterator[str]:
    """
    Yield records terminated by *separator*, reading *chunk_size* characters
    at a time.

    Each character is searched once. The unterminated part of a record is
    kept as a list of pieces plus the last ``len(separator) - 1``
    characters, which are searched again with the next read so a separator
    split across two reads still matches. Every terminated record is
    yielded, empty ones included; a non-empty trailing remainder without a
    terminator is yielded last.
    """
    if not separator:
        raise ValueError("Row separator must not be empty.")
    overlap = len(separator) - 1
    pieces: list[str] = []
    carry = ""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        window = carry + chunk
        start = 0
        end = window.find(separator)
        while end >= 0:
            pieces.append(window[start:end])
            yield "".join(pieces)
            pieces = []
            start = end + len(separator)
            end = window.find(separator, start)
        rest = window[start:]
        split_at = max(0, len(rest) - overlap)
        if split_at:
            pieces.append(rest[:split_at])
        carry = rest[split_at:]
    remainder = "".join(pieces) + carry
    if remainder:
        yield remainder


def read_records(
    infile: Path | str,
    row_separator: str = "\n",
    chunk_size: int = 1 << 16,
) -> Iterator[str]:
    """
    Open *infile* and stream its records.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    if row_separator == "\n":
        with open(infile, "r", encoding=ENCODING, newline="\n") as stream:
            yield from iter_lines(stream)
        return

    with open(infile, "r", encoding=ENCODING, newline="") as stream:
        yield from scan_records(stream, row_separator, chunk_size)
