"""
transfer/codec.py
-----------------
Delimited record encoding shared by the exporter and the importer.

File Formats::

    textual:  a b c\\n            (caller-chosen separators, no NULL marker)
    binary:   a\\x1fb\\x1f\\N\\x1e\\n  (unit/record separators, \\N marks NULL)

Design Decisions:
    * Pure functions only; the codec never raises for malformed records.
      Field-count mismatches are the importer's concern.
    * Outside binary mode a NULL encodes to an empty string, so NULL and
      "" cannot be told apart after a round trip. That is a property of
      the textual format, not something the codec tries to repair.
"""
from __future__ import annotations

from typing import Any, Sequence

from models.options import NULL_SENTINEL, Delimiters

Field = str | None


def format_field(value: Any, binary: bool = False) -> str:
    """
    Return the textual form of one database value.

    Bytes are decoded as UTF-8 (undecodable bytes are replaced), every
    other value uses its ``str()`` form.
    """
    if value is None:
        return NULL_SENTINEL if binary else ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def encode_row(row: Sequence[Any], delimiters: Delimiters) -> str:
    """
    Serialise *row* into one record, row separator included.

    Example::

        >>> encode_row((1, None, "x"), Delimiters())
        '1  x\\n'
    """
    body = delimiters.column.join(format_field(v, delimiters.binary) for v in row)
    return body + delimiters.row


def decode_record(record: str, delimiters: Delimiters) -> list[Field]:
    """
    Split one record (row separator already removed) into fields.

    In binary mode a field equal to ``\\N`` becomes ``None``; otherwise
    every field is kept verbatim, including empty strings.
    """
    fields: list[Field] = list(record.split(delimiters.column))
    if delimiters.binary:
        fields = [None if f == NULL_SENTINEL else f for f in fields]
    return fields


def fit_to_width(fields: Sequence[Field], width: int) -> tuple[Field, ...]:
    """Pad with ``None`` or truncate *fields* to exactly *width* entries."""
    if len(fields) >= width:
        return tuple(fields[:width])
    return tuple(fields) + (None,) * (width - len(fields))
