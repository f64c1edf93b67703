"""
transfer/errors.py
------------------
Exception hierarchy for the export/import engine.

    TransferError (base)
    ├── ConfigurationError
    ├── SchemaError
    └── DatabaseError           (transfer/database.py)
        └── ConnectionLostError

I/O failures are not wrapped; ``OSError`` propagates unchanged.
"""
from __future__ import annotations


class TransferError(Exception):
    """Base class for every fatal condition raised by the engine."""


class ConfigurationError(TransferError):
    """
    Raised before any I/O when a run is misconfigured.

    Examples:
    - Unknown export variant name
    """


class SchemaError(TransferError):
    """Raised when the import target table is missing or has no columns."""

    def __init__(self, table: str, message: str | None = None) -> None:
        self.table = table
        super().__init__(message or f"Table '{table}' not found or has no columns.")
