"""models/__init__.py"""
from models.options import (
    NULL_SENTINEL,
    RECORD_SEPARATOR,
    UNIT_SEPARATOR,
    Delimiters,
    EventKind,
    ExportEvent,
    ExportOptions,
    ExportResult,
    ExportVariant,
    ImportOptions,
    ImportResult,
    Verbosity,
)

__all__ = [
    "NULL_SENTINEL",
    "RECORD_SEPARATOR",
    "UNIT_SEPARATOR",
    "Delimiters",
    "EventKind",
    "ExportEvent",
    "ExportOptions",
    "ExportResult",
    "ExportVariant",
    "ImportOptions",
    "ImportResult",
    "Verbosity",
]
