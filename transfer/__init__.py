"""transfer/__init__.py"""
from transfer.codec import decode_record, encode_row, format_field
from transfer.database import ConnectionLostError, DatabaseError, DatabaseManager
from transfer.errors import ConfigurationError, SchemaError, TransferError
from transfer.exporter import Exporter
from transfer.importer import Importer
from transfer.queries import ExportQuery, resolve_query

__all__ = [
    "decode_record",
    "encode_row",
    "format_field",
    "ConnectionLostError",
    "DatabaseError",
    "DatabaseManager",
    "ConfigurationError",
    "SchemaError",
    "TransferError",
    "Exporter",
    "Importer",
    "ExportQuery",
    "resolve_query",
]
