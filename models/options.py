"""
models/options.py
-----------------
Typed data models for export/import runs.

Design Decision:
    Using ``@dataclass`` and ``Enum`` instead of plain dicts ensures:
    * A single source of truth for the valid export variants and
      verbosity levels.
    * Delimiter configuration is resolved once (binary mode overrides
      the caller's separators) and is immutable afterwards, so exporter
      and importer always agree on the format.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path

# Binary-mode format constants.
UNIT_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e\n"
NULL_SENTINEL = "\\N"

DEFAULT_COLUMN_SEPARATOR = " "
DEFAULT_ROW_SEPARATOR = "\n"


class Verbosity(IntEnum):
    """Ordered output levels; comparisons such as ``>= NORMAL`` are meaningful."""
    SILENT = 0
    QUIET = 1
    NORMAL = 2
    DETAILED = 3
    DEBUG = 4

    @classmethod
    def from_name(cls, name: str) -> "Verbosity":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(v.name.lower() for v in cls)
            raise ValueError(f"Unknown verbosity '{name}'. Expected one of: {valid}.") from None


class ExportVariant(str, Enum):
    """The closed set of named exports."""
    CONFIGURATION = "Configuration"
    PROPERTIES = "Properties"
    CAMA = "Cama"


@dataclass(frozen=True)
class Delimiters:
    """
    Column/row separators plus the binary-mode flag.

    Attributes:
        column: Separator between fields of one record.
        row:    Terminator appended after every record.
        binary: When True, ``\\N`` marks a database NULL.
    """
    column: str = DEFAULT_COLUMN_SEPARATOR
    row: str = DEFAULT_ROW_SEPARATOR
    binary: bool = False

    def __post_init__(self) -> None:
        if not self.column:
            raise ValueError("Column separator must not be empty.")
        if not self.row:
            raise ValueError("Row separator must not be empty.")

    @classmethod
    def resolve(
        cls,
        binary: bool = False,
        column: str | None = None,
        row: str | None = None,
    ) -> "Delimiters":
        """
        Build the effective delimiters for a run.

        In binary mode the separators are fixed control characters and any
        caller-supplied separators are ignored.
        """
        if binary:
            return cls(column=UNIT_SEPARATOR, row=RECORD_SEPARATOR, binary=True)
        return cls(
            column=column if column is not None else DEFAULT_COLUMN_SEPARATOR,
            row=row if row is not None else DEFAULT_ROW_SEPARATOR,
            binary=False,
        )

    @property
    def is_line_oriented(self) -> bool:
        return self.row == DEFAULT_ROW_SEPARATOR


@dataclass
class ExportOptions:
    """Everything one export run needs besides its collaborators."""
    variant: ExportVariant | str
    outfile: Path | str | None = None  # None → standard output
    top: int | None = None
    delimiters: Delimiters = field(default_factory=Delimiters)
    verbosity: Verbosity = Verbosity.NORMAL

    @property
    def to_file(self) -> bool:
        return self.outfile is not None and str(self.outfile) != ""


@dataclass
class ImportOptions:
    """Everything one import run needs besides its collaborators."""
    infile: Path | str
    table: str
    delimiters: Delimiters = field(default_factory=Delimiters)
    drop_existing: bool = False
    verbosity: Verbosity = Verbosity.NORMAL


class EventKind(str, Enum):
    PROGRESS = "progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ExportEvent:
    """A progress tick or the completion summary of an export."""
    kind: EventKind
    rows: int
    destination: str | None = None

    @property
    def message(self) -> str:
        if self.kind is EventKind.PROGRESS:
            return f"{self.rows:,} rows written"
        return f"Wrote {self.rows} lines to {self.destination}"


@dataclass
class ExportResult:
    """Outcome of one export run."""
    variant: str
    destination: str
    rows_written: int = 0
    elapsed_seconds: float = 0.0

    def __str__(self) -> str:
        return f"[OK] {self.variant} → {self.destination}: {self.rows_written} rows"


@dataclass
class ImportResult:
    """Outcome of one import run."""
    table: str
    rows_imported: int = 0
    batches: int = 0
    truncated: bool = False
    elapsed_seconds: float = 0.0

    def __str__(self) -> str:
        return (
            f"[OK] {self.table}: {self.rows_imported} rows "
            f"in {self.batches} batch(es), {self.elapsed_seconds:.2f}s"
        )
