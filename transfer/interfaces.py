"""Collaborator protocols the exporter and importer are written against."""
from __future__ import annotations

from typing import Any, ContextManager, Iterator, Protocol, Sequence


class RowSource(Protocol):
    """Executes a query and yields its rows once, front to back."""

    def iter_rows(self, sql: str, params: Sequence[Any] | None = None) -> Iterator[tuple]:
        ...


class TableSink(Protocol):
    """Schema lookup plus transactional batch execution for one table."""

    def column_names(self, table: str) -> list[str]:
        """Ordered column names; an empty list means the table was not found."""
        ...

    def truncate_table(self, table: str) -> None:
        ...

    def transaction(self) -> ContextManager[None]:
        """Commit on clean exit, roll back on any exception."""
        ...

    def insert_statement(self, table: str, columns: Sequence[str]) -> str:
        """Parameterised INSERT for *columns* of *table*, in that order."""
        ...

    def execute_batch(self, sql: str, rows: Sequence[Sequence[Any]]) -> int:
        ...
