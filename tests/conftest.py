"""
tests/conftest.py
-----------------
In-memory stand-in for the MySQL collaborator, shared by the exporter,
importer, round-trip and CLI tests.
"""
from __future__ import annotations

import copy
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

import pytest

from transfer.database import DatabaseError, build_insert_sql


class FakeDatabase:
    """
    Implements ``RowSource`` and ``TableSink`` over plain lists.

    Attributes:
        tables:        ``{name: {"columns": [...], "rows": [tuple, ...]}}``.
        query_rows:    Rows returned by ``iter_rows`` keyed by SQL text.
        batches:       ``(sql, rows)`` for every ``execute_batch`` call.
        events:        Ordered log of calls ("begin", "truncate", "batch", ...).
        fail_on_batch: 1-based batch number that raises ``DatabaseError``.
    """

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, Any]] = {}
        self.query_rows: dict[str, list[tuple]] = {}
        self.executed_queries: list[tuple[str, Sequence[Any] | None]] = []
        self.batches: list[tuple[str, list[tuple]]] = []
        self.events: list[str] = []
        self.commits = 0
        self.rollbacks = 0
        self.fail_on_batch: int | None = None
        self.rows_before_first_batch: int | None = None
        self._target: str | None = None
        self._snapshot: dict[str, dict[str, Any]] | None = None

    # --- helpers ---------------------------------------------------------

    def add_table(self, name: str, columns: list[str], rows: list[tuple] | None = None) -> None:
        self.tables[name] = {"columns": list(columns), "rows": list(rows or [])}

    def rows_of(self, name: str) -> list[tuple]:
        return self.tables[name]["rows"]

    def __enter__(self) -> "FakeDatabase":
        self.events.append("connect")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.events.append("close")
        return False

    # --- RowSource -------------------------------------------------------

    def iter_rows(self, sql: str, params: Sequence[Any] | None = None) -> Iterator[tuple]:
        self.executed_queries.append((sql, params))
        yield from self.query_rows.get(sql, [])

    # --- TableSink -------------------------------------------------------

    def column_names(self, table: str) -> list[str]:
        self.events.append("columns")
        self._target = table
        entry = self.tables.get(table)
        return list(entry["columns"]) if entry else []

    def truncate_table(self, table: str) -> None:
        self.events.append("truncate")
        self.tables[table]["rows"] = []

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self.events.append("begin")
        self._snapshot = copy.deepcopy(self.tables)
        try:
            yield
        except BaseException:
            self.tables = self._snapshot
            self.rollbacks += 1
            self.events.append("rollback")
            raise
        self.commits += 1
        self.events.append("commit")

    def insert_statement(self, table: str, columns: Sequence[str]) -> str:
        return build_insert_sql(table, columns)

    def execute_batch(self, sql: str, rows: Sequence[Sequence[Any]]) -> int:
        self.events.append("batch")
        if self.rows_before_first_batch is None and self._target in self.tables:
            self.rows_before_first_batch = len(self.tables[self._target]["rows"])
        self.batches.append((sql, [tuple(r) for r in rows]))
        if self.fail_on_batch is not None and len(self.batches) == self.fail_on_batch:
            raise DatabaseError("Duplicate entry '1' for key 'PRIMARY'")
        assert self._target is not None
        self.tables[self._target]["rows"].extend(tuple(r) for r in rows)
        return len(rows)


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()
