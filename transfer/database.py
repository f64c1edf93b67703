"""
transfer/database.py
--------------------
MySQL connection management, row streaming and batched, transactional
inserts.

Design Decisions:
    * ``DatabaseManager`` is a context manager so callers can use it with
      ``with`` statements and be guaranteed the connection is closed on exit.
    * It implements both collaborator protocols (``RowSource`` for export,
      ``TableSink`` for import); the engine never imports mysql.connector.
    * Exports stream through an unbuffered cursor with ``fetchmany`` so the
      result set is never materialised client-side.
    * Only identifiers confirmed by ``information_schema`` are quoted into
      statement text; all data values are bound as ``%s`` parameters.
    * Autocommit is off. ``transaction()`` commits on clean exit and rolls
      back on any exception, ``KeyboardInterrupt`` included.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Generator, Iterator, Sequence

import mysql.connector
from mysql.connector import MySQLConnection
from mysql.connector.cursor import MySQLCursor

from config import CONFIG, DatabaseConfig
from logger import get_logger
from transfer.errors import TransferError

log = get_logger(__name__)


class DatabaseError(TransferError):
    """Raised for database-level failures reported by this module."""


class ConnectionLostError(DatabaseError):
    """Raised when the connection to MySQL is detected as lost."""


def quote_identifier(name: str) -> str:
    """Backtick-quote one identifier, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


def split_table_name(table: str) -> tuple[str | None, str]:
    """Split ``schema.table`` into its parts; a bare name has no schema."""
    schema, dot, name = table.strip().rpartition(".")
    name = name.strip("`")
    if not dot:
        return None, name
    return schema.strip("`"), name


def quote_table_name(table: str) -> str:
    schema, name = split_table_name(table)
    if schema:
        return f"{quote_identifier(schema)}.{quote_identifier(name)}"
    return quote_identifier(name)


def build_insert_sql(table: str, columns: Sequence[str]) -> str:
    """
    Build one parameterised INSERT covering *columns* in order.

    Example::

        >>> build_insert_sql("Config", ["key", "value"])
        'INSERT INTO `Config` (`key`, `value`) VALUES (%s, %s)'
    """
    col_list = ", ".join(quote_identifier(c) for c in columns)
    placeholders = ", ".join(["%s"] * len(columns))
    return f"INSERT INTO {quote_table_name(table)} ({col_list}) VALUES ({placeholders})"


class DatabaseManager:
    """
    MySQL connection wrapper used by both export and import.

    Example::

        with DatabaseManager.from_config() as db:
            for row in db.iter_rows("SELECT * FROM t"):
                ...

            with db.transaction():
                db.execute_batch(insert_sql, rows)
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: str | None = None,
        charset: str = "utf8mb4",
        connect_timeout: int = 10,
        connect_attempts: int = 1,
        retry_delay: float = 1.0,
        fetch_size: int = 1000,
    ) -> None:
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._database = database
        self._charset = charset
        self._connect_timeout = connect_timeout
        self._connect_attempts = max(1, connect_attempts)
        self._retry_delay = retry_delay
        self._fetch_size = fetch_size

        self._conn: MySQLConnection | None = None

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, db_config: DatabaseConfig | None = None) -> "DatabaseManager":
        """Convenience factory using values from the application config."""
        cfg = db_config or CONFIG.db
        return cls(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
            charset=cfg.charset,
            connect_timeout=cfg.connect_timeout,
            connect_attempts=cfg.connect_attempts,
            fetch_size=CONFIG.transfer.fetch_size,
        )

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "DatabaseManager":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            log.debug("Closing connection after error: %s", exc_val)
            self._safe_rollback()
        self.close()
        return False  # Never suppress exceptions

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """
        Open the MySQL connection.

        Raises:
            DatabaseError: If the connection cannot be established.
        """
        for attempt in range(1, self._connect_attempts + 1):
            try:
                log.debug(
                    "Connecting to MySQL at %s:%s (attempt %d/%d)",
                    self._host, self._port, attempt, self._connect_attempts,
                )
                self._conn = mysql.connector.connect(
                    host=self._host,
                    port=self._port,
                    user=self._user,
                    password=self._password,
                    database=self._database,
                    charset=self._charset,
                    connect_timeout=self._connect_timeout,
                    autocommit=False,
                    consume_results=True,
                )
                log.debug("Connected to MySQL successfully.")
                return
            except mysql.connector.Error as exc:
                log.warning("Connection attempt %d failed: %s", attempt, exc)
                if attempt < self._connect_attempts:
                    time.sleep(self._retry_delay * attempt)
        raise DatabaseError(
            f"Could not connect to MySQL at {self._host}:{self._port} "
            f"after {self._connect_attempts} attempt(s)."
        )

    def close(self) -> None:
        """Close the connection; cleanup errors are logged, not raised."""
        try:
            if self._conn and self._conn.is_connected():
                self._conn.close()
                log.debug("Database connection closed.")
        except mysql.connector.Error as exc:
            log.warning("Error while closing connection: %s", exc)
        self._conn = None

    @property
    def is_connected(self) -> bool:
        return bool(self._conn and self._conn.is_connected())

    def _ensure_connected(self) -> MySQLConnection:
        if not self.is_connected:
            raise ConnectionLostError(
                "Database connection is not open. Call connect() first."
            )
        assert self._conn is not None
        return self._conn

    def _safe_rollback(self) -> None:
        try:
            if self._conn and self._conn.is_connected():
                self._conn.rollback()
                log.debug("Transaction rolled back.")
        except mysql.connector.Error as exc:
            log.warning("Rollback failed: %s", exc)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> int:
        """
        Execute one statement that returns no rows.

        Returns:
            The affected row count.

        Raises:
            DatabaseError: On MySQL execution errors.
        """
        conn = self._ensure_connected()
        cursor: MySQLCursor = conn.cursor()
        try:
            cursor.execute(sql, params)
            return cursor.rowcount
        except mysql.connector.Error as exc:
            log.error("SQL execution error: %s | SQL: %.500s", exc, sql)
            raise DatabaseError(str(exc)) from exc
        finally:
            cursor.close()

    def iter_rows(self, sql: str, params: Sequence[Any] | None = None) -> Iterator[tuple]:
        """
        Stream the rows of *sql* through a forward-only cursor.

        Every result set is walked in order, so procedure calls that return
        their rows as a result set are streamed the same way as a SELECT.

        Raises:
            DatabaseError: On MySQL execution or fetch errors.
        """
        conn = self._ensure_connected()
        cursor: MySQLCursor = conn.cursor(buffered=False)
        try:
            cursor.execute(sql, params or ())
            while True:
                if cursor.with_rows:
                    while True:
                        rows = cursor.fetchmany(self._fetch_size)
                        if not rows:
                            break
                        yield from rows
                if not cursor.nextset():
                    break
        except mysql.connector.Error as exc:
            log.error("Query failed: %s | SQL: %.500s", exc, sql)
            raise DatabaseError(str(exc)) from exc
        finally:
            cursor.close()

    def column_names(self, table: str) -> list[str]:
        """
        Return the columns of *table* in physical order.

        A ``schema.table`` name is looked up in that schema, a bare name in
        the connection's current database.

        Returns:
            Ordered column names; empty if the table does not exist.
        """
        schema, name = split_table_name(table)
        conn = self._ensure_connected()
        cursor: MySQLCursor = conn.cursor()
        try:
            cursor.execute(
                "SELECT COLUMN_NAME FROM information_schema.COLUMNS "
                "WHERE TABLE_SCHEMA = COALESCE(%s, DATABASE()) AND TABLE_NAME = %s "
                "ORDER BY ORDINAL_POSITION",
                (schema, name),
            )
            return [row[0] for row in cursor.fetchall()]
        except mysql.connector.Error as exc:
            log.error("Could not read columns of '%s': %s", table, exc)
            raise DatabaseError(str(exc)) from exc
        finally:
            cursor.close()

    def truncate_table(self, table: str) -> None:
        """Remove every row of *table* (an implicit commit in MySQL)."""
        self.execute(f"TRUNCATE TABLE {quote_table_name(table)}")
        log.info("Truncated table '%s'.", table)

    def insert_statement(self, table: str, columns: Sequence[str]) -> str:
        return build_insert_sql(table, columns)

    def execute_batch(self, sql: str, rows: Sequence[Sequence[Any]]) -> int:
        """
        Execute *sql* once per parameter set in *rows*.

        Returns:
            The affected row count reported by the driver.

        Raises:
            DatabaseError: If any parameter set fails.
        """
        conn = self._ensure_connected()
        cursor: MySQLCursor = conn.cursor()
        try:
            cursor.executemany(sql, rows)
            return cursor.rowcount
        except mysql.connector.Error as exc:
            log.error("Batch execution error: %s | SQL: %.500s", exc, sql)
            raise DatabaseError(str(exc)) from exc
        finally:
            cursor.close()

    def commit(self) -> None:
        self._ensure_connected().commit()

    def rollback(self) -> None:
        self._safe_rollback()

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """
        Explicit transaction scope.

        Autocommit is off, so the server opens the transaction implicitly
        with the first statement (the column lookup included). Commits on
        clean exit, rolls back on any exception.

        Example::

            with db.transaction():
                db.execute_batch(insert_sql, first_batch)
                db.execute_batch(insert_sql, second_batch)
            # committed once
        """
        conn = self._ensure_connected()
        try:
            yield
        except BaseException:
            self._safe_rollback()
            raise
        try:
            conn.commit()
        except mysql.connector.Error as exc:
            self._safe_rollback()
            raise DatabaseError(f"Commit failed: {exc}") from exc
        log.debug("Transaction committed.")
