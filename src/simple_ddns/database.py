#!/usr/bin/env python3
"""
Record Store

Versioned SQLite table of hostname -> address records. Every address change
deactivates the previously active row and inserts a new active one inside a
single transaction, so at most one row per (fqdn, record type) is active and
older values are kept as history.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

# Standard library imports
import logging
import os
import queue
import sqlite3
import threading
from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, List, Optional, Sequence

# Internal imports
from .exceptions import (
    DatabaseError,
    InitializationError,
    OperationCancelled,
    StoreError,
    TransactionError,
    ValidationError,
)
from .records import DomainRecord, RecordType

################################################################################
# SQL STATEMENTS
################################################################################

DATABASE_PATH = "ddns.storage.sqlite.db"

TABLE_NAME = "ddns_domains"

# No uniqueness constraint: the single active row per key is kept by the
# deactivate-then-insert write path.
TABLE_COLUMNS = [
    ("fqdn", "TEXT NOT NULL"),
    ("update_time", "TEXT NOT NULL"),
    ("register_type", "TEXT NOT NULL"),
    ("ip", "TEXT NOT NULL"),
    ("active", "BOOL NOT NULL"),
]

SELECT_ACTIVE_RECORDS = f"SELECT fqdn, ip, register_type FROM {TABLE_NAME} WHERE active = 1"

INSERT_RECORD = f"""INSERT INTO {TABLE_NAME} (fqdn, update_time, register_type, ip, active)
                    VALUES (?, ?, ?, ?, 1)"""

DEACTIVATE_RECORD = f"""UPDATE {TABLE_NAME} SET active = 0
                        WHERE fqdn = ? AND register_type = ? AND active = 1"""

# Seconds to wait for a free pooled connection
POOL_TIMEOUT = 10.0

# Progress handler granularity (SQLite VM instructions between cancel checks)
CANCEL_CHECK_INTERVAL = 100

################################################################################
# RECORD STORE CLASS - SQLite with Connection Pooling
################################################################################

class RecordStore:
    """Record store for DNS records with connection pooling and transactional writes."""

    _shared: Optional["RecordStore"] = None
    _shared_lock = threading.RLock()

    def __init__(self, db_file: str, max_connections: int = 3, logger: Optional[Any] = None) -> None:
        """Open the connection pool and create the records table if absent.

        Args:
            db_file: Path to SQLite database file
            max_connections: Maximum number of connections in pool (default: 3)
            logger: Logger instance

        Raises:
            InitializationError: If a connection cannot be opened or the table
                cannot be created. Connections opened so far are closed.
        """
        self.db_file = db_file
        self.max_connections = max_connections
        self.logger = logger if logger else logging.getLogger(__name__)

        self._pool: "queue.Queue[sqlite3.Connection]" = queue.Queue(maxsize=max_connections)

        self._initialize_pool()

        try:
            self.create_table(TABLE_NAME, TABLE_COLUMNS)
        except sqlite3.Error as e:
            self.close()
            raise InitializationError(f"Failed to create table {TABLE_NAME}: {e}") from e

        self.logger.debug(f"Record store initialized: {db_file} (pool: {max_connections})")

    ################################################################################
    # PUBLIC CLASS METHODS - Process-wide Instance
    ################################################################################

    @classmethod
    def shared(cls, db_file: str, logger: Optional[Any] = None) -> "RecordStore":
        """Return the process-wide store, creating it on first call (thread-safe).

        Later calls reuse the existing pool whatever db_file they pass. A failed
        initialization leaves no instance behind, so a later call may retry.
        """
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls(db_file, logger=logger)
            elif os.path.abspath(db_file) != os.path.abspath(cls._shared.db_file):
                cls._shared.logger.warning(
                    f"Record store already open on {cls._shared.db_file}, ignoring {db_file}"
                )
            return cls._shared

    @classmethod
    def close_shared(cls) -> None:
        """Close and forget the process-wide store."""
        with cls._shared_lock:
            shared = cls._shared
        if shared is not None:
            shared.close()

    @classmethod
    def from_config(cls, config: Any, logger: Optional[Any] = None) -> "RecordStore":
        """Open the shared store at the path configured under ddns.storage.sqlite.db."""
        db_path = config.decode_str(DATABASE_PATH)
        return cls.shared(config.resolve_path(db_path), logger=logger)

    ################################################################################
    # PUBLIC INTERFACE - Record Operations
    ################################################################################

    def get_active_records(self, cancel: Optional[threading.Event] = None) -> List[DomainRecord]:
        """Return every active record (empty list when there are none).

        Rows that cannot be converted to a DomainRecord are logged and skipped.

        Raises:
            StoreError: On connection or query failure
            OperationCancelled: If cancel is set before or during the query
        """
        try:
            with self.get_connection() as conn, self._cancellable(conn, cancel):
                rows = conn.execute(SELECT_ACTIVE_RECORDS).fetchall()
        except OperationCancelled:
            raise
        except (sqlite3.Error, DatabaseError) as e:
            raise StoreError(f"Failed to read active records: {e}") from e

        records = []
        for row in rows:
            try:
                records.append(DomainRecord(
                    fqdn=row["fqdn"],
                    record_type=RecordType.parse(row["register_type"]),
                    value=row["ip"],
                ))
            except (ValidationError, IndexError, KeyError, TypeError) as e:
                self.logger.warning(f"Skipping unreadable record row {tuple(row)}: {e}")

        self.logger.debug(f"Loaded {len(records)} active records")
        return records

    def update_record(self, record: DomainRecord, cancel: Optional[threading.Event] = None) -> None:
        """Replace the active value of a record (deactivate old row + insert new row, atomically).

        Raises:
            TransactionError: If any step fails; nothing is changed
            OperationCancelled: If cancel is set; nothing is changed
        """
        with self.transaction(cancel) as conn:
            self._deactivate(conn, record)
            self._insert(conn, record, self._now())

        self.logger.debug(f"Stored record {record}")

    def init_records(self, records: Sequence[DomainRecord], cancel: Optional[threading.Event] = None) -> None:
        """Seed records as active in one transaction. Any failure rolls back the whole batch.

        An already active row for a seeded key is deactivated first.

        Raises:
            TransactionError: If any insertion fails; nothing is changed
            OperationCancelled: If cancel is set; nothing is changed
        """
        now = self._now()
        with self.transaction(cancel) as conn:
            for record in records:
                self._deactivate(conn, record)
                self._insert(conn, record, now)

        self.logger.info(f"Initialized {len(records)} records")

    ################################################################################
    # PUBLIC CONNECTION INTERFACE - Context Managers
    ################################################################################

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a connection from the pool (thread-safe context manager)."""
        try:
            conn = self._pool.get(timeout=POOL_TIMEOUT)
        except queue.Empty:
            raise DatabaseError("Connection pool exhausted - no connections available")

        try:
            yield conn
        finally:
            if conn.in_transaction:
                conn.rollback()
            self._pool.put(conn)

    @contextmanager
    def transaction(self, cancel: Optional[threading.Event] = None) -> Iterator[sqlite3.Connection]:
        """Run the block in one transaction; commit on success, roll back on any exception.

        Raises:
            TransactionError: With stage "begin" if no connection is available
                or BEGIN fails, "commit" if COMMIT fails
        """
        with ExitStack() as stack:
            try:
                conn = stack.enter_context(self.get_connection())
            except DatabaseError as e:
                raise TransactionError("begin", f"No connection available: {e}") from e
            stack.enter_context(self._cancellable(conn, cancel))

            try:
                conn.execute("BEGIN")
            except sqlite3.Error as e:
                raise TransactionError("begin", f"Failed to start transaction: {e}") from e

            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise

            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.rollback()
                raise TransactionError("commit", f"Failed to commit transaction: {e}") from e

    def create_table(self, table_name: str, columns: List[tuple]) -> None:
        """Create a table if it does not exist."""
        columns_sql = ", ".join([f"{name} {type_}" for name, type_ in columns])
        sql = f"CREATE TABLE IF NOT EXISTS {table_name} ({columns_sql});"

        with self.get_connection() as conn:
            conn.execute(sql)

    ################################################################################
    # RESOURCE MANAGEMENT - Cleanup Methods
    ################################################################################

    def close(self) -> None:
        """Close all connections in the pool. A closed shared store is forgotten."""
        with RecordStore._shared_lock:
            if RecordStore._shared is self:
                RecordStore._shared = None

        while True:
            try:
                conn = self._pool.get_nowait()
            except queue.Empty:
                break
            try:
                conn.close()
            except sqlite3.Error as e:
                self.logger.warning(f"Error closing connection: {e}")

        self.logger.debug("All database connections closed")

    ################################################################################
    # PRIVATE METHODS - Internal Implementation
    ################################################################################

    def _deactivate(self, conn: sqlite3.Connection, record: DomainRecord) -> None:
        try:
            conn.execute(DEACTIVATE_RECORD, (record.fqdn, record.record_type.value))
        except sqlite3.Error as e:
            raise TransactionError("deactivate", f"Failed to deactivate {record.fqdn} ({record.record_type.value}): {e}") from e

    def _insert(self, conn: sqlite3.Connection, record: DomainRecord, update_time: str) -> None:
        try:
            conn.execute(INSERT_RECORD, (record.fqdn, update_time, record.record_type.value, record.value))
        except sqlite3.Error as e:
            raise TransactionError("insert", f"Failed to insert {record}: {e}") from e

    @contextmanager
    def _cancellable(self, conn: sqlite3.Connection, cancel: Optional[threading.Event]) -> Iterator[None]:
        """Abort running statements when cancel is set and raise OperationCancelled."""
        if cancel is None:
            yield
            return

        if cancel.is_set():
            raise OperationCancelled("Database operation cancelled")

        conn.set_progress_handler(lambda: 1 if cancel.is_set() else 0, CANCEL_CHECK_INTERVAL)
        try:
            yield
        except DatabaseError as e:
            if cancel.is_set():
                raise OperationCancelled("Database operation cancelled") from e
            raise
        except sqlite3.OperationalError as e:
            if cancel.is_set():
                raise OperationCancelled("Database operation cancelled") from e
            raise
        finally:
            conn.set_progress_handler(None, 0)

    def _initialize_pool(self) -> None:
        """Initialize the connection pool with connections."""
        try:
            for _ in range(self.max_connections):
                self._pool.put(self._create_connection())
        except sqlite3.Error as e:
            self.close()
            raise InitializationError(f"Failed to initialize connection pool for {self.db_file}: {e}") from e

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new database connection in autocommit mode (transactions are explicit)."""
        conn = sqlite3.connect(
            self.db_file,
            check_same_thread=False,
            timeout=30.0,
            isolation_level=None
        )
        conn.row_factory = sqlite3.Row

        try:
            conn.execute("PRAGMA busy_timeout = 30000")
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
        except sqlite3.Error:
            conn.close()
            raise

        return conn

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
