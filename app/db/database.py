import logging
import os
import shutil
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable

from app.settings import settings


DB_VERSION = 1

logger = logging.getLogger(__name__)


class DatabaseNotInitializedError(Exception):
    """Raised when database operations are attempted before setup()"""
    pass


def register_schema_sql(func: Callable[[], str]) -> Callable[[], str]:
    """Register the SQL returned by `func` to run, in import order, on Database.setup()

    Example:
        @register_schema_sql
        def _create_users_table() -> str:
            return "CREATE TABLE IF NOT EXISTS users (...)"
    """
    Database._schema_registry.append(func())
    return func


class Database:
    """SQLite access for the repositories.

    Every call opens its own short-lived connection, so the object can be shared
    across concurrent requests. Foreign keys are enforced on every connection.
    """

    _schema_registry: list[str] = []

    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path if db_path is not None else settings.db_path
        self._initialized = False

    def setup(self) -> None:
        """Discard a database written by another schema version, then create missing tables"""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        stored_version = self._stored_version()
        if stored_version is not None and stored_version != DB_VERSION:
            logger.warning(
                "Database schema version mismatch",
                extra={"db_version": stored_version, "schema_version": DB_VERSION},
            )
            self._discard_old_db()

        with self._connection() as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS db_version (version INTEGER NOT NULL)")
            conn.execute("DELETE FROM db_version")
            conn.execute("INSERT INTO db_version (version) VALUES (?)", (DB_VERSION,))
            for sql in self._schema_registry:
                conn.execute(sql)

        self._initialized = True

    def _stored_version(self) -> int | None:
        if not os.path.exists(self.db_path):
            return None

        with self._connection() as conn:
            has_table = conn.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'db_version'"
            ).fetchone()
            if has_table is None:
                # A file without a version table predates versioning
                return 0
            row = conn.execute("SELECT version FROM db_version LIMIT 1").fetchone()
            return row[0] if row else 0

    def _discard_old_db(self) -> None:
        if not settings.preserve_old_db:
            os.remove(self.db_path)
            logger.warning("Old database deleted", extra={"db_path": self.db_path})
            return

        root, ext = os.path.splitext(self.db_path)
        backup_path = f"{root}-{datetime.now().strftime('%Y%m%d%H%M%S')}{ext}"
        shutil.move(self.db_path, backup_path)
        logger.warning("Old database moved aside", extra={"backup_path": backup_path})

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error, always close"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _check_initialized(self) -> None:
        if not self._initialized:
            raise DatabaseNotInitializedError(
                "Database has not been initialized. Call setup() first."
            )

    def execute_query(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Execute a SELECT query and return results"""
        self._check_initialized()
        with self._connection() as conn:
            return conn.execute(query, params).fetchall()

    def execute_update(self, query: str, params: tuple[Any, ...] = ()) -> int:
        """Execute an INSERT/UPDATE/DELETE query and return affected rows"""
        self._check_initialized()
        with self._connection() as conn:
            return conn.execute(query, params).rowcount

    def execute_in_transaction(self, statements: list[tuple[str, tuple[Any, ...]]]) -> None:
        """Execute several INSERT/UPDATE/DELETE statements atomically"""
        self._check_initialized()
        with self._connection() as conn:
            for query, params in statements:
                conn.execute(query, params)

    def is_healthy(self) -> bool:
        if not self._initialized:
            return False
        try:
            with self._connection() as conn:
                conn.execute("SELECT 1").fetchone()
        except sqlite3.Error:
            logger.exception("Database health check failed")
            return False
        return True
