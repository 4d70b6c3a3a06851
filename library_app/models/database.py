"""Database connection management and schema.

This module provides the persistence adapter used by every model: a thin
wrapper over one ``sqlite3`` connection that only accepts parameterized
statements and turns driver failures into the application's error types.
"""
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence

from flask import current_app, g

from library_app.errors import ConstraintViolation, StoreError

logger = logging.getLogger(__name__)

SCHEMA = '''
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        password TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'member' CHECK (role IN ('member', 'admin'))
    );

    CREATE TABLE IF NOT EXISTS books (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        author TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Available',
        borrowed_by_user_id INTEGER,
        due_date TEXT,
        FOREIGN KEY (borrowed_by_user_id) REFERENCES users (id),
        CHECK (
            (status = 'Available' AND borrowed_by_user_id IS NULL AND due_date IS NULL)
            OR (status = 'Borrowed' AND borrowed_by_user_id IS NOT NULL AND due_date IS NOT NULL)
        )
    );

    CREATE TABLE IF NOT EXISTS sessions (
        token TEXT PRIMARY KEY,
        user_id INTEGER NOT NULL,
        username TEXT NOT NULL,
        role TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    );

    CREATE INDEX IF NOT EXISTS idx_sessions_expires_at ON sessions (expires_at);

    CREATE TABLE IF NOT EXISTS audit_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        action TEXT NOT NULL,
        details TEXT,
        log_type TEXT NOT NULL DEFAULT 'info',
        user_id INTEGER
    );
'''

# Dependents first so foreign keys never block the drop.
DROP_ORDER = ('audit_log', 'sessions', 'books', 'users')


class ExecResult(NamedTuple):
    """Outcome of a mutating statement."""

    inserted_id: Optional[int]
    affected_rows: int


class Database:
    """Parameterized access to a single SQLite connection.

    Each call to :meth:`execute` commits on its own unless it runs inside
    :meth:`transaction`.
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self._depth = 0
        if path != ':memory:':
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        try:
            self.conn = sqlite3.connect(
                path,
                timeout=timeout,
                detect_types=sqlite3.PARSE_DECLTYPES
            )
            self.conn.row_factory = sqlite3.Row
            self.conn.execute('PRAGMA foreign_keys = ON')
        except sqlite3.Error as exc:
            logger.error('Cannot open database %s: %s', path, exc)
            raise StoreError() from exc

    def execute(self, statement: str, params: Sequence[Any] = ()) -> ExecResult:
        """Run an INSERT, UPDATE or DELETE statement."""
        cursor = self._run(statement, params)
        if self._depth == 0:
            self._commit()
        return ExecResult(cursor.lastrowid, cursor.rowcount)

    def query_one(self, statement: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        row = self._run(statement, params).fetchone()
        return dict(row) if row is not None else None

    def query_all(self, statement: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._run(statement, params).fetchall()]

    def executescript(self, script: str) -> None:
        """Run a trusted, parameter-free DDL script."""
        try:
            self.conn.executescript(script)
        except sqlite3.Error as exc:
            logger.error('Schema script failed: %s', exc)
            raise StoreError() from exc

    @contextmanager
    def transaction(self) -> Iterator['Database']:
        """Group several statements into one commit."""
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.conn.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self._commit()

    def close(self) -> None:
        self.conn.close()

    def _commit(self) -> None:
        try:
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            logger.error('Commit failed, changes rolled back: %s', exc)
            raise StoreError() from exc

    def _run(self, statement: str, params: Sequence[Any]) -> sqlite3.Cursor:
        try:
            return self.conn.execute(statement, tuple(params))
        except sqlite3.IntegrityError as exc:
            if self._depth == 0:
                self.conn.rollback()
            logger.info('Constraint violation: %s', exc)
            raise ConstraintViolation() from exc
        except sqlite3.Error as exc:
            if self._depth == 0:
                self.conn.rollback()
            logger.error('Database error: %s | statement: %s', exc, ' '.join(statement.split()))
            raise StoreError() from exc


def get_db() -> Database:
    """Get database connection from Flask application context.

    Returns:
        The ``Database`` bound to the current application context.
    """
    if 'db' not in g:
        g.db = Database(
            current_app.config['DATABASE_PATH'],
            timeout=current_app.config.get('DATABASE_TIMEOUT', 5.0)
        )
    return g.db


def close_db(e=None):
    """Close database connection"""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def create_schema(db: Database) -> None:
    """Create any missing tables. Existing data is kept."""
    db.executescript(SCHEMA)


def drop_schema(db: Database) -> None:
    """Drop every table. All data is lost."""
    db.executescript(''.join(f'DROP TABLE IF EXISTS {table};\n' for table in DROP_ORDER))
    logger.warning('Dropped tables: %s', ', '.join(DROP_ORDER))
