"""
Database connection management.
Handles request-scoped connections, query deadlines, initialization and teardown.
"""

import os
import sqlite3
import time
from contextlib import contextmanager

from flask import g, current_app

# Progress handler granularity (SQLite VM instructions between deadline checks)
_PROGRESS_STEPS = 1000


def get_db():
    """
    Get the request-scoped database connection with row factory.

    The connection waits at most QUERY_TIMEOUT seconds for a write lock
    held by another request before failing.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/bookings.db')
        if db_path != ':memory:':
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        g.db = sqlite3.connect(
            db_path,
            timeout=current_app.config.get('QUERY_TIMEOUT', 2.0)
        )
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        # Enable WAL mode for better concurrency
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


@contextmanager
def query_deadline(db, seconds: float):
    """
    Abort any statement on `db` still running after `seconds`.

    SQLite raises sqlite3.OperationalError('interrupted') when the deadline
    passes; callers translate it into QueryError/PersistenceError.
    """
    deadline = time.monotonic() + seconds

    def _check():
        return 1 if time.monotonic() > deadline else 0

    db.set_progress_handler(_check, _PROGRESS_STEPS)
    try:
        yield db
    finally:
        db.set_progress_handler(None, _PROGRESS_STEPS)


def init_db():
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    # Insert seed data
    seed_database(db)

    db.commit()
    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))
