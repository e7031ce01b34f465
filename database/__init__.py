"""
Database package for the booking application.

This package provides modular database operations:
- connection: Database connection management (get_db, close_db, init_db, query_deadline)
- schema: Table creation and indexes
- seed: Initial seed data
- sessions: Server-side session storage
"""

from database.connection import get_db, close_db, init_db, query_deadline
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database
from database.sessions import SqliteSessionInterface, renew_session

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    'query_deadline',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
    # Sessions
    'SqliteSessionInterface',
    'renew_session',
]
