"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'room_restrictions',
        'reservations',
        'restrictions',
        'rooms',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users (admin authentication only)
    db.execute('''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL DEFAULT '',
            last_name TEXT NOT NULL DEFAULT '',
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            access_level INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 2. Rooms (reference data)
    db.execute('''
        CREATE TABLE rooms (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            room_name TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Restriction kinds lookup
    db.execute('''
        CREATE TABLE restrictions (
            id INTEGER PRIMARY KEY,
            restriction_name TEXT UNIQUE NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 4. Reservations (dates stored as YYYY-MM-DD text)
    db.execute('''
        CREATE TABLE reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT NOT NULL,
            phone TEXT DEFAULT '',
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            processed INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date < end_date)
        )
    ''')

    # 5. Room restrictions: the rows availability is tested against
    db.execute('''
        CREATE TABLE room_restrictions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            reservation_id INTEGER REFERENCES reservations(id) ON DELETE CASCADE,
            restriction_id INTEGER NOT NULL REFERENCES restrictions(id),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date < end_date)
        )
    ''')


def create_indexes(db):
    """Create performance indexes."""

    # Overlap queries filter on room and date span
    db.execute('CREATE INDEX idx_room_restrictions_span ON room_restrictions(room_id, start_date, end_date)')
    db.execute('CREATE INDEX idx_room_restrictions_reservation ON room_restrictions(reservation_id)')

    # Admin listings
    db.execute('CREATE INDEX idx_reservations_processed ON reservations(processed)')
    db.execute('CREATE INDEX idx_reservations_start ON reservations(start_date)')
