"""
Database seed data.
Initial data population for fresh database installations.
"""

import os

from werkzeug.security import generate_password_hash

from models.entities import RESTRICTION_IDS

ROOMS = [
    "General's Quarters",
    "Major's Suite",
]

RESTRICTION_NAMES = {
    'reservation': 'Reservation',
    'owner-block': 'Owner Block',
}


def seed_database(db):
    """Insert initial seed data."""

    # 1. Restriction kinds
    for kind, restriction_id in RESTRICTION_IDS.items():
        db.execute('''
            INSERT INTO restrictions (id, restriction_name)
            VALUES (?, ?)
        ''', (restriction_id, RESTRICTION_NAMES[kind]))

    # 2. Rooms
    for room_name in ROOMS:
        db.execute('INSERT INTO rooms (room_name) VALUES (?)', (room_name,))

    # 3. Default administrator
    admin_password = os.environ.get('ADMIN_PASSWORD', 'password')
    db.execute('''
        INSERT INTO users (first_name, last_name, email, password_hash, access_level)
        VALUES (?, ?, ?, ?, ?)
    ''', ('Admin', 'User', 'admin@here.com', generate_password_hash(admin_password), 3))
