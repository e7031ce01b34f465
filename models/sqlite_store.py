"""
SQLite booking store.
Raw SQL over the request-scoped connection from database.get_db().
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, timedelta
from typing import List, Optional

from werkzeug.security import generate_password_hash, check_password_hash

from database.connection import get_db, query_deadline
from models.booking_store import BookingStore, _clean_fields, _timing_hash
from models.entities import (
    Room, Reservation, RoomRestriction, User,
    KIND_RESERVATION, KIND_OWNER_BLOCK, RESTRICTION_IDS,
)
from models.errors import (
    AuthError, NotFoundError, PersistenceError, QueryError, RoomUnavailableError,
)

logger = logging.getLogger(__name__)


class SqliteBookingStore(BookingStore):
    """BookingStore on SQLite."""

    def __init__(self, connection_factory=None, query_timeout: float = 2.0):
        """
        Args:
            connection_factory: Callable returning an open sqlite3.Connection
                (defaults to the request-scoped get_db)
            query_timeout: Seconds a single store call may run
        """
        self._connect = connection_factory or get_db
        self.query_timeout = query_timeout

    # =========================================================================
    # CONNECTION HELPERS
    # =========================================================================

    @contextmanager
    def _reading(self):
        try:
            db = self._connect()
            with query_deadline(db, self.query_timeout):
                yield db
        except sqlite3.Error as e:
            logger.error(f"Booking query failed: {e}")
            raise QueryError(str(e)) from e

    @contextmanager
    def _writing(self):
        db = None
        try:
            db = self._connect()
            with query_deadline(db, self.query_timeout):
                yield db
            db.commit()
        except sqlite3.Error as e:
            if db is not None:
                db.rollback()
            logger.error(f"Booking write failed: {e}")
            raise PersistenceError(str(e)) from e
        except Exception:
            if db is not None:
                db.rollback()
            raise

    @staticmethod
    def _count_overlaps(db, start: date, end: date, room_id: int) -> int:
        row = db.execute('''
            SELECT COUNT(id) AS n FROM room_restrictions
            WHERE room_id = ? AND ? < end_date AND ? > start_date
        ''', (room_id, start.isoformat(), end.isoformat())).fetchone()
        return row['n']

    @staticmethod
    def _insert_reservation(db, draft) -> int:
        cursor = db.execute('''
            INSERT INTO reservations (
                first_name, last_name, email, phone,
                start_date, end_date, room_id, processed,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, 0, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
        ''', (
            draft.first_name, draft.last_name, draft.email, draft.phone,
            draft.start_date.isoformat(), draft.end_date.isoformat(), draft.room_id
        ))
        return cursor.lastrowid

    @staticmethod
    def _insert_restriction(db, restriction: RoomRestriction) -> int:
        cursor = db.execute('''
            INSERT INTO room_restrictions (
                start_date, end_date, room_id, reservation_id, restriction_id,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
        ''', (
            restriction.start_date.isoformat(), restriction.end_date.isoformat(),
            restriction.room_id, restriction.reservation_id, restriction.restriction_id
        ))
        return cursor.lastrowid

    # =========================================================================
    # ROOMS AND AVAILABILITY
    # =========================================================================

    def all_rooms(self) -> List[Room]:
        with self._reading() as db:
            rows = db.execute('SELECT * FROM rooms ORDER BY id').fetchall()
        return [Room.from_row(r) for r in rows]

    def get_room(self, room_id: int) -> Room:
        with self._reading() as db:
            row = db.execute('SELECT * FROM rooms WHERE id = ?', (room_id,)).fetchone()
        if not row:
            raise NotFoundError(f"Room {room_id} not found")
        return Room.from_row(row)

    def create_room(self, name: str) -> int:
        with self._writing() as db:
            cursor = db.execute('INSERT INTO rooms (room_name) VALUES (?)', (name,))
            return cursor.lastrowid

    def search_available_rooms(self, start: date, end: date) -> List[Room]:
        with self._reading() as db:
            rows = db.execute('''
                SELECT r.* FROM rooms r
                WHERE r.id NOT IN (
                    SELECT rr.room_id FROM room_restrictions rr
                    WHERE ? < rr.end_date AND ? > rr.start_date
                )
                ORDER BY r.id
            ''', (start.isoformat(), end.isoformat())).fetchall()
        return [Room.from_row(r) for r in rows]

    def is_room_available(self, start: date, end: date, room_id: int) -> bool:
        with self._reading() as db:
            return self._count_overlaps(db, start, end, room_id) == 0

    # =========================================================================
    # RESERVATION COMMIT
    # =========================================================================

    def create_reservation(self, draft) -> int:
        with self._writing() as db:
            return self._insert_reservation(db, draft)

    def create_room_restriction(self, restriction: RoomRestriction) -> int:
        with self._writing() as db:
            return self._insert_restriction(db, restriction)

    def commit_reservation(self, draft) -> int:
        with self._writing() as db:
            # Take the write lock before re-checking so concurrent commits serialize
            db.execute('BEGIN IMMEDIATE')

            if self._count_overlaps(db, draft.start_date, draft.end_date, draft.room_id):
                raise RoomUnavailableError(
                    f"Room {draft.room_id} is no longer available "
                    f"from {draft.start_date} to {draft.end_date}"
                )

            reservation_id = self._insert_reservation(db, draft)
            self._insert_restriction(db, RoomRestriction(
                room_id=draft.room_id,
                start_date=draft.start_date,
                end_date=draft.end_date,
                reservation_id=reservation_id,
                restriction_kind=KIND_RESERVATION,
            ))
            return reservation_id

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    def get_reservation(self, reservation_id: int) -> Reservation:
        with self._reading() as db:
            row = db.execute('''
                SELECT r.*, rm.room_name
                FROM reservations r
                LEFT JOIN rooms rm ON r.room_id = rm.id
                WHERE r.id = ?
            ''', (reservation_id,)).fetchone()
        if not row:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return Reservation.from_row(row)

    def list_reservations(self, unprocessed_only: bool = False) -> List[Reservation]:
        query = '''
            SELECT r.*, rm.room_name
            FROM reservations r
            LEFT JOIN rooms rm ON r.room_id = rm.id
        '''
        if unprocessed_only:
            query += ' WHERE r.processed = 0'
        query += ' ORDER BY r.start_date DESC, r.id DESC'

        with self._reading() as db:
            rows = db.execute(query).fetchall()
        return [Reservation.from_row(r) for r in rows]

    def update_reservation(self, reservation_id: int, **fields) -> None:
        fields = _clean_fields(fields)
        if not fields:
            return

        assignments = ', '.join(f'{name} = ?' for name in fields)
        with self._writing() as db:
            db.execute(
                f'UPDATE reservations SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
                list(fields.values()) + [reservation_id]
            )

    def mark_processed(self, reservation_id: int) -> None:
        with self._writing() as db:
            db.execute('''
                UPDATE reservations
                SET processed = 1, updated_at = CURRENT_TIMESTAMP
                WHERE id = ? AND processed = 0
            ''', (reservation_id,))

    def delete_reservation(self, reservation_id: int) -> None:
        with self._writing() as db:
            db.execute('DELETE FROM room_restrictions WHERE reservation_id = ?', (reservation_id,))
            db.execute('DELETE FROM reservations WHERE id = ?', (reservation_id,))

    def restrictions_for_room(self, room_id: int, start: date, end: date) -> List[RoomRestriction]:
        with self._reading() as db:
            rows = db.execute('''
                SELECT * FROM room_restrictions
                WHERE room_id = ? AND ? <= end_date AND ? >= start_date
                ORDER BY start_date
            ''', (room_id, start.isoformat(), end.isoformat())).fetchall()
        return [RoomRestriction.from_row(r) for r in rows]

    def add_owner_block(self, room_id: int, day: date) -> int:
        return self.create_room_restriction(RoomRestriction(
            room_id=room_id,
            start_date=day,
            end_date=day + timedelta(days=1),
            restriction_kind=KIND_OWNER_BLOCK,
        ))

    def remove_block(self, restriction_id: int) -> None:
        with self._writing() as db:
            db.execute('''
                DELETE FROM room_restrictions
                WHERE id = ? AND reservation_id IS NULL AND restriction_id = ?
            ''', (restriction_id, RESTRICTION_IDS[KIND_OWNER_BLOCK]))

    def find_orphan_reservations(self) -> List[Reservation]:
        with self._reading() as db:
            rows = db.execute('''
                SELECT r.*, rm.room_name
                FROM reservations r
                LEFT JOIN rooms rm ON r.room_id = rm.id
                LEFT JOIN room_restrictions rr ON rr.reservation_id = r.id
                WHERE rr.id IS NULL
                ORDER BY r.id
            ''').fetchall()
        return [Reservation.from_row(r) for r in rows]

    # =========================================================================
    # USERS
    # =========================================================================

    def authenticate(self, email: str, password: str) -> int:
        with self._reading() as db:
            row = db.execute(
                'SELECT id, password_hash FROM users WHERE email = ?',
                ((email or '').strip().lower(),)
            ).fetchone()

        stored_hash = row['password_hash'] if row else _timing_hash()
        if not check_password_hash(stored_hash, password or '') or row is None:
            raise AuthError()
        return row['id']

    def get_user(self, user_id: int) -> Optional[User]:
        with self._reading() as db:
            row = db.execute('SELECT * FROM users WHERE id = ?', (user_id,)).fetchone()
        return User.from_row(row) if row else None

    def create_user(self, email: str, password: str, first_name: str = '',
                    last_name: str = '', access_level: int = 1) -> int:
        with self._writing() as db:
            cursor = db.execute('''
                INSERT INTO users (first_name, last_name, email, password_hash, access_level)
                VALUES (?, ?, ?, ?, ?)
            ''', (first_name, last_name, email.strip().lower(),
                  generate_password_hash(password), access_level))
            return cursor.lastrowid
