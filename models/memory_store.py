"""
In-memory booking store.
Same contract as SqliteBookingStore, held in dicts behind one lock.
"""

import itertools
import threading
from datetime import date, datetime, timedelta
from typing import List, Optional

from werkzeug.security import generate_password_hash, check_password_hash

from models.booking_store import BookingStore, ranges_overlap, _clean_fields, _timing_hash
from models.entities import (
    Room, Reservation, RoomRestriction, User, KIND_RESERVATION, KIND_OWNER_BLOCK,
)
from models.errors import AuthError, NotFoundError, PersistenceError, RoomUnavailableError


class MemoryBookingStore(BookingStore):
    """BookingStore kept in process memory."""

    def __init__(self):
        self._lock = threading.RLock()
        self._ids = {
            'rooms': itertools.count(1),
            'reservations': itertools.count(1),
            'restrictions': itertools.count(1),
            'users': itertools.count(1),
        }
        self.rooms = {}
        self.reservations = {}
        self.restrictions = {}
        self.users = {}

    @classmethod
    def with_defaults(cls) -> 'MemoryBookingStore':
        """Store holding the same rooms and admin user as a freshly seeded database."""
        from database.seed import ROOMS

        store = cls()
        for name in ROOMS:
            store.create_room(name)
        store.create_user('admin@here.com', 'password', 'Admin', 'User', access_level=3)
        return store

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    def _overlapping(self, start: date, end: date, room_id: int = None):
        return [
            r for r in self.restrictions.values()
            if (room_id is None or r.room_id == room_id)
            and ranges_overlap(start, end, r.start_date, r.end_date)
        ]

    def _with_room_name(self, reservation: Reservation) -> Reservation:
        room = self.rooms.get(reservation.room_id)
        reservation.room_name = room.name if room else ''
        return reservation

    def _copy(self, reservation: Reservation) -> Reservation:
        return self._with_room_name(Reservation(**vars(reservation)))

    # =========================================================================
    # ROOMS AND AVAILABILITY
    # =========================================================================

    def all_rooms(self) -> List[Room]:
        with self._lock:
            return sorted(self.rooms.values(), key=lambda r: r.id)

    def get_room(self, room_id: int) -> Room:
        with self._lock:
            room = self.rooms.get(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return room

    def create_room(self, name: str) -> int:
        with self._lock:
            now = datetime.now()
            room = Room(id=self._next_id('rooms'), name=name, created_at=now, updated_at=now)
            self.rooms[room.id] = room
            return room.id

    def search_available_rooms(self, start: date, end: date) -> List[Room]:
        with self._lock:
            blocked = {r.room_id for r in self._overlapping(start, end)}
            return [room for room in self.all_rooms() if room.id not in blocked]

    def is_room_available(self, start: date, end: date, room_id: int) -> bool:
        with self._lock:
            return not self._overlapping(start, end, room_id)

    # =========================================================================
    # RESERVATION COMMIT
    # =========================================================================

    def create_reservation(self, draft) -> int:
        if not draft.start_date or not draft.end_date or draft.start_date >= draft.end_date:
            raise PersistenceError("Reservation start date must be before end date")

        with self._lock:
            if draft.room_id not in self.rooms:
                raise PersistenceError(f"Room {draft.room_id} does not exist")
            now = datetime.now()
            reservation = Reservation(
                id=self._next_id('reservations'),
                room_id=draft.room_id,
                first_name=draft.first_name,
                last_name=draft.last_name,
                email=draft.email,
                phone=draft.phone,
                start_date=draft.start_date,
                end_date=draft.end_date,
                processed=False,
                created_at=now,
                updated_at=now,
            )
            self.reservations[reservation.id] = reservation
            return reservation.id

    def create_room_restriction(self, restriction: RoomRestriction) -> int:
        if restriction.start_date >= restriction.end_date:
            raise PersistenceError("Restriction start date must be before end date")

        with self._lock:
            if restriction.room_id not in self.rooms:
                raise PersistenceError(f"Room {restriction.room_id} does not exist")
            if restriction.reservation_id is not None and restriction.reservation_id not in self.reservations:
                raise PersistenceError(f"Reservation {restriction.reservation_id} does not exist")
            now = datetime.now()
            stored = RoomRestriction(**vars(restriction))
            stored.id = self._next_id('restrictions')
            stored.created_at = now
            stored.updated_at = now
            self.restrictions[stored.id] = stored
            return stored.id

    def commit_reservation(self, draft) -> int:
        with self._lock:
            if self._overlapping(draft.start_date, draft.end_date, draft.room_id):
                raise RoomUnavailableError(
                    f"Room {draft.room_id} is no longer available "
                    f"from {draft.start_date} to {draft.end_date}"
                )
            reservation_id = self.create_reservation(draft)
            try:
                self.create_room_restriction(RoomRestriction(
                    room_id=draft.room_id,
                    start_date=draft.start_date,
                    end_date=draft.end_date,
                    reservation_id=reservation_id,
                    restriction_kind=KIND_RESERVATION,
                ))
            except PersistenceError:
                del self.reservations[reservation_id]
                raise
            return reservation_id

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    def get_reservation(self, reservation_id: int) -> Reservation:
        with self._lock:
            reservation = self.reservations.get(reservation_id)
            if reservation is None:
                raise NotFoundError(f"Reservation {reservation_id} not found")
            return self._copy(reservation)

    def list_reservations(self, unprocessed_only: bool = False) -> List[Reservation]:
        with self._lock:
            items = [
                self._copy(r) for r in self.reservations.values()
                if not (unprocessed_only and r.processed)
            ]
        return sorted(items, key=lambda r: (r.start_date, r.id), reverse=True)

    def update_reservation(self, reservation_id: int, **fields) -> None:
        fields = _clean_fields(fields)
        with self._lock:
            reservation = self.reservations.get(reservation_id)
            if reservation is None or not fields:
                return
            for name, value in fields.items():
                setattr(reservation, name, value)
            reservation.updated_at = datetime.now()

    def mark_processed(self, reservation_id: int) -> None:
        with self._lock:
            reservation = self.reservations.get(reservation_id)
            if reservation is not None and not reservation.processed:
                reservation.processed = True
                reservation.updated_at = datetime.now()

    def delete_reservation(self, reservation_id: int) -> None:
        with self._lock:
            self.reservations.pop(reservation_id, None)
            linked = [rid for rid, r in self.restrictions.items() if r.reservation_id == reservation_id]
            for rid in linked:
                del self.restrictions[rid]

    def restrictions_for_room(self, room_id: int, start: date, end: date) -> List[RoomRestriction]:
        with self._lock:
            items = [
                r for r in self.restrictions.values()
                if r.room_id == room_id and start <= r.end_date and end >= r.start_date
            ]
        return sorted(items, key=lambda r: r.start_date)

    def add_owner_block(self, room_id: int, day: date) -> int:
        return self.create_room_restriction(RoomRestriction(
            room_id=room_id,
            start_date=day,
            end_date=day + timedelta(days=1),
            restriction_kind=KIND_OWNER_BLOCK,
        ))

    def remove_block(self, restriction_id: int) -> None:
        with self._lock:
            restriction = self.restrictions.get(restriction_id)
            if restriction is not None and restriction.restriction_kind == KIND_OWNER_BLOCK \
                    and restriction.reservation_id is None:
                del self.restrictions[restriction_id]

    def find_orphan_reservations(self) -> List[Reservation]:
        with self._lock:
            linked = {r.reservation_id for r in self.restrictions.values()}
            return [self._copy(r) for r in sorted(self.reservations.values(), key=lambda r: r.id)
                    if r.id not in linked]

    # =========================================================================
    # USERS
    # =========================================================================

    def authenticate(self, email: str, password: str) -> int:
        email = (email or '').strip().lower()
        with self._lock:
            user = next((u for u in self.users.values() if u.email == email), None)

        stored_hash = user.password_hash if user else _timing_hash()
        if not check_password_hash(stored_hash, password or '') or user is None:
            raise AuthError()
        return user.id

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self.users.get(user_id)

    def create_user(self, email: str, password: str, first_name: str = '',
                    last_name: str = '', access_level: int = 1) -> int:
        email = email.strip().lower()
        with self._lock:
            if any(u.email == email for u in self.users.values()):
                raise PersistenceError(f"User {email} already exists")
            now = datetime.now()
            user = User(
                id=self._next_id('users'),
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=generate_password_hash(password),
                access_level=access_level,
                created_at=now,
                updated_at=now,
            )
            self.users[user.id] = user
            return user.id
