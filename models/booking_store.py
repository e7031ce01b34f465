"""
Booking store interface.

Two interchangeable backends implement BookingStore:
- SqliteBookingStore: relational store on the request-scoped SQLite connection
- MemoryBookingStore: in-process store used by tests and local demos

The active store is built once in create_app() and kept in
app.extensions['booking_store']; views reach it through get_store().
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from flask import current_app
from werkzeug.security import generate_password_hash

from models.entities import Room, Reservation, RoomRestriction, User

EXTENSION_KEY = 'booking_store'

# Fields an administrator may edit on an existing reservation
EDITABLE_FIELDS = ('first_name', 'last_name', 'email', 'phone')


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Half-open overlap test: [start, end) and [other_start, other_end) conflict."""
    return start < other_end and end > other_start


class BookingStore(ABC):
    """Rooms, reservations, room restrictions and admin users."""

    # -------------------------------------------------------------------------
    # Rooms and availability
    # -------------------------------------------------------------------------

    @abstractmethod
    def all_rooms(self) -> List[Room]:
        ...

    @abstractmethod
    def get_room(self, room_id: int) -> Room:
        """Raises NotFoundError if the room does not exist."""

    @abstractmethod
    def create_room(self, name: str) -> int:
        ...

    @abstractmethod
    def search_available_rooms(self, start: date, end: date) -> List[Room]:
        """
        Rooms with no restriction overlapping [start, end).

        Raises:
            QueryError: database unreachable or query timed out
        """

    @abstractmethod
    def is_room_available(self, start: date, end: date, room_id: int) -> bool:
        """Raises QueryError on database failure."""

    # -------------------------------------------------------------------------
    # Reservation commit
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_reservation(self, draft) -> int:
        """
        Insert a reservation row from a draft. Does not check availability.

        Raises:
            PersistenceError: write failed
        """

    @abstractmethod
    def create_room_restriction(self, restriction: RoomRestriction) -> int:
        """Raises PersistenceError on write failure."""

    @abstractmethod
    def commit_reservation(self, draft) -> int:
        """
        Re-check availability and insert reservation plus restriction atomically.

        Raises:
            RoomUnavailableError: the room was taken since the search
            PersistenceError: write failed; nothing was persisted
        """

    # -------------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_reservation(self, reservation_id: int) -> Reservation:
        """Raises NotFoundError if the reservation does not exist."""

    @abstractmethod
    def list_reservations(self, unprocessed_only: bool = False) -> List[Reservation]:
        """Reservations with room names, newest start date first."""

    @abstractmethod
    def update_reservation(self, reservation_id: int, **fields) -> None:
        ...

    @abstractmethod
    def mark_processed(self, reservation_id: int) -> None:
        ...

    @abstractmethod
    def delete_reservation(self, reservation_id: int) -> None:
        ...

    @abstractmethod
    def restrictions_for_room(self, room_id: int, start: date, end: date) -> List[RoomRestriction]:
        """Restrictions of a room touching the inclusive window [start, end]."""

    @abstractmethod
    def add_owner_block(self, room_id: int, day: date) -> int:
        ...

    @abstractmethod
    def remove_block(self, restriction_id: int) -> None:
        ...

    @abstractmethod
    def find_orphan_reservations(self) -> List[Reservation]:
        """Reservations with no linked room restriction."""

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @abstractmethod
    def authenticate(self, email: str, password: str) -> int:
        """
        Check credentials and return the user id.

        Raises:
            AuthError: unknown e-mail or wrong password, indistinguishably
        """

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def create_user(self, email: str, password: str, first_name: str = '',
                    last_name: str = '', access_level: int = 1) -> int:
        ...


_dummy_hash = None


def _timing_hash() -> str:
    """Hash compared against when the e-mail is unknown, so both failures cost the same."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = generate_password_hash('not-a-real-password')
    return _dummy_hash


def _clean_fields(fields: dict) -> dict:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")
    return {k: (v or '').strip() for k, v in fields.items()}


def create_store(app) -> BookingStore:
    """Build the store selected by STORE_BACKEND."""
    backend = app.config.get('STORE_BACKEND', 'sqlite')
    timeout = app.config.get('QUERY_TIMEOUT', 2.0)

    if backend == 'sqlite':
        from models.sqlite_store import SqliteBookingStore
        return SqliteBookingStore(query_timeout=timeout)
    if backend == 'memory':
        from models.memory_store import MemoryBookingStore
        return MemoryBookingStore.with_defaults()

    raise ValueError(f"Unknown STORE_BACKEND: {backend}")


def get_store() -> BookingStore:
    """Store registered on the current app."""
    return current_app.extensions[EXTENSION_KEY]
