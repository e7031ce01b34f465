"""
Booking error taxonomy.
Every error a view can recover from derives from BookingError.
"""


class BookingError(Exception):
    """Base class for recoverable booking errors."""


class ParseError(BookingError):
    """Malformed date or integer coming from user input."""


class NotFoundError(BookingError):
    """Room, reservation or user id does not exist."""


class QueryError(BookingError):
    """Database unreachable or query timed out while reading."""


class PersistenceError(BookingError):
    """Database write failed (connectivity or constraint violation)."""


class RoomUnavailableError(PersistenceError):
    """Availability re-check inside the commit transaction found a conflict."""


class OrphanReservationError(PersistenceError):
    """
    Reservation row was written but its room restriction was not.

    The orphan escapes the availability check for its dates until an
    operator reconciles it (see `flask reconcile-orphans`).
    """

    def __init__(self, reservation_id: int, message: str = None):
        self.reservation_id = reservation_id
        super().__init__(message or f"Reservation {reservation_id} has no room restriction")


class AuthError(BookingError):
    """Unknown e-mail or wrong password. Deliberately indistinguishable."""

    def __init__(self, message: str = 'invalid login credentials'):
        super().__init__(message)
