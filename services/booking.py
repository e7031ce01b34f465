"""
Reservation commit.

Persists a validated draft as a reservation plus its blocking room
restriction. Two modes:
- transactional (default): store.commit_reservation() re-checks availability
  and writes both rows in one serialized transaction.
- two-step: create_reservation() then create_room_restriction() as separate
  writes with no re-check. Concurrent bookings for overlapping dates can both
  succeed, and a failed second write leaves an orphan reservation.
"""

import logging

from models.entities import RoomRestriction, KIND_RESERVATION
from models.errors import OrphanReservationError, PersistenceError

logger = logging.getLogger(__name__)


def commit_draft(store, draft, transactional: bool = True) -> int:
    """
    Persist a draft.

    Args:
        store: BookingStore
        draft: ReservationDraft with dates, room and guest details
        transactional: Re-validate and write atomically

    Returns:
        int: New reservation ID

    Raises:
        RoomUnavailableError: room taken since the search (transactional only)
        OrphanReservationError: reservation written, restriction not (two-step only)
        PersistenceError: nothing was written
    """
    if transactional:
        reservation_id = store.commit_reservation(draft)
        logger.info(f"Reservation {reservation_id} committed for room {draft.room_id} "
                    f"{draft.start_date}..{draft.end_date}")
        return reservation_id

    reservation_id = store.create_reservation(draft)

    try:
        store.create_room_restriction(RoomRestriction(
            room_id=draft.room_id,
            start_date=draft.start_date,
            end_date=draft.end_date,
            reservation_id=reservation_id,
            restriction_kind=KIND_RESERVATION,
        ))
    except PersistenceError as e:
        logger.error(
            f"ORPHAN RESERVATION {reservation_id}: room {draft.room_id} "
            f"{draft.start_date}..{draft.end_date} has no room restriction and does not "
            f"block availability ({e}). Run `flask reconcile-orphans`."
        )
        raise OrphanReservationError(reservation_id) from e

    logger.info(f"Reservation {reservation_id} saved in two steps for room {draft.room_id}")
    return reservation_id


def reconcile_orphans(store, repair: bool = False):
    """
    Find reservations without a room restriction.

    Args:
        store: BookingStore
        repair: Insert the missing restriction when the room is still free

    Returns:
        list of (Reservation, status) with status 'orphan', 'repaired' or 'conflict'
    """
    results = []
    for reservation in store.find_orphan_reservations():
        if not repair:
            results.append((reservation, 'orphan'))
            continue

        if not store.is_room_available(reservation.start_date, reservation.end_date, reservation.room_id):
            logger.warning(f"Orphan reservation {reservation.id} overlaps another booking, not repaired")
            results.append((reservation, 'conflict'))
            continue

        store.create_room_restriction(RoomRestriction(
            room_id=reservation.room_id,
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            reservation_id=reservation.id,
            restriction_kind=KIND_RESERVATION,
        ))
        logger.info(f"Orphan reservation {reservation.id} repaired")
        results.append((reservation, 'repaired'))
    return results
