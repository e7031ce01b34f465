"""
Session-held reservation draft.
Typed accessors over the Flask session so views never touch raw session values.
"""

import logging
from dataclasses import dataclass, asdict, replace
from datetime import date
from typing import Optional

from flask import session

logger = logging.getLogger(__name__)

DRAFT_KEY = 'reservation'
BLOCK_MAP_PREFIX = 'block_map_'

# Workflow stages, in order
STAGE_EMPTY = 'empty'
STAGE_SEARCHED = 'searched'
STAGE_ROOM_CHOSEN = 'room_chosen'
STAGE_DETAILS_ENTERED = 'details_entered'
STAGE_COMMITTED = 'committed'


@dataclass
class ReservationDraft:
    """In-progress reservation accumulated across the booking pages."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    room_id: Optional[int] = None
    room_name: str = ''
    first_name: str = ''
    last_name: str = ''
    email: str = ''
    phone: str = ''
    reservation_id: Optional[int] = None

    @property
    def stage(self) -> str:
        if self.reservation_id is not None:
            return STAGE_COMMITTED
        if self.start_date is None or self.end_date is None:
            return STAGE_EMPTY
        if self.room_id is None:
            return STAGE_SEARCHED
        if self.first_name and self.last_name and self.email:
            return STAGE_DETAILS_ENTERED
        return STAGE_ROOM_CHOSEN

    def with_changes(self, **changes) -> 'ReservationDraft':
        """Return a new draft; steps always write the whole struct back."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['start_date'] = self.start_date.isoformat() if self.start_date else None
        data['end_date'] = self.end_date.isoformat() if self.end_date else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ReservationDraft':
        start = data.get('start_date')
        end = data.get('end_date')
        room_id = data.get('room_id')
        reservation_id = data.get('reservation_id')
        return cls(
            start_date=date.fromisoformat(start) if start else None,
            end_date=date.fromisoformat(end) if end else None,
            room_id=int(room_id) if room_id is not None else None,
            room_name=data.get('room_name') or '',
            first_name=data.get('first_name') or '',
            last_name=data.get('last_name') or '',
            email=data.get('email') or '',
            phone=data.get('phone') or '',
            reservation_id=int(reservation_id) if reservation_id is not None else None,
        )


# =============================================================================
# DRAFT ACCESSORS
# =============================================================================

def put_draft(draft: ReservationDraft) -> None:
    session[DRAFT_KEY] = draft.to_dict()


def get_draft() -> Optional[ReservationDraft]:
    """
    Read the draft from the session.

    Returns:
        ReservationDraft, or None when absent or unreadable
    """
    data = session.get(DRAFT_KEY)
    if not isinstance(data, dict):
        return None
    try:
        return ReservationDraft.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning(f"Discarding unreadable reservation draft: {e}")
        session.pop(DRAFT_KEY, None)
        return None


def clear_draft() -> None:
    session.pop(DRAFT_KEY, None)


# =============================================================================
# ADMIN CALENDAR BLOCK MAPS
# =============================================================================

def put_block_map(room_id: int, block_map: dict) -> None:
    """Store {date: restriction_id} for the owner blocks shown to the admin."""
    session[f'{BLOCK_MAP_PREFIX}{room_id}'] = {
        day: restriction_id for day, restriction_id in block_map.items() if restriction_id
    }


def get_block_map(room_id: int) -> dict:
    data = session.get(f'{BLOCK_MAP_PREFIX}{room_id}')
    if not isinstance(data, dict):
        return {}
    return {day: int(restriction_id) for day, restriction_id in data.items()}
