"""
Booking entities.
Plain dataclasses shared by both store backends and the views.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


# =============================================================================
# RESTRICTION KINDS
# =============================================================================

KIND_RESERVATION = 'reservation'
KIND_OWNER_BLOCK = 'owner-block'

# Rows of the `restrictions` lookup table
RESTRICTION_IDS = {
    KIND_RESERVATION: 1,
    KIND_OWNER_BLOCK: 2,
}
RESTRICTION_KINDS = {v: k for k, v in RESTRICTION_IDS.items()}


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _parse_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# =============================================================================
# ENTITIES
# =============================================================================

@dataclass
class Room:
    id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> 'Room':
        return cls(
            id=row['id'],
            name=row['room_name'],
            created_at=_parse_timestamp(row['created_at']),
            updated_at=_parse_timestamp(row['updated_at']),
        )


@dataclass
class Reservation:
    id: int
    room_id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    start_date: date
    end_date: date
    processed: bool = False
    room_name: str = ''
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    @classmethod
    def from_row(cls, row) -> 'Reservation':
        keys = row.keys()
        return cls(
            id=row['id'],
            room_id=row['room_id'],
            first_name=row['first_name'],
            last_name=row['last_name'],
            email=row['email'],
            phone=row['phone'] or '',
            start_date=_parse_date(row['start_date']),
            end_date=_parse_date(row['end_date']),
            processed=bool(row['processed']),
            room_name=row['room_name'] if 'room_name' in keys and row['room_name'] else '',
            created_at=_parse_timestamp(row['created_at']),
            updated_at=_parse_timestamp(row['updated_at']),
        )


@dataclass
class RoomRestriction:
    room_id: int
    start_date: date
    end_date: date
    restriction_kind: str = KIND_RESERVATION
    reservation_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def restriction_id(self) -> int:
        """Lookup-table id stored in the room_restrictions row."""
        return RESTRICTION_IDS[self.restriction_kind]

    @classmethod
    def from_row(cls, row) -> 'RoomRestriction':
        return cls(
            id=row['id'],
            room_id=row['room_id'],
            reservation_id=row['reservation_id'],
            restriction_kind=RESTRICTION_KINDS.get(row['restriction_id'], KIND_OWNER_BLOCK),
            start_date=_parse_date(row['start_date']),
            end_date=_parse_date(row['end_date']),
            created_at=_parse_timestamp(row['created_at']),
            updated_at=_parse_timestamp(row['updated_at']),
        )


@dataclass
class User:
    id: int
    first_name: str
    last_name: str
    email: str
    password_hash: str = field(repr=False, default='')
    access_level: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'.strip()

    @classmethod
    def from_row(cls, row) -> 'User':
        return cls(
            id=row['id'],
            first_name=row['first_name'],
            last_name=row['last_name'],
            email=row['email'],
            password_hash=row['password_hash'],
            access_level=row['access_level'],
            created_at=_parse_timestamp(row['created_at']),
            updated_at=_parse_timestamp(row['updated_at']),
        )
