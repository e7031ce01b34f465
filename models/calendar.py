"""
Admin reservation calendar.
Per-room day maps for a month and the diff of owner-block checkboxes.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Tuple

from models.entities import KIND_OWNER_BLOCK
from models.errors import ParseError

logger = logging.getLogger(__name__)

ADD_PREFIX = 'add_block_'
KEEP_PREFIX = 'remove_block_'


def days_between(first: date, last: date) -> List[date]:
    """Every day from first to last, both included."""
    return [first + timedelta(days=n) for n in range((last - first).days + 1)]


def build_room_month(store, room_id: int, first: date, last: date) -> Tuple[Dict[str, int], Dict[str, int]]:
    """
    Build the occupancy maps of one room for the days first..last.

    Args:
        store: BookingStore
        room_id: Room ID
        first: First day of the month
        last: Last day of the month

    Returns:
        tuple: (reservation_map, block_map), both keyed by YYYY-MM-DD.
            reservation_map holds the reservation id on every occupied day,
            block_map holds the restriction id on the start day of each owner block.
            Days without either are 0.
    """
    days = [d.isoformat() for d in days_between(first, last)]
    reservation_map = dict.fromkeys(days, 0)
    block_map = dict.fromkeys(days, 0)

    for restriction in store.restrictions_for_room(room_id, first, last):
        if restriction.reservation_id:
            span_start = max(restriction.start_date, first)
            span_end = min(restriction.end_date, last)
            for day in days_between(span_start, span_end):
                reservation_map[day.isoformat()] = restriction.reservation_id
        elif restriction.restriction_kind == KIND_OWNER_BLOCK:
            key = restriction.start_date.isoformat()
            if key in block_map:
                block_map[key] = restriction.id

    return reservation_map, block_map


def _parse_block_field(name: str, prefix: str) -> Tuple[int, date]:
    # <prefix><room_id>_<YYYY-MM-DD>
    try:
        room_part, day_part = name[len(prefix):].split('_', 1)
        return int(room_part), date.fromisoformat(day_part)
    except ValueError as e:
        raise ParseError(f"Bad calendar field {name!r}") from e


def diff_block_changes(
    saved_maps: Dict[int, Dict[str, int]],
    posted_fields: Iterable[str]
) -> Tuple[List[int], List[Tuple[int, date]]]:
    """
    Compare the owner blocks shown to the admin with the posted checkboxes.

    Existing blocks are rendered as checked `remove_block_<room>_<date>`
    boxes; unchecking one leaves it out of the post. Empty days offer an
    `add_block_<room>_<date>` box.

    Args:
        saved_maps: {room_id: {YYYY-MM-DD: restriction_id}} stored at render time
        posted_fields: Names of the posted form fields

    Returns:
        tuple: (restriction ids to remove, [(room_id, day)] blocks to add)

    Raises:
        ParseError: if an add_block field name is malformed
    """
    posted = set(posted_fields)

    to_remove = []
    for room_id, block_map in saved_maps.items():
        for day, restriction_id in block_map.items():
            if restriction_id > 0 and f'{KEEP_PREFIX}{room_id}_{day}' not in posted:
                to_remove.append(restriction_id)

    to_add = []
    for name in sorted(posted):
        if name.startswith(ADD_PREFIX):
            to_add.append(_parse_block_field(name, ADD_PREFIX))

    return to_remove, to_add


def apply_block_changes(store, to_remove: List[int], to_add: List[Tuple[int, date]]) -> None:
    for restriction_id in to_remove:
        logger.info(f"Removing owner block {restriction_id}")
        store.remove_block(restriction_id)
    for room_id, day in to_add:
        logger.info(f"Adding owner block for room {room_id} on {day}")
        store.add_owner_block(room_id, day)
