"""
JSON response helper for the availability endpoint.

Response format:

    {"ok": true, "message": "...", "room_id": "1",
     "start_date": "2050-01-01", "end_date": "2050-01-02"}

Usage:
    from utils.api_response import availability_json

    return availability_json(True, room_id=1, start_date='2050-01-01', end_date='2050-01-02')
"""

from flask import jsonify


def availability_json(
    ok: bool,
    message: str = '',
    room_id=None,
    start_date: str = '',
    end_date: str = '',
    status: int = 200
) -> tuple:
    """
    Build the availability JSON response.

    Args:
        ok: Whether the room is available
        message: Human readable message
        room_id: Room ID (sent back as a string)
        start_date: Arrival date as posted
        end_date: Departure date as posted
        status: HTTP status code (default 200)

    Returns:
        Tuple of (Response, status_code)
    """
    response = {
        'ok': ok,
        'message': message,
        'room_id': '' if room_id is None else str(room_id),
        'start_date': start_date or '',
        'end_date': end_date or '',
    }
    return jsonify(response), status
