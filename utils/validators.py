"""
Input validation helper functions.
Provides validation for common input types.
"""

import re
from datetime import date

from models.errors import ParseError


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_date_range(start: date, end: date) -> bool:
    """
    Validate that a stay ends after it starts.

    Args:
        start: Arrival date
        end: Departure date

    Returns:
        True if start is strictly before end
    """
    return start is not None and end is not None and start < end


def parse_int(value, field: str = 'value') -> int:
    """
    Convert user input to int.

    Raises:
        ParseError: if value is not an integer
    """
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise ParseError(f"Can't convert {field} {value!r} to an integer") from e
