"""Timezone-aware date helpers for the booking application."""

import calendar
from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app

from models.errors import ParseError

DATE_FORMAT = '%Y-%m-%d'


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'UTC')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def parse_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD date coming from a form or query string.

    Raises:
        ParseError: if the value is missing or malformed
    """
    try:
        return datetime.strptime((value or '').strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise ParseError(f"Can't parse date {value!r}") from e


def human_date(value) -> str:
    """Format a date as YYYY-MM-DD."""
    if not value:
        return ''
    return value.strftime(DATE_FORMAT)


def month_bounds(year: int, month: int):
    """First and last day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int):
    """(year, month) moved by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
