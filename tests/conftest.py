"""
Pytest configuration and fixtures.
Every test gets its own SQLite file, so tests never share state.
"""

import os
from datetime import date

import pytest

os.environ['FLASK_ENV'] = 'test'

ADMIN_EMAIL = 'admin@here.com'
ADMIN_PASSWORD = 'password'


def _stop_mail(app):
    app.extensions['mail_queue'].stop()


@pytest.fixture
def app(tmp_path):
    """Test application on a fresh, seeded SQLite database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['DATABASE_PATH'] = str(tmp_path / 'bookings.db')

    with app.app_context():
        init_db()
        yield app

    _stop_mail(app)


@pytest.fixture
def memory_app(tmp_path):
    """Test application on the in-memory store. Sessions still use a SQLite file."""
    from app import create_app
    from models.memory_store import MemoryBookingStore

    app = create_app('test', store=MemoryBookingStore.with_defaults())
    app.config['DATABASE_PATH'] = str(tmp_path / 'sessions.db')

    with app.app_context():
        yield app

    _stop_mail(app)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def admin_client(app):
    """Test client logged in as the seeded administrator."""
    client = app.test_client()
    client.post('/user/login', data={
        'email': ADMIN_EMAIL,
        'password': ADMIN_PASSWORD
    })
    return client


@pytest.fixture(params=['sqlite', 'memory'])
def store(request, app):
    """Each store backend, seeded with the two rooms and the administrator."""
    from models.booking_store import get_store
    from models.memory_store import MemoryBookingStore

    if request.param == 'sqlite':
        return get_store()
    return MemoryBookingStore.with_defaults()


@pytest.fixture
def make_draft():
    """Factory for complete reservation drafts."""
    from models.draft import ReservationDraft

    def _make(start, end, room_id=1, **guest):
        return ReservationDraft(
            start_date=date.fromisoformat(start),
            end_date=date.fromisoformat(end),
            room_id=room_id,
            room_name=guest.pop('room_name', "General's Quarters"),
            first_name=guest.pop('first_name', 'John'),
            last_name=guest.pop('last_name', 'Smith'),
            email=guest.pop('email', 'john@smith.com'),
            phone=guest.pop('phone', '555-555-5555'),
        )

    return _make


@pytest.fixture
def failing_store():
    """In-memory store whose room restriction insert always fails."""
    from models.errors import PersistenceError
    from models.memory_store import MemoryBookingStore

    class RestrictionFailingStore(MemoryBookingStore):
        def create_room_restriction(self, restriction):
            raise PersistenceError('connection lost')

    return RestrictionFailingStore.with_defaults()


@pytest.fixture
def failing_app(tmp_path, failing_store):
    """Test application whose reservation commits always fail."""
    from app import create_app

    app = create_app('test', store=failing_store)
    app.config['DATABASE_PATH'] = str(tmp_path / 'sessions.db')

    with app.app_context():
        yield app

    _stop_mail(app)
