"""
Tests for the public booking flow.
search_availability -> choose_room -> make_reservation -> reservation_summary
"""

import pytest

from models.booking_store import get_store
from models.draft import DRAFT_KEY
from utils.messages import MESSAGES

GUEST = {
    'first_name': 'John',
    'last_name': 'Smith',
    'email': 'john@smith.com',
    'phone': '555-555-5555',
}


def search(client, start='2050-01-01', end='2050-01-02', **kwargs):
    return client.post('/search_availability', data={'start': start, 'end': end}, **kwargs)


def book(client, room_id=1, start='2050-01-01', end='2050-01-02', **guest):
    """Run the whole flow and return the make_reservation POST response."""
    search(client, start, end)
    client.get(f'/choose_room/{room_id}')
    return client.post('/make_reservation', data={**GUEST, **guest})


class TestPages:
    """Static and room pages."""

    @pytest.mark.parametrize('url', [
        '/', '/about', '/contact', '/search_availability',
        '/rooms/1', '/rooms/2', '/generals-quarters', '/majors-suite',
    ])
    def test_public_pages(self, client, url):
        assert client.get(url).status_code == 200

    def test_room_page_shows_room(self, client):
        response = client.get('/majors-suite')
        assert b'Suite' in response.data

    def test_unknown_room_redirects_home(self, client):
        response = client.get('/rooms/99')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')

    def test_unknown_url(self, client):
        assert client.get('/no-such-page').status_code == 404


class TestSearch:
    """POST /search_availability."""

    def test_lists_free_rooms_and_stores_dates(self, client):
        response = search(client)

        assert response.status_code == 200
        assert b'Quarters' in response.data
        assert b'Suite' in response.data
        with client.session_transaction() as session:
            assert session[DRAFT_KEY]['start_date'] == '2050-01-01'
            assert session[DRAFT_KEY]['end_date'] == '2050-01-02'
            assert session[DRAFT_KEY]['room_id'] is None

    def test_unparseable_start(self, client):
        response = search(client, start='not-a-date', follow_redirects=True)
        assert b'parse start date' in response.data

    def test_unparseable_end(self, client):
        response = search(client, end='2050-13-45', follow_redirects=True)
        assert b'parse end date' in response.data

    def test_end_must_follow_start(self, client):
        response = search(client, start='2050-01-05', end='2050-01-05', follow_redirects=True)
        assert b'Departure date must be after arrival date' in response.data

    def test_no_availability(self, client):
        book(client, room_id=1)
        book(client, room_id=2, first_name='Jane')

        response = search(client, follow_redirects=True)
        assert b'No availability' in response.data

    def test_query_failure_is_reported(self, client, monkeypatch):
        from models.errors import QueryError

        def fail(*args):
            raise QueryError('database is locked')

        monkeypatch.setattr(get_store(), 'search_available_rooms', fail)
        response = search(client, follow_redirects=True)
        assert b'query database' in response.data


class TestChooseRoom:
    """GET /choose_room/<id>."""

    def test_attaches_room_and_redirects(self, client):
        search(client)
        response = client.get('/choose_room/1')

        assert response.status_code == 303
        assert response.headers['Location'].endswith('/make_reservation')
        with client.session_transaction() as session:
            assert session[DRAFT_KEY]['room_id'] == 1

    def test_without_draft(self, client):
        response = client.get('/choose_room/1', follow_redirects=True)
        assert b'reservation from session' in response.data

    def test_bad_room_id(self, client):
        search(client)
        response = client.get('/choose_room/abc', follow_redirects=True)
        assert b'Unable to get room ID from URL' in response.data

    def test_unknown_room(self, client):
        search(client)
        response = client.get('/choose_room/99', follow_redirects=True)
        assert b'find room' in response.data

    def test_book_room_link(self, client):
        response = client.get('/book_room?id=2&s=2050-01-01&e=2050-01-03')

        assert response.status_code == 303
        with client.session_transaction() as session:
            assert session[DRAFT_KEY]['room_id'] == 2
            assert session[DRAFT_KEY]['room_name'] == "Major's Suite"

    def test_book_room_bad_dates(self, client):
        response = client.get('/book_room?id=2&s=2050-01-03&e=2050-01-01', follow_redirects=True)
        assert b'Departure date must be after arrival date' in response.data


class TestMakeReservation:
    """GET/POST /make_reservation."""

    def test_form_shows_draft(self, client):
        search(client)
        client.get('/choose_room/2')

        response = client.get('/make_reservation')
        assert response.status_code == 200
        assert b'Suite' in response.data
        assert b'2050-01-01' in response.data

    def test_requires_draft(self, client):
        response = client.get('/make_reservation', follow_redirects=True)
        assert b'reservation from session' in response.data

    def test_requires_room(self, client):
        search(client)
        response = client.get('/make_reservation', follow_redirects=True)
        assert b'Please choose a room first' in response.data

    def test_invalid_details_rerender_without_writing(self, client):
        response = book(client, first_name='J', email='not-an-email')

        assert response.status_code == 200
        assert b'at least 3 characters' in response.data
        assert b'Invalid email address' in response.data
        assert get_store().list_reservations() == []
        with client.session_transaction() as session:
            assert session[DRAFT_KEY]['first_name'] == 'J'

    def test_missing_last_name(self, client):
        response = book(client, last_name='')

        assert response.status_code == 200
        assert b'This field cannot be blank' in response.data
        assert get_store().list_reservations() == []


class TestScenarios:
    """End-to-end booking scenarios."""

    def test_happy_path(self, app, client):
        response = book(client)

        assert response.status_code == 303
        assert response.headers['Location'].endswith('/reservation_summary')

        reservations = get_store().list_reservations()
        assert len(reservations) == 1
        assert reservations[0].email == 'john@smith.com'
        assert reservations[0].room_id == 1
        assert get_store().find_orphan_reservations() == []

        summary = client.get('/reservation_summary')
        assert summary.status_code == 200
        assert b'John' in summary.data
        assert b'Quarters' in summary.data

        # The draft is gone after the summary
        again = client.get('/reservation_summary')
        assert again.status_code == 302
        with client.session_transaction() as session:
            assert DRAFT_KEY not in session

    def test_confirmation_mails(self, app, client):
        book(client)

        mail = app.extensions['mail_queue']
        mail.join()
        recipients = sorted(message.to for message in mail.outbox)
        assert recipients == sorted(['john@smith.com', app.config['OWNER_EMAIL']])

        guest = next(m for m in mail.outbox if m.to == 'john@smith.com')
        assert guest.template == 'basic.html'
        assert '2050-01-01' in guest.content

    def test_booked_room_disappears_from_search(self, client):
        book(client, room_id=1)

        response = search(client)
        assert b'Suite' in response.data
        assert b'/choose_room/1' not in response.data

        response = client.get('/choose_room/1', follow_redirects=True)
        assert b'No availability' in response.data

    def test_adjacent_stays_both_succeed(self, client):
        assert book(client, start='2050-01-01', end='2050-01-03').status_code == 303
        assert book(client, start='2050-01-03', end='2050-01-05').status_code == 303
        assert len(get_store().list_reservations()) == 2

    def test_draft_race_loses_cleanly(self, app):
        alice = app.test_client()
        bob = app.test_client()

        for guest in (alice, bob):
            search(guest)
            assert guest.get('/choose_room/1').status_code == 303

        assert alice.post('/make_reservation', data=GUEST).status_code == 303

        response = bob.post('/make_reservation', data={**GUEST, 'first_name': 'Bobby'})
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')
        assert b'save your reservation' in bob.get('/').data

        reservations = get_store().list_reservations()
        assert [r.first_name for r in reservations] == ['John']
        with bob.session_transaction() as session:
            assert session[DRAFT_KEY]['room_id'] is None

    def test_summary_without_draft(self, client):
        response = client.get('/reservation_summary', follow_redirects=True)
        assert b'Unable to get reservation from session' in response.data

    def test_two_step_commit_mode(self, app, client):
        app.config['TRANSACTIONAL_COMMIT'] = False

        assert book(client).status_code == 303
        assert len(get_store().list_reservations()) == 1
        assert get_store().find_orphan_reservations() == []

    def test_memory_backend(self, memory_app):
        client = memory_app.test_client()

        assert book(client).status_code == 303
        assert len(get_store().list_reservations()) == 1


class TestCommitFailure:
    """A failed commit sends the guest home with a generic message."""

    @pytest.mark.parametrize('transactional', [True, False])
    def test_redirects_home_without_success(self, failing_app, failing_store, transactional):
        failing_app.config['TRANSACTIONAL_COMMIT'] = transactional
        client = failing_app.test_client()

        response = book(client)

        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')
        with client.session_transaction() as session:
            assert session[DRAFT_KEY]['reservation_id'] is None
            assert session['_flashes'] == [('error', MESSAGES['reservation_failed'])]

        assert client.get('/reservation_summary').status_code == 302
        failing_app.extensions['mail_queue'].join()
        assert failing_app.extensions['mail_queue'].outbox == []
        assert failing_store.restrictions == {}

    def test_transactional_failure_leaves_nothing(self, failing_app, failing_store):
        failing_app.config['TRANSACTIONAL_COMMIT'] = True

        book(failing_app.test_client())

        assert failing_store.list_reservations() == []

    def test_two_step_failure_logs_the_orphan(self, failing_app, failing_store, caplog):
        failing_app.config['TRANSACTIONAL_COMMIT'] = False

        book(failing_app.test_client())

        orphans = failing_store.find_orphan_reservations()
        assert len(orphans) == 1
        assert f'ORPHAN RESERVATION {orphans[0].id}' in caplog.text


class TestAvailabilityJson:
    """POST /search_availability-json."""

    def post(self, client, **data):
        payload = {'start': '2050-01-01', 'end': '2050-01-02', 'room_id': '1'}
        payload.update(data)
        return client.post('/search_availability-json', data=payload).get_json()

    def test_available(self, client):
        assert self.post(client) == {
            'ok': True,
            'message': 'Room is available',
            'room_id': '1',
            'start_date': '2050-01-01',
            'end_date': '2050-01-02',
        }

    def test_unavailable_after_booking(self, client):
        book(client, room_id=1)

        data = self.post(client)
        assert data['ok'] is False
        assert data['room_id'] == '1'

        assert self.post(client, room_id='2')['ok'] is True

    def test_bad_room_id(self, client):
        data = self.post(client, room_id='x')
        assert data['ok'] is False
        assert data['room_id'] == 'x'

    def test_bad_date(self, client):
        data = self.post(client, start='yesterday')
        assert data['ok'] is False
        assert data['start_date'] == 'yesterday'
