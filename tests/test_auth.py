"""
Tests for administrator login and logout.
"""

from models.booking_store import get_store


def login(client, email='admin@here.com', password='password', **kwargs):
    return client.post('/user/login', data={'email': email, 'password': password}, **kwargs)


class TestLogin:

    def test_login_page(self, client):
        response = client.get('/user/login')
        assert response.status_code == 200
        assert b'Login' in response.data

    def test_successful_login(self, client):
        response = login(client)

        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')
        with client.session_transaction() as session:
            assert session['_user_id'] == '1'

    def test_login_follows_next(self, client):
        response = login(client, query_string={'next': '/admin/reservations_new'})
        assert response.headers['Location'].endswith('/admin/reservations_new')

    def test_login_ignores_external_next(self, client):
        response = login(client, query_string={'next': 'https://evil.example.com/'})
        assert 'evil' not in response.headers['Location']

    def test_wrong_password(self, client):
        response = login(client, password='wrong', follow_redirects=True)
        assert b'invalid login credentials' in response.data
        with client.session_transaction() as session:
            assert '_user_id' not in session

    def test_unknown_email_gets_same_message(self, client):
        response = login(client, email='ghost@here.com', follow_redirects=True)
        assert b'invalid login credentials' in response.data

    def test_invalid_form_rerenders(self, client):
        response = login(client, email='', password='')
        assert response.status_code == 200
        assert b'This field cannot be blank' in response.data

    def test_logged_in_user_goes_to_dashboard(self, admin_client):
        response = admin_client.get('/user/login')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/admin/dashboard')

    def test_login_drops_previous_draft(self, client):
        client.post('/search_availability', data={'start': '2050-01-01', 'end': '2050-01-02'})
        login(client)
        with client.session_transaction() as session:
            assert 'reservation' not in session


class TestLogout:

    def test_logout_clears_session(self, admin_client):
        response = admin_client.get('/user/logout')

        assert response.status_code == 302
        with admin_client.session_transaction() as session:
            assert '_user_id' not in session
        assert admin_client.get('/admin/dashboard').status_code == 302


class TestAccessLevel:

    def test_low_access_level_is_forbidden(self, app):
        get_store().create_user('staff@here.com', 'secret123', 'Sam', 'Staff', access_level=1)
        client = app.test_client()
        login(client, email='staff@here.com', password='secret123')

        assert client.get('/admin/dashboard').status_code == 403
