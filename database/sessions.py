"""
Server-side session storage.
The session cookie carries only a random session id; the session contents
live in the `sessions` table of the application database.
"""

import logging
import os
import secrets
import sqlite3
import time
from contextlib import closing

from flask import session
from flask.json.tag import TaggedJSONSerializer
from flask.sessions import SessionInterface, SessionMixin
from werkzeug.datastructures import CallbackDict

logger = logging.getLogger(__name__)

# Keys Flask and Flask-Login write on every request; a session holding only these is empty
_BOOKKEEPING_KEYS = frozenset({'_permanent', '_fresh'})

SESSIONS_TABLE = '''
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        data TEXT NOT NULL,
        expires_at REAL NOT NULL
    )
'''


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class ServerSession(CallbackDict, SessionMixin):
    """Session dict tracking its id and whether it changed."""

    def __init__(self, initial=None, sid=None, new=False):
        def on_update(self):
            self.modified = True

        super().__init__(initial, on_update)
        self.sid = sid or new_session_id()
        self.new = new
        self.previous_sid = None
        self.modified = False

    def regenerate(self):
        """Move the contents to a fresh id; the old row is deleted on save."""
        if self.previous_sid is None and not self.new:
            self.previous_sid = self.sid
        self.sid = new_session_id()
        self.modified = True

    @property
    def is_empty(self) -> bool:
        return all(key in _BOOKKEEPING_KEYS for key in self)


class SqliteSessionInterface(SessionInterface):
    """Stores sessions in SQLite, keyed by the id in the session cookie."""

    serializer = TaggedJSONSerializer()

    def _connect(self, app):
        db_path = app.config.get('SESSION_DATABASE_PATH') or app.config.get(
            'DATABASE_PATH', 'instance/bookings.db'
        )
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        db = sqlite3.connect(db_path, timeout=app.config.get('QUERY_TIMEOUT', 2.0))
        db.execute(SESSIONS_TABLE)
        return db

    def open_session(self, app, request):
        sid = request.cookies.get(self.get_cookie_name(app))
        if not sid:
            return ServerSession(new=True)

        with closing(self._connect(app)) as db:
            row = db.execute(
                'SELECT data FROM sessions WHERE id = ? AND expires_at > ?',
                (sid, time.time())
            ).fetchone()

        # Unknown or expired ids are never reused
        if row is None:
            return ServerSession(new=True)

        try:
            data = self.serializer.loads(row[0])
        except ValueError as e:
            logger.warning(f"Discarding unreadable session data: {e}")
            return ServerSession(new=True)
        return ServerSession(data, sid=sid)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)
        secure = self.get_cookie_secure(app)
        samesite = self.get_cookie_samesite(app)
        httponly = self.get_cookie_httponly(app)

        if session.accessed:
            response.vary.add('Cookie')

        if session.is_empty:
            if not session.new:
                self._delete(app, session.sid, session.previous_sid)
                response.delete_cookie(
                    name, domain=domain, path=path,
                    secure=secure, samesite=samesite, httponly=httponly
                )
            return

        if not self.should_set_cookie(app, session):
            return

        now = time.time()
        expires_at = now + app.permanent_session_lifetime.total_seconds()

        with closing(self._connect(app)) as db:
            with db:
                if session.previous_sid:
                    db.execute('DELETE FROM sessions WHERE id = ?', (session.previous_sid,))
                if session.new:
                    db.execute('DELETE FROM sessions WHERE expires_at <= ?', (now,))
                db.execute(
                    'INSERT OR REPLACE INTO sessions (id, data, expires_at) VALUES (?, ?, ?)',
                    (session.sid, self.serializer.dumps(dict(session)), expires_at)
                )

        response.set_cookie(
            name,
            session.sid,
            expires=self.get_expiration_time(app, session),
            httponly=httponly,
            domain=domain,
            path=path,
            secure=secure,
            samesite=samesite,
        )

    def _delete(self, app, *sids):
        with closing(self._connect(app)) as db:
            with db:
                for sid in sids:
                    if sid:
                        db.execute('DELETE FROM sessions WHERE id = ?', (sid,))


def renew_session():
    """Clear the current session and give it a new id (login and logout)."""
    session.clear()
    if isinstance(session, ServerSession):
        session.regenerate()
