"""
Tests for reservation commit modes, orphan reconciliation and the CLI commands.
"""

from datetime import date

import pytest

from models.booking_store import get_store
from models.errors import OrphanReservationError, PersistenceError, RoomUnavailableError
from models.memory_store import MemoryBookingStore
from services.booking import commit_draft, reconcile_orphans


class TestCommitDraft:

    def test_transactional(self, make_draft):
        store = MemoryBookingStore.with_defaults()
        reservation_id = commit_draft(store, make_draft('2050-01-01', '2050-01-02'))

        assert store.get_reservation(reservation_id).room_id == 1
        assert store.find_orphan_reservations() == []

    def test_transactional_conflict(self, make_draft):
        store = MemoryBookingStore.with_defaults()
        commit_draft(store, make_draft('2050-01-01', '2050-01-03'))

        with pytest.raises(RoomUnavailableError):
            commit_draft(store, make_draft('2050-01-02', '2050-01-04'))

    def test_transactional_failure_leaves_nothing(self, failing_store, make_draft):
        store = failing_store

        with pytest.raises(PersistenceError):
            commit_draft(store, make_draft('2050-01-01', '2050-01-02'))

        assert store.list_reservations() == []

    def test_two_step_failure_is_reported_as_orphan(self, failing_store, make_draft, caplog):
        store = failing_store

        with pytest.raises(OrphanReservationError) as error:
            commit_draft(store, make_draft('2050-01-01', '2050-01-02'), transactional=False)

        assert [r.id for r in store.find_orphan_reservations()] == [error.value.reservation_id]
        assert 'ORPHAN RESERVATION' in caplog.text


class TestReconcileOrphans:

    def test_list_only(self, store, make_draft):
        store.create_reservation(make_draft('2050-01-01', '2050-01-02'))

        results = reconcile_orphans(store)

        assert [status for _, status in results] == ['orphan']
        assert len(store.find_orphan_reservations()) == 1

    def test_repair(self, store, make_draft):
        reservation_id = store.create_reservation(make_draft('2050-01-01', '2050-01-03'))

        results = reconcile_orphans(store, repair=True)

        assert [(r.id, status) for r, status in results] == [(reservation_id, 'repaired')]
        assert store.find_orphan_reservations() == []
        assert not store.is_room_available(date(2050, 1, 1), date(2050, 1, 3), 1)

    def test_conflict_is_not_repaired(self, store, make_draft):
        store.create_reservation(make_draft('2050-01-01', '2050-01-03'))
        store.commit_reservation(make_draft('2050-01-02', '2050-01-04', first_name='Jane'))

        results = reconcile_orphans(store, repair=True)

        assert [status for _, status in results] == ['conflict']
        assert len(store.find_orphan_reservations()) == 1


class TestCliCommands:

    def test_reconcile_orphans_clean(self, app):
        result = app.test_cli_runner().invoke(args=['reconcile-orphans'])
        assert 'No orphan reservations.' in result.output

    def test_reconcile_orphans_repair(self, app, make_draft):
        get_store().create_reservation(make_draft('2050-01-01', '2050-01-03'))
        runner = app.test_cli_runner()

        assert 'orphan' in runner.invoke(args=['reconcile-orphans']).output
        assert 'repaired' in runner.invoke(args=['reconcile-orphans', '--repair']).output
        assert get_store().find_orphan_reservations() == []

    def test_create_user(self, app):
        result = app.test_cli_runner().invoke(args=[
            'create-user', 'owner@here.com', '--first-name', 'Olive',
            '--password', 'secret123',
        ])

        assert 'User created successfully' in result.output
        user = get_store().get_user(get_store().authenticate('owner@here.com', 'secret123'))
        assert user.access_level == 3

    def test_create_user_rejects_bad_email(self, app):
        result = app.test_cli_runner().invoke(args=['create-user', 'nope', '--password', 'x'])
        assert 'Invalid email' in result.output

    def test_init_db(self, app, make_draft):
        get_store().commit_reservation(make_draft('2050-01-01', '2050-01-02'))

        result = app.test_cli_runner().invoke(args=['init-db'])

        assert 'Database initialized successfully!' in result.output
        assert get_store().list_reservations() == []
