"""
Admin routes for reservation management.
Lists, edits, processes and deletes reservations; maintains owner blocks
through the reservations calendar.
"""

from flask import render_template, redirect, url_for, flash, request, Blueprint, current_app
from flask_login import login_required

from blueprints.booking.forms import ReservationForm
from models.booking_store import get_store
from models.calendar import build_room_month, diff_block_changes, apply_block_changes, days_between
from models.draft import put_block_map, get_block_map
from models.errors import NotFoundError, ParseError, PersistenceError
from utils.datetime_helpers import get_today, month_bounds, shift_month
from utils.decorators import access_level_required
from utils.messages import MESSAGES
from utils.validators import parse_int

admin_bp = Blueprint('admin', __name__, template_folder='../../templates/admin')

LIST_SOURCES = {
    'new': 'admin.reservations_new',
    'all': 'admin.reservations_all',
}


def _back_to(src: str):
    """Redirect to the page a reservation action was started from."""
    if src == 'cal':
        year = request.values.get('y')
        month = request.values.get('m')
        if year and month:
            return redirect(url_for('admin.reservations_calendar', y=year, m=month))
        return redirect(url_for('admin.reservations_calendar'))
    return redirect(url_for(LIST_SOURCES.get(src, 'admin.dashboard')))


def _requested_month(values):
    """
    (year, month) from y/m parameters, or the current month when absent.

    Raises:
        ParseError: if y or m is present but malformed
    """
    if not values.get('y'):
        today = get_today()
        return today.year, today.month

    year = parse_int(values.get('y'), 'year')
    month = parse_int(values.get('m'), 'month')
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise ParseError(f"Month out of range: {year}-{month}")
    return year, month


# =============================================================================
# DASHBOARD AND LISTS
# =============================================================================

@admin_bp.route('/dashboard')
@login_required
@access_level_required()
def dashboard():
    """Admin dashboard with reservation counts."""
    store = get_store()
    stats = {
        'new_reservations': len(store.list_reservations(unprocessed_only=True)),
        'all_reservations': len(store.list_reservations()),
        'rooms': len(store.all_rooms()),
    }
    return render_template('dashboard.html', stats=stats)


@admin_bp.route('/reservations_new')
@login_required
@access_level_required()
def reservations_new():
    """Reservations not yet processed."""
    reservations = get_store().list_reservations(unprocessed_only=True)
    return render_template('reservations_list.html', reservations=reservations, src='new')


@admin_bp.route('/reservations_all')
@login_required
@access_level_required()
def reservations_all():
    """Every reservation."""
    reservations = get_store().list_reservations()
    return render_template('reservations_list.html', reservations=reservations, src='all')


# =============================================================================
# SINGLE RESERVATION
# =============================================================================

@admin_bp.route('/reservations/<src>/<int:reservation_id>', methods=['GET', 'POST'])
@login_required
@access_level_required()
def reservation_show(src, reservation_id):
    """
    Show a reservation and edit its guest details.

    GET: Display reservation with edit form
    POST: Save guest details and return to the source page
    """
    store = get_store()
    try:
        reservation = store.get_reservation(reservation_id)
    except NotFoundError:
        flash(MESSAGES['reservation_not_found'], 'error')
        return _back_to(src)

    form = ReservationForm(obj=reservation)

    if form.validate_on_submit():
        try:
            store.update_reservation(reservation_id, **form.guest_fields())
        except PersistenceError as e:
            current_app.logger.error(f"Reservation {reservation_id} update failed: {e}")
            flash(MESSAGES['cant_save_reservation'], 'error')
            return _back_to(src)
        current_app.logger.info(f"Reservation {reservation_id} updated")
        flash(MESSAGES['reservation_saved'], 'success')
        return _back_to(src)

    return render_template(
        'reservation_show.html',
        reservation=reservation,
        form=form,
        src=src,
        year=request.args.get('y', ''),
        month=request.args.get('m', ''),
    )


@admin_bp.route('/process_reservation/<src>/<int:reservation_id>', methods=['POST'])
@login_required
@access_level_required()
def process_reservation(src, reservation_id):
    """Mark a reservation processed. Repeating it changes nothing."""
    try:
        get_store().mark_processed(reservation_id)
    except PersistenceError as e:
        current_app.logger.error(f"Reservation {reservation_id} processing failed: {e}")
        flash(MESSAGES['cant_save_reservation'], 'error')
        return _back_to(src)
    current_app.logger.info(f"Reservation {reservation_id} processed")
    flash(MESSAGES['reservation_processed'], 'success')
    return _back_to(src)


@admin_bp.route('/delete_reservation/<src>/<int:reservation_id>', methods=['POST'])
@login_required
@access_level_required()
def delete_reservation(src, reservation_id):
    """Delete a reservation and its room restriction. Repeating it changes nothing."""
    try:
        get_store().delete_reservation(reservation_id)
    except PersistenceError as e:
        current_app.logger.error(f"Reservation {reservation_id} delete failed: {e}")
        flash(MESSAGES['cant_save_reservation'], 'error')
        return _back_to(src)
    current_app.logger.info(f"Reservation {reservation_id} deleted")
    flash(MESSAGES['reservation_deleted'], 'success')
    return _back_to(src)


# =============================================================================
# CALENDAR
# =============================================================================

@admin_bp.route('/reservations_calendar', methods=['GET'])
@login_required
@access_level_required()
def reservations_calendar():
    """Month grid of reservations and owner blocks per room."""
    try:
        year, month = _requested_month(request.args)
    except ParseError:
        flash(MESSAGES['cant_parse_month'], 'error')
        return redirect(url_for('admin.reservations_calendar'))

    first, last = month_bounds(year, month)
    store = get_store()
    rooms = store.all_rooms()

    reservation_maps = {}
    block_maps = {}
    for room in rooms:
        reservation_map, block_map = build_room_month(store, room.id, first, last)
        reservation_maps[room.id] = reservation_map
        block_maps[room.id] = block_map
        # Kept for the save POST, which diffs against what was shown
        put_block_map(room.id, block_map)

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)

    return render_template(
        'reservations_calendar.html',
        rooms=rooms,
        reservation_maps=reservation_maps,
        block_maps=block_maps,
        days=[d.isoformat() for d in days_between(first, last)],
        first=first,
        year=year,
        month=month,
        prev={'y': prev_year, 'm': prev_month},
        next={'y': next_year, 'm': next_month},
    )


@admin_bp.route('/reservations_calendar', methods=['POST'])
@login_required
@access_level_required()
def save_reservations_calendar():
    """Apply owner block checkbox changes from the calendar."""
    try:
        year, month = _requested_month(request.form)
    except ParseError:
        year, month = get_today().year, get_today().month

    store = get_store()
    saved_maps = {room.id: get_block_map(room.id) for room in store.all_rooms()}

    try:
        to_remove, to_add = diff_block_changes(saved_maps, request.form.keys())
        apply_block_changes(store, to_remove, to_add)
    except ParseError as e:
        current_app.logger.warning(f"Calendar post rejected: {e}")
        flash(MESSAGES['cant_save_calendar'], 'error')
    except PersistenceError as e:
        current_app.logger.error(f"Calendar changes failed: {e}")
        flash(MESSAGES['cant_save_calendar'], 'error')
    else:
        flash(MESSAGES['calendar_saved'], 'success')

    return redirect(url_for('admin.reservations_calendar', y=year, m=month))
