"""
Public booking routes: pages, availability search and the reservation flow.

Flow over the session draft:
    search_availability -> choose_room -> make_reservation -> reservation_summary
"""

from flask import (
    Blueprint, current_app, flash, redirect, render_template, request, url_for,
)

from blueprints.booking.forms import ReservationForm
from models.booking_store import get_store
from models.draft import (
    ReservationDraft, get_draft, put_draft, clear_draft,
    STAGE_EMPTY, STAGE_SEARCHED, STAGE_COMMITTED,
)
from models.errors import (
    NotFoundError, OrphanReservationError, ParseError, PersistenceError,
    QueryError, RoomUnavailableError,
)
from services.booking import commit_draft
from services.mail_queue import get_mail_queue
from services.notifications import notify_reservation
from utils.api_response import availability_json
from utils.datetime_helpers import parse_date
from utils.messages import MESSAGES
from utils.validators import parse_int, validate_date_range

booking_bp = Blueprint('booking', __name__, template_folder='../../templates/booking')

# Friendly room page URLs
ROOM_ALIASES = {
    'generals-quarters': 1,
    'majors-suite': 2,
}


def _to_search(message_key: str):
    flash(MESSAGES[message_key], 'error')
    return redirect(url_for('booking.search_availability'))


def _to_home(message_key: str):
    flash(MESSAGES[message_key], 'error')
    return redirect(url_for('booking.home'))


# =============================================================================
# STATIC PAGES
# =============================================================================

@booking_bp.route('/')
def home():
    """Landing page."""
    return render_template('home.html')


@booking_bp.route('/about')
def about():
    return render_template('about.html')


@booking_bp.route('/contact')
def contact():
    return render_template('contact.html')


@booking_bp.route('/rooms/<int:room_id>')
def room(room_id):
    """Room detail page with a per-room availability check."""
    try:
        found = get_store().get_room(room_id)
    except NotFoundError:
        return _to_home('room_not_found')
    return render_template('room.html', room=found)


@booking_bp.route('/generals-quarters', defaults={'alias': 'generals-quarters'})
@booking_bp.route('/majors-suite', defaults={'alias': 'majors-suite'})
def room_alias(alias):
    return room(ROOM_ALIASES[alias])


# =============================================================================
# SEARCH
# =============================================================================

@booking_bp.route('/search_availability', methods=['GET'])
def search_availability():
    """Display the date range search form."""
    return render_template('search_availability.html')


@booking_bp.route('/search_availability', methods=['POST'])
def post_search_availability():
    """
    Search all rooms for a date range.

    Stores a fresh draft holding the dates and renders the rooms to choose from.
    """
    try:
        start = parse_date(request.form.get('start'))
    except ParseError:
        return _to_search('cant_parse_start')

    try:
        end = parse_date(request.form.get('end'))
    except ParseError:
        return _to_search('cant_parse_end')

    if not validate_date_range(start, end):
        return _to_search('invalid_date_range')

    try:
        rooms = get_store().search_available_rooms(start, end)
    except QueryError as e:
        current_app.logger.error(f"Availability search failed for {start}..{end}: {e}")
        return _to_search('cant_query_db')

    if not rooms:
        return _to_search('no_availability')

    draft = ReservationDraft(start_date=start, end_date=end)
    put_draft(draft)

    return render_template('choose_room.html', rooms=rooms, draft=draft)


@booking_bp.route('/search_availability-json', methods=['POST'])
def search_availability_json():
    """Check one room for a date range and answer in JSON."""
    sd = request.form.get('start', '')
    ed = request.form.get('end', '')

    try:
        start = parse_date(sd)
        end = parse_date(ed)
        room_id = parse_int(request.form.get('room_id'), 'room_id')
    except ParseError as e:
        return availability_json(False, str(e), request.form.get('room_id'), sd, ed)

    if not validate_date_range(start, end):
        return availability_json(False, MESSAGES['invalid_date_range'], room_id, sd, ed)

    try:
        available = get_store().is_room_available(start, end, room_id)
    except QueryError as e:
        current_app.logger.error(f"Availability check failed for room {room_id}: {e}")
        return availability_json(False, MESSAGES['cant_query_db'], room_id, sd, ed)

    message = MESSAGES['json_available'] if available else MESSAGES['json_unavailable']
    return availability_json(available, message, room_id, sd, ed)


# =============================================================================
# CHOOSE ROOM
# =============================================================================

@booking_bp.route('/choose_room/<room_id>')
def choose_room(room_id):
    """Attach the chosen room to the draft and continue to the details form."""
    try:
        room_id = parse_int(room_id, 'room id')
    except ParseError:
        return _to_search('bad_room_id')

    draft = get_draft()
    if draft is None or draft.stage == STAGE_EMPTY:
        return _to_search('no_draft')

    store = get_store()
    try:
        chosen = store.get_room(room_id)
        available = store.is_room_available(draft.start_date, draft.end_date, room_id)
    except NotFoundError:
        return _to_search('room_not_found')
    except QueryError as e:
        current_app.logger.error(f"Room lookup failed for room {room_id}: {e}")
        return _to_search('cant_query_db')

    if not available:
        return _to_search('no_availability')

    put_draft(draft.with_changes(room_id=chosen.id, room_name=chosen.name, reservation_id=None))
    return redirect(url_for('booking.make_reservation'), code=303)


@booking_bp.route('/book_room')
def book_room():
    """Start a draft straight from a room page: /book_room?id=1&s=2050-01-01&e=2050-01-02."""
    try:
        room_id = parse_int(request.args.get('id'), 'room id')
        start = parse_date(request.args.get('s'))
        end = parse_date(request.args.get('e'))
    except ParseError:
        return _to_search('bad_room_id')

    if not validate_date_range(start, end):
        return _to_search('invalid_date_range')

    try:
        chosen = get_store().get_room(room_id)
    except NotFoundError:
        return _to_search('room_not_found')

    put_draft(ReservationDraft(
        start_date=start,
        end_date=end,
        room_id=chosen.id,
        room_name=chosen.name,
    ))
    return redirect(url_for('booking.make_reservation'), code=303)


# =============================================================================
# GUEST DETAILS AND COMMIT
# =============================================================================

def _draft_for_details():
    """
    Draft ready for the details step.

    Returns:
        tuple: (draft, None) or (None, redirect response)
    """
    draft = get_draft()
    if draft is None:
        return None, _to_search('no_draft')
    if draft.stage in (STAGE_EMPTY, STAGE_SEARCHED):
        return None, _to_search('choose_room_first')
    if draft.stage == STAGE_COMMITTED:
        return None, redirect(url_for('booking.reservation_summary'))
    return draft, None


@booking_bp.route('/make_reservation', methods=['GET'])
def make_reservation():
    """Display the guest details form for the chosen room and dates."""
    draft, response = _draft_for_details()
    if response:
        return response

    try:
        chosen = get_store().get_room(draft.room_id)
    except NotFoundError:
        return _to_home('room_not_found')

    draft = draft.with_changes(room_name=chosen.name)
    put_draft(draft)

    form = ReservationForm(data={
        'first_name': draft.first_name,
        'last_name': draft.last_name,
        'email': draft.email,
        'phone': draft.phone,
    })
    return render_template('make_reservation.html', form=form, draft=draft)


@booking_bp.route('/make_reservation', methods=['POST'])
def post_make_reservation():
    """
    Validate guest details and commit the reservation.

    Invalid details re-render the form (HTTP 200) with the posted values;
    nothing is written.
    """
    draft, response = _draft_for_details()
    if response:
        return response

    form = ReservationForm()
    draft = draft.with_changes(**form.guest_fields())
    put_draft(draft)

    if not form.validate_on_submit():
        return render_template('make_reservation.html', form=form, draft=draft)

    try:
        reservation_id = commit_draft(
            get_store(), draft,
            transactional=current_app.config.get('TRANSACTIONAL_COMMIT', True)
        )
    except RoomUnavailableError as e:
        # Booked by someone else since the search; the guest starts over
        current_app.logger.warning(str(e))
        put_draft(draft.with_changes(room_id=None, room_name=''))
        return _to_home('reservation_failed')
    except OrphanReservationError:
        # Already logged as an orphan by commit_draft
        return _to_home('reservation_failed')
    except PersistenceError as e:
        current_app.logger.error(f"Reservation commit failed for room {draft.room_id}: {e}")
        return _to_home('reservation_failed')

    notify_reservation(get_mail_queue(), draft, current_app.config)

    put_draft(draft.with_changes(reservation_id=reservation_id))
    return redirect(url_for('booking.reservation_summary'), code=303)


# =============================================================================
# SUMMARY
# =============================================================================

@booking_bp.route('/reservation_summary')
def reservation_summary():
    """Show the committed reservation once, then forget the draft."""
    draft = get_draft()
    if draft is None or draft.stage != STAGE_COMMITTED:
        return _to_home('summary_unavailable')

    clear_draft()
    return render_template('reservation_summary.html', draft=draft)
