"""
Centralized UI messages.
All user-facing text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Successfully logged in',
    'logout_success': 'You have been logged out',
    'reservation_saved': 'Changes saved!',
    'reservation_processed': 'Processed reservation!',
    'reservation_deleted': 'Reservation has been deleted!',
    'calendar_saved': 'Changes saved!',

    # Search errors
    'cant_parse_start': "can't parse start date",
    'cant_parse_end': "can't parse end date",
    'invalid_date_range': 'Departure date must be after arrival date',
    'cant_query_db': "can't query database",
    'no_availability': 'No availability',

    # Draft errors
    'no_draft': "can't get reservation from session",
    'choose_room_first': 'Please choose a room first',
    'bad_room_id': 'Unable to get room ID from URL',
    'room_not_found': "can't find room",

    # Commit errors
    'reservation_failed': "can't save your reservation, please try again",
    'summary_unavailable': 'Unable to get reservation from session',

    # Auth
    'invalid_credentials': 'invalid login credentials',
    'login_required': 'Please log in to access this page',
    'permission_denied': 'You do not have permission to access this page',

    # Admin
    'reservation_not_found': 'Reservation not found',
    'cant_parse_month': "can't read the requested month",
    'cant_save_calendar': 'could not save calendar changes',
    'cant_save_reservation': 'could not save changes to the reservation',

    # Validation messages
    'field_required': 'This field cannot be blank',
    'min_length': 'This field must be at least {length} characters long',
    'invalid_email': 'Invalid email address',

    # JSON availability
    'json_available': 'Room is available',
    'json_unavailable': 'Room is not available for those dates',

    # Notifications
    'mail_guest_subject': 'Reservation confirmation',
    'mail_owner_subject': 'New Reservation',
}
