"""
Reservation notifications.
Builds the guest confirmation and the owner notice for a committed draft.
"""

from markupsafe import escape

from services.mail_queue import MailMessage
from utils.datetime_helpers import human_date
from utils.messages import MESSAGES


def guest_confirmation(draft, sender: str) -> MailMessage:
    content = (
        '<strong>Reservation confirmation</strong><br>'
        f'Dear {escape(draft.first_name)}, <br>'
        f'This is a confirmation for your reservation from {human_date(draft.start_date)} '
        f'to {human_date(draft.end_date)} for the {escape(draft.room_name)} room.'
    )
    return MailMessage(
        to=draft.email,
        sender=sender,
        subject=MESSAGES['mail_guest_subject'],
        content=content,
        template='basic.html',
    )


def owner_notification(draft, sender: str, owner: str) -> MailMessage:
    content = (
        '<strong>New Reservation</strong><br>'
        f'A reservation has been made from {human_date(draft.start_date)} '
        f'to {human_date(draft.end_date)} for the {escape(draft.room_name)} room '
        f'by {escape(draft.first_name)} {escape(draft.last_name)}.'
    )
    return MailMessage(
        to=owner,
        sender=sender,
        subject=MESSAGES['mail_owner_subject'],
        content=content,
    )


def notify_reservation(mail_queue, draft, config) -> None:
    """Queue both notifications; never raises for delivery problems."""
    sender = config.get('MAIL_DEFAULT_SENDER', 'me@here.com')
    owner = config.get('OWNER_EMAIL', 'property@owner.com')
    mail_queue.enqueue(guest_confirmation(draft, sender))
    mail_queue.enqueue(owner_notification(draft, sender, owner))
