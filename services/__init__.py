"""
Application services shared by the blueprints.
- booking: reservation commit and orphan reconciliation
- mail_queue: background e-mail delivery
- notifications: reservation e-mails
"""

from services.booking import commit_draft, reconcile_orphans
from services.mail_queue import MailQueue, MailMessage, get_mail_queue
from services.notifications import notify_reservation

__all__ = [
    'commit_draft',
    'reconcile_orphans',
    'MailQueue',
    'MailMessage',
    'get_mail_queue',
    'notify_reservation',
]
