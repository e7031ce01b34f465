"""
Outbound e-mail queue.

Views enqueue MailMessage objects; one daemon thread drains the queue and
delivers over SMTP. The queue is bounded: when it is full, enqueue() drops
the message and logs a warning instead of blocking the request.
"""

import logging
import os
import queue
import smtplib
import threading
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List, Optional

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'mail_queue'
BODY_PLACEHOLDER = '[%body%]'

_STOP = object()


@dataclass
class MailMessage:
    """One outbound e-mail."""
    to: str
    sender: str
    subject: str
    content: str
    template: Optional[str] = None


class MailQueue:
    """Bounded queue with a single background delivery worker."""

    def __init__(self, maxsize: int = 100, smtp_host: str = 'localhost', smtp_port: int = 1025,
                 template_folder: str = None, suppress_send: bool = False):
        """
        Args:
            maxsize: Queue capacity; further messages are dropped
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            template_folder: Folder holding HTML mail templates
            suppress_send: Record messages in `outbox` instead of sending
        """
        self._queue = queue.Queue(maxsize=maxsize)
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.template_folder = template_folder
        self.suppress_send = suppress_send
        self.outbox: List[MailMessage] = []
        self.dropped = 0
        self._thread = None

    @classmethod
    def from_config(cls, config) -> 'MailQueue':
        return cls(
            maxsize=config.get('MAIL_QUEUE_SIZE', 100),
            smtp_host=config.get('MAIL_SERVER', 'localhost'),
            smtp_port=config.get('MAIL_PORT', 1025),
            template_folder=config.get('MAIL_TEMPLATE_FOLDER'),
            suppress_send=config.get('MAIL_SUPPRESS_SEND', False),
        )

    # =========================================================================
    # PRODUCER SIDE
    # =========================================================================

    def enqueue(self, message: MailMessage) -> bool:
        """
        Queue a message without blocking.

        Returns:
            True if queued, False if dropped because the queue is full
        """
        try:
            self._queue.put_nowait(message)
            return True
        except queue.Full:
            self.dropped += 1
            logger.warning(f"Mail queue full, dropped message to {message.to}: {message.subject}")
            return False

    # =========================================================================
    # WORKER
    # =========================================================================

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(target=self._listen, name='mail-worker', daemon=True)
        self._thread.start()
        logger.info('Mail worker started')

    def stop(self, timeout: float = 5.0) -> None:
        """Let the worker finish queued messages, then end it."""
        if not self.running:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        self._thread = None

    def join(self) -> None:
        """Block until every queued message has been handled."""
        self._queue.join()

    def _listen(self) -> None:
        while True:
            message = self._queue.get()
            try:
                if message is _STOP:
                    return
                self.deliver(message)
            except Exception:
                # Delivery failures never reach the booking flow
                logger.exception(f"Failed to deliver mail to {getattr(message, 'to', '?')}")
            finally:
                self._queue.task_done()

    # =========================================================================
    # DELIVERY
    # =========================================================================

    def render(self, message: MailMessage) -> str:
        """Body of the message, wrapped in its HTML template when it has one."""
        if not message.template or not self.template_folder:
            return message.content

        path = os.path.join(self.template_folder, message.template)
        with open(path, encoding='utf-8') as f:
            template = f.read()
        return template.replace(BODY_PLACEHOLDER, message.content)

    def deliver(self, message: MailMessage) -> None:
        body = self.render(message)

        if self.suppress_send:
            self.outbox.append(message)
            logger.debug(f"Mail to {message.to} recorded (sending suppressed)")
            return

        email = EmailMessage()
        email['From'] = message.sender
        email['To'] = message.to
        email['Subject'] = message.subject
        email.set_content(body, subtype='html')

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=10) as smtp:
            smtp.send_message(email)
        logger.info(f"Mail sent to {message.to}: {message.subject}")


def get_mail_queue():
    from flask import current_app
    return current_app.extensions[EXTENSION_KEY]
