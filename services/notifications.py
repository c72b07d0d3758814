"""
Booking emails, sent off the request path.

Every send is submitted to a small thread pool owned by the sink and runs
inside its own app context. Delivery failures are logged and reported as a
False future result; they never reach the booking flow.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from types import SimpleNamespace

from services.errors import NotificationError
from utils import email_templates
from utils.emailer import send_email

logger = logging.getLogger(__name__)


def _snapshot(booking):
    # ORM instances are bound to the request's session; workers get plain copies
    return SimpleNamespace(**{c.name: getattr(booking, c.name) for c in booking.__table__.columns})


class NotificationSink:
    def __init__(self, app=None, sender=send_email):
        self.sender = sender
        self.app = None
        self._executor = None
        self._pending = set()
        self._pending_lock = threading.Lock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        self._executor = ThreadPoolExecutor(
            max_workers=app.config.get("NOTIFY_MAX_WORKERS", 4),
            thread_name_prefix="notify",
        )
        app.extensions["notifications"] = self

    # ---------- public sends ----------
    def send_client_confirmation(self, booking):
        data = _snapshot(booking)
        link = email_templates.cancel_link(self.app.config.get("CANCEL_PAGE_URL"), data.id, data.cancel_token)
        subject, body = email_templates.client_confirmation(data, cancel_url=link)
        return self._dispatch("client_confirmation", data.email, subject, body, reply_to=data.clinic_email)

    def send_owner_new_booking_notice(self, booking):
        data = _snapshot(booking)
        subject, body = email_templates.owner_new_booking(data)
        return self._dispatch("owner_new_booking", data.clinic_email, subject, body, reply_to=data.email)

    def send_client_cancellation_notice(self, booking, cancelled_by_owner: bool):
        data = _snapshot(booking)
        subject, body = email_templates.client_cancellation(data, cancelled_by_owner)
        return self._dispatch("client_cancellation", data.email, subject, body, reply_to=data.clinic_email)

    def send_owner_cancellation_notice(self, booking):
        data = _snapshot(booking)
        subject, body = email_templates.owner_cancellation(data)
        return self._dispatch("owner_cancellation", data.clinic_email, subject, body, reply_to=data.email)

    # ---------- plumbing ----------
    def _dispatch(self, kind, to_email, subject, body, reply_to=None):
        future = self._executor.submit(self._deliver, kind, to_email, subject, body, reply_to or None)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future):
        with self._pending_lock:
            self._pending.discard(future)

    def _deliver(self, kind, to_email, subject, body, reply_to):
        try:
            with self.app.app_context():
                ok, error = self.sender(to_email, subject, body, reply_to=reply_to)
            if not ok:
                raise NotificationError(error)
        except Exception as exc:
            logger.warning("Notification %s to %s failed: %s", kind, to_email, exc)
            return False
        logger.info("Notification %s sent to %s", kind, to_email)
        return True

    def drain(self, timeout=None):
        """Block until every queued email has been attempted."""
        with self._pending_lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def shutdown(self, wait_for_pending=True):
        if self._executor is not None:
            self._executor.shutdown(wait=wait_for_pending)
