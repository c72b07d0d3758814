"""Shared test fixtures."""
import threading
from datetime import datetime

import pytest

from app import create_app
from models import db
from services.notifications import NotificationSink

OWNER_KEY = "owner-secret"


class FrozenClock:
    """Callable clock the booking service reads instead of datetime.utcnow."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class RecordingSender:
    """Stands in for utils.emailer.send_email and remembers every message."""

    def __init__(self):
        self.sent = []
        self.fail = False
        self._lock = threading.Lock()

    def __call__(self, to_email, subject, body, reply_to=None):
        with self._lock:
            self.sent.append({"to": to_email, "subject": subject, "body": body, "reply_to": reply_to})
        if self.fail:
            return False, "SMTP unavailable"
        return True, None

    def to(self, address):
        return [m for m in self.sent if m["to"] == address]


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 19, 12, 0))


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def sink(sender):
    return NotificationSink(sender=sender)


@pytest.fixture
def app(tmp_path, sink, clock):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///" + str(tmp_path / "test.db"),
            "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"timeout": 30, "check_same_thread": False}},
            "OWNER_API_KEY": OWNER_KEY,
            "BOOKING_RATE_MAX_REQUESTS": 1000,
            "CANCEL_PAGE_URL": "https://shop.example.com/cancel",
        },
        notifier=sink,
        clock=clock,
    )
    with app.app_context():
        db.create_all()
    yield app
    sink.shutdown()
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def service(app, ctx):
    return app.extensions["booking_service"]


@pytest.fixture
def config_service(app, ctx):
    return app.extensions["config_service"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def owner_headers():
    return {"X-Owner-Key": OWNER_KEY}


@pytest.fixture
def booking_payload():
    """Build a booking request body; keyword overrides replace defaults."""
    def _create(**overrides):
        data = {
            "date": "2026-01-20",
            "time": "10:00",
            "service": "Dental Checkup",
            "name": "Ana Lopez",
            "email": "ana@example.com",
            "phone": "5551234",
            "clinicName": "Smile Clinic",
            "clinicEmail": "a@b.com",
            "clinicPhone": "555-0000",
            "clinicAddress": "1 Main St",
            "websiteUrl": "https://smile.example.com",
        }
        data.update(overrides)
        return {k: v for k, v in data.items() if v is not None}
    return _create
