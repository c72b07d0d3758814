"""Emails triggered by bookings are sent in the background and never break the flow."""
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from services.booking_service import BookingService
from services.notifications import NotificationSink
from utils import email_templates


class TestBookingEmails:

    def test_create_notifies_client_and_owner(self, service, sink, sender, booking_payload):
        booking = service.create_booking(booking_payload())
        sink.drain(timeout=5)

        client_mail = sender.to("ana@example.com")
        owner_mail = sender.to("a@b.com")
        assert len(client_mail) == 1
        assert len(owner_mail) == 1
        assert "confirmed" in client_mail[0]["subject"].lower()
        assert f"id={booking.id}" in client_mail[0]["body"]
        assert f"token={booking.cancel_token}" in client_mail[0]["body"]
        assert client_mail[0]["reply_to"] == "a@b.com"
        assert "Ana Lopez" in owner_mail[0]["body"]

    def test_no_email_no_client_notice(self, service, sink, sender, booking_payload):
        service.create_booking(booking_payload(email=None, clinicEmail=None))
        sink.drain(timeout=5)

        assert sender.sent == []

    def test_client_cancel_notifies_both(self, service, sink, sender, booking_payload):
        booking = service.create_booking(booking_payload())
        sink.drain(timeout=5)
        sender.sent.clear()

        service.cancel_booking(booking.id, booking.cancel_token)
        sink.drain(timeout=5)

        client_mail = sender.to("ana@example.com")
        assert len(client_mail) == 1
        assert "sorry" not in client_mail[0]["subject"].lower()
        assert len(sender.to("a@b.com")) == 1

    def test_owner_cancel_apologises_and_skips_owner(self, service, sink, sender, booking_payload):
        booking = service.create_booking(booking_payload())
        sink.drain(timeout=5)
        sender.sent.clear()

        service.cancel_booking(booking.id, booking.cancel_token, is_owner=True)
        sink.drain(timeout=5)

        client_mail = sender.to("ana@example.com")
        assert len(client_mail) == 1
        assert "sorry" in client_mail[0]["subject"].lower()
        assert "apologise" in client_mail[0]["body"]
        assert sender.to("a@b.com") == []

    def test_send_failure_does_not_fail_booking(self, service, sink, sender, booking_payload, caplog):
        sender.fail = True

        booking = service.create_booking(booking_payload())
        sink.drain(timeout=5)

        assert booking.status == "confirmed"
        assert "failed" in caplog.text

    def test_sender_exception_is_contained(self, app, ctx, booking_payload):
        sink = NotificationSink(app, sender=Mock(side_effect=RuntimeError("boom")))
        service = app.extensions["booking_service"]
        booking = service.create_booking(booking_payload())

        future = sink.send_client_confirmation(booking)

        assert future.result(timeout=5) is False
        sink.shutdown()

    def test_broken_notifier_is_logged_not_raised(self, app, ctx, booking_payload, caplog):
        base = app.extensions["booking_service"]
        notifier = Mock()
        notifier.send_client_confirmation.side_effect = RuntimeError("executor gone")
        service = BookingService(base.repository, base.config_service, notifier=notifier, clock=base.clock)

        booking = service.create_booking(booking_payload())

        assert booking.status == "confirmed"
        notifier.send_owner_new_booking_notice.assert_called_once()
        assert "Could not queue send_client_confirmation" in caplog.text

    def test_without_notifier(self, app, ctx, booking_payload):
        base = app.extensions["booking_service"]
        service = BookingService(base.repository, base.config_service, notifier=None, clock=base.clock)

        booking = service.create_booking(booking_payload())
        service.cancel_booking(booking.id, booking.cancel_token)


class TestEmailTemplates:

    @pytest.fixture
    def data(self):
        return SimpleNamespace(
            id=1768903200000, name="Ana", email="ana@example.com", phone="", notes="",
            service="Cleaning", date="2026-01-20", time="10:00", timezone="UTC",
            clinic_name="Smile Clinic", clinic_email="a@b.com", clinic_phone="",
            clinic_address="", website_url="",
        )

    def test_cancel_link_appends_query(self):
        assert email_templates.cancel_link("https://x.com/cancel", 5, "tok") == "https://x.com/cancel?id=5&token=tok"
        assert email_templates.cancel_link("https://x.com/c?lang=en", 5, "tok") == "https://x.com/c?lang=en&id=5&token=tok"
        assert email_templates.cancel_link(None, 5, "tok") is None

    def test_confirmation_without_link(self, data):
        subject, body = email_templates.client_confirmation(data)
        assert subject == "Booking confirmed - Smile Clinic"
        assert "Need to cancel" not in body
        assert "Booking reference: 1768903200000" in body

    def test_owner_notice_lists_client(self, data):
        subject, body = email_templates.owner_new_booking(data)
        assert subject == "New booking: 2026-01-20 10:00 - Ana"
        assert "Phone: -" in body

    def test_owner_cancellation_notice(self, data):
        subject, body = email_templates.owner_cancellation(data)
        assert subject.startswith("Booking cancelled")
        assert "available again" in body
