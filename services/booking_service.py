"""
Booking lifecycle: slot capacity, creation and token-based cancellation.

Capacity is enforced per (date, time, clinic email) slot. Inside one process
creations for the same slot are serialized by a keyed lock; across processes
each active booking holds a numbered seat below the slot's capacity and the
(date, time, clinic_email, seat) unique constraint rejects a second holder.
"""

import logging
import secrets
from datetime import datetime

from models.booking import Booking, STATUS_CONFIRMED
from services.errors import (
    CancellationWindowError,
    ConflictError,
    NotFoundError,
    SlotFullError,
    ValidationError,
)
from utils.ids import BookingIdGenerator
from utils.slot_locks import KeyedLock
from utils.validators import (
    MAX_BIGINT,
    clean_text,
    is_valid_date,
    is_valid_email,
    is_valid_time,
    normalize_email,
    parse_positive_int,
)

logger = logging.getLogger(__name__)

# extra insert attempts allowed for id collisions with other processes
ID_CONFLICT_RETRIES = 3


class BookingService:
    def __init__(self, repository, config_service, notifier=None, cancel_cutoff_hours: int = 6,
                 clock=datetime.utcnow, id_generator=None, slot_locks=None):
        self.repository = repository
        self.config_service = config_service
        self.notifier = notifier
        self.cancel_cutoff_hours = cancel_cutoff_hours
        self.clock = clock
        self.id_generator = id_generator or BookingIdGenerator()
        self.slot_locks = slot_locks or KeyedLock()

    # ---------- create ----------
    def create_booking(self, payload: dict) -> Booking:
        if not isinstance(payload, dict):
            raise ValidationError()
        fields = self._validate(payload)
        slot = (fields["date"], fields["time"], fields["clinic_email"])
        capacity = self.config_service.resolve_capacity(payload.get("slotsPerHour"), fields["clinic_email"])

        with self.slot_locks.hold(slot):
            booking = self._insert_with_free_seat(fields, capacity)

        logger.info(
            "Booking %s created: %s %s for %s (clinic=%s)",
            booking.id, booking.date, booking.time, booking.name, booking.clinic_email or "-",
        )

        if booking.email:
            self._notify("send_client_confirmation", booking)
        if booking.clinic_email:
            self._notify("send_owner_new_booking_notice", booking)
        return booking

    def _insert_with_free_seat(self, fields: dict, capacity: int) -> Booking:
        date, time, clinic_email = fields["date"], fields["time"], fields["clinic_email"]

        for _ in range(capacity + ID_CONFLICT_RETRIES):
            count = self.repository.count_bookings(date, time, clinic_email)
            if count >= capacity:
                break
            used = self.repository.used_seats(date, time, clinic_email)
            seat = next((i for i in range(capacity) if i not in used), None)
            if seat is None:
                break

            booking = Booking(
                id=self.id_generator.next_id(),
                status=STATUS_CONFIRMED,
                cancel_token=secrets.token_hex(32),
                seat=seat,
                created_at=self.clock(),
                **fields,
            )
            try:
                self.repository.insert_booking(booking)
                return booking
            except ConflictError:
                # another writer took the seat (or the id); look again
                logger.info("Seat %s of slot %s %s (%s) taken concurrently, retrying", seat, date, time, clinic_email)

        logger.warning("Slot full: %s %s (clinic=%s, capacity=%s)", date, time, clinic_email or "-", capacity)
        raise SlotFullError()

    def _validate(self, payload: dict) -> dict:
        date = payload.get("date")
        time = payload.get("time")
        if not date or not time:
            raise ValidationError("Date and time are required")
        if not is_valid_date(date):
            raise ValidationError("Invalid date format. Use YYYY-MM-DD")
        if not is_valid_time(time):
            raise ValidationError("Invalid time format. Use HH:MM")
        try:
            datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
        except ValueError:
            raise ValidationError("Invalid date or time")

        email = clean_text(payload.get("email"))
        if email and not is_valid_email(email):
            raise ValidationError("Invalid email address")

        clinic_email = normalize_email(payload.get("clinicEmail"))
        if clinic_email and not is_valid_email(clinic_email):
            raise ValidationError("Invalid clinic email address")

        return {
            "date": date,
            "time": time,
            "clinic_email": clinic_email,
            "service": clean_text(payload.get("service"), "Consultation"),
            "name": clean_text(payload.get("name"), "Guest"),
            "email": email,
            "phone": clean_text(payload.get("phone"), max_length=40),
            "timezone": clean_text(payload.get("timezone"), "UTC", max_length=64),
            "notes": clean_text(payload.get("notes"), max_length=1000),
            "clinic_name": clean_text(payload.get("clinicName")),
            "clinic_phone": clean_text(payload.get("clinicPhone"), max_length=40),
            "clinic_address": clean_text(payload.get("clinicAddress")),
            "website_url": clean_text(payload.get("websiteUrl")),
        }

    # ---------- cancel ----------
    def hours_until(self, booking: Booking) -> float:
        return (booking.starts_at - self.clock()).total_seconds() / 3600

    def _lookup(self, booking_id, token, is_owner: bool = False) -> Booking:
        if booking_id in (None, "") or (not token and not is_owner):
            raise ValidationError("Booking id and token are required")
        booking_id = parse_positive_int(booking_id, max_value=MAX_BIGINT)
        if booking_id is None:
            raise NotFoundError()

        booking = self.repository.find_booking(booking_id, token=token or None)
        if booking is None:
            raise NotFoundError()
        return booking

    def get_booking_for_cancellation(self, booking_id, token) -> dict:
        booking = self._lookup(booking_id, token)
        hours = self.hours_until(booking)
        return {
            "id": booking.id,
            "date": booking.date,
            "time": booking.time,
            "service": booking.service,
            "name": booking.name,
            "timezone": booking.timezone,
            "clinicName": booking.clinic_name,
            "status": booking.status,
            "canCancel": hours >= self.cancel_cutoff_hours,
            "hoursUntil": round(hours, 1),
        }

    def cancel_booking(self, booking_id, token, is_owner: bool = False) -> Booking:
        """
        Cancel a booking identified by id and cancellation token.

        Client cancellations must happen at least cancel_cutoff_hours before the
        appointment; owner cancellations skip that rule and may omit the token.
        A second cancellation of the same booking fails with NotFoundError.
        """
        booking = self._lookup(booking_id, token, is_owner=is_owner)

        if not is_owner:
            hours = self.hours_until(booking)
            if hours < self.cancel_cutoff_hours:
                raise CancellationWindowError(hours, self.cancel_cutoff_hours)

        if not self.repository.mark_cancelled(booking, self.clock(), by_owner=is_owner):
            raise NotFoundError()

        logger.info("Booking %s cancelled by %s", booking.id, "owner" if is_owner else "client")

        if booking.email:
            self._notify("send_client_cancellation_notice", booking, is_owner)
        if booking.clinic_email and not is_owner:
            self._notify("send_owner_cancellation_notice", booking)
        return booking

    # ---------- reads ----------
    def get_booking_counts(self, clinic_email=None) -> dict:
        return self.repository.slot_counts(normalize_email(clinic_email) if clinic_email else None)

    def list_all_bookings(self, clinic_email=None):
        return self.repository.list_bookings(normalize_email(clinic_email) if clinic_email else None)

    # ---------- side effects ----------
    def _notify(self, method: str, *args):
        if self.notifier is None:
            return
        try:
            getattr(self.notifier, method)(*args)
        except Exception:
            logger.exception("Could not queue %s for booking %s", method, args[0].id)
