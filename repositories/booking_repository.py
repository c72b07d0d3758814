"""
Data access for bookings and slot configuration.

The repository wraps a SQLAlchemy session (Flask-SQLAlchemy's scoped session
by default) and translates storage failures into the booking error taxonomy:
uniqueness violations become ConflictError, everything else StorageError.
Each write commits on its own; the service decides what to retry.
"""

from contextlib import contextmanager
import logging
from typing import Dict, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.booking import Booking, INACTIVE_STATUSES, STATUS_CANCELLED
from models.slot_config import SlotConfig
from services.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


class BookingRepository:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    @contextmanager
    def _storage(self, operation: str):
        """Roll back and re-raise storage failures as StorageError."""
        try:
            yield self.session
        except (ConflictError, StorageError):
            raise
        except SQLAlchemyError as exc:
            logger.error("Repository %s failed: %s", operation, exc)
            self.session.rollback()
            raise StorageError() from exc

    def _active_in_slot(self, date: str, time: str, clinic_email: str):
        return self.session.query(Booking).filter(
            Booking.date == date,
            Booking.time == time,
            Booking.clinic_email == clinic_email,
            Booking.status.notin_(INACTIVE_STATUSES),
        )

    # ---------- bookings ----------
    def count_bookings(self, date: str, time: str, clinic_email: str) -> int:
        """Count bookings holding a seat in the (date, time, clinic) slot."""
        with self._storage("count_bookings"):
            return self._active_in_slot(date, time, clinic_email).count()

    def used_seats(self, date: str, time: str, clinic_email: str) -> Set[int]:
        with self._storage("used_seats"):
            rows = (
                self._active_in_slot(date, time, clinic_email)
                .with_entities(Booking.seat)
                .all()
            )
        return {r.seat for r in rows if r.seat is not None}

    def insert_booking(self, booking: Booking) -> None:
        with self._storage("insert_booking"):
            self.session.add(booking)
            try:
                self.session.commit()
            except IntegrityError as exc:
                self.session.rollback()
                raise ConflictError() from exc

    def find_booking(self, booking_id: int, token: Optional[str] = None,
                     include_cancelled: bool = False) -> Optional[Booking]:
        with self._storage("find_booking"):
            q = self.session.query(Booking).filter(Booking.id == booking_id)
            if token is not None:
                q = q.filter(Booking.cancel_token == token)
            if not include_cancelled:
                q = q.filter(Booking.status != STATUS_CANCELLED)
            return q.first()

    def mark_cancelled(self, booking: Booking, cancelled_at, by_owner: bool) -> bool:
        """
        Flip a booking to cancelled and release its seat.

        The update is conditional on the booking still being uncancelled, so two
        concurrent cancellations cannot both succeed. Returns False when the
        booking was already cancelled.
        """
        with self._storage("mark_cancelled"):
            updated = (
                self.session.query(Booking)
                .filter(Booking.id == booking.id, Booking.status != STATUS_CANCELLED)
                .update(
                    {
                        Booking.status: STATUS_CANCELLED,
                        Booking.seat: None,
                        Booking.cancelled_at: cancelled_at,
                        Booking.cancelled_by_owner: by_owner,
                    },
                    synchronize_session=False,
                )
            )
            self.session.commit()
            if updated:
                self.session.refresh(booking)
            return bool(updated)

    def delete_booking(self, booking_id: int) -> bool:
        with self._storage("delete_booking"):
            deleted = self.session.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
            self.session.commit()
            return bool(deleted)

    def list_bookings(self, clinic_email: Optional[str] = None) -> List[Booking]:
        with self._storage("list_bookings"):
            q = self.session.query(Booking)
            if clinic_email is not None:
                q = q.filter(Booking.clinic_email == clinic_email)
            return q.order_by(Booking.created_at.desc(), Booking.id.desc()).all()

    def slot_counts(self, clinic_email: Optional[str] = None) -> Dict[str, int]:
        """Active bookings per "{date}-{time}" key."""
        with self._storage("slot_counts"):
            q = (
                self.session.query(Booking.date, Booking.time, func.count(Booking.id))
                .filter(Booking.status.notin_(INACTIVE_STATUSES))
            )
            if clinic_email is not None:
                q = q.filter(Booking.clinic_email == clinic_email)
            rows = q.group_by(Booking.date, Booking.time).all()
        return {f"{d}-{t}": n for d, t, n in rows}

    # ---------- configuration ----------
    def get_config(self, tenant: str) -> Optional[SlotConfig]:
        with self._storage("get_config"):
            return self.session.get(SlotConfig, tenant)

    def insert_config_if_missing(self, tenant: str, slots_per_hour: int) -> SlotConfig:
        """Create a config row unless a concurrent caller already did; return the stored row."""
        with self._storage("insert_config_if_missing"):
            existing = self.session.get(SlotConfig, tenant)
            if existing is not None:
                return existing
            self.session.add(SlotConfig(tenant=tenant, slots_per_hour=slots_per_hour))
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
            return self.session.get(SlotConfig, tenant)

    def upsert_config(self, tenant: str, slots_per_hour: int) -> SlotConfig:
        with self._storage("upsert_config"):
            row = self.session.get(SlotConfig, tenant)
            if row is None:
                row = SlotConfig(tenant=tenant, slots_per_hour=slots_per_hour)
                self.session.add(row)
            else:
                row.slots_per_hour = slots_per_hour
            try:
                self.session.commit()
            except IntegrityError:
                # created concurrently; apply the update to the winner's row
                self.session.rollback()
                row = self.session.get(SlotConfig, tenant)
                row.slots_per_hour = slots_per_hour
                self.session.commit()
            return row
