from datetime import datetime
from models.db import db

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_NO_SHOW = "no-show"

# statuses that no longer hold a seat in their slot
INACTIVE_STATUSES = (STATUS_CANCELLED, STATUS_NO_SHOW)


class Booking(db.Model):
    __tablename__ = "bookings"

    # time-based id assigned by the service, not autoincrement
    id = db.Column(db.BigInteger, primary_key=True, autoincrement=False)

    date = db.Column(db.String(10), nullable=False)   # YYYY-MM-DD
    time = db.Column(db.String(5), nullable=False)    # HH:MM
    clinic_email = db.Column(db.String(255), nullable=False, default="", index=True)

    status = db.Column(db.String(20), nullable=False, default=STATUS_CONFIRMED)
    # status values: confirmed, cancelled, no-show

    cancel_token = db.Column(db.String(64), nullable=False)

    # seat index inside the slot while active, NULL once released
    seat = db.Column(db.Integer, nullable=True)

    name = db.Column(db.String(255), nullable=False, default="Guest")
    email = db.Column(db.String(255), nullable=False, default="")
    phone = db.Column(db.String(255), nullable=False, default="")
    notes = db.Column(db.Text, nullable=False, default="")
    service = db.Column(db.String(255), nullable=False, default="Consultation")
    timezone = db.Column(db.String(64), nullable=False, default="UTC")

    # tenant details as they were when the booking was made
    clinic_name = db.Column(db.String(255), nullable=False, default="")
    clinic_phone = db.Column(db.String(255), nullable=False, default="")
    clinic_address = db.Column(db.String(255), nullable=False, default="")
    website_url = db.Column(db.String(255), nullable=False, default="")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancelled_by_owner = db.Column(db.Boolean, nullable=True)

    __table_args__ = (
        # Hard business-rule: a seat in a slot can only be held once (prevents overbooking)
        db.UniqueConstraint("date", "time", "clinic_email", "seat", name="uq_booking_slot_seat"),
        db.Index("ix_bookings_slot", "date", "time", "clinic_email"),
    )

    @property
    def starts_at(self) -> datetime:
        return datetime.strptime(f"{self.date} {self.time}", "%Y-%m-%d %H:%M")

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date,
            "time": self.time,
            "status": self.status,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "notes": self.notes,
            "service": self.service,
            "timezone": self.timezone,
            "clinicName": self.clinic_name,
            "clinicEmail": self.clinic_email,
            "clinicPhone": self.clinic_phone,
            "clinicAddress": self.clinic_address,
            "websiteUrl": self.website_url,
            "cancelToken": self.cancel_token,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }
