"""Error taxonomy for the booking core.

Each error carries the HTTP status the transport layer answers with. Storage
errors are surfaced with a generic message; notification errors never leave
the notification sink.
"""


class BookingError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"success": False, "error": self.message}


class ValidationError(BookingError):
    status_code = 400
    default_message = "Invalid booking data"


class SlotFullError(BookingError):
    status_code = 409
    default_message = "This time slot is fully booked. Please choose another time."


class NotFoundError(BookingError):
    status_code = 404
    default_message = "Booking not found or already cancelled"


class CancellationWindowError(BookingError):
    status_code = 403

    def __init__(self, hours_until: float, cutoff_hours: int):
        self.hours_until = hours_until
        self.cutoff_hours = cutoff_hours
        super().__init__(
            f"Cancellations must be made at least {cutoff_hours} hours in advance. "
            f"Your appointment is in {hours_until:.1f} hours."
        )

    def to_dict(self):
        data = super().to_dict()
        data["hoursUntil"] = round(self.hours_until, 1)
        return data


class StorageError(BookingError):
    status_code = 500
    default_message = "Booking storage is unavailable. Please try again later."


class NotificationError(BookingError):
    default_message = "Email could not be sent"


class ConflictError(BookingError):
    """Insert rejected by a storage uniqueness constraint."""

    status_code = 409
    default_message = "Booking conflicts with an existing record"
