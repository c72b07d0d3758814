"""Plain-text bodies for booking emails. Each builder returns (subject, body)."""

from urllib.parse import urlencode


def cancel_link(base_url: str, booking_id: int, token: str):
    if not base_url:
        return None
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{urlencode({'id': booking_id, 'token': token})}"


def _clinic_footer(booking) -> str:
    lines = [booking.clinic_name or "Your clinic"]
    if booking.clinic_address:
        lines.append(booking.clinic_address)
    if booking.clinic_phone:
        lines.append(f"Phone: {booking.clinic_phone}")
    if booking.clinic_email:
        lines.append(f"Email: {booking.clinic_email}")
    if booking.website_url:
        lines.append(booking.website_url)
    return "\n".join(lines)


def _appointment_block(booking) -> str:
    return (
        f"Service: {booking.service}\n"
        f"Date: {booking.date}\n"
        f"Time: {booking.time} ({booking.timezone})"
    )


def client_confirmation(booking, cancel_url=None):
    clinic = booking.clinic_name or "the clinic"
    subject = f"Booking confirmed - {clinic}"
    body = (
        f"Hi {booking.name},\n\n"
        f"Your appointment with {clinic} is confirmed.\n\n"
        f"{_appointment_block(booking)}\n"
        f"Booking reference: {booking.id}\n"
    )
    if cancel_url:
        body += (
            "\nNeed to cancel? Use this link (at least 6 hours before your appointment):\n"
            f"{cancel_url}\n"
        )
    body += f"\nSee you soon,\n{_clinic_footer(booking)}\n"
    return subject, body


def owner_new_booking(booking):
    subject = f"New booking: {booking.date} {booking.time} - {booking.name}"
    body = (
        "You have a new booking.\n\n"
        f"{_appointment_block(booking)}\n\n"
        f"Client: {booking.name}\n"
        f"Email: {booking.email or '-'}\n"
        f"Phone: {booking.phone or '-'}\n"
        f"Notes: {booking.notes or '-'}\n\n"
        f"Booking reference: {booking.id}\n"
    )
    return subject, body


def client_cancellation(booking, cancelled_by_owner: bool):
    clinic = booking.clinic_name or "the clinic"
    if cancelled_by_owner:
        subject = f"We're sorry - your appointment with {clinic} was cancelled"
        intro = (
            f"Unfortunately {clinic} had to cancel your appointment. "
            "We apologise for the inconvenience. Please book another time that suits you."
        )
    else:
        subject = f"Booking cancelled - {clinic}"
        intro = "Your appointment has been cancelled as requested."
    body = (
        f"Hi {booking.name},\n\n"
        f"{intro}\n\n"
        f"{_appointment_block(booking)}\n"
        f"Booking reference: {booking.id}\n\n"
        f"{_clinic_footer(booking)}\n"
    )
    return subject, body


def owner_cancellation(booking):
    subject = f"Booking cancelled: {booking.date} {booking.time} - {booking.name}"
    body = (
        "A client cancelled their booking. The slot is available again.\n\n"
        f"{_appointment_block(booking)}\n\n"
        f"Client: {booking.name}\n"
        f"Email: {booking.email or '-'}\n"
        f"Phone: {booking.phone or '-'}\n\n"
        f"Booking reference: {booking.id}\n"
    )
    return subject, body
