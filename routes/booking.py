from flask import Blueprint, request, jsonify

from security.owner import is_owner_request, require_owner
from security.rate_limit import check_and_increment_booking_rate
from services import get_booking_service
from services.errors import SlotFullError
from utils.audit import log_event

booking_bp = Blueprint("booking", __name__, url_prefix="/api/bookings")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ---------- STOREFRONT: availability ----------
@booking_bp.get("")
def booking_counts():
    counts = get_booking_service().get_booking_counts(request.args.get("clinicEmail"))
    return jsonify(success=True, bookings=counts), 200


# ---------- CLIENT: book slot (DOUBLE-BOOKING SAFE) ----------
@booking_bp.post("")
def create_booking():
    allowed, retry_after = check_and_increment_booking_rate()
    if not allowed:
        resp = jsonify(success=False, error="Too many booking attempts. Please try again later.")
        resp.headers["Retry-After"] = str(retry_after)
        return resp, 429

    data = _json_body()
    try:
        booking = get_booking_service().create_booking(data)
    except SlotFullError:
        log_event("BOOKING_FAIL_SLOT_FULL", actor="client", entity="slot",
                  metadata={"date": data.get("date"), "time": data.get("time"), "clinicEmail": data.get("clinicEmail")})
        raise

    log_event("BOOKING_CREATE", actor="client", entity="booking", entity_id=booking.id)
    return jsonify(
        success=True,
        message="Booking confirmed!",
        bookingId=booking.id,
        id=booking.id,
        status=booking.status,
        cancelToken=booking.cancel_token,
    ), 201


# ---------- OWNER: list all bookings ----------
@booking_bp.get("/all")
@require_owner
def list_all_bookings():
    rows = get_booking_service().list_all_bookings(request.args.get("clinicEmail"))
    return jsonify(success=True, bookings=[b.to_dict() for b in rows]), 200


# ---------- CLIENT: cancellation preview ----------
@booking_bp.get("/<int:booking_id>/cancel")
def cancellation_preview(booking_id: int):
    token = request.args.get("token")
    summary = get_booking_service().get_booking_for_cancellation(booking_id, token)
    return jsonify(success=True, booking=summary), 200


# ---------- CLIENT/OWNER: cancel with token (policy window for clients) ----------
@booking_bp.post("/cancel")
def cancel_booking():
    data = _json_body()
    owner = is_owner_request()
    booking = get_booking_service().cancel_booking(data.get("id"), data.get("token"), is_owner=owner)

    actor = "owner" if owner else "client"
    log_event("BOOKING_CANCEL", actor=actor, entity="booking", entity_id=booking.id)
    return jsonify(success=True, message="Booking cancelled successfully"), 200


# ---------- OWNER: cancel any booking ----------
@booking_bp.delete("/<int:booking_id>")
@require_owner
def owner_cancel_booking(booking_id: int):
    token = request.args.get("token")
    booking = get_booking_service().cancel_booking(booking_id, token, is_owner=True)

    log_event("BOOKING_CANCEL", actor="owner", entity="booking", entity_id=booking.id)
    return jsonify(success=True, message="Booking cancelled by owner"), 200
