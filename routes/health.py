from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models import db

health_bp = Blueprint("health", __name__)

ENDPOINTS = {
    "GET /api/bookings": "Get booking counts by date-time",
    "POST /api/bookings": "Create a booking",
    "GET /api/bookings/all": "Get all bookings (owner)",
    "GET /api/bookings/<id>/cancel": "Preview a cancellation",
    "POST /api/bookings/cancel": "Cancel a booking with its token",
    "DELETE /api/bookings/<id>": "Cancel a booking (owner)",
    "GET /api/config": "Get slot configuration",
    "POST /api/config": "Update slot configuration (owner)",
}


def _database_status() -> str:
    try:
        db.session.execute(text("SELECT 1"))
        return "connected"
    except SQLAlchemyError:
        db.session.rollback()
        return "disconnected"


@health_bp.get("/")
@health_bp.get("/health")
def health():
    return jsonify(
        status="ok",
        message="Clinic booking API",
        database=_database_status(),
        endpoints=ENDPOINTS,
    ), 200
