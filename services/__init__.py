from flask import current_app

from repositories.booking_repository import BookingRepository
from services.booking_service import BookingService
from services.config_service import ConfigService
from services.notifications import NotificationSink


def init_services(app, notifier=None, clock=None):
    """Build the booking core for an app and register it under app.extensions."""
    repository = BookingRepository()
    if notifier is None:
        notifier = NotificationSink(app)
    elif notifier.app is None:
        notifier.init_app(app)
    config_service = ConfigService(repository, app.config.get("DEFAULT_SLOTS_PER_HOUR", 1))
    options = {"clock": clock} if clock is not None else {}
    booking_service = BookingService(
        repository,
        config_service,
        notifier=notifier,
        cancel_cutoff_hours=app.config.get("CANCEL_CUTOFF_HOURS", 6),
        **options,
    )
    app.extensions["config_service"] = config_service
    app.extensions["booking_service"] = booking_service
    return booking_service


def get_booking_service() -> BookingService:
    return current_app.extensions["booking_service"]


def get_config_service() -> ConfigService:
    return current_app.extensions["config_service"]
