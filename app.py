import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from routes import health_bp, booking_bp, config_bp
from models import db
from services import init_services
from services.errors import BookingError

logger = logging.getLogger(__name__)


def create_app(overrides=None, notifier=None, clock=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(config_bp)

    # Database init (engine is created lazily, once per app)
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Booking core
    init_services(app, notifier=notifier, clock=clock)

    @app.errorhandler(BookingError)
    def _booking_error(exc):
        if exc.status_code >= 500:
            logger.error("Booking request failed: %s", exc.__cause__ or exc)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify(success=False, error=exc.description), exc.code

    @app.errorhandler(Exception)
    def _unexpected_error(exc):
        logger.exception("Unhandled error")
        return jsonify(success=False, error="Internal server error"), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def register_cli(app):
    @app.cli.command("set-slots")
    @click.argument("slots_per_hour")
    @click.option("--tenant", default=None, help="Clinic email; omit for the global default.")
    def set_slots(slots_per_hour, tenant):
        """Set how many bookings a slot accepts."""
        config = app.extensions["config_service"].set_config(tenant, slots_per_hour)
        click.echo(f"{config.tenant}: {config.slots_per_hour} per slot")

    @app.cli.command("show-config")
    @click.option("--tenant", default=None, help="Clinic email; omit for the global default.")
    def show_config(tenant):
        """Print the slot configuration (creates the default if missing)."""
        config = app.extensions["config_service"].get_config(tenant)
        click.echo(f"{config.tenant}: {config.slots_per_hour} per slot")

    @app.cli.command("init-db")
    def init_db():
        """Create tables without running migrations (local development)."""
        db.create_all()
        click.echo("Tables created")


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
