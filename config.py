import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # Shared secret sent by clinic dashboards in the X-Owner-Key header
    OWNER_API_KEY = os.getenv("OWNER_API_KEY")

    # SQLite database file stored next to the app as clinicslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "clinicslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "connect_args": {"timeout": 30} if SQLALCHEMY_DATABASE_URI.startswith("sqlite")
        else {"connect_timeout": 30},
    }

    # Slot capacity used when neither the request nor the tenant config sets one
    DEFAULT_SLOTS_PER_HOUR = int(os.getenv("DEFAULT_SLOTS_PER_HOUR", "1"))

    # Cancellation policy (client-initiated only)
    CANCEL_CUTOFF_HOURS = 6

    # Per-IP limit on booking creation
    BOOKING_RATE_WINDOW_SECONDS = 60
    BOOKING_RATE_MAX_REQUESTS = int(os.getenv("BOOKING_RATE_MAX_REQUESTS", "5"))

    # Reject request bodies over 10kb
    MAX_CONTENT_LENGTH = 10 * 1024

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_TIMEOUT = int(os.getenv("SMTP_TIMEOUT", "10"))

    # Background email workers
    NOTIFY_MAX_WORKERS = int(os.getenv("NOTIFY_MAX_WORKERS", "4"))

    # Page on the storefront that renders the cancellation confirmation
    CANCEL_PAGE_URL = os.getenv("CANCEL_PAGE_URL")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
