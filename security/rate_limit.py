from datetime import datetime, timedelta
from flask import request, current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.ip_rate_limit import IpRateLimit

BOOKING_SCOPE = "booking_create"

def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    return forwarded.split(",")[0].strip() or request.remote_addr or "unknown"

def check_and_increment_booking_rate() -> tuple[bool, int]:
    """
    Returns (allowed, retry_after_seconds).
    Simple fixed window per IP for booking creation. The counter is bumped
    in SQL so concurrent requests from one IP are all counted.
    """
    ip = _client_ip()
    now = datetime.utcnow()

    window_seconds = current_app.config.get("BOOKING_RATE_WINDOW_SECONDS", 60)
    max_requests = current_app.config.get("BOOKING_RATE_MAX_REQUESTS", 5)
    window = timedelta(seconds=window_seconds)

    if not IpRateLimit.query.filter_by(scope=BOOKING_SCOPE, ip=ip).first():
        db.session.add(IpRateLimit(scope=BOOKING_SCOPE, ip=ip, window_start=now, count=0))
        try:
            db.session.commit()
        except IntegrityError:
            # first request from this IP raced another one; the stored row wins
            db.session.rollback()

    rows = IpRateLimit.query.filter_by(scope=BOOKING_SCOPE, ip=ip)

    # Reset window if expired
    rows.filter(IpRateLimit.window_start <= now - window).update(
        {IpRateLimit.window_start: now, IpRateLimit.count: 0}, synchronize_session=False
    )
    rows.update({IpRateLimit.count: IpRateLimit.count + 1}, synchronize_session=False)
    db.session.commit()

    row = rows.first()
    if row.count > max_requests:
        retry_after = int((row.window_start + window - now).total_seconds())
        return False, max(retry_after, 1)

    return True, 0
