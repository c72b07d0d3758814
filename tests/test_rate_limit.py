"""Per-IP fixed window on booking creation."""
import threading
from datetime import timedelta

from models import IpRateLimit, db
from security.rate_limit import check_and_increment_booking_rate

IP = "203.0.113.7"


def _hit(app, ip=IP):
    with app.test_request_context("/api/bookings", method="POST", headers={"X-Forwarded-For": ip}):
        return check_and_increment_booking_rate()


def _stored_count(app, ip=IP):
    with app.app_context():
        return IpRateLimit.query.filter_by(scope="booking_create", ip=ip).one().count


class TestBookingRateLimit:

    def test_blocks_after_limit(self, app):
        app.config["BOOKING_RATE_MAX_REQUESTS"] = 2

        results = [_hit(app) for _ in range(3)]

        assert [allowed for allowed, _ in results] == [True, True, False]
        assert 1 <= results[-1][1] <= 60
        assert _stored_count(app) == 3

    def test_expired_window_starts_over(self, app):
        app.config["BOOKING_RATE_MAX_REQUESTS"] = 1
        _hit(app)
        assert _hit(app)[0] is False

        with app.app_context():
            row = IpRateLimit.query.filter_by(ip=IP).one()
            row.window_start -= timedelta(seconds=61)
            db.session.commit()

        assert _hit(app) == (True, 0)
        assert _stored_count(app) == 1

    def test_concurrent_requests_are_all_counted(self, app):
        attempts = 8
        _hit(app)
        barrier = threading.Barrier(attempts)

        def worker():
            with app.test_request_context("/api/bookings", method="POST", headers={"X-Forwarded-For": IP}):
                barrier.wait()
                check_and_increment_booking_rate()

        threads = [threading.Thread(target=worker) for _ in range(attempts)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        assert _stored_count(app) == attempts + 1
