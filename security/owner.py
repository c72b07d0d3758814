import hmac
from functools import wraps
from flask import current_app, jsonify, request

OWNER_HEADER = "X-Owner-Key"


def is_owner_request() -> bool:
    """
    True when the request carries the clinic owner's shared key.

    This is a caller-asserted secret, not a user login: anyone holding the key
    is treated as the owner.
    """
    expected = current_app.config.get("OWNER_API_KEY")
    supplied = request.headers.get(OWNER_HEADER)
    if not expected or not supplied:
        return False
    return hmac.compare_digest(supplied.encode(), expected.encode())


def require_owner(fn):
    """
    Usage: @require_owner
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if request.headers.get(OWNER_HEADER) is None:
            return jsonify(success=False, error="Owner key required"), 401
        if not is_owner_request():
            return jsonify(success=False, error="Forbidden"), 403
        return fn(*args, **kwargs)
    return wrapper
