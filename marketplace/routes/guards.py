# marketplace/routes/guards.py

from flask import jsonify

from marketplace.identity import get_identity

ERROR_STATUS = {
    "auth": 401,
    "forbidden": 403,
    "validation": 400,
    "not_found": 404,
    "storage": 503,
}


def respond(result, status: int = 200):
    """Service result dict -> (json, http status)."""
    if result.get("ok"):
        return jsonify(result), status
    return jsonify(result), ERROR_STATUS.get(result.get("error"), 400)


def require_role(*roles):
    """
    Returns (ok, response_or_none, identity).
    Guests get 401, logged-in callers with another role get 403.
    """
    ident = get_identity()
    if not ident.is_logged_in:
        return False, (jsonify(ok=False, error="auth", message="Please log in"), 401), ident
    if roles and ident.role not in roles:
        return False, (jsonify(ok=False, error="forbidden", message="Not allowed"), 403), ident
    return True, None, ident
