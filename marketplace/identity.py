# marketplace/identity.py

from flask import session
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import NoAuthorizationError

from marketplace.models.identity_models import Identity

ROLES = ("admin", "owner", "customer")


# ----------------------------
# HYBRID AUTH HELPERS
# ----------------------------
def _from_session():
    user_id = session.get("user_id")
    role = (session.get("role") or "").lower()
    if not user_id or role not in ROLES:
        return None
    return Identity(
        is_logged_in=True,
        user_id=str(user_id),
        role=role,
        email=session.get("email") or "",
        first_name=session.get("first_name") or "",
        last_name=session.get("last_name") or "",
    )


def _from_jwt():
    """
    Bearer token (mobile / API clients). Accepts either a dict identity or a
    string identity with the profile carried in additional claims.
    """
    try:
        verify_jwt_in_request(optional=True)  # does not raise if missing
        ident = get_jwt_identity()
        claims = get_jwt() or {}
    except NoAuthorizationError:
        return None
    except Exception:
        # don't crash the request if the token is malformed or expired
        return None

    if not ident:
        return None
    data = ident if isinstance(ident, dict) else {**claims, "userId": ident}

    user_id = data.get("userId") or data.get("user_id")
    role = (data.get("role") or "").lower()
    if not user_id or role not in ROLES:
        return None
    return Identity(
        is_logged_in=True,
        user_id=str(user_id),
        role=role,
        email=data.get("email") or "",
        first_name=data.get("firstName") or "",
        last_name=data.get("lastName") or "",
    )


def get_identity() -> Identity:
    """
    Caller identity from
      1) Flask cookie session (web)
      2) JWT Bearer token (mobile)
    Falls back to a guest; never raises.
    """
    return _from_session() or _from_jwt() or Identity.guest()
