"""
Caller authentication for the task API.

Every task operation is scoped to an owning user.  That identity comes
from the ``user_id`` claim of an RS256 bearer token, checked here against
the policy in the app config (``JWT_PUBLIC_KEY``, ``JWT_ALGORITHMS``,
``JWT_REQUIRED_CLAIMS``, ``JWT_CLOCK_SKEW_SECONDS``) and published on
``flask.g`` for the route handlers.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import jwt
from flask import Response, current_app, g, jsonify, request

MISSING_TOKEN = "Missing or invalid Authorization header"
INVALID_TOKEN = "Invalid or expired token"


def _bearer_token() -> str | None:
    """Extract the token from ``Authorization: Bearer <token>``."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        return None
    return token


def _is_owner_id(value: Any) -> bool:
    # bool is an int subclass; True must not pass as user 1.
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def verify_token(token: str, public_key: str | None = None) -> dict[str, Any] | None:
    """
    Decode ``token`` under the configured JWT policy.

    Args:
        token: Encoded JWT.
        public_key: PEM key to verify with; defaults to the app's
            ``JWT_PUBLIC_KEY``.

    Returns:
        The claims when the signature, expiry and required claims check
        out and ``user_id`` / ``username`` are usable; otherwise ``None``.
    """
    settings = current_app.config
    try:
        claims = jwt.decode(
            token,
            public_key or settings["JWT_PUBLIC_KEY"],
            algorithms=settings["JWT_ALGORITHMS"],
            options={"require": settings["JWT_REQUIRED_CLAIMS"]},
            leeway=settings["JWT_CLOCK_SKEW_SECONDS"],
        )
    except jwt.InvalidTokenError:
        return None

    username = claims.get("username")
    if not _is_owner_id(claims.get("user_id")):
        return None
    if not isinstance(username, str) or not username.strip():
        return None
    return claims


def require_auth(view_func: Callable[..., Response]):
    """
    Reject unauthenticated requests with 401 ``{message}``.

    Authenticated requests run the view with ``g.user_id`` and
    ``g.username`` set from the token.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            return jsonify({"message": MISSING_TOKEN}), 401

        claims = verify_token(token)
        if claims is None:
            return jsonify({"message": INVALID_TOKEN}), 401

        g.user_id = claims["user_id"]
        g.username = claims["username"]
        return view_func(*args, **kwargs)

    return wrapper
