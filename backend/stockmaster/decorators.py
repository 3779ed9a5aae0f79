# Overview: Request decorators for API routes.

from functools import wraps

from flask import g, jsonify, request

from .services import auth_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization") or ""
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.current_user_id: the userId claim
    - g.token_claims: the decoded token payload

    Returns 401 when no token is sent and 403 when the token is invalid or
    expired. The user row is not loaded here; routes that need it look it up.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            return jsonify({"message": "Access token required"}), 401

        claims = auth_service.decode_access_token(token)
        if claims is None:
            return jsonify({"message": "Invalid token"}), 403

        g.current_user_id = claims["userId"]
        g.token_claims = claims
        return f(*args, **kwargs)

    return decorated_function
