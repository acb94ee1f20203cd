import logging
from datetime import datetime, timezone
from functools import wraps

import bcrypt
from flask import current_app, g, jsonify, request
from jose import JWTError, jwt

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"
USERNAME_COOKIE = "username"


def hash_password(password):
    rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", 12)
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))


def verify_password(entered_password, stored_hashed_password):
    try:
        return bcrypt.checkpw(entered_password.encode('utf-8'), stored_hashed_password)
    except ValueError:
        # Malformed stored hash
        return False


def issue_token(administrator, issued_at=None):
    """Sign an access token carrying the administrator id.

    The token expires ``JWT_ACCESS_TOKEN_EXPIRES`` after ``issued_at``
    (default: now).
    """
    config = current_app.config
    issued_at = issued_at or datetime.now(timezone.utc)
    claims = {
        "sub": str(administrator.id),
        "id": administrator.id,
        "iat": issued_at,
        "exp": issued_at + config["JWT_ACCESS_TOKEN_EXPIRES"],
    }
    return jwt.encode(claims, config["JWT_SECRET_KEY"], algorithm=config["JWT_ALGORITHM"])


def verify_token(token):
    """Return the decoded payload of ``token`` or None when it is malformed,
    badly signed or expired."""
    if not token:
        return None
    config = current_app.config
    try:
        return jwt.decode(token, config["JWT_SECRET_KEY"], algorithms=[config["JWT_ALGORITHM"]])
    except JWTError as exc:
        logger.debug("Token rejected: %s", exc)
        return None


def bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme == "Bearer" and token.strip():
        return token.strip()
    return None


def verify_session():
    return verify_token(request.cookies.get(TOKEN_COOKIE))


def token_required(fn):
    """Gate for mutating API routes.

    The token comes from the ``Authorization: Bearer`` header, or from the
    session cookie for same-site browser calls. Missing token answers 401,
    a token that fails verification answers 403.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = bearer_token() or request.cookies.get(TOKEN_COOKIE)
        if not token:
            return jsonify({"error": "Authorization token is required"}), 401
        payload = verify_token(token)
        if payload is None:
            return jsonify({"error": "Invalid or expired token"}), 403
        g.token_payload = payload
        return fn(*args, **kwargs)

    return wrapper


def display_name(email):
    return email.split("@")[0]


def set_session_cookies(response, token, email):
    config = current_app.config
    lifetime = config["JWT_ACCESS_TOKEN_EXPIRES"]
    secure = config["JWT_COOKIE_SECURE"]
    response.set_cookie(
        TOKEN_COOKIE, token, max_age=lifetime, secure=secure, httponly=True, samesite="Strict"
    )
    response.set_cookie(
        USERNAME_COOKIE, display_name(email), max_age=lifetime, secure=secure, samesite="Strict"
    )
    return response


def clear_session_cookies(response):
    response.delete_cookie(TOKEN_COOKIE)
    response.delete_cookie(USERNAME_COOKIE)
    return response
