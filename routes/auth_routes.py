import logging

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from credentials import (
    clear_session_cookies,
    hash_password,
    issue_token,
    set_session_cookies,
    verify_password,
)
from repository import get_repository
from routes.common import api_error
from schemas import credentials_schema, flatten_errors

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

INVALID_CREDENTIALS = "Invalid email or password"


@auth_bp.route("/api/signup", methods=["POST"])
def signup():
    try:
        payload = credentials_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return api_error(INVALID_CREDENTIALS, 400, flatten_errors(exc))

    repo = get_repository()
    if repo.find_administrator(payload["email"]):
        return api_error("User already exists", 400)

    try:
        repo.create_administrator(payload["email"], hash_password(payload["password"]))
    except Exception:
        repo.rollback()
        logger.exception("Failed to create administrator")
        return api_error("Registration failed", 500)

    return jsonify({'message': 'User created successfully'}), 201


@auth_bp.route("/api/login", methods=["POST"])
def login():
    # Every failure answers with the same message so callers cannot tell
    # which check rejected them.
    try:
        payload = credentials_schema.load(request.get_json(silent=True) or {})
    except ValidationError:
        return api_error(INVALID_CREDENTIALS, 400)

    admin = get_repository().find_administrator(payload["email"])
    if not admin or not verify_password(payload["password"], admin.password_hash):
        logger.warning("Rejected login attempt")
        return api_error(INVALID_CREDENTIALS, 400)

    token = issue_token(admin)
    response = jsonify({'token': token})
    return set_session_cookies(response, token, admin.email)


@auth_bp.route("/api/logout", methods=["POST"])
def logout():
    response = jsonify({'message': 'Logged out'})
    return clear_session_cookies(response)
