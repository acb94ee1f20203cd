import logging

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from credentials import token_required
from repository import get_repository
from routes.common import api_error, page_argument, page_payload, validation_error
from schemas import actor_schema

logger = logging.getLogger(__name__)

actor_bp = Blueprint("actor_api", __name__)


@actor_bp.route("/api/actors", methods=["GET"])
def list_actors():
    page = get_repository().list_actors(page_argument())
    return jsonify(page_payload(page, actor_schema))


@actor_bp.route("/api/actors/<int:actor_id>", methods=["GET"])
def get_actor(actor_id: int):
    actor = get_repository().get_actor(actor_id)
    if not actor:
        return api_error("Actor not found", 404)
    return jsonify(actor_schema.dump(actor))


@actor_bp.route("/api/actors", methods=["POST"])
@token_required
def create_actor():
    try:
        fields = actor_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error(exc)

    repo = get_repository()
    try:
        actor = repo.create_actor(fields)
    except Exception:
        repo.rollback()
        logger.exception("Failed to create actor")
        return api_error("Failed to create actor", 500)

    return jsonify(actor_schema.dump(actor)), 201


@actor_bp.route("/api/actors/<int:actor_id>", methods=["PUT"])
@token_required
def update_actor(actor_id: int):
    try:
        changes = actor_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error(exc)

    repo = get_repository()
    actor = repo.get_actor(actor_id)
    if not actor:
        return api_error("Actor not found", 404)

    try:
        actor = repo.update_actor(actor, changes)
    except Exception:
        repo.rollback()
        logger.exception("Failed to update actor %s", actor_id)
        return api_error("Failed to update actor", 500)

    return jsonify(actor_schema.dump(actor))


@actor_bp.route("/api/actors/<int:actor_id>", methods=["DELETE"])
@token_required
def delete_actor(actor_id: int):
    repo = get_repository()
    actor = repo.get_actor(actor_id)
    if not actor:
        return api_error("Actor not found", 404)

    try:
        repo.delete_actor(actor)
    except Exception:
        repo.rollback()
        logger.exception("Failed to delete actor %s", actor_id)
        return api_error("Failed to delete actor", 500)

    return jsonify({"message": "Actor deleted successfully", "actor_id": actor_id})
