import logging

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from credentials import token_required
from repository import NotFound, get_repository
from routes.common import api_error, page_argument, page_payload, validation_error
from schemas import screening_schema, screening_update_schema

logger = logging.getLogger(__name__)

screening_bp = Blueprint("screening_api", __name__)


@screening_bp.route("/api/screenings", methods=["GET"])
def list_screenings():
    page = get_repository().list_screenings(page_argument())
    return jsonify(page_payload(page, screening_schema))


@screening_bp.route("/api/screenings/<int:screening_id>", methods=["GET"])
def get_screening(screening_id: int):
    screening = get_repository().get_screening(screening_id)
    if not screening:
        return api_error("Screening not found", 404)
    return jsonify(screening_schema.dump(screening))


@screening_bp.route("/api/screenings", methods=["POST"])
@token_required
def create_screening():
    try:
        fields = screening_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error(exc)

    repo = get_repository()
    try:
        screening = repo.create_screening(fields)
    except NotFound as exc:
        return api_error(str(exc), 404)
    except Exception:
        repo.rollback()
        logger.exception("Failed to create screening")
        return api_error("Failed to create screening", 500)

    return jsonify(screening_schema.dump(screening)), 201


@screening_bp.route("/api/screenings/<int:screening_id>", methods=["PUT"])
@token_required
def update_screening(screening_id: int):
    try:
        changes = screening_update_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error(exc)

    repo = get_repository()
    screening = repo.get_screening(screening_id)
    if not screening:
        return api_error("Screening not found", 404)

    try:
        screening = repo.update_screening(screening, changes)
    except NotFound as exc:
        return api_error(str(exc), 404)
    except Exception:
        repo.rollback()
        logger.exception("Failed to update screening %s", screening_id)
        return api_error("Failed to update screening", 500)

    return jsonify(
        {"message": "Screening updated successfully", "screening": screening_schema.dump(screening)}
    )


@screening_bp.route("/api/screenings/<int:screening_id>", methods=["DELETE"])
@token_required
def delete_screening(screening_id: int):
    repo = get_repository()
    screening = repo.get_screening(screening_id)
    if not screening:
        return api_error("Screening not found", 404)

    try:
        repo.delete_screening(screening)
    except Exception:
        repo.rollback()
        logger.exception("Failed to delete screening %s", screening_id)
        return api_error("Failed to delete screening", 500)

    return jsonify({"message": "Screening deleted successfully", "screening_id": screening_id})
