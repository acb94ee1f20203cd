import logging

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from credentials import token_required
from repository import get_repository, parse_identifier
from routes.common import api_error, page_argument, page_payload, validation_error
from schemas import movie_schema, movie_update_schema

logger = logging.getLogger(__name__)

movie_bp = Blueprint("movie_api", __name__)


def _movie_id(identifier):
    movie_id, _ = parse_identifier(identifier)
    return movie_id


@movie_bp.route("/api/movie", methods=["GET"])
def list_movies():
    page = get_repository().list_movies(page_argument())
    return jsonify(page_payload(page, movie_schema))


@movie_bp.route("/api/movie/search", methods=["GET"])
def search_movies():
    term = request.args.get("search", "")
    if not term:
        return api_error("Search parameter is required", 400)

    page = get_repository().search_movies(term, page_argument())
    return jsonify(page_payload(page, movie_schema))


@movie_bp.route("/api/movie/<identifier>", methods=["GET"])
def get_movie(identifier):
    if not identifier.strip():
        return api_error("Movie identifier is required", 400)

    movie = get_repository().find_movie(identifier)
    if not movie:
        return api_error("Movie not found", 404)
    return jsonify(movie_schema.dump(movie))


@movie_bp.route("/api/movie", methods=["POST"])
@token_required
def create_movie():
    try:
        fields = movie_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error(exc, "Duration and age limit must be integers")

    repo = get_repository()
    if repo.movie_title_exists(fields["title"]):
        return api_error("Movie already exists", 409)

    try:
        movie = repo.create_movie(fields)
    except Exception:
        repo.rollback()
        logger.exception("Failed to create movie %r", fields["title"])
        return api_error("Failed to create movie", 500)

    logger.info("Created movie %s (%s)", movie.id, movie.slug)
    return jsonify(movie_schema.dump(movie)), 201


@movie_bp.route("/api/movie/<identifier>", methods=["PUT"])
@token_required
def update_movie(identifier):
    movie_id = _movie_id(identifier)
    if movie_id is None:
        return api_error("Invalid movie ID", 400)

    try:
        changes = movie_update_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error(exc)

    repo = get_repository()
    movie = repo.get_movie(movie_id)
    if not movie:
        return api_error("Movie not found", 404)

    try:
        movie = repo.update_movie(movie, changes)
    except Exception:
        repo.rollback()
        logger.exception("Failed to update movie %s", movie_id)
        return api_error("Failed to update movie", 500)

    return jsonify({"message": "Movie updated successfully", "movie": movie_schema.dump(movie)})


@movie_bp.route("/api/movie/<identifier>", methods=["DELETE"])
@token_required
def delete_movie(identifier):
    movie_id = _movie_id(identifier)
    if movie_id is None:
        return api_error("Invalid movie ID", 400)

    repo = get_repository()
    movie = repo.get_movie(movie_id)
    if not movie:
        return api_error("Movie not found", 404)

    try:
        deleted_screenings = repo.delete_movie(movie)
    except Exception:
        repo.rollback()
        logger.exception("Failed to delete movie %s", movie_id)
        return api_error("Failed to delete movie", 500)

    return jsonify(
        {
            "message": "Movie deleted successfully",
            "movie_id": movie_id,
            "deleted_screenings": deleted_screenings,
        }
    )
