import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest, HTTPException

from config import Config
from models import db
from routes.actor_routes import actor_bp
from routes.auth_routes import auth_bp
from routes.common import BadPage, api_error
from routes.movie_routes import movie_bp
from routes.page_routes import page_bp
from routes.screening_routes import screening_bp
from seed import seed_command

logger = logging.getLogger(__name__)


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    if not app.config.get("JWT_SECRET_KEY"):
        raise RuntimeError("JWT_SECRET environment variable is not set.")

    db.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(movie_bp)
    app.register_blueprint(actor_bp)
    app.register_blueprint(screening_bp)
    app.register_blueprint(page_bp)
    app.cli.add_command(seed_command)

    register_template_helpers(app)
    register_error_handlers(app)

    @app.route("/api")
    def api_root():
        return jsonify({"message": "Welcome to the API"})

    with app.app_context():
        db.create_all()

    return app


def register_template_helpers(app):
    @app.context_processor
    def inject_user_context():
        return {"current_username": request.cookies.get("username")}

    @app.template_filter("poster_url")
    def poster_url(path):
        if not path or path.startswith("http"):
            return path
        return f"{app.config['TMDB_IMG_URL']}/{app.config['TMDB_IMG_THUMB_SIZE']}{path}"


def register_error_handlers(app):
    @app.errorhandler(BadPage)
    def bad_page(exc):
        if not request.path.startswith("/api"):
            return BadRequest(str(exc))
        return api_error(str(exc), 400)

    @app.errorhandler(HTTPException)
    def http_error(exc):
        # Pages keep Flask's HTML errors; the API always answers JSON
        if not request.path.startswith("/api"):
            return exc
        return api_error(exc.description, exc.code)

    @app.errorhandler(Exception)
    def unhandled_error(exc):
        logger.exception("Unhandled exception on %s %s", request.method, request.path)
        db.session.rollback()
        return api_error("Internal server error", 500)


if __name__ == '__main__':
    create_app().run(debug=True)
