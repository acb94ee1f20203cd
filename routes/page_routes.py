from functools import wraps

from flask import Blueprint, abort, redirect, render_template, url_for

from credentials import clear_session_cookies, verify_session
from repository import get_repository
from routes.common import page_argument

page_bp = Blueprint("pages", __name__)


def admin_required_view(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if verify_session() is None:
            return redirect(url_for("pages.unauthorized"))
        return fn(*args, **kwargs)

    return wrapper


@page_bp.route("/")
def home():
    page = get_repository().list_movies(page_argument())
    return render_template("index.html", page=page)


@page_bp.route("/movies/<slug>")
def movie_detail(slug):
    movie = get_repository().find_movie(slug)
    if not movie:
        abort(404)
    return render_template("movie.html", movie=movie)


@page_bp.route("/authentication")
def authentication():
    return render_template("authentication.html")


@page_bp.route("/admin-dashboard")
@admin_required_view
def admin_dashboard():
    page = get_repository().list_movies(page_argument())
    return render_template("admin_dashboard.html", page=page)


@page_bp.route("/unauthorized")
def unauthorized():
    return render_template("unauthorized.html"), 401


@page_bp.route("/logout")
def logout():
    return clear_session_cookies(redirect(url_for("pages.home")))
