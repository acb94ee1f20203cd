import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    BCRYPT_LOG_ROUNDS = _env_int("BCRYPT_LOG_ROUNDS", 12)

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///cinema.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tokens travel in the Authorization header for the API and in the
    # "token" cookie for pages.
    JWT_SECRET_KEY = os.getenv("JWT_SECRET")
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=72)
    JWT_COOKIE_SECURE = _env_flag("JWT_COOKIE_SECURE", True)

    TMDB_API_KEY = os.getenv("TMDB_API_KEY")
    TMDB_IMG_URL = os.getenv("TMDB_IMG_URL", "https://image.tmdb.org/t/p")
    TMDB_IMG_THUMB_SIZE = os.getenv("TMDB_IMG_THUMB_SIZE", "w500")
    TMDB_MOVIE_DETAIL_URL = os.getenv("TMDB_MOVIE_DETAIL_URL", "https://api.themoviedb.org/3/movie")
    TMDB_TRENDING_MOVIE_URL = os.getenv(
        "TMDB_TRENDING_MOVIE_URL", "https://api.themoviedb.org/3/trending/all/week"
    )

    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
    TOTAL_MOVIES = _env_int("TOTAL_MOVIES", 200)
    TOTAL_CINEMA = _env_int("TOTAL_CINEMA", 30)
