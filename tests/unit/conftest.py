import os
import sys
from datetime import datetime
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SECRET_KEY", "test")
os.environ.setdefault("JWT_SECRET", "test-jwt")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from app import create_app
from credentials import hash_password, issue_token
from models import Cinema, Screening, db
from repository import CatalogRepository

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin123!"


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'unit.db'}",
            "JWT_SECRET_KEY": "test-jwt",
            "BCRYPT_LOG_ROUNDS": 4,
        }
    )
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def repo(app):
    return CatalogRepository(db.session)


@pytest.fixture()
def admin(repo):
    return repo.create_administrator(ADMIN_EMAIL, hash_password(ADMIN_PASSWORD))


@pytest.fixture()
def auth_headers(admin):
    return {"Authorization": f"Bearer {issue_token(admin)}"}


@pytest.fixture()
def make_movie(repo):
    def _make_movie(title="Interstellar", **overrides):
        fields = {
            "title": title,
            "duration": 169,
            "language": "en",
            "age_limit": 0,
            "director": "Christopher Nolan",
            "synopsis": "A team travels through a wormhole.",
            "photo": None,
            "video": None,
        }
        fields.update(overrides)
        return repo.create_movie(fields)

    return _make_movie


@pytest.fixture()
def make_cinema():
    def _make_cinema(name="Le Grand Rex", city="Paris", address="1 Boulevard Poissonnière"):
        cinema = Cinema(name=name, city=city, address=address)
        db.session.add(cinema)
        db.session.commit()
        return cinema

    return _make_cinema


@pytest.fixture()
def make_screening():
    def _make_screening(movie, cinema, start_time=None, subtitle="French"):
        screening = Screening(
            movie_id=movie.id,
            cinema_id=cinema.id,
            start_time=start_time or datetime(2030, 1, 1, 20, 0),
            subtitle=subtitle,
        )
        db.session.add(screening)
        db.session.commit()
        return screening

    return _make_screening
