"""Catalog data access: paginated listings, search, slug management and the
create/update/delete operations behind the JSON API.

Handlers never touch ``db.session`` directly; they build a
:class:`CatalogRepository` with :func:`get_repository` (or tests build one
around their own session).
"""
import math
from dataclasses import dataclass
from typing import List, Optional

from slugify import slugify
from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from models import Actor, Administrator, Cinema, Movie, Screening, db, movie_actors

PAGE_SIZE = 30
# largest value an INTEGER primary key can hold
MAX_ID = 2 ** 63 - 1


class NotFound(Exception):
    """Raised when a referenced row does not exist."""

    def __init__(self, entity):
        super().__init__(f"{entity} not found")
        self.entity = entity


@dataclass
class Page:
    hits: List
    page: int
    total: int
    size: int = PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size)


def slugify_title(title: str) -> str:
    """Lower-cased, hyphen-separated and free of characters that would break
    a URL path segment (/, ?, #, %)."""
    return slugify(title) or "movie"


def parse_identifier(identifier: str):
    """Numeric identifiers address ids, anything else addresses slugs."""
    try:
        movie_id = int(identifier)
    except (TypeError, ValueError):
        return None, identifier
    if not 0 < movie_id <= MAX_ID:
        return None, identifier
    return movie_id, None


class CatalogRepository:
    def __init__(self, session):
        self.session = session

    # ------------------------------
    # Pagination
    # ------------------------------
    def _paginate(self, query, page: int) -> Page:
        total = query.order_by(None).count()
        offset = (page - 1) * PAGE_SIZE
        if offset >= total:
            return Page(hits=[], page=page, total=total)
        hits = query.offset(offset).limit(PAGE_SIZE).all()
        return Page(hits=hits, page=page, total=total)

    def _movies(self):
        return self.session.query(Movie).options(
            selectinload(Movie.screenings).selectinload(Screening.cinema),
            selectinload(Movie.actors),
        )

    def _screenings(self):
        return self.session.query(Screening).options(
            selectinload(Screening.movie),
            selectinload(Screening.cinema),
        )

    # ------------------------------
    # Movies
    # ------------------------------
    def list_movies(self, page: int) -> Page:
        return self._paginate(self._movies().order_by(Movie.id), page)

    def search_movies(self, term: str, page: int) -> Page:
        # EXISTS sub-queries keep one row per movie, so hits and totals agree
        in_cinema = Screening.cinema.has(
            or_(
                Cinema.city.contains(term, autoescape=True),
                Cinema.name.contains(term, autoescape=True),
            )
        )
        query = self._movies().filter(
            or_(
                Movie.title.contains(term, autoescape=True),
                Movie.screenings.any(in_cinema),
                Movie.actors.any(Actor.name.contains(term, autoescape=True)),
            )
        )
        return self._paginate(query.order_by(Movie.id), page)

    def find_movie(self, identifier: str) -> Optional[Movie]:
        movie_id, slug = parse_identifier(identifier)
        query = self._movies()
        if movie_id is not None:
            movie = query.filter(Movie.id == movie_id).first()
            if movie is not None:
                return movie
            # titles such as "1917" give all-digit slugs
            slug = identifier
        return query.filter(Movie.slug == slug).first()

    def _get(self, model, row_id):
        if not 0 < row_id <= MAX_ID:
            return None
        return self.session.get(model, row_id)

    def get_movie(self, movie_id: int) -> Optional[Movie]:
        return self._get(Movie, movie_id)

    def movie_title_exists(self, title: str) -> bool:
        return self.session.query(Movie.id).filter(Movie.title == title).first() is not None

    def slug_taken(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = self.session.query(Movie.id).filter(Movie.slug == slug)
        if exclude_id is not None:
            query = query.filter(Movie.id != exclude_id)
        return query.first() is not None

    def unique_slug(self, title: str, exclude_id: Optional[int] = None) -> str:
        base = slugify_title(title)
        candidate = base
        suffix = 1
        while self.slug_taken(candidate, exclude_id):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def create_movie(self, fields: dict) -> Movie:
        movie = Movie(slug=self.unique_slug(fields["title"]), **fields)
        self.session.add(movie)
        self.session.commit()
        return movie

    def update_movie(self, movie: Movie, changes: dict) -> Movie:
        if "title" in changes:
            movie.slug = self.unique_slug(changes["title"], exclude_id=movie.id)
        for field, value in changes.items():
            setattr(movie, field, value)
        self.session.commit()
        return movie

    def delete_movie(self, movie: Movie) -> int:
        """Delete the movie's screenings, then the movie. Returns the number
        of screenings removed."""
        deleted_screenings = (
            self.session.query(Screening)
            .filter(Screening.movie_id == movie.id)
            .delete(synchronize_session="fetch")
        )
        self.session.expire(movie, ["screenings"])
        self.session.delete(movie)
        self.session.commit()
        return deleted_screenings

    # ------------------------------
    # Actors
    # ------------------------------
    def list_actors(self, page: int) -> Page:
        return self._paginate(self.session.query(Actor).order_by(Actor.id), page)

    def get_actor(self, actor_id: int) -> Optional[Actor]:
        return self._get(Actor, actor_id)

    def create_actor(self, fields: dict) -> Actor:
        actor = Actor(**fields)
        self.session.add(actor)
        self.session.commit()
        return actor

    def update_actor(self, actor: Actor, changes: dict) -> Actor:
        for field, value in changes.items():
            setattr(actor, field, value)
        self.session.commit()
        return actor

    def delete_actor(self, actor: Actor) -> None:
        self.session.delete(actor)
        self.session.commit()

    # ------------------------------
    # Screenings
    # ------------------------------
    def list_screenings(self, page: int) -> Page:
        return self._paginate(self._screenings().order_by(Screening.id), page)

    def get_screening(self, screening_id: int) -> Optional[Screening]:
        if not 0 < screening_id <= MAX_ID:
            return None
        return self._screenings().filter(Screening.id == screening_id).first()

    def _check_references(self, fields: dict) -> None:
        if "movie_id" in fields and self._get(Movie, fields["movie_id"]) is None:
            raise NotFound("Movie")
        if "cinema_id" in fields and self._get(Cinema, fields["cinema_id"]) is None:
            raise NotFound("Cinema")

    def create_screening(self, fields: dict) -> Screening:
        self._check_references(fields)
        screening = Screening(**fields)
        self.session.add(screening)
        self.session.commit()
        return screening

    def update_screening(self, screening: Screening, changes: dict) -> Screening:
        self._check_references(changes)
        for field, value in changes.items():
            setattr(screening, field, value)
        self.session.commit()
        return screening

    def delete_screening(self, screening: Screening) -> None:
        self.session.delete(screening)
        self.session.commit()

    # ------------------------------
    # Administrators
    # ------------------------------
    def find_administrator(self, email: str) -> Optional[Administrator]:
        return self.session.query(Administrator).filter_by(email=email).first()

    def create_administrator(self, email: str, password_hash: bytes) -> Administrator:
        admin = Administrator(email=email, password_hash=password_hash)
        self.session.add(admin)
        self.session.commit()
        return admin

    # ------------------------------
    # Provisioning
    # ------------------------------
    def clear_catalog(self) -> None:
        """Delete every row of every collection in a single transaction."""
        self.session.execute(movie_actors.delete())
        for model in (Administrator, Screening, Movie, Actor, Cinema):
            self.session.query(model).delete(synchronize_session=False)
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def get_repository() -> CatalogRepository:
    return CatalogRepository(db.session)
