import logging
import random

import click
from faker import Faker
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import text

from credentials import hash_password
from models import Actor, Cinema, Movie, Screening, db
from repository import CatalogRepository, slugify_title
from tmdb import TMDBClient, TMDBError

logger = logging.getLogger(__name__)

SCREENINGS_PER_MOVIE = 8

france_cities = [
    "Paris", "Marseille", "Lyon", "Toulouse", "Nice", "Nantes", "Montpellier",
    "Strasbourg", "Bordeaux", "Lille", "Rennes", "Reims", "Le Havre",
    "Saint-Étienne", "Toulon", "Grenoble", "Dijon", "Angers", "Nîmes",
    "Villeurbanne", "Clermont-Ferrand", "Le Mans", "Aix-en-Provence", "Brest",
    "Tours", "Amiens", "Limoges", "Annecy", "Perpignan", "Boulogne-Billancourt",
    "Metz", "Besançon", "Orléans", "Saint-Denis", "Argenteuil", "Rouen",
    "Montreuil", "Mulhouse", "Caen", "Nancy", "Saint-Paul", "Roubaix",
    "Tourcoing", "Nanterre", "Vitry-sur-Seine", "Créteil", "Avignon", "Poitiers",
    "Dunkerque", "Asnières-sur-Seine", "Courbevoie", "Versailles", "Colombes",
    "Fort-de-France", "Aulnay-sous-Bois", "Rueil-Malmaison", "Pau",
    "Aubervilliers", "Champigny-sur-Marne", "Antibes", "Saint-Maur-des-Fossés",
    "Cannes", "Béziers", "Calais", "Mérignac", "Drancy", "Ajaccio",
    "Issy-les-Moulineaux", "Levallois-Perret", "La Rochelle", "Quimper",
    "Noisy-le-Grand", "Vénissieux", "Cergy", "Pessac", "Troyes",
    "Ivry-sur-Seine", "Clichy", "Chambéry", "Lorient", "Niort", "Sarcelles",
    "Les Abymes", "Montauban", "Villejuif", "Saint-Quentin",
]


def populate_admin(repo, email, password):
    if repo.find_administrator(email):
        logger.info("Admin account already exists")
        return None
    admin = repo.create_administrator(email, hash_password(password))
    logger.info("Admin account created")
    return admin


def _director(credits):
    for member in credits.get("crew", []):
        if member.get("job") == "Director":
            return member.get("name")
    return "Unknown"


def populate_movies(session, movies_details):
    """Insert TMDB movies and their cast. Actors are shared across movies by TMDB id."""
    slugs = set()
    actors = {}
    movies = []
    seen_ids = set()

    for data in movies_details:
        # trending pages can repeat a movie
        if data["id"] in seen_ids:
            continue
        seen_ids.add(data["id"])

        base = slugify_title(data["title"])
        slug = base
        suffix = 1
        while slug in slugs:
            slug = f"{base}-{suffix}"
            suffix += 1
        slugs.add(slug)

        videos = data.get("videos") or []
        movie = Movie(
            id=data["id"],
            title=data["title"],
            slug=slug,
            duration=data.get("runtime") or 0,
            language=data.get("original_language") or "",
            age_limit=0,
            director=_director(data.get("credits", {})),
            synopsis=data.get("overview") or "",
            photo=data.get("poster_path") or data.get("backdrop_path"),
            video=videos[0].get("key") if videos else None,
        )

        for cast in data.get("credits", {}).get("cast", []):
            actor = actors.get(cast["id"])
            if actor is None:
                actor = Actor(id=cast["id"], name=cast["name"], profile=cast.get("profile_path"))
                actors[cast["id"]] = actor
            if actor not in movie.actors:
                movie.actors.append(actor)

        session.add(movie)
        movies.append(movie)

    session.commit()
    return movies


def sync_id_sequences(session, tables=("movies", "actors")):
    """Move PostgreSQL id sequences past the explicit TMDB ids. SQLite picks
    max(id) + 1 on its own."""
    if session.get_bind().dialect.name != "postgresql":
        return
    for table in tables:
        session.execute(text(
            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
            f"COALESCE((SELECT MAX(id) FROM {table}), 1))"
        ))
    session.commit()


def populate_cinemas(session, max_per_city, fake, rng, cities=None):
    cinemas = []
    for city in cities or france_cities:
        for _ in range(rng.randint(1, max_per_city)):
            cinemas.append(Cinema(name=fake.company(), city=city, address=fake.street_address()))
    session.add_all(cinemas)
    session.commit()
    return cinemas


def populate_screenings(session, total, fake, rng):
    movies = session.query(Movie).all()
    cinemas = session.query(Cinema).all()
    if not movies or not cinemas:
        return []

    screenings = [
        Screening(
            movie_id=rng.choice(movies).id,
            cinema_id=rng.choice(cinemas).id,
            start_time=fake.future_datetime(end_date="+60d"),
            subtitle=fake.language_name(),
        )
        for _ in range(total)
    ]
    session.add_all(screenings)
    session.commit()
    return screenings


def run_seed(session, tmdb_client, total_movies, total_cinema, admin_email, admin_password,
             random_seed=None):
    """Wipe the catalog and repopulate it. Never run against live traffic."""
    rng = random.Random(random_seed)
    fake = Faker("fr_FR")
    if random_seed is not None:
        fake.seed_instance(random_seed)

    # Fetch first so a TMDB outage leaves the current catalog untouched
    click.echo("Fetching trending movies......")
    details = tmdb_client.trending_movies_with_details(total_movies)

    repo = CatalogRepository(session)
    repo.clear_catalog()

    populate_admin(repo, admin_email, admin_password)

    click.echo("Adding movies......")
    movies = populate_movies(session, details)
    sync_id_sequences(session)

    click.echo("Adding cinemas......")
    cinemas = populate_cinemas(session, total_cinema, fake, rng)

    click.echo("Adding screenings......")
    screenings = populate_screenings(session, len(movies) * SCREENINGS_PER_MOVIE, fake, rng)

    return {"movies": len(movies), "cinemas": len(cinemas), "screenings": len(screenings)}


@click.command("seed")
@click.option("--movies", "total_movies", type=click.IntRange(min=1), default=None,
              help="Number of trending movies to import (default: TOTAL_MOVIES).")
@click.option("--cinemas", "total_cinema", type=click.IntRange(min=1), default=None,
              help="Maximum cinemas per city (default: TOTAL_CINEMA).")
@click.option("--admin-email", default=None, help="Administrator email (default: ADMIN_EMAIL).")
@click.option("--admin-password", default=None, help="Administrator password (default: ADMIN_PASSWORD).")
@click.option("--random-seed", type=int, default=None, help="Seed for reproducible synthetic data.")
@click.confirmation_option(prompt="This deletes every row in the catalog. Continue?")
@with_appcontext
def seed_command(total_movies, total_cinema, admin_email, admin_password, random_seed):
    """Reset the database and fill it with TMDB movies and synthetic cinemas."""
    config = current_app.config
    admin_email = admin_email or config["ADMIN_EMAIL"]
    admin_password = admin_password or config["ADMIN_PASSWORD"]
    if not admin_email or not admin_password:
        raise click.UsageError("Admin email or password is not defined.")

    try:
        client = TMDBClient(
            config["TMDB_API_KEY"],
            config["TMDB_MOVIE_DETAIL_URL"],
            config["TMDB_TRENDING_MOVIE_URL"],
        )
        counts = run_seed(
            db.session,
            client,
            total_movies or config["TOTAL_MOVIES"],
            total_cinema or config["TOTAL_CINEMA"],
            admin_email,
            admin_password,
            random_seed=random_seed,
        )
    except TMDBError as exc:
        db.session.rollback()
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"Seeding complete! {counts['movies']} movies, {counts['cinemas']} cinemas, "
        f"{counts['screenings']} screenings."
    )
