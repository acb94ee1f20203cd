from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


movie_actors = db.Table(
    "movie_actors",
    db.Column("movie_id", db.Integer, db.ForeignKey("movies.id"), primary_key=True),
    db.Column("actor_id", db.Integer, db.ForeignKey("actors.id"), primary_key=True),
)


class Administrator(db.Model):
    __tablename__ = 'administrators'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.LargeBinary, nullable=False)


class Movie(db.Model):
    __tablename__ = 'movies'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    duration = db.Column(db.Integer, nullable=False)
    language = db.Column(db.String(50), nullable=False)
    age_limit = db.Column(db.Integer, nullable=False, default=0)
    director = db.Column(db.String(255), nullable=False)
    synopsis = db.Column(db.Text, nullable=False)
    photo = db.Column(db.String(300))
    video = db.Column(db.String(300))

    screenings = db.relationship(
        "Screening", back_populates="movie", order_by="Screening.start_time"
    )
    actors = db.relationship(
        "Actor", secondary=movie_actors, back_populates="movies", order_by="Actor.id"
    )


class Actor(db.Model):
    __tablename__ = 'actors'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    profile = db.Column(db.String(300))

    movies = db.relationship("Movie", secondary=movie_actors, back_populates="actors")


class Cinema(db.Model):
    __tablename__ = 'cinemas'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255), nullable=False)

    screenings = db.relationship("Screening", back_populates="cinema")


class Screening(db.Model):
    __tablename__ = 'screenings'
    id = db.Column(db.Integer, primary_key=True)
    movie_id = db.Column(db.Integer, db.ForeignKey("movies.id"), nullable=False)
    cinema_id = db.Column(db.Integer, db.ForeignKey("cinemas.id"), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    subtitle = db.Column(db.String(100), nullable=False)

    movie = db.relationship("Movie", back_populates="screenings")
    cinema = db.relationship("Cinema", back_populates="screenings")
