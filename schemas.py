import re
from datetime import timezone
from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, pre_load, validate, validates

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_SYMBOLS = "@$!%*?&+="
PASSWORD_PATTERN = re.compile(r"^[A-Za-z\d@$!%*?&+=]+$")

REQUIRED_MESSAGE = "Missing required field."
EMPTY_MESSAGE = "Field may not be empty."

not_empty = validate.Length(min=1, error=EMPTY_MESSAGE)


def required_str(**kwargs):
    return fields.Str(
        required=True,
        validate=not_empty,
        error_messages={"required": REQUIRED_MESSAGE, "null": REQUIRED_MESSAGE},
        **kwargs,
    )


def required_int(**kwargs):
    return fields.Int(
        required=True,
        error_messages={"required": REQUIRED_MESSAGE, "null": REQUIRED_MESSAGE},
        **kwargs,
    )


def flatten_errors(exc: ValidationError):
    """Turn marshmallow's nested message dict into a flat list of field errors."""
    errors = []
    for field, messages in (exc.messages or {}).items():
        if isinstance(messages, dict):
            messages = [msg for nested in messages.values() for msg in nested]
        for message in messages:
            errors.append({"field": field, "msg": message})
    return errors


def has_missing_fields(errors) -> bool:
    return any(error["msg"] in (REQUIRED_MESSAGE, EMPTY_MESSAGE) for error in errors)


class CredentialsSchema(Schema):
    email = fields.Str(required=True)
    password = fields.Str(required=True)

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def strip_email(self, data: Dict[str, Any], **kwargs):
        email = data.get("email") if isinstance(data, dict) else None
        if isinstance(email, str):
            data["email"] = email.strip()
        return data

    @validates("email")
    def validate_email(self, value: str, **kwargs):
        if not EMAIL_PATTERN.fullmatch(value):
            raise ValidationError("Email must be a valid address")

    @validates("password")
    def validate_password(self, value: str, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters")
        # bcrypt only looks at the first 72 bytes
        if len(value.encode("utf-8")) > 72:
            raise ValidationError("Password must be at most 72 bytes")
        if not re.search(r"[a-z]", value):
            raise ValidationError("Password must have a lowercase letter")
        if not re.search(r"[A-Z]", value):
            raise ValidationError("Password must have an uppercase letter")
        if not re.search(r"\d", value):
            raise ValidationError("Password must have a number")
        if not any(symbol in value for symbol in PASSWORD_SYMBOLS):
            raise ValidationError(f"Password must have one of {PASSWORD_SYMBOLS}")
        if not PASSWORD_PATTERN.fullmatch(value):
            raise ValidationError("Password contains unsupported characters")


class CinemaSchema(Schema):
    id = fields.Int(dump_only=True)
    name = fields.Str()
    city = fields.Str()
    address = fields.Str()


class ActorSchema(Schema):
    id = fields.Int(dump_only=True)
    name = required_str()
    profile = fields.Str(allow_none=True, load_default=None)

    class Meta:
        unknown = EXCLUDE


class ScreeningSchema(Schema):
    id = fields.Int(dump_only=True)
    movie_id = required_int(data_key="movieId")
    cinema_id = required_int(data_key="cinemaId")
    start_time = fields.DateTime(
        required=True,
        data_key="startTime",
        error_messages={"required": REQUIRED_MESSAGE, "null": REQUIRED_MESSAGE},
    )
    subtitle = required_str()
    movie = fields.Nested(lambda: MovieSchema(only=("id", "slug", "title")), dump_only=True)
    cinema = fields.Nested(CinemaSchema, dump_only=True)

    class Meta:
        unknown = EXCLUDE

    @post_load
    def naive_utc_start(self, data: Dict[str, Any], **kwargs):
        start_time = data.get("start_time")
        if start_time is not None and start_time.tzinfo is not None:
            data["start_time"] = start_time.astimezone(timezone.utc).replace(tzinfo=None)
        return data


class MovieSchema(Schema):
    id = fields.Int(dump_only=True)
    title = required_str()
    slug = fields.Str(dump_only=True)
    duration = required_int()
    language = required_str()
    age_limit = fields.Int(data_key="ageLimit", load_default=0)
    director = required_str()
    synopsis = required_str()
    photo = fields.Str(allow_none=True, load_default=None)
    video = fields.Str(allow_none=True, load_default=None)
    screenings = fields.List(
        fields.Nested(ScreeningSchema(only=("id", "start_time", "subtitle", "cinema"))),
        dump_only=True,
    )
    actors = fields.List(fields.Nested(ActorSchema), dump_only=True)

    class Meta:
        unknown = EXCLUDE


credentials_schema = CredentialsSchema()
movie_schema = MovieSchema()
movie_update_schema = MovieSchema(partial=True)
actor_schema = ActorSchema()
screening_schema = ScreeningSchema()
screening_update_schema = ScreeningSchema(partial=True)
