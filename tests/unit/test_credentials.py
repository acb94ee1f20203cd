from datetime import datetime, timedelta, timezone

from jose import jwt

from credentials import display_name, hash_password, issue_token, verify_password, verify_token


def test_password_hash_round_trip(app):
    hashed = hash_password("Admin123!")
    assert verify_password("Admin123!", hashed)
    assert not verify_password("admin123!", hashed)


def test_verify_password_rejects_malformed_hash(app):
    assert verify_password("Admin123!", b"not-a-bcrypt-hash") is False


def test_token_carries_administrator_id(admin):
    payload = verify_token(issue_token(admin))
    assert payload["id"] == admin.id
    assert payload["sub"] == str(admin.id)


def test_token_lives_seventy_two_hours(admin):
    payload = verify_token(issue_token(admin))
    assert payload["exp"] - payload["iat"] == 72 * 3600


def test_expired_token_is_rejected(admin):
    issued = datetime.now(timezone.utc) - timedelta(hours=73)
    assert verify_token(issue_token(admin, issued_at=issued)) is None


def test_token_signed_with_other_secret_is_rejected(admin):
    forged = jwt.encode({"sub": "1", "id": admin.id}, "someone-else", algorithm="HS256")
    assert verify_token(forged) is None


def test_garbage_tokens_are_rejected(app):
    assert verify_token("") is None
    assert verify_token(None) is None
    assert verify_token("a.b.c") is None


def test_display_name_is_email_local_part():
    assert display_name("jane.doe@example.com") == "jane.doe"
