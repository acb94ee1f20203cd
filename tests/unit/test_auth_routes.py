import json

from models import Administrator

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


# valid signup
def test_signup_creates_administrator(client):
    response = post_json(client, "/api/signup", {"email": "new@example.com", "password": "Valid123!"})
    assert response.status_code == 201
    assert response.get_json()["message"] == "User created successfully"
    admin = Administrator.query.filter_by(email="new@example.com").one()
    # only the bcrypt hash is stored
    assert admin.password_hash != b"Valid123!"
    assert admin.password_hash.startswith(b"$2")


def test_signup_strips_email(client):
    response = post_json(client, "/api/signup", {"email": "  spaced@example.com ", "password": "Valid123!"})
    assert response.status_code == 201
    assert Administrator.query.filter_by(email="spaced@example.com").count() == 1


# duplicate signup
def test_signup_duplicate_email(client, admin):
    response = post_json(client, "/api/signup", {"email": ADMIN_EMAIL, "password": "Other123!"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "User already exists"


def test_signup_invalid_email(client):
    response = post_json(client, "/api/signup", {"email": "not-an-email", "password": "Valid123!"})
    assert response.status_code == 400
    body = response.get_json()
    email_errors = [error["msg"] for error in body["errors"] if error["field"] == "email"]
    assert "Email must be a valid address" in email_errors


def test_signup_weak_passwords(client):
    cases = {
        "Sh0rt!": "Password must be at least 8 characters",
        "ALLUPPER123!": "Password must have a lowercase letter",
        "alllower123!": "Password must have an uppercase letter",
        "NoDigits!!": "Password must have a number",
        "NoSymbol123": "Password must have one of @$!%*?&+=",
        "Bad Space1!": "Password contains unsupported characters",
    }
    for password, message in cases.items():
        response = post_json(client, "/api/signup", {"email": "weak@example.com", "password": password})
        assert response.status_code == 400, password
        password_errors = [error["msg"] for error in response.get_json()["errors"] if error["field"] == "password"]
        assert password_errors == [message]
    assert Administrator.query.count() == 0


def test_signup_password_over_bcrypt_limit(client):
    password = "Aa1!" + "x" * 69
    response = post_json(client, "/api/signup", {"email": "long@example.com", "password": password})
    assert response.status_code == 400


def test_signup_missing_body(client):
    response = client.post("/api/signup")
    assert response.status_code == 400


# login sets the session cookies next to the token
def test_login_success(client, admin):
    response = post_json(client, "/api/login", {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})

    assert response.status_code == 200
    assert response.get_json()["token"]

    cookies = response.headers.getlist("Set-Cookie")
    token_cookie = next(cookie for cookie in cookies if cookie.startswith("token="))
    username_cookie = next(cookie for cookie in cookies if cookie.startswith("username="))
    assert "HttpOnly" in token_cookie
    assert "SameSite=Strict" in token_cookie
    assert "Secure" in token_cookie
    assert username_cookie.startswith("username=admin;")
    assert "HttpOnly" not in username_cookie


def test_login_token_opens_protected_routes(client, admin):
    token = post_json(client, "/api/login", {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}).get_json()["token"]
    response = client.post(
        "/api/actors",
        data=json.dumps({"name": "Zendaya"}),
        content_type="application/json",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 201


# wrong password and unknown email are indistinguishable
def test_login_failures_share_one_message(client, admin):
    wrong_password = post_json(client, "/api/login", {"email": ADMIN_EMAIL, "password": "Wrong123!"})
    unknown_email = post_json(client, "/api/login", {"email": "ghost@example.com", "password": ADMIN_PASSWORD})
    malformed = post_json(client, "/api/login", {"email": "ghost", "password": "x"})

    for response in (wrong_password, unknown_email, malformed):
        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid email or password"}
        assert not response.headers.getlist("Set-Cookie")


def test_logout_clears_cookies(client):
    response = client.post("/api/logout")
    assert response.status_code == 200
    assert response.get_json()["message"] == "Logged out"
    cookies = response.headers.getlist("Set-Cookie")
    assert any(cookie.startswith("token=;") for cookie in cookies)
    assert any(cookie.startswith("username=;") for cookie in cookies)
    assert all("Expires=Thu, 01 Jan 1970" in cookie for cookie in cookies)
