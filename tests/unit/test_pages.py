from credentials import TOKEN_COOKIE, issue_token


def test_api_root_welcomes(client):
    response = client.get("/api")
    assert response.status_code == 200
    assert response.get_json() == {"message": "Welcome to the API"}


def test_unknown_api_route_answers_json(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert "error" in response.get_json()


def test_home_page_lists_movies(client, make_movie):
    make_movie("Paddington", photo="/paddington.jpg")
    response = client.get("/")
    assert response.status_code == 200
    assert b"Now Showing" in response.data
    assert b"Paddington" in response.data
    assert b"https://image.tmdb.org/t/p/w500/paddington.jpg" in response.data


def test_movie_page_by_slug(client, make_movie):
    make_movie("Paddington")
    assert client.get("/movies/paddington").status_code == 200
    assert client.get("/movies/unknown").status_code == 404


# the dashboard bounces visitors without a valid session cookie
def test_admin_dashboard_redirects_without_session(client):
    response = client.get("/admin-dashboard")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/unauthorized")


def test_admin_dashboard_rejects_forged_cookie(client):
    client.set_cookie(TOKEN_COOKIE, "forged")
    response = client.get("/admin-dashboard")
    assert response.status_code == 302


def test_admin_dashboard_renders_with_session(client, admin, make_movie):
    make_movie("Paddington")
    client.set_cookie(TOKEN_COOKIE, issue_token(admin))
    response = client.get("/admin-dashboard")
    assert response.status_code == 200
    assert b'id="adminPage"' in response.data
    assert b"paddington" in response.data


def test_unauthorized_page(client):
    assert client.get("/unauthorized").status_code == 401


def test_logout_page_redirects_home(client):
    response = client.get("/logout")
    assert response.status_code == 302
    assert any(cookie.startswith("token=;") for cookie in response.headers.getlist("Set-Cookie"))


# a bad page number on an HTML page answers an HTML 400
def test_home_page_rejects_non_positive_page(client):
    response = client.get("/?page=0")
    assert response.status_code == 400
    assert response.mimetype == "text/html"
    assert b"Page must be a positive number" in response.data


def test_admin_dashboard_rejects_non_positive_page(client, admin):
    client.set_cookie(TOKEN_COOKIE, issue_token(admin))
    response = client.get("/admin-dashboard?page=-1")
    assert response.status_code == 400
    assert response.mimetype == "text/html"
