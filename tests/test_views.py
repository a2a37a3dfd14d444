from __future__ import annotations

from tests.conftest import PASSWORD, SIGNATURE, registration


def test_public_views_render_without_session(client):
    assert client.get("/login").status_code == 200
    assert client.get("/register").status_code == 200


def test_protected_view_redirects_to_login(client):
    response = client.get("/forms/building", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login?next=%2Fforms%2Fbuilding"


def test_login_redirects_back(client):
    client.post("/api/auth/register", json=registration())
    response = client.post(
        "/login",
        data={"username": "inspector", "password": PASSWORD, "next": "/forms/building"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/forms/building"
    assert client.get("/forms/building").status_code == 200


def test_login_does_not_redirect_off_site(client):
    client.post("/api/auth/register", json=registration())
    response = client.post(
        "/login",
        data={"username": "inspector", "password": PASSWORD, "next": "https://evil.example/"},
        follow_redirects=False,
    )
    assert response.headers["location"] == "/"


def test_failed_login_shows_generic_message(client):
    response = client.post("/login", data={"username": "ghost", "password": "x"})
    assert response.status_code == 401
    assert "Invalid username or password" in response.text


def test_register_form_shows_field_errors(client):
    response = client.post(
        "/register",
        data={**registration(), "password": "abc12345", "confirmPassword": "abc12345"},
    )
    assert response.status_code == 400
    assert "missing uppercase/symbol" in response.text
    assert "abc12345" not in response.text


def test_register_form_redirects_to_login(client):
    response = client.post("/register", data=registration(), follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login?registered=1"


def test_form_page_renders_fields_in_order(logged_in):
    html = logged_in.get("/forms/building").text
    assert html.index('name="permit_number"') < html.index('name="owner"')
    assert 'type="checkbox" name="foundation_ok"' in html


def test_form_page_follows_saved_order(logged_in):
    elements = logged_in.get("/api/forms/building").json()["elements"]
    logged_in.put("/api/forms/building", json={"elements": list(reversed(elements))})
    html = logged_in.get("/forms/building").text
    assert html.index('name="owner"') < html.index('name="permit_number"')


def test_html_submission_is_stored(logged_in, app):
    response = logged_in.post(
        "/forms/building",
        data={
            "permit_number": "P-9",
            "foundation_ok": "true",
            "inspected_on": "2026-02-03",
            "inspector_signature": SIGNATURE,
        },
    )
    assert response.status_code == 200
    assert "Submission saved." in response.text
    stored = app.state.storage.submissions.list_submissions("building")
    assert len(stored) == 1
    values = stored[0]["values"]
    assert values["permit_number"] == "P-9"
    assert values["foundation_ok"] is True
    assert values["wiring_ok"] is False
    assert values["inspector_signature"] == SIGNATURE


def test_unknown_form_page_is_404(logged_in):
    response = logged_in.get("/forms/nope")
    assert response.status_code == 404
    assert "Form not found" in response.text


def test_builder_page_embeds_state(logged_in):
    html = logged_in.get("/forms/fire-safety/builder").text
    assert 'id="builder"' in html
    assert "&#34;formName&#34;: &#34;fire-safety&#34;" in html
    assert "&#34;originElements&#34;: null" in html
    assert "&#34;dragIndex&#34;: null" in html


def test_logout_view_ends_session(logged_in):
    response = logged_in.post("/logout", follow_redirects=False)
    assert response.headers["location"] == "/login"
    assert logged_in.get("/api/auth/check").json() == {"isAuthenticated": False}
    assert logged_in.get("/", follow_redirects=False).status_code == 303
