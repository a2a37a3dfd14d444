from __future__ import annotations

import pytest

from inspectform.auth import password_problems, validate_registration
from tests.conftest import PASSWORD, registration


def fields_of(errors):
    return {error["field"] for error in errors}


def test_valid_registration_has_no_errors():
    assert validate_registration(registration()) == []


def test_every_violation_is_reported():
    errors = validate_registration({})
    assert fields_of(errors) == {
        "idNumber",
        "username",
        "email",
        "password",
        "signature",
    }


def test_confirm_password_mismatch():
    errors = validate_registration(registration(confirmPassword="Abc123!#"))
    assert errors == [{"field": "confirmPassword", "reason": "does not match password"}]


@pytest.mark.parametrize("id_number", ["123456789", "12345678901", "12345abcde", ""])
def test_id_number_must_be_ten_digits(id_number):
    errors = validate_registration(registration(idNumber=id_number))
    assert fields_of(errors) == {"idNumber"}


@pytest.mark.parametrize("email", ["plain", "a@b", "a b@c.com", "@example.com"])
def test_email_shape(email):
    errors = validate_registration(registration(email=email))
    assert fields_of(errors) == {"email"}


def test_password_missing_uppercase_and_symbol():
    assert password_problems("abc12345") == ["missing uppercase/symbol"]


def test_password_with_all_classes_passes():
    assert password_problems("Abc123!@") == []


def test_short_password_reports_length_and_classes():
    assert password_problems("") == [
        "must be at least 8 characters",
        "missing lowercase/uppercase/digit/symbol",
    ]


def test_missing_signature():
    errors = validate_registration(registration(signature="   "))
    assert errors == [{"field": "signature", "reason": "is required"}]


def test_register_api_rejects_invalid_payload(client):
    response = client.post(
        "/api/auth/register",
        json=registration(password="abc12345", confirmPassword="abc12345"),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert {"field": "password", "reason": "missing uppercase/symbol"} in body["errors"]


def test_register_succeeds_once(client):
    assert client.post("/api/auth/register", json=registration()).json() == {"success": True}
    again = client.post("/api/auth/register", json=registration())
    assert again.status_code == 409
    assert again.json()["code"] == "DUPLICATE"


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"email": "other@example.gov", "idNumber": "0987654321"}, "username"),
        ({"username": "other", "idNumber": "0987654321"}, "email"),
        ({"username": "other", "email": "other@example.gov"}, "idNumber"),
    ],
)
def test_each_unique_field_is_enforced(client, overrides, field):
    client.post("/api/auth/register", json=registration())
    response = client.post("/api/auth/register", json=registration(**overrides))
    assert response.status_code == 409
    assert response.json()["errors"] == [{"field": field, "reason": "already registered"}]


def test_password_is_stored_hashed(client, app):
    client.post("/api/auth/register", json=registration())
    user = app.state.storage.users.get_user_by_username("inspector")
    assert user["password_hash"] != PASSWORD
    assert user["password_hash"].startswith("$2")
    assert PASSWORD not in user["password_hash"]


def test_register_rejects_non_object_body(client):
    response = client.post("/api/auth/register", json=["not", "an", "object"])
    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "body", "reason": "must be a JSON object"}]


def test_email_uniqueness_ignores_case_and_whitespace(client):
    assert client.post("/api/auth/register", json=registration()).status_code == 200
    response = client.post(
        "/api/auth/register",
        json=registration(
            username="other", idNumber="0987654321", email=" INSPECTOR@Example.GOV "
        ),
    )
    assert response.status_code == 409
    assert response.json()["errors"] == [{"field": "email", "reason": "already registered"}]


def test_email_is_stored_lower_cased(client, app):
    payload = registration(email="Inspector@Example.GOV")
    assert client.post("/api/auth/register", json=payload).status_code == 200
    user = app.state.storage.users.get_user_by_username("inspector")
    assert user["email"] == "inspector@example.gov"


def test_username_is_stored_stripped(client, app):
    assert client.post("/api/auth/register", json=registration(username=" inspector ")).status_code == 200
    assert app.state.storage.users.get_user_by_username("inspector") is not None
