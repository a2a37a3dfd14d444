from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from inspectform.app import create_app
from inspectform.config import Settings

SIGNATURE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR4nGNgYGD4DwABBAEAwS2OUAAAAABJRU5ErkJggg=="
PASSWORD = "Abc123!@"


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now += timedelta(**kwargs)


def registration(**overrides: Any) -> dict[str, Any]:
    payload = {
        "idNumber": "1234567890",
        "username": "inspector",
        "email": "inspector@example.gov",
        "password": PASSWORD,
        "confirmPassword": PASSWORD,
        "signature": SIGNATURE,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.setenv("JSON_PATH", str(tmp_path / "jsonstore.json"))
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("SESSION_TTL_MINUTES", "60")
    monkeypatch.setenv("FRONTEND_ORIGIN", "http://frontend.test")
    return Settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def logged_in(client):
    assert client.post("/api/auth/register", json=registration()).status_code == 200
    response = client.post("/api/auth/login", json={"username": "inspector", "password": PASSWORD})
    assert response.status_code == 200
    return client
