from __future__ import annotations

import pytest

from inspectform.errors import TransportError


def test_list_forms(client):
    names = [form["name"] for form in client.get("/api/forms").json()]
    assert "fire-safety" in names


def test_get_template(client):
    body = client.get("/api/forms/building").json()
    assert body["name"] == "building"
    assert body["elements"][0] == {"id": "permit_number", "type": "text", "content": "Permit number"}


def test_unknown_template_is_404(client):
    response = client.get("/api/forms/nope")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_save_requires_session(client):
    response = client.put("/api/forms/building", json={"elements": []})
    assert response.status_code == 401


def test_save_new_order(logged_in):
    elements = logged_in.get("/api/forms/building").json()["elements"]
    reordered = elements[1:] + elements[:1]
    response = logged_in.put("/api/forms/building", json={"elements": reordered})
    assert response.status_code == 200
    assert logged_in.get("/api/forms/building").json()["elements"] == reordered


def test_save_rejects_duplicate_ids_and_unknown_types(logged_in):
    response = logged_in.put(
        "/api/forms/building",
        json={
            "elements": [
                {"id": "a", "type": "text", "content": "A"},
                {"id": "a", "type": "slider", "content": "B"},
            ]
        },
    )
    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"elements.1.id", "elements.1.type"}


def test_save_unknown_form_is_404(logged_in):
    response = logged_in.put(
        "/api/forms/nope", json={"elements": [{"id": "a", "type": "text", "content": "A"}]}
    )
    assert response.status_code == 404


def test_move_uses_stored_order(logged_in):
    ids = [e["id"] for e in logged_in.get("/api/forms/building").json()["elements"]]
    response = logged_in.post("/api/forms/building/builder/move", json={"from": 0, "to": 2})
    moved = [e["id"] for e in response.json()["elements"]]
    assert moved == ids[1:3] + ids[:1] + ids[3:]
    # Moving does not persist anything.
    assert [e["id"] for e in logged_in.get("/api/forms/building").json()["elements"]] == ids


def test_move_with_client_elements(logged_in):
    elements = [
        {"id": "name", "type": "text", "content": "Name"},
        {"id": "pass", "type": "checkbox", "content": "Pass"},
        {"id": "on", "type": "date", "content": "Inspected On"},
    ]
    response = logged_in.post(
        "/api/forms/building/builder/move", json={"from": 0, "to": 2, "elements": elements}
    )
    assert [e["id"] for e in response.json()["elements"]] == ["pass", "on", "name"]


@pytest.mark.parametrize("payload", [{"from": 0, "to": 99}, {"from": "0", "to": 1}, {"to": 1}])
def test_move_rejects_bad_indices(logged_in, payload):
    assert logged_in.post("/api/forms/building/builder/move", json=payload).status_code == 400


@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"from": 0, "to": 7}, "to"),
        ({"from": 7, "to": 0}, "from"),
        ({"from": -1, "to": 9}, "from"),
    ],
)
def test_move_names_the_out_of_range_index(logged_in, payload, field):
    response = logged_in.post("/api/forms/building/builder/move", json=payload)
    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": field, "reason": "must be between 0 and 6"}]


def test_submit_requires_session(client):
    response = client.post("/api/forms/building/submit", json={"values": {}})
    assert response.status_code == 401


def test_submit_and_list(logged_in):
    values = {"permit_number": "P-1", "foundation_ok": True, "inspected_on": "2026-01-01"}
    response = logged_in.post("/api/forms/building/submit", json={"values": values})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    listed = logged_in.get("/api/forms/building/submissions").json()
    assert [item["id"] for item in listed] == [body["submissionId"]]
    assert listed[0]["values"] == values
    assert listed[0]["submittedBy"] == logged_in.get("/api/user").json()["id"]


def test_submit_rejects_unknown_fields_and_wrong_types(logged_in):
    response = logged_in.post(
        "/api/forms/building/submit",
        json={"values": {"foundation_ok": "yes", "bogus": "x"}},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_submit_to_unknown_form_is_404(logged_in):
    assert logged_in.post("/api/forms/nope/submit", json={"values": {}}).status_code == 404


def test_storage_failure_asks_for_retry(logged_in, app, monkeypatch):
    def broken(submission):
        raise OSError("disk full")

    monkeypatch.setattr(app.state.storage.submissions, "create_submission", broken)
    response = logged_in.post("/api/forms/building/submit", json={"values": {}})
    assert response.status_code == 503
    assert response.json()["code"] == TransportError().code


def test_security_and_cors_headers(client):
    response = client.get("/api/forms", headers={"Origin": "http://frontend.test"})
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["access-control-allow-origin"] == "http://frontend.test"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_other_origins(client):
    response = client.get("/api/forms", headers={"Origin": "http://evil.test"})
    assert "access-control-allow-origin" not in response.headers
