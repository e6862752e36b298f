from fastapi.testclient import TestClient

from conftest import auth


def test_root_reports_running(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "server is running"


def test_store_is_opened_by_lifespan(client, store):
    assert store.is_open


def test_store_is_closed_on_shutdown(app, store):
    with TestClient(app):
        assert store.is_open
    assert not store.is_open


def test_validation_errors_use_error_envelope(client):
    response = client.post("/models", json={"name": "x"}, headers=auth("alice-token"))
    assert response.status_code == 422
    body = response.json()
    assert body["error"] is True
    assert body["message"]
