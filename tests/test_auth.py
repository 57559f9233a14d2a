"""Tests for admin API-key authentication and the open health endpoint."""

import pytest

STATIONS = "/api/enterprise/stations"


@pytest.fixture()
def admin_key(app, monkeypatch):
    monkeypatch.setitem(app.config, "ADMIN_API_KEY", "k9-secret")
    return "k9-secret"


class TestAdminKey:
    def test_missing_key_is_rejected(self, client, admin_key):
        resp = client.get(STATIONS)

        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Invalid or missing admin API key"}

    def test_wrong_key_is_rejected(self, client, admin_key):
        resp = client.get(STATIONS, headers={"X-Admin-Key": "guess"})
        assert resp.status_code == 401

    def test_header_key(self, client, admin_key):
        resp = client.get(STATIONS, headers={"X-Admin-Key": admin_key})
        assert resp.status_code == 200

    def test_bearer_token(self, client, admin_key):
        resp = client.get("/api/finance/accounts-payable", headers={"Authorization": f"Bearer {admin_key}"})
        assert resp.status_code == 200

    def test_writes_are_protected(self, client, admin_key):
        resp = client.post("/api/finance/ita/invoices/retry-failed")
        assert resp.status_code == 401

    def test_auth_disabled_without_configured_key(self, client):
        assert client.get(STATIONS).status_code == 200


class TestHealth:
    def test_health_is_open(self, client, admin_key):
        resp = client.get("/api/health")

        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok", "database": "connected"}

    def test_unknown_route(self, client):
        resp = client.get("/api/nowhere")

        assert resp.status_code == 404
        assert "error" in resp.get_json()
