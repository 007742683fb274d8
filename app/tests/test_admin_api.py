# app/tests/test_admin_api.py
"""Tests for checkout and admin endpoints."""
import json
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.main import app
from persistence.reviews import save_review
from persistence.vault import get_secret, put_secret

ADMIN_HEADERS = {"X-Admin-Password": "correct-horse"}


@pytest.fixture
def client(fresh_db):
    with patch.dict(os.environ, {"HEALPET_ADMIN_PASSWORD": "correct-horse"}):
        yield TestClient(app)


def _creem_response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = body
    return response


class TestCheckoutEndpoint:
    def test_success(self, client):
        put_secret("CREEM_API_KEY", "creem_test_key")
        response_body = {"id": "ch_123", "checkout_url": "https://creem.io/pay/ch_123"}

        with patch("billing.creem_client.httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=_creem_response(200, response_body)
            )
            response = client.post(
                "/api/checkout",
                json={"product_id": "healpet_pro_monthly", "success_url": "https://healpet.app/success"},
            )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "checkout_url": "https://creem.io/pay/ch_123",
            "checkout_id": "ch_123",
        }

    def test_missing_vault_key(self, client):
        response = client.post("/api/checkout", json={"product_id": "healpet_pro_monthly"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "CREEM_API_KEY not found in vault"}

    def test_missing_product(self, client):
        response = client.post("/api/checkout", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "product_id is required"

    def test_provider_reply_not_json(self, client):
        put_secret("CREEM_API_KEY", "creem_test_key")
        reply = _creem_response(200, text="<html>ok</html>")
        reply.json.side_effect = json.JSONDecodeError("Expecting value", "<html>ok</html>", 0)

        with patch("billing.creem_client.httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(return_value=reply)
            response = client.post("/api/checkout", json={"product_id": "healpet_pro_monthly"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Creem API returned an invalid response"}

    def test_malformed_body(self, client):
        response = client.post(
            "/api/checkout",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid request body"}

    @pytest.mark.parametrize("body", [
        {"product_id": "healpet_pro_monthly", "metadata": "x"},
        ["healpet_pro_monthly"],
    ])
    def test_wrongly_shaped_body(self, client, body):
        response = client.post("/api/checkout", json=body)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid request body"}

    def test_plans(self, client):
        plans = client.get("/api/plans").json()["plans"]

        assert [p["price"] for p in plans] == [9.99, 79.99]
        assert plans[1]["savings"] == "Save 33%"


class TestAdminGuard:
    def test_disabled_without_configured_password(self, fresh_db):
        with patch.dict(os.environ, {"HEALPET_ADMIN_PASSWORD": ""}):
            response = TestClient(app).get("/api/admin/stats", headers=ADMIN_HEADERS)

        assert response.status_code == 503

    def test_missing_header(self, client):
        assert client.get("/api/admin/stats").status_code == 401

    def test_wrong_password(self, client):
        response = client.get("/api/admin/stats", headers={"X-Admin-Password": "wrong"})
        assert response.status_code == 401


class TestAdminEndpoints:
    def test_stats(self, client):
        client.post("/api/auth/signup", json={"email": "owner@example.com", "password": "kibble123"})

        stats = client.get("/api/admin/stats", headers=ADMIN_HEADERS).json()

        assert stats["total_users"] == 1
        assert stats["new_users_today"] == 1
        assert stats["risk_levels"] == {"low": 0, "medium": 0, "high": 0}

    def test_activity_and_users(self, client):
        client.post("/api/auth/signup", json={"email": "owner@example.com", "password": "kibble123"})

        activity = client.get("/api/admin/activity", headers=ADMIN_HEADERS).json()
        users = client.get("/api/admin/users", headers=ADMIN_HEADERS).json()

        assert activity["items"][0]["type"] == "signup"
        assert users["users"][0]["email"] == "owner@example.com"
        assert users["users"][0]["diagnoses"] == 0

    def test_approve_review(self, client):
        review_id = save_review(user_id="u1", user_name="owner", content="Great app", rating=5)

        response = client.post(f"/api/admin/reviews/{review_id}/approve", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert client.get("/api/reviews").json()["count"] == 1

    def test_approve_missing_review(self, client):
        response = client.post("/api/admin/reviews/missing/approve", headers=ADMIN_HEADERS)
        assert response.status_code == 404

    def test_store_and_delete_secret(self, client):
        response = client.put(
            "/api/admin/secrets/CREEM_API_KEY",
            json={"secret": "creem_live_key"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        assert "creem_live_key" not in response.text
        assert get_secret("CREEM_API_KEY") == "creem_live_key"

        assert client.delete("/api/admin/secrets/CREEM_API_KEY", headers=ADMIN_HEADERS).status_code == 200
        assert client.delete("/api/admin/secrets/CREEM_API_KEY", headers=ADMIN_HEADERS).status_code == 404
