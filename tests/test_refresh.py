"""Tests for the refresh flow and POST /refresh."""
from datetime import timedelta

import jwt
import pytest

from api import create_app
from conftest import register_refresh
from utils.exceptions import InvalidToken, MissingToken, UnknownToken
from utils.refresh_flow import RefreshFlow
from utils.security import create_refresh_token, verify_token


def _decode_access(app, token):
    result = verify_token(token, app.config["JWT_SECRET"], expected_type="access")
    assert result.ok, result.error
    return result.claims


class TestRefreshEndpoint:
    def test_registered_token_returns_new_access_token(self, app, client, registry):
        token = register_refresh(registry, "u1", "a@x.com")

        resp = client.post("/refresh", json={"refreshToken": token})

        assert resp.status_code == 200
        claims = _decode_access(app, resp.get_json()["token"])
        assert claims["sub"] == "u1"
        assert claims["email"] == "a@x.com"

    def test_refresh_token_is_not_rotated(self, client, registry):
        token = register_refresh(registry, "u1", "a@x.com")

        first = client.post("/refresh", json={"refreshToken": token})
        second = client.post("/refresh", json={"refreshToken": token})

        assert first.status_code == second.status_code == 200
        assert registry.contains(token)
        assert "refreshToken" not in first.get_json()

    def test_back_to_back_refreshes_give_distinct_tokens(self, client, registry):
        token = register_refresh(registry, "u1", "a@x.com")

        tokens = {client.post("/refresh", json={"refreshToken": token}).get_json()["token"] for _ in range(5)}

        assert len(tokens) == 5

    @pytest.mark.parametrize("body", [{}, {"refreshToken": ""}, {"refreshToken": None}, {"refresh_token": "x"}])
    def test_missing_token(self, client, body):
        resp = client.post("/refresh", json=body)

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Refresh token is required"

    def test_non_json_body_is_missing_token(self, client):
        resp = client.post("/refresh", data="refreshToken=abc", content_type="text/plain")

        assert resp.status_code == 400

    def test_unknown_token(self, client, registry):
        registry.add("rt-other")

        resp = client.post("/refresh", json={"refreshToken": "unknown"})

        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Invalid refresh token"
        assert len(registry) == 1

    def test_valid_but_unregistered_token_is_rejected(self, client, registry):
        token = create_refresh_token("u1", "a@x.com")

        resp = client.post("/refresh", json={"refreshToken": token})

        assert resp.status_code == 403
        assert not registry.contains(token)

    def test_expired_registered_token_is_evicted(self, app, client, registry):
        app.config["REFRESH_TOKEN_EXPIRES"] = timedelta(seconds=-30)
        token = register_refresh(registry, "u1", "a@x.com")

        resp = client.post("/refresh", json={"refreshToken": token})

        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Invalid refresh token"
        assert not registry.contains(token)

        again = client.post("/refresh", json={"refreshToken": token})
        assert again.status_code == 403
        assert again.get_json()["code"] == "UNKNOWN_TOKEN"

    def test_mis_signed_registered_token_is_evicted(self, client, registry):
        forged = jwt.encode(
            {"sub": "u1", "email": "a@x.com", "type": "refresh", "exp": 4102444800},
            "some-stale-secret-0123456789abcdef0123456789",
            algorithm="HS256",
        )
        registry.add(forged)

        resp = client.post("/refresh", json={"refreshToken": forged})

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "INVALID_TOKEN"
        assert not registry.contains(forged)

    def test_registered_lone_surrogate_token_is_evicted(self, client, registry):
        registry.add("\ud800")

        resp = client.post("/refresh", data='{"refreshToken": "\\ud800"}', content_type="application/json")

        assert resp.status_code == 403
        assert not registry.contains("\ud800")

    def test_garbage_registered_token_is_evicted(self, client, registry):
        registry.add("rt-123")

        resp = client.post("/refresh", json={"refreshToken": "rt-123"})

        assert resp.status_code == 403
        assert not registry.contains("rt-123")


class TestDatabaseRegistryRefresh:
    @pytest.fixture
    def db_app(self):
        app = create_app("testing", overrides={"REFRESH_REGISTRY_BACKEND": "database"})
        with app.app_context():
            yield app

    def test_refresh_and_evict(self, db_app):
        registry = db_app.extensions["refresh_registry"]
        client = db_app.test_client()
        good = register_refresh(registry, "u1", "a@x.com")
        registry.add("rt-broken")

        ok = client.post("/refresh", json={"refreshToken": good})
        bad = client.post("/refresh", json={"refreshToken": "rt-broken"})

        assert ok.status_code == 200
        assert _decode_access(db_app, ok.get_json()["token"])["sub"] == "u1"
        assert bad.status_code == 403
        assert registry.contains(good)
        assert not registry.contains("rt-broken")

    def test_lone_surrogate_token_is_unknown(self, db_app):
        client = db_app.test_client()

        resp = client.post(
            "/refresh",
            data='{"refreshToken": "\\ud800"}',
            content_type="application/json",
        )

        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Invalid refresh token"

    def test_lone_surrogate_token_can_be_evicted(self, db_app):
        registry = db_app.extensions["refresh_registry"]
        client = db_app.test_client()
        registry.add("rt-\ud800")

        resp = client.post(
            "/refresh",
            data='{"refreshToken": "rt-\\ud800"}',
            content_type="application/json",
        )

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "INVALID_TOKEN"
        assert not registry.contains("rt-\ud800")


class TestRefreshFlow:
    def test_steps_raise_typed_errors(self, app, registry):
        flow = RefreshFlow(registry)

        with pytest.raises(MissingToken):
            flow.refresh(None)
        with pytest.raises(UnknownToken):
            flow.refresh("nope")

        registry.add("broken")
        with pytest.raises(InvalidToken):
            flow.refresh("broken")
        assert not registry.contains("broken")

    def test_returns_access_token(self, app, registry):
        token = register_refresh(registry, "u9", "z@x.com")

        access = RefreshFlow(registry).refresh(token)

        assert _decode_access(app, access)["sub"] == "u9"

    def test_registry_is_injected(self, app, registry):
        other = type(registry)()
        token = register_refresh(other, "u1", "a@x.com")

        with pytest.raises(UnknownToken):
            RefreshFlow(registry).refresh(token)
        assert RefreshFlow(other).refresh(token)
