"""Token verification, lazy user creation and the auth endpoints."""

from datetime import datetime

from quotes_api.core.auth import get_token_verifier
from quotes_api.api.main import app

from conftest import auth_header


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)


class TestMissingOrBadToken:
    def test_no_token_is_authentication_required(self, test_client, verifier):
        r = test_client.get("/api/auth/me")
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "authentication_required"
        assert r.headers["WWW-Authenticate"] == "Bearer"
        assert verifier.calls == 0

    def test_non_bearer_scheme_is_authentication_required(self, test_client):
        r = test_client.get("/api/auth/me", headers={"Authorization": "Basic abc"})
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "authentication_required"

    def test_unknown_token_is_invalid(self, test_client):
        r = test_client.get("/api/auth/me", headers=auth_header("forged"))
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "invalid_token"

    def test_token_without_email_is_invalid(self, test_client, verifier):
        token = verifier.register("no-email", uid="uid-anon")
        r = test_client.post("/api/auth/verify", headers=auth_header(token))
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "invalid_token"

    def test_no_verifier_configured_is_invalid(self, test_client, user_token):
        app.dependency_overrides[get_token_verifier] = lambda: None
        r = test_client.get("/api/auth/me", headers=auth_header(user_token))
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "invalid_token"


class TestUserSync:
    def test_first_verify_creates_user_with_default_role(self, test_client, user_token):
        r = test_client.post("/api/auth/verify", headers=auth_header(user_token))
        assert r.status_code == 200
        user = r.json()["user"]
        assert user["uid"] == "uid-user"
        assert user["email"] == "reader@example.com"
        assert user["display_name"] == "Reader"
        assert user["role"] == "user"

    def test_display_name_falls_back_to_email_local_part(self, test_client, other_token):
        r = test_client.get("/api/auth/me", headers=auth_header(other_token))
        assert r.status_code == 200
        assert r.json()["user"]["display_name"] == "other"

    def test_new_user_gets_default_preferences(self, test_client, user_token):
        r = test_client.get("/api/auth/me", headers=auth_header(user_token))
        assert r.json()["user"]["preferences"] == {"theme": "light", "email_notifications": True}

    def test_repeated_verification_keeps_one_record(self, test_client, user_token):
        first = test_client.get("/api/auth/me", headers=auth_header(user_token)).json()["user"]
        second = test_client.get("/api/auth/me", headers=auth_header(user_token)).json()["user"]
        assert first["id"] == second["id"]
        assert _ts(second["last_login"]) > _ts(first["last_login"])

    def test_first_login_is_flagged_in_activity(self, test_client, user_token):
        test_client.post("/api/auth/verify", headers=auth_header(user_token))
        r = test_client.get(
            "/api/users/activity",
            params={"action": "login"},
            headers=auth_header(user_token),
        )
        activities = r.json()["activities"]
        assert len(activities) == 2
        # Newest first
        assert activities[0]["details"] == {}
        assert activities[1]["details"] == {"first_login": True}

    def test_token_verified_once_per_request(self, test_client, verifier, user_token):
        test_client.get("/api/auth/me", headers=auth_header(user_token))
        assert verifier.calls == 1


class TestLogout:
    def test_logout_records_activity(self, test_client, user_token):
        r = test_client.post("/api/auth/logout", headers=auth_header(user_token))
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Logout successful"}

        r = test_client.get(
            "/api/users/activity",
            params={"action": "logout"},
            headers=auth_header(user_token),
        )
        assert r.json()["pagination"]["total"] == 1

    def test_logout_requires_token(self, test_client):
        assert test_client.post("/api/auth/logout").status_code == 401
