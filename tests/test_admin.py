"""Admin surface: user management, deletion policy, stats, import/export."""

from dataclasses import replace

from quotes_api.api.main import app
from quotes_api.core.config import get_settings
from quotes_api.utils.enums import UserDeletionPolicy

from conftest import auth_header, user_count


def _user_id(client, token) -> int:
    return client.get("/api/auth/me", headers=auth_header(token)).json()["user"]["id"]


def _activity_total(client, admin_token, user_id) -> int:
    r = client.get("/api/admin/activity", params={"user_id": user_id}, headers=auth_header(admin_token))
    return r.json()["pagination"]["total"]


class TestRoleGate:
    def test_anonymous_is_authentication_required(self, test_client):
        r = test_client.get("/api/admin/stats")
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "authentication_required"

    def test_invalid_token_is_rejected_without_creating_a_user(self, test_client, test_db_url):
        r = test_client.get("/api/admin/stats", headers=auth_header("forged"))
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "invalid_token"
        assert user_count(test_db_url) == 0

    def test_regular_user_is_denied(self, test_client, user_token):
        for method, url in [
            ("get", "/api/admin/users"),
            ("get", "/api/admin/stats"),
            ("get", "/api/admin/activity"),
            ("get", "/api/admin/quotes/export"),
        ]:
            r = getattr(test_client, method)(url, headers=auth_header(user_token))
            assert r.status_code == 403, url
            assert r.json()["error"]["code"] == "permission_denied"

    def test_admin_is_admitted(self, test_client, admin_token):
        assert test_client.get("/api/admin/stats", headers=auth_header(admin_token)).status_code == 200


class TestUserManagement:
    def test_list_and_search_users(self, test_client, admin_token, user_token, other_token):
        _user_id(test_client, user_token)
        _user_id(test_client, other_token)

        r = test_client.get("/api/admin/users", headers=auth_header(admin_token))
        assert r.json()["pagination"]["total"] == 3

        r = test_client.get("/api/admin/users", params={"search": "READER"}, headers=auth_header(admin_token))
        assert [u["email"] for u in r.json()["users"]] == ["reader@example.com"]

    def test_user_detail_includes_recent_activity(self, test_client, admin_token, user_token):
        user_id = _user_id(test_client, user_token)
        r = test_client.get(f"/api/admin/users/{user_id}", headers=auth_header(admin_token))
        assert r.status_code == 200
        data = r.json()
        assert data["user"]["id"] == user_id
        assert data["recent_activity"][0]["action"] == "login"

    def test_promote_user(self, test_client, admin_token, user_token):
        user_id = _user_id(test_client, user_token)
        r = test_client.put(
            f"/api/admin/users/{user_id}",
            json={"role": "admin"},
            headers=auth_header(admin_token),
        )
        assert r.status_code == 200
        assert r.json()["user"]["role"] == "admin"
        assert test_client.get("/api/admin/stats", headers=auth_header(user_token)).status_code == 200

    def test_unknown_role_is_rejected(self, test_client, admin_token, user_token):
        user_id = _user_id(test_client, user_token)
        r = test_client.put(
            f"/api/admin/users/{user_id}",
            json={"role": "superuser"},
            headers=auth_header(admin_token),
        )
        assert r.status_code == 400

    def test_missing_user_is_not_found(self, test_client, admin_token):
        r = test_client.get("/api/admin/users/9999", headers=auth_header(admin_token))
        assert r.status_code == 404
        r = test_client.delete("/api/admin/users/9999", headers=auth_header(admin_token))
        assert r.status_code == 404


class TestUserDeletion:
    def test_self_delete_is_rejected(self, test_client, admin_token):
        admin_id = _user_id(test_client, admin_token)
        r = test_client.delete(f"/api/admin/users/{admin_id}", headers=auth_header(admin_token))
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "bad_request"

        r = test_client.get(f"/api/admin/users/{admin_id}", headers=auth_header(admin_token))
        assert r.status_code == 200

    def test_retain_policy_keeps_activity(self, test_client, admin_token, user_token, create_quote):
        quote = create_quote()
        user_id = _user_id(test_client, user_token)
        test_client.post(f"/api/users/favorites/{quote['id']}", headers=auth_header(user_token))

        r = test_client.delete(f"/api/admin/users/{user_id}", headers=auth_header(admin_token))
        assert r.status_code == 200
        assert r.json()["message"] == "User deleted successfully"

        assert test_client.get(f"/api/admin/users/{user_id}", headers=auth_header(admin_token)).status_code == 404
        assert _activity_total(test_client, admin_token, user_id) > 0

    def test_purge_policy_removes_activity(self, test_client, admin_token, user_token):
        app.dependency_overrides[get_settings] = lambda: replace(
            get_settings(), user_delete_policy=UserDeletionPolicy.PURGE
        )
        user_id = _user_id(test_client, user_token)
        assert _activity_total(test_client, admin_token, user_id) > 0

        r = test_client.delete(f"/api/admin/users/{user_id}", headers=auth_header(admin_token))
        assert r.status_code == 200
        assert _activity_total(test_client, admin_token, user_id) == 0

    def test_deletion_is_logged_with_policy(self, test_client, admin_token, user_token):
        user_id = _user_id(test_client, user_token)
        test_client.delete(f"/api/admin/users/{user_id}", headers=auth_header(admin_token))

        r = test_client.get(
            "/api/admin/activity",
            params={"action": "user_deleted"},
            headers=auth_header(admin_token),
        )
        details = r.json()["activities"][0]["details"]
        assert details["target_user_id"] == user_id
        assert details["policy"] == "retain"

    def test_deleted_user_signs_in_as_new_record(self, test_client, admin_token, user_token):
        user_id = _user_id(test_client, user_token)
        test_client.delete(f"/api/admin/users/{user_id}", headers=auth_header(admin_token))
        r = test_client.get("/api/users/favorites", headers=auth_header(user_token))
        assert r.status_code == 200
        assert r.json()["favorites"] == []

        r = test_client.get("/api/admin/users", params={"search": "reader"}, headers=auth_header(admin_token))
        assert r.json()["pagination"]["total"] == 1


class TestStats:
    def test_stats_counts(self, test_client, admin_token, user_token, create_quote):
        popular = create_quote(text="Popular")
        create_quote(text="Quiet")
        for _ in range(3):
            test_client.get(f"/api/quotes/{popular['id']}", headers=auth_header(user_token))

        r = test_client.get("/api/admin/stats", headers=auth_header(admin_token))
        assert r.status_code == 200
        stats = r.json()["stats"]
        assert stats["total_users"] == 2
        assert stats["total_quotes"] == 2
        assert stats["active_users"]["daily"] == 2
        assert stats["registrations"]["monthly"] == 2
        assert stats["quotes_served"]["weekly"] == 3
        assert stats["top_quotes"][0]["id"] == popular["id"]
        assert stats["top_quotes"][0]["views"] == 3


class TestImportExport:
    def test_import_reports_each_item(self, test_client, admin_token):
        r = test_client.post(
            "/api/admin/quotes/import",
            json={
                "quotes": [
                    {"text": "One", "author": "A", "tags": ["x"]},
                    {"text": "", "author": "B"},
                    {"text": "Three", "author": "C"},
                    "not a quote",
                ]
            },
            headers=auth_header(admin_token),
        )
        assert r.status_code == 200
        results = r.json()["results"]
        assert results["total"] == 4
        assert results["imported"] == 2
        assert len(results["errors"]) == 2
        assert results["errors"][0]["quote"] == {"text": "", "author": "B"}

        assert test_client.get("/api/quotes").json()["pagination"]["total"] == 2

    def test_import_reports_overlong_tags_per_item(self, test_client, admin_token):
        r = test_client.post(
            "/api/admin/quotes/import",
            json={
                "quotes": [
                    {"text": "Kept", "author": "A", "tags": ["short"]},
                    {"text": "Skipped", "author": "B", "tags": ["t" * 51]},
                ]
            },
            headers=auth_header(admin_token),
        )
        assert r.status_code == 200
        results = r.json()["results"]
        assert results["imported"] == 1
        assert results["errors"][0]["quote"]["text"] == "Skipped"
        assert test_client.get("/api/quotes").json()["pagination"]["total"] == 1

    def test_import_requires_non_empty_list(self, test_client, admin_token):
        for body in ({"quotes": []}, {"quotes": "nope"}, {}):
            r = test_client.post("/api/admin/quotes/import", json=body, headers=auth_header(admin_token))
            assert r.status_code == 400, body
            assert r.json()["error"]["code"] == "validation_error"

    def test_export_returns_all_quotes(self, test_client, admin_token, create_quote):
        for text in ("A", "B", "C"):
            create_quote(text=text)
        r = test_client.get("/api/admin/quotes/export", headers=auth_header(admin_token))
        assert r.status_code == 200
        data = r.json()
        assert data["count"] == 3
        assert [q["text"] for q in data["quotes"]] == ["C", "B", "A"]

        r = test_client.get(
            "/api/admin/activity",
            params={"action": "quotes_exported"},
            headers=auth_header(admin_token),
        )
        assert r.json()["activities"][0]["details"] == {"count": 3}
