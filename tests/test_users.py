"""Profile, favorites and the user's own activity log."""

from conftest import auth_header


class TestProfile:
    def test_get_profile(self, test_client, user_token):
        r = test_client.get("/api/users/profile", headers=auth_header(user_token))
        assert r.status_code == 200
        assert r.json()["user"]["email"] == "reader@example.com"

    def test_update_merges_preferences(self, test_client, user_token):
        r = test_client.put(
            "/api/users/profile",
            json={"display_name": "Night Reader", "preferences": {"theme": "dark"}},
            headers=auth_header(user_token),
        )
        assert r.status_code == 200
        user = r.json()["user"]
        assert user["display_name"] == "Night Reader"
        assert user["preferences"] == {"theme": "dark", "email_notifications": True}

        r = test_client.put(
            "/api/users/profile",
            json={"preferences": {"email_notifications": False}},
            headers=auth_header(user_token),
        )
        user = r.json()["user"]
        assert user["display_name"] == "Night Reader"
        assert user["preferences"] == {"theme": "dark", "email_notifications": False}

    def test_profile_update_is_logged(self, test_client, user_token):
        test_client.put("/api/users/profile", json={"display_name": "R"}, headers=auth_header(user_token))
        r = test_client.get(
            "/api/users/activity",
            params={"action": "profile_updated"},
            headers=auth_header(user_token),
        )
        assert r.json()["pagination"]["total"] == 1

    def test_unknown_theme_is_rejected(self, test_client, user_token):
        r = test_client.put(
            "/api/users/profile",
            json={"preferences": {"theme": "sepia"}},
            headers=auth_header(user_token),
        )
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "validation_error"

    def test_profile_requires_token(self, test_client):
        assert test_client.get("/api/users/profile").status_code == 401

    def test_profile_lists_favorites_and_recent_views(self, test_client, user_token, create_quote):
        first = create_quote(text="First")
        second = create_quote(text="Second")
        headers = auth_header(user_token)
        test_client.post("/api/auth/verify", headers=headers)

        test_client.get(f"/api/quotes/{first['id']}", headers=headers)
        test_client.get(f"/api/quotes/{second['id']}", headers=headers)
        test_client.post(f"/api/users/favorites/{second['id']}", headers=headers)

        for url in ("/api/users/profile", "/api/auth/me"):
            user = test_client.get(url, headers=headers).json()["user"]
            assert user["favorites"] == [second["id"]]
            # Newest first
            assert [v["quote_id"] for v in user["quotes_viewed"]] == [second["id"], first["id"]]
            assert all(v["viewed_at"] for v in user["quotes_viewed"])

    def test_new_user_has_empty_history(self, test_client, user_token):
        user = test_client.get("/api/auth/me", headers=auth_header(user_token)).json()["user"]
        assert user["favorites"] == []
        assert user["quotes_viewed"] == []


class TestFavorites:
    def test_add_twice_is_idempotent(self, test_client, user_token, create_quote):
        quote = create_quote()
        url = f"/api/users/favorites/{quote['id']}"

        first = test_client.post(url, headers=auth_header(user_token))
        assert first.status_code == 200
        assert first.json() == {
            "message": "Quote added to favorites",
            "changed": True,
            "favorites": [quote["id"]],
        }

        second = test_client.post(url, headers=auth_header(user_token))
        assert second.status_code == 200
        assert second.json()["message"] == "Quote already in favorites"
        assert second.json()["changed"] is False
        assert second.json()["favorites"] == first.json()["favorites"]

        r = test_client.get(
            "/api/users/activity",
            params={"action": "favorite_added"},
            headers=auth_header(user_token),
        )
        assert r.json()["pagination"]["total"] == 1

    def test_remove_absent_is_noop(self, test_client, user_token, create_quote):
        quote = create_quote()
        r = test_client.delete(f"/api/users/favorites/{quote['id']}", headers=auth_header(user_token))
        assert r.status_code == 200
        assert r.json()["message"] == "Quote not in favorites"
        assert r.json()["changed"] is False
        assert r.json()["favorites"] == []

        r = test_client.get(
            "/api/users/activity",
            params={"action": "favorite_removed"},
            headers=auth_header(user_token),
        )
        assert r.json()["pagination"]["total"] == 0

    def test_remove_present(self, test_client, user_token, create_quote):
        keep, drop = create_quote(text="Keep"), create_quote(text="Drop")
        test_client.post(f"/api/users/favorites/{keep['id']}", headers=auth_header(user_token))
        test_client.post(f"/api/users/favorites/{drop['id']}", headers=auth_header(user_token))

        r = test_client.delete(f"/api/users/favorites/{drop['id']}", headers=auth_header(user_token))
        assert r.json()["message"] == "Quote removed from favorites"
        assert r.json()["favorites"] == [keep["id"]]

    def test_list_keeps_insertion_order(self, test_client, user_token, create_quote):
        a, b, c = (create_quote(text=t) for t in ("A", "B", "C"))
        for quote in (b, c, a):
            test_client.post(f"/api/users/favorites/{quote['id']}", headers=auth_header(user_token))

        r = test_client.get("/api/users/favorites", headers=auth_header(user_token))
        assert [q["text"] for q in r.json()["favorites"]] == ["B", "C", "A"]

    def test_favorite_missing_quote_is_not_found(self, test_client, user_token):
        r = test_client.post("/api/users/favorites/9999", headers=auth_header(user_token))
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "not_found"

    def test_favorites_are_per_user(self, test_client, user_token, other_token, create_quote):
        quote = create_quote()
        test_client.post(f"/api/users/favorites/{quote['id']}", headers=auth_header(user_token))
        r = test_client.get("/api/users/favorites", headers=auth_header(other_token))
        assert r.json()["favorites"] == []


class TestActivity:
    def test_lists_only_own_records(self, test_client, user_token, other_token):
        test_client.post("/api/auth/logout", headers=auth_header(other_token))
        r = test_client.get("/api/users/activity", headers=auth_header(user_token))
        assert r.status_code == 200
        activities = r.json()["activities"]
        assert activities
        assert {a["user_id"] for a in activities} == {activities[0]["user_id"]}
        assert "logout" not in {a["action"] for a in activities}

    def test_date_bounds(self, test_client, user_token):
        test_client.get("/api/users/profile", headers=auth_header(user_token))

        r = test_client.get(
            "/api/users/activity",
            params={"start_date": "2000-01-01T00:00:00Z", "end_date": "2999-01-01T00:00:00Z"},
            headers=auth_header(user_token),
        )
        assert r.json()["pagination"]["total"] == 2

        r = test_client.get(
            "/api/users/activity",
            params={"start_date": "2999-01-01T00:00:00Z"},
            headers=auth_header(user_token),
        )
        assert r.json()["pagination"]["total"] == 0

        r = test_client.get(
            "/api/users/activity",
            params={"end_date": "2000-01-01T00:00:00Z"},
            headers=auth_header(user_token),
        )
        assert r.json()["pagination"]["total"] == 0

    def test_unknown_action_is_rejected(self, test_client, user_token):
        r = test_client.get(
            "/api/users/activity",
            params={"action": "hacked"},
            headers=auth_header(user_token),
        )
        assert r.status_code == 400
