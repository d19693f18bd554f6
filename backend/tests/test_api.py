"""
HTTP 接口测试
"""

from archiver.models.user import UserRole

from conftest import PASSWORD


ARTICLE = {
    "url": "https://archive.io/story",
    "title": "A story worth keeping",
    "source": {"domain": "archive.io", "site_name": "Archive"},
}


def _register(client, username="alice"):
    return client.post("/api/auth/register", json={
        "username": username,
        "email": f"{username}@archive.io",
        "password": PASSWORD,
        "role": "admin",
    })


class TestSystem:
    def test_root_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_api_health_checks_database(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["database"]["status"] == "ok"

    def test_api_info(self, client):
        assert client.get("/api-info").json()["api_docs"] == "/api/docs"

    def test_unknown_route(self, client):
        response = client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json()["detail"] == "Can't find /api/nowhere on this server!"


class TestAuth:
    def test_register_forces_user_role(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["role"] == "user"
        assert body["access_token"]
        assert body["refresh_token"]

    def test_register_validation_errors(self, client):
        response = client.post("/api/auth/register", json={
            "username": "x",
            "email": "bad",
            "password": "short",
        })

        assert response.status_code == 422
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"username", "email", "password"}

    def test_duplicate_registration(self, client):
        _register(client)

        assert _register(client).status_code == 409

    def test_login_and_me(self, client):
        _register(client)

        response = client.post("/api/auth/login", json={"identifier": "alice@archive.io", "password": PASSWORD})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == "alice"
        assert me.json()["last_login"] is not None

    def test_login_failures_share_one_message(self, client):
        _register(client)

        wrong_password = client.post("/api/auth/login", json={"identifier": "alice", "password": "nope-nope"})
        unknown_user = client.post("/api/auth/login", json={"identifier": "mallory", "password": PASSWORD})

        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()

    def test_refresh_and_logout(self, client):
        tokens = _register(client).json()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}
        body = {"refresh_token": tokens["refresh_token"]}

        refreshed = client.post("/api/auth/refresh", json=body)
        assert refreshed.status_code == 200
        assert refreshed.json()["access_token"]

        assert client.post("/api/auth/logout", json=body, headers=headers).json() is True
        assert client.post("/api/auth/refresh", json=body).status_code == 401

    def test_access_token_cannot_refresh(self, client):
        tokens = _register(client).json()

        response = client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})

        assert response.status_code == 401

    def test_missing_or_bad_bearer(self, client):
        assert client.get("/api/users/me").status_code == 401
        assert client.get("/api/users/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


class TestUsers:
    def test_admin_only_listing(self, client, auth_headers):
        assert client.get("/api/users/", headers=auth_headers("alice")).status_code == 403

        response = client.get("/api/users/", headers=auth_headers("root", UserRole.ADMIN))
        assert response.status_code == 200
        assert {user["username"] for user in response.json()} == {"alice", "root"}

    def test_deactivate(self, client, auth_headers):
        user_headers = auth_headers("alice")
        admin_headers = auth_headers("root", UserRole.ADMIN)
        alice = client.get("/api/users/me", headers=user_headers).json()

        assert client.delete(f"/api/users/{alice['id']}", headers=admin_headers).json() is True
        assert client.get("/api/users/me", headers=user_headers).status_code == 400
        assert client.delete("/api/users/999", headers=admin_headers).status_code == 404

    def test_update_me(self, client, auth_headers):
        headers = auth_headers("alice")

        response = client.put("/api/users/me", json={"profile": {"bio": "Collector"}}, headers=headers)

        assert response.status_code == 200
        assert response.json()["profile"]["bio"] == "Collector"
        assert response.json()["role"] == "user"


class TestCategories:
    def test_create_requires_moderator(self, client, auth_headers):
        response = client.post("/api/categories/", json={"name": "News"}, headers=auth_headers("alice"))

        assert response.status_code == 403

    def test_tree_path_and_delete_guard(self, client, auth_headers):
        mod = auth_headers("mod", UserRole.MODERATOR)
        admin = auth_headers("root", UserRole.ADMIN)

        news = client.post("/api/categories/", json={"name": "News"}, headers=mod).json()
        world = client.post("/api/categories/", json={"name": "World", "parent_id": news["id"]}, headers=mod).json()
        assert world["slug"] == "world"

        tree = client.get("/api/categories/tree").json()["categories"]
        assert [node["name"] for node in tree] == ["News"]
        assert [child["name"] for child in tree[0]["children"]] == ["World"]

        path = client.get(f"/api/categories/{world['id']}/path").json()
        assert path["full_path"] == "News > World"

        blocked = client.delete(f"/api/categories/{news['id']}", headers=admin)
        assert blocked.status_code == 409
        assert "subcategories" in blocked.json()["detail"]

        assert client.delete(f"/api/categories/{world['id']}", headers=admin).json() is True
        assert client.delete(f"/api/categories/{news['id']}", headers=admin).json() is True
        assert client.get(f"/api/categories/{news['id']}").status_code == 404

    def test_cycle_is_rejected(self, client, auth_headers):
        mod = auth_headers("mod", UserRole.MODERATOR)
        top = client.post("/api/categories/", json={"name": "Top"}, headers=mod).json()
        sub = client.post("/api/categories/", json={"name": "Sub", "parent_id": top["id"]}, headers=mod).json()

        response = client.put(f"/api/categories/{top['id']}", json={"parent_id": sub["id"]}, headers=mod)

        assert response.status_code == 400

    def test_duplicate_slug(self, client, auth_headers):
        mod = auth_headers("mod", UserRole.MODERATOR)
        client.post("/api/categories/", json={"name": "News", "slug": "news"}, headers=mod)

        response = client.post("/api/categories/", json={"name": "Other", "slug": "news"}, headers=mod)

        assert response.status_code == 400

    def test_missing_parent(self, client, auth_headers):
        mod = auth_headers("mod", UserRole.MODERATOR)

        response = client.post("/api/categories/", json={"name": "Orphan", "parent_id": 999}, headers=mod)

        assert response.status_code == 404


class TestArticles:
    def test_create_counts_and_bookmarks(self, client, auth_headers):
        mod = auth_headers("mod", UserRole.MODERATOR)
        user = auth_headers("alice")
        category = client.post("/api/categories/", json={"name": "Saved"}, headers=mod).json()

        created = client.post("/api/articles/", json=dict(ARTICLE, category_ids=[category["id"]]), headers=user)
        assert created.status_code == 201
        article = created.json()
        assert article["category_ids"] == [category["id"]]

        assert client.get(f"/api/categories/{category['id']}").json()["article_count"] == 1
        assert client.post("/api/articles/", json=ARTICLE, headers=user).status_code == 400

        bookmarked = client.post(f"/api/articles/{article['id']}/bookmark", headers=user).json()
        assert bookmarked["analytics"]["bookmarks"] == 1
        viewed = client.post(f"/api/articles/{article['id']}/view").json()
        assert viewed["analytics"]["views"] == 1

        stats = client.get("/api/articles/stats").json()
        assert stats["total"] == 1
        assert stats["pending"] == 1

    def test_invalid_article(self, client, auth_headers):
        payload = dict(ARTICLE, url="not-a-url")

        response = client.post("/api/articles/", json=payload, headers=auth_headers("alice"))

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "url"

    def test_update_requires_moderator(self, client, auth_headers):
        user = auth_headers("alice")
        article = client.post("/api/articles/", json=ARTICLE, headers=user).json()

        forbidden = client.put(f"/api/articles/{article['id']}", json={"title": "New"}, headers=user)
        assert forbidden.status_code == 403

        mod = auth_headers("mod", UserRole.MODERATOR)
        updated = client.put(f"/api/articles/{article['id']}", json={"status": "processed"}, headers=mod)
        assert updated.status_code == 200
        assert updated.json()["status"] == "processed"
        assert [a["id"] for a in client.get("/api/articles/published").json()] == [article["id"]]

    def test_missing_article(self, client):
        assert client.get("/api/articles/999").status_code == 404
