# =============================================================================
# tests/test_api.py - HTTP Endpoint Tests
# =============================================================================
# Routes are exercised through FastAPI's TestClient with the database
# replaced by a MagicMock and the admin check overridden where needed.
# =============================================================================

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.auth.dependencies import require_admin
from app.auth.models import AuthUser
from app.main import app
from core.services.media_service import MediaService
from core.services.sitemap_service import SitemapService
from core.services.username_service import UsernameService
from core.services.user_service import UserService

ADMIN = AuthUser(id=uuid4(), email="admin@example.com")


@pytest.fixture
def client(supabase_mock):
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    app.dependency_overrides[require_admin] = lambda: ADMIN
    return client


class TestPublicEndpoints:

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/v1/health"

    def test_health(self, client):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "healthy"

    def test_readiness(self, client):
        body = client.get("/api/v1/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"]["database"] == "healthy"

    def test_sitemap_headers(self, client):
        with patch.object(SitemapService, "generate_sitemap", return_value="<urlset></urlset>\n"):
            response = client.get("/sitemap.xml")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/xml; charset=utf-8"
        assert response.headers["cache-control"] == "public, max-age=3600"

    def test_username_check_anonymous(self, client):
        with patch.object(UsernameService, "check_username", return_value={"available": True}) as check:
            response = client.post("/api/v1/usernames/check", json={"username": "newname"})

        assert response.json() == {"available": True}
        check.assert_called_once_with("newname", None)

    def test_username_check_signed_in(self, client, make_token):
        user_id = str(uuid4())
        headers = {"Authorization": f"Bearer {make_token(sub=user_id)}"}

        with patch.object(UsernameService, "check_username", return_value={"available": True}) as check:
            client.post("/api/v1/usernames/check", json={"username": "mine"}, headers=headers)

        check.assert_called_once_with("mine", user_id)

    def test_resolve_missing_redirect(self, client, supabase_mock):
        query = supabase_mock.table.return_value.select.return_value.eq.return_value.eq.return_value
        query.limit.return_value.execute.return_value.data = []

        response = client.get("/api/v1/redirects/resolve", params={"path": "/gone"})

        assert response.status_code == 404
        assert response.json()["code"] == "REDIRECT_NOT_FOUND"


class TestAuthRoutes:

    def test_verify(self, client, make_token):
        user_id = str(uuid4())
        response = client.get(
            "/api/v1/auth/verify",
            headers={"Authorization": f"Bearer {make_token(sub=user_id, email='fan@example.com')}"},
        )

        assert response.json() == {"valid": True, "user_id": user_id, "email": "fan@example.com"}

    def test_expired_token(self, client, make_token):
        response = client.get(
            "/api/v1/auth/verify",
            headers={"Authorization": f"Bearer {make_token(expires_in=-10)}"},
        )

        assert response.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/api/v1/auth/verify").status_code in (401, 403)

    def test_non_admin_rejected(self, client, supabase_mock, make_token):
        supabase_mock.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []

        response = client.get(
            "/api/v1/redirects",
            headers={"Authorization": f"Bearer {make_token()}"},
        )

        assert response.status_code == 403
        assert response.json()["code"] == "ADMIN_REQUIRED"


class TestAdminEndpoints:

    def test_duplicate_redirect(self, admin_client, supabase_mock):
        supabase_mock.table.return_value.insert.return_value.execute.side_effect = Exception(
            "duplicate key value violates unique constraint"
        )

        response = admin_client.post("/api/v1/redirects", json={"source_url": "/old", "target_url": "/new"})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_REDIRECT"

    def test_invalid_redirect_body(self, admin_client):
        response = admin_client.post("/api/v1/redirects", json={"source_url": "old", "target_url": "/new"})
        assert response.status_code == 422

    def test_self_deletion(self, admin_client):
        response = admin_client.delete(f"/api/v1/users/{ADMIN.id}")

        assert response.status_code == 400
        assert response.json()["code"] == "SELF_DELETION"

    def test_create_user(self, admin_client):
        created = {"id": str(uuid4()), "email": "new@example.com"}
        with patch.object(UserService, "create_user", return_value=created) as create:
            response = admin_client.post(
                "/api/v1/users",
                json={"email": "New@Example.com", "password": "secret1"},
            )

        assert response.status_code == 201
        assert response.json() == created
        assert create.call_args.kwargs["email"] == "new@example.com"

    def test_short_password_rejected(self, admin_client):
        response = admin_client.post("/api/v1/users", json={"email": "a@b.com", "password": "123"})
        assert response.status_code == 422

    def test_database_error_is_502(self, admin_client, supabase_mock):
        supabase_mock.table.return_value.select.return_value.order.return_value.order.return_value.execute.side_effect = (
            RuntimeError("connection reset")
        )

        response = admin_client.get("/api/v1/revenue/pools")

        assert response.status_code == 502
        assert response.json()["code"] == "FETCH_FAILED"


class TestImports:

    def test_wordpress_import_submitted(self, admin_client):
        csv = b"user_email,display_name\njane@example.com,Jane\nomar@example.com,Omar\n"

        with patch("workers.tasks.import_wordpress_users") as task:
            task.delay.return_value = MagicMock(id="task-1")
            response = admin_client.post(
                "/api/v1/imports/wordpress-users",
                params={"mode": "import"},
                files={"file": ("users.csv", csv, "text/csv")},
            )

        assert response.status_code == 202
        assert response.json() == {"task_id": "task-1", "status": "PENDING", "rows": 2}
        users, mode = task.delay.call_args.args
        assert mode == "import"
        assert users[0]["email"] == "jane@example.com"

    def test_wrong_extension(self, admin_client):
        response = admin_client.post(
            "/api/v1/imports/tag-repair",
            files={"file": ("contacts.xlsx", b"a,b,c", "application/octet-stream")},
        )

        assert response.status_code == 400

    def test_broker_down(self, admin_client):
        csv = b"a,b,email,d,tags\nx,y,jane@example.com,z,Student\n"

        with patch("workers.tasks.repair_tags_from_csv") as task:
            task.delay.side_effect = ConnectionError("redis unavailable")
            response = admin_client.post(
                "/api/v1/imports/tag-repair",
                files={"file": ("contacts.csv", csv, "text/csv")},
            )

        assert response.status_code == 503


class TestPlays:

    def test_short_listen_answered_locally(self, client, make_token):
        with patch.object(MediaService, "register_play") as register:
            response = client.post(
                "/api/v1/media/plays",
                json={
                    "content_id": str(uuid4()),
                    "content_type": "song",
                    "listen_duration_seconds": 10,
                    "content_duration_seconds": 200,
                },
                headers={"Authorization": f"Bearer {make_token()}"},
            )

        assert response.json()["threshold_met"] is False
        register.assert_not_called()

    def test_counted_listen_forwards_user_token(self, client, make_token):
        token = make_token()
        with patch.object(MediaService, "register_play", return_value={"credited": True}) as register:
            response = client.post(
                "/api/v1/media/plays",
                json={
                    "content_id": str(uuid4()),
                    "content_type": "podcast_episode",
                    "listen_duration_seconds": 150,
                    "content_duration_seconds": 200,
                },
                headers={"Authorization": f"Bearer {token}"},
            )

        assert response.json() == {"credited": True}
        assert register.call_args.args[0] == token
