"""
Admin console: bootstrap, access control, user management, assignment
"""
import asyncio

from crm.domains.identity.services import IdentityService
from tests.factories import TestDataFactory


class TestAdminBootstrap:
    """Default admin is created once"""

    def test_bootstrap_is_idempotent(self, store):
        service = IdentityService(store)
        first = asyncio.run(service.ensure_admin())
        second = asyncio.run(service.ensure_admin())

        assert first is not None
        assert first.id.startswith("admin-")
        assert first.must_change_password
        assert second is None

        admins = [u for u in asyncio.run(store.get_collection("users")) if u.get("role") == "admin"]
        assert len(admins) == 1

    def test_bootstrap_does_not_rewrite_existing_data(self, store, monkeypatch):
        service = IdentityService(store)
        asyncio.run(service.ensure_admin())

        async def fail_write(data):
            raise AssertionError("data file must not be rewritten")

        monkeypatch.setattr(store, "write_data", fail_write)
        assert asyncio.run(service.ensure_admin()) is None

    def test_startup_creates_admin(self, client, store):
        users = asyncio.run(store.get_collection("users"))
        assert [u["email"] for u in users] == ["admin"]

    def test_admin_login_requires_admin_role(self, client):
        TestDataFactory.register_user(client, email="noa@mail-crm.io")
        response = client.post(
            "/api/admin/login", json={"email": "noa@mail-crm.io", "password": TestDataFactory.DEFAULT_PASSWORD}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid admin credentials"

    def test_admin_login_reports_password_change_required(self, client):
        response = client.post("/api/admin/login", json={"email": "admin", "password": "admin"})
        assert response.status_code == 200
        assert response.json()["user"]["mustChangePassword"] is True

    def test_change_password_clears_flag(self, client):
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        response = client.post(
            "/api/admin/change-password",
            json={"currentPassword": "admin", "newPassword": "stronger-admin"},
            headers=headers
        )
        assert response.status_code == 200

        login = client.post("/api/admin/login", json={"email": "admin", "password": "stronger-admin"})
        assert login.json()["user"]["mustChangePassword"] is False

    def test_change_password_with_wrong_current_password(self, client):
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        response = client.post(
            "/api/admin/change-password",
            json={"currentPassword": "wrong", "newPassword": "stronger-admin"},
            headers=headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"


class TestAdminAccess:

    def test_regular_user_is_forbidden(self, client):
        token, _ = TestDataFactory.register_user(client)
        response = client.get("/api/admin/dashboard", headers=TestDataFactory.auth_headers(token))
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_anonymous_is_unauthorized(self, client):
        assert client.get("/api/admin/users").status_code == 401


class TestUserManagement:

    def test_dashboard_stats(self, client):
        token_u, _ = TestDataFactory.register_user(client)
        TestDataFactory.register_user(client)
        TestDataFactory.create_client(client, token_u)
        TestDataFactory.create_product(client, token_u)
        TestDataFactory.upload_document(client, token_u)
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        body = client.get("/api/admin/dashboard", headers=headers).json()
        stats = body["stats"]
        assert stats["totalUsers"] == 2
        assert stats["totalClients"] == 1
        assert stats["totalProducts"] == 1
        assert stats["totalDocuments"] == 1
        assert stats["activeUsers"] == 1
        assert stats["usersWithClients"] == 1
        assert stats["usersWithProducts"] == 1
        assert len(body["recentLogins"]) == 1

    def test_users_list_has_counts_and_no_admins(self, client):
        token_u, user = TestDataFactory.register_user(client)
        TestDataFactory.create_client(client, token_u)
        TestDataFactory.create_client(client, token_u)
        TestDataFactory.create_product(client, token_u)
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        users = client.get("/api/admin/users", headers=headers).json()
        assert [u["id"] for u in users] == [user["id"]]
        assert users[0]["clientCount"] == 2
        assert users[0]["productCount"] == 1
        assert users[0]["documentCount"] == 0

    def test_reset_user_password_requires_change(self, client):
        _, user = TestDataFactory.register_user(client, email="noa@mail-crm.io")
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        response = client.post(
            f"/api/admin/users/{user['id']}/reset-password", json={"newPassword": "temp-pass"}, headers=headers
        )
        assert response.status_code == 200

        login = client.post("/api/auth/login", json={"email": "noa@mail-crm.io", "password": "temp-pass"})
        assert login.status_code == 200
        assert login.json()["user"]["mustChangePassword"] is True

    def test_change_user_email_checks_uniqueness(self, client):
        _, user = TestDataFactory.register_user(client, email="noa@mail-crm.io")
        TestDataFactory.register_user(client, email="taken@mail-crm.io")
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        taken = client.put(
            f"/api/admin/users/{user['id']}/email", json={"email": "taken@mail-crm.io"}, headers=headers
        )
        assert taken.status_code == 400

        changed = client.put(
            f"/api/admin/users/{user['id']}/email", json={"email": "noa.new@mail-crm.io"}, headers=headers
        )
        assert changed.json()["email"] == "noa.new@mail-crm.io"

    def test_deactivated_user_token_stops_working(self, client):
        token, user = TestDataFactory.register_user(client)
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        response = client.put(f"/api/admin/users/{user['id']}/status", json={"isActive": False}, headers=headers)
        assert response.json()["isActive"] is False
        assert client.get("/api/auth/verify", headers=TestDataFactory.auth_headers(token)).status_code == 401

    def test_admin_accounts_cannot_be_targeted(self, client):
        admin_token = TestDataFactory.admin_token(client)
        headers = TestDataFactory.auth_headers(admin_token)
        admin = client.get("/api/auth/verify", headers=headers).json()

        assert client.delete(f"/api/admin/users/{admin['id']}", headers=headers).status_code == 404
        assert client.put(
            f"/api/admin/users/{admin['id']}/status", json={"isActive": False}, headers=headers
        ).status_code == 404

    def test_delete_user_keeps_their_records(self, client, store):
        token, user = TestDataFactory.register_user(client)
        TestDataFactory.create_product(client, token)
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        assert client.delete(f"/api/admin/users/{user['id']}", headers=headers).status_code == 200
        assert client.delete(f"/api/admin/users/{user['id']}", headers=headers).status_code == 404
        products = asyncio.run(store.get_collection("products"))
        assert [p["userId"] for p in products] == [user["id"]]


class TestAssignment:
    """Admin reassigns records between users"""

    def test_assign_product_moves_ownership(self, client):
        token_u, _ = TestDataFactory.register_user(client)
        token_u2, user_u2 = TestDataFactory.register_user(client)
        product = TestDataFactory.create_product(client, token_u)
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        response = client.post(
            f"/api/admin/products/{product['id']}/assign", json={"userId": user_u2["id"]}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["userId"] == user_u2["id"]

        assert client.get("/api/products/", headers=TestDataFactory.auth_headers(token_u)).json() == []
        listed = client.get("/api/products/", headers=TestDataFactory.auth_headers(token_u2)).json()
        assert [p["id"] for p in listed] == [product["id"]]

    def test_assign_client_and_document(self, client):
        token_u, _ = TestDataFactory.register_user(client)
        _, user_u2 = TestDataFactory.register_user(client)
        crm_client = TestDataFactory.create_client(client, token_u)
        document = TestDataFactory.upload_document(client, token_u).json()
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        assigned_client = client.post(
            f"/api/admin/clients/{crm_client['id']}/assign", json={"userId": user_u2["id"]}, headers=headers
        )
        assigned_document = client.post(
            f"/api/admin/documents/{document['id']}/assign", json={"userId": user_u2["id"]}, headers=headers
        )
        assert assigned_client.json()["userId"] == user_u2["id"]
        assert assigned_document.json()["userId"] == user_u2["id"]

    def test_assign_validation(self, client):
        token_u, user_u = TestDataFactory.register_user(client)
        product = TestDataFactory.create_product(client, token_u)
        headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        url = f"/api/admin/products/{product['id']}/assign"

        missing_id = client.post(url, json={}, headers=headers)
        assert missing_id.status_code == 400
        assert missing_id.json()["detail"] == "User ID is required"

        unknown_user = client.post(url, json={"userId": "nobody"}, headers=headers)
        assert unknown_user.status_code == 400

        missing_product = client.post(
            "/api/admin/products/missing/assign", json={"userId": user_u["id"]}, headers=headers
        )
        assert missing_product.status_code == 404
        assert missing_product.json()["detail"] == "Product not found"
