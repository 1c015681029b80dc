"""
Ownership scoping: list filtering, 403 for foreign records, 404 for missing ones
"""
import asyncio

import pytest

from crm.core.exceptions import AccessDeniedError
from crm.domains.ownership.entities import OwnershipScope
from crm.domains.products.entities import Product
from tests.factories import TestDataFactory


def make_product(user_id):
    return Product.build({"nameEn": "Widget", "code": "W1", "price": 10}, user_id)


class TestOwnershipScope:
    """Unit tests for the scope object"""

    def test_regular_user_sees_only_own_records(self):
        scope = OwnershipScope("u1")
        products = [make_product("u1"), make_product("u2"), make_product(None)]
        assert [p.user_id for p in scope.filter(products)] == ["u1"]

    def test_admin_sees_everything(self):
        scope = OwnershipScope("admin-1", is_admin=True)
        products = [make_product("u1"), make_product(None)]
        assert scope.filter(products) == products

    def test_check_missing_returns_none(self):
        assert OwnershipScope("u1").check(None) is None

    def test_check_foreign_raises(self):
        with pytest.raises(AccessDeniedError):
            OwnershipScope("u1").check(make_product("u2"))

    def test_record_without_owner_is_hidden_from_users(self):
        assert not OwnershipScope("u1").can_access(None)
        assert OwnershipScope("admin-1", is_admin=True).can_access(None)


class TestProductOwnershipApi:
    """Ownership rules through the products endpoints"""

    def test_widget_scenario(self, client, store):
        token_u, user_u = TestDataFactory.register_user(client)
        token_u2, _ = TestDataFactory.register_user(client)
        admin_token = TestDataFactory.admin_token(client)

        created = TestDataFactory.create_product(
            client, token_u, nameEn="Widget", code="W1", price=10, discount=50, discountType="percent"
        )
        assert created["finalPrice"] == 5

        stored = asyncio.run(store.get_collection("products"))
        assert len(stored) == 1
        assert stored[0]["userId"] == user_u["id"]

        response = client.get("/api/products/", headers=TestDataFactory.auth_headers(token_u2))
        assert response.json() == []

        response = client.get("/api/products/", headers=TestDataFactory.auth_headers(admin_token))
        assert [p["id"] for p in response.json()] == [created["id"]]

    def test_foreign_record_is_forbidden(self, client):
        token_u, _ = TestDataFactory.register_user(client)
        token_u2, _ = TestDataFactory.register_user(client)
        product = TestDataFactory.create_product(client, token_u)
        headers = TestDataFactory.auth_headers(token_u2)

        assert client.get(f"/api/products/{product['id']}", headers=headers).status_code == 403
        assert client.put(
            f"/api/products/{product['id']}", json={"price": 1}, headers=headers
        ).status_code == 403
        assert client.delete(f"/api/products/{product['id']}", headers=headers).status_code == 403

        owner = client.get(f"/api/products/{product['id']}", headers=TestDataFactory.auth_headers(token_u))
        assert owner.json()["price"] == product["price"]

    def test_missing_record_is_not_found(self, client):
        token, _ = TestDataFactory.register_user(client)
        headers = TestDataFactory.auth_headers(token)

        response = client.get("/api/products/missing", headers=headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"
        assert client.put("/api/products/missing", json={"price": 1}, headers=headers).status_code == 404
        assert client.delete("/api/products/missing", headers=headers).status_code == 404

    def test_admin_can_modify_any_record(self, client):
        token_u, _ = TestDataFactory.register_user(client)
        admin_headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        product = TestDataFactory.create_product(client, token_u)

        response = client.put(f"/api/products/{product['id']}", json={"price": 42}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["price"] == 42
        assert response.json()["userId"] == product["userId"]

    def test_orphaned_records_visible_only_to_admin(self, client, store):
        token_u, _ = TestDataFactory.register_user(client)

        async def add_orphan():
            async with store.transaction() as data:
                data["products"].append({"id": "legacy", "nameEn": "Old", "code": "O1", "price": 3})

        asyncio.run(add_orphan())

        user_headers = TestDataFactory.auth_headers(token_u)
        assert client.get("/api/products/", headers=user_headers).json() == []
        assert client.get("/api/products/legacy", headers=user_headers).status_code == 403

        admin_headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        assert client.get("/api/products/legacy", headers=admin_headers).status_code == 200

    def test_requests_without_token_are_rejected(self, client):
        assert client.get("/api/products/").status_code == 401
        response = client.get("/api/products/", headers=TestDataFactory.auth_headers("garbage"))
        assert response.status_code == 401


class TestClientDeletion:
    """Delete then get returns NotFound"""

    def test_delete_then_get_is_not_found(self, client):
        token, _ = TestDataFactory.register_user(client)
        headers = TestDataFactory.auth_headers(token)
        created = TestDataFactory.create_client(client, token)

        assert client.delete(f"/api/clients/{created['id']}", headers=headers).status_code == 200
        response = client.get(f"/api/clients/{created['id']}", headers=headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Client not found"
