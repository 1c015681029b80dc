"""
Bulk import of products and clients, and the import history
"""
import asyncio

import pytest

from tests.factories import TestDataFactory


def valid_rows(count):
    return [
        {"nameEn": f"Item {i}", "code": f"C{i}", "price": i + 1}
        for i in range(count)
    ]


def invalid_rows(count):
    return [{"nameEn": f"Broken {i}", "price": 1} for i in range(count)]


class TestBulkImportCounts:
    """N valid and M invalid rows grow the collection by N and log M errors"""

    @pytest.mark.parametrize("n_valid, n_invalid, expected_status", [
        (3, 0, "success"),
        (2, 2, "partial"),
        (0, 3, "error"),
    ])
    def test_counts_and_status(self, client, store, n_valid, n_invalid, expected_status):
        token, _ = TestDataFactory.register_user(client)
        before = len(asyncio.run(store.get_collection("products")))

        response = client.post(
            "/api/products/bulk",
            json={"products": valid_rows(n_valid) + invalid_rows(n_invalid), "fileName": "items.csv"},
            headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 201, response.text
        body = response.json()
        assert body["count"] == n_valid
        assert body["failedCount"] == n_invalid
        assert body["status"] == expected_status
        assert len(body["errors"]) == n_invalid

        after = asyncio.run(store.get_collection("products"))
        assert len(after) == before + n_valid

        logs = asyncio.run(store.get_collection("importLogs"))
        assert len(logs) == 1
        assert logs[0]["id"] == body["importLogId"]
        assert logs[0]["successfulCount"] == n_valid
        assert logs[0]["failedCount"] == n_invalid
        assert logs[0]["status"] == expected_status
        assert logs[0]["fileName"] == "items.csv"

    def test_error_rows_are_one_based(self, client):
        token, _ = TestDataFactory.register_user(client)
        rows = valid_rows(1) + [{"nameEn": "No price", "code": "X"}]
        body = client.post(
            "/api/products/bulk", json={"products": rows}, headers=TestDataFactory.auth_headers(token)
        ).json()
        assert body["errors"] == [
            {"row": 2, "error": "Price must be a valid number", "data": {"nameEn": "No price", "code": "X"}}
        ]

    def test_empty_batch_is_rejected(self, client, store):
        token, _ = TestDataFactory.register_user(client)
        response = client.post(
            "/api/products/bulk", json={"products": []}, headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 400
        assert asyncio.run(store.get_collection("importLogs")) == []

    def test_client_import_requires_names(self, client, store):
        token, user = TestDataFactory.register_user(client)
        response = client.post(
            "/api/clients/bulk",
            json={"clients": [{"name": "Dana", "notes": "called twice"}, {"phone": "123"}]},
            headers=TestDataFactory.auth_headers(token)
        )
        body = response.json()
        assert body["status"] == "partial"
        assert body["errors"][0]["error"] == "Client name is required"

        clients = asyncio.run(store.get_collection("clients"))
        assert len(clients) == 1
        assert clients[0]["userId"] == user["id"]
        assert clients[0]["comments"][0]["text"] == "called twice"

    @pytest.mark.parametrize("bad_field, message", [
        ({"comments": 5}, "comments must be a list"),
        ({"reminders": 7}, "reminders must be a list"),
        ({"comments": [3]}, "Comment must be a string or an object"),
        ({"reminders": ["tomorrow"]}, "Reminder must be an object"),
    ])
    def test_malformed_nested_fields_fail_only_their_row(self, client, store, bad_field, message):
        token, _ = TestDataFactory.register_user(client)
        response = client.post(
            "/api/clients/bulk",
            json={"clients": [{"name": "Good"}, {"name": "Bad", **bad_field}]},
            headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 201, response.text
        body = response.json()
        assert body["status"] == "partial"
        assert body["count"] == 1
        assert body["errors"] == [{"row": 2, "error": message, "data": {"name": "Bad", **bad_field}}]

        assert [c["name"] for c in asyncio.run(store.get_collection("clients"))] == ["Good"]
        assert len(asyncio.run(store.get_collection("importLogs"))) == 1


class TestBulkImportOwnership:
    """Owner of imported rows"""

    def test_rows_belong_to_importer(self, client, store):
        token, user = TestDataFactory.register_user(client)
        client.post(
            "/api/products/bulk", json={"products": valid_rows(2)}, headers=TestDataFactory.auth_headers(token)
        )
        owners = {p["userId"] for p in asyncio.run(store.get_collection("products"))}
        assert owners == {user["id"]}

    def test_admin_can_import_for_another_user(self, client, store):
        _, user = TestDataFactory.register_user(client, full_name="Dana Levi")
        admin_headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))

        body = client.post(
            "/api/products/bulk",
            json={"products": valid_rows(2), "assignToUserId": user["id"]},
            headers=admin_headers
        ).json()

        owners = {p["userId"] for p in asyncio.run(store.get_collection("products"))}
        assert owners == {user["id"]}

        log = client.get(f"/api/import-history/{body['importLogId']}", headers=admin_headers).json()
        assert log["assignedUserId"] == user["id"]
        assert log["assignedUserName"] == "Dana Levi"
        assert log["importedBy"] == "Administrator"

    def test_user_cannot_import_for_someone_else(self, client, store):
        token, _ = TestDataFactory.register_user(client)
        _, other = TestDataFactory.register_user(client)
        response = client.post(
            "/api/products/bulk",
            json={"products": valid_rows(1), "assignToUserId": other["id"]},
            headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 403
        assert asyncio.run(store.get_collection("products")) == []

    def test_assign_to_unknown_user_is_rejected(self, client):
        admin_headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        response = client.post(
            "/api/products/bulk",
            json={"products": valid_rows(1), "assignToUserId": "nobody"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "User not found"


class TestImportHistory:
    """Admin-only import history"""

    def _import(self, client, token, rows):
        return client.post(
            "/api/products/bulk", json={"products": rows}, headers=TestDataFactory.auth_headers(token)
        ).json()["importLogId"]

    def test_history_is_admin_only(self, client):
        token, _ = TestDataFactory.register_user(client)
        response = client.get("/api/import-history/", headers=TestDataFactory.auth_headers(token))
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_list_get_delete_clear(self, client, store):
        token, _ = TestDataFactory.register_user(client)
        admin_headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        first = self._import(client, token, valid_rows(1))
        second = self._import(client, token, valid_rows(2))

        # Журналы одной секунды различаются только по времени создания
        async def age_first():
            async with store.transaction() as data:
                for log in data["importLogs"]:
                    if log["id"] == first:
                        log["createdAt"] = "2020-01-01T00:00:00.000Z"

        asyncio.run(age_first())

        logs = client.get("/api/import-history/", headers=admin_headers).json()
        assert [log["id"] for log in logs] == [second, first]
        assert logs[0]["totalRows"] == 2

        assert client.get("/api/import-history/missing", headers=admin_headers).status_code == 404
        assert client.delete(f"/api/import-history/{first}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/import-history/{first}", headers=admin_headers).status_code == 404

        cleared = client.delete("/api/import-history/", headers=admin_headers).json()
        assert cleared == {"success": True, "deleted": 1}
        assert client.get("/api/import-history/", headers=admin_headers).json() == []
