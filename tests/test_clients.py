"""
Clients: creation rules, comments and reminders
"""
import asyncio

from tests.factories import TestDataFactory


class TestClientApi:
    """Clients endpoints"""

    def test_create_requires_name(self, client):
        token, _ = TestDataFactory.register_user(client)
        response = client.post(
            "/api/clients/", json={"phone": "050-0000000"}, headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Client name is required"

    def test_notes_become_first_comment(self, client):
        token, user = TestDataFactory.register_user(client)
        created = TestDataFactory.create_client(client, token, name="Dana", notes="Prefers email")
        assert created["userId"] == user["id"]
        assert [c["text"] for c in created["comments"]] == ["Prefers email"]
        assert created["comments"][0]["userId"] == user["id"]

    def test_list_is_scoped_to_owner(self, client):
        token_u, _ = TestDataFactory.register_user(client)
        token_u2, _ = TestDataFactory.register_user(client)
        mine = TestDataFactory.create_client(client, token_u)
        TestDataFactory.create_client(client, token_u2)

        response = client.get("/api/clients/", headers=TestDataFactory.auth_headers(token_u))
        assert [c["id"] for c in response.json()] == [mine["id"]]

    def test_update_keeps_owner(self, client):
        token, user = TestDataFactory.register_user(client)
        created = TestDataFactory.create_client(client, token, name="Dana")
        response = client.put(
            f"/api/clients/{created['id']}",
            json={"name": "Dana Cohen", "userId": "someone-else"},
            headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Dana Cohen"
        assert response.json()["userId"] == user["id"]

    def test_nested_fields_are_stored_as_strings(self, client, store):
        token, user = TestDataFactory.register_user(client)
        headers = TestDataFactory.auth_headers(token)
        response = client.post(
            "/api/clients/",
            json={
                "name": "Dana",
                "comments": [{"text": "hi", "createdAt": 5, "id": 7, "userId": "someone-else"}],
                "reminders": [{"date": "2026-11-01", "note": 12, "createdAt": 5}],
            },
            headers=headers
        )
        assert response.status_code == 201, response.text
        comment = response.json()["comments"][0]
        assert comment == {"id": "7", "text": "hi", "createdAt": "5", "userId": user["id"]}
        assert response.json()["reminders"][0]["note"] == "12"

        listed = client.get("/api/clients/", headers=headers)
        assert listed.status_code == 200
        assert [c["name"] for c in listed.json()] == ["Dana"]

    def test_update_with_malformed_comment_is_400(self, client):
        token, _ = TestDataFactory.register_user(client)
        created = TestDataFactory.create_client(client, token)
        response = client.put(
            f"/api/clients/{created['id']}", json={"comments": [3]}, headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Comment must be a string or an object"

    def test_update_keeps_comment_authors(self, client):
        token, user = TestDataFactory.register_user(client)
        headers = TestDataFactory.auth_headers(token)
        created = TestDataFactory.create_client(client, token, notes="first")
        admin_headers = TestDataFactory.auth_headers(TestDataFactory.admin_token(client))
        existing = created["comments"][0]

        response = client.put(
            f"/api/clients/{created['id']}",
            json={"comments": [existing, {"text": "second", "userId": user["id"]}]},
            headers=admin_headers
        )
        comments = response.json()["comments"]
        admin = client.get("/api/auth/verify", headers=admin_headers).json()
        assert comments[0]["userId"] == user["id"]
        assert comments[1]["userId"] == admin["id"]
        assert client.get(f"/api/clients/{created['id']}", headers=headers).status_code == 200

    def test_legacy_client_without_last_contacted(self, client, store):
        token, user = TestDataFactory.register_user(client)

        async def seed():
            async with store.transaction() as data:
                data["clients"].append({"id": "legacy", "name": "Old", "userId": user["id"], "comments": 5})

        asyncio.run(seed())
        body = client.get("/api/clients/legacy", headers=TestDataFactory.auth_headers(token)).json()
        assert body["lastContacted"] is None
        assert body["comments"] == []

    def test_update_with_empty_name_is_400(self, client):
        token, _ = TestDataFactory.register_user(client)
        created = TestDataFactory.create_client(client, token)
        response = client.put(
            f"/api/clients/{created['id']}", json={"name": "  "}, headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 400


class TestCommentsAndReminders:
    """Comments and reminders carry the author's id"""

    def test_admin_comment_is_stamped_with_admin_id(self, client):
        token, user = TestDataFactory.register_user(client)
        created = TestDataFactory.create_client(client, token)
        admin_token = TestDataFactory.admin_token(client)
        admin = client.get("/api/auth/verify", headers=TestDataFactory.auth_headers(admin_token)).json()

        response = client.post(
            f"/api/clients/{created['id']}/comments",
            json={"text": "Called back"},
            headers=TestDataFactory.auth_headers(admin_token)
        )
        assert response.status_code == 201
        body = response.json()
        assert body["userId"] == user["id"]
        assert body["comments"][-1]["text"] == "Called back"
        assert body["comments"][-1]["userId"] == admin["id"]
        assert body["lastContacted"] == body["comments"][-1]["createdAt"]

    def test_add_reminder(self, client):
        token, user = TestDataFactory.register_user(client)
        created = TestDataFactory.create_client(client, token)
        response = client.post(
            f"/api/clients/{created['id']}/reminders",
            json={"date": "2030-05-01", "note": "Renew contract"},
            headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 201
        reminder = response.json()["reminders"][0]
        assert reminder["date"] == "2030-05-01"
        assert reminder["note"] == "Renew contract"
        assert reminder["userId"] == user["id"]

    def test_comment_on_foreign_client_is_forbidden(self, client):
        token_u, _ = TestDataFactory.register_user(client)
        token_u2, _ = TestDataFactory.register_user(client)
        created = TestDataFactory.create_client(client, token_u)
        response = client.post(
            f"/api/clients/{created['id']}/comments",
            json={"text": "Hi"},
            headers=TestDataFactory.auth_headers(token_u2)
        )
        assert response.status_code == 403

    def test_comment_on_missing_client(self, client):
        token, _ = TestDataFactory.register_user(client)
        response = client.post(
            "/api/clients/missing/comments", json={"text": "Hi"}, headers=TestDataFactory.auth_headers(token)
        )
        assert response.status_code == 404
