"""
MeetSpace Backend: API Integration Tests
==========================================

What:  Full request/response cycles through the FastAPI app with the fake
       identity provider and the in-memory store swapped in.

What we test:
    ✅ Register / login / password reset (unauthenticated routes)
    ✅ Profile read with lazy provisioning, update, email change, delete
    ✅ Meeting CRUD, field validation, owner scoping of the list
    ✅ Error body shape and status codes
    ✅ Health endpoint
"""

import pytest

from conftest import bearer

USERS = "/api/v1/users"
MEETINGS = "/api/v1/meetings"

STANDUP = {"title": "Standup", "date": "2024-01-05", "time": "09:00", "duration": 15}


async def _register(client, email="ada@meetspace.io", password="secret123", **profile):
    response = await client.post(
        f"{USERS}/register", json={"email": email, "password": password, **profile}
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestRegisterAndLogin:

    @pytest.mark.asyncio
    async def test_register_returns_camel_case_profile(self, test_client):
        body = await _register(test_client, username="ada", lastname="Lovelace")

        assert body["id"] == "uid-1"
        assert body["email"] == "ada@meetspace.io"
        assert body["username"] == "ada"
        assert body["birthdate"] == ""
        assert body["createdAt"] == body["updatedAt"]
        assert "created_at" not in body

    @pytest.mark.asyncio
    async def test_register_without_email_never_reaches_provider(self, test_client, identity):
        response = await test_client.post(f"{USERS}/register", json={"password": "secret123"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"
        assert identity.calls == []

    @pytest.mark.asyncio
    async def test_register_duplicate_email_is_409(self, test_client):
        await _register(test_client)
        response = await test_client.post(
            f"{USERS}/register", json={"email": "ada@meetspace.io", "password": "other123"}
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_login_returns_tokens_and_user(self, test_client):
        registered = await _register(test_client)

        response = await test_client.post(
            f"{USERS}/login", json={"email": "ada@meetspace.io", "password": "secret123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["idToken"] == "token-uid-1"
        assert body["refreshToken"] == "refresh-uid-1"
        assert body["expiresIn"] == "3600"
        assert body["user"] == registered

    @pytest.mark.asyncio
    async def test_login_wrong_password_is_401(self, test_client):
        await _register(test_client)

        response = await test_client.post(
            f"{USERS}/login", json={"email": "ada@meetspace.io", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_without_profile_has_null_user(self, test_client, identity):
        identity.add_account("uid-ext", "ext@meetspace.io")

        response = await test_client.post(
            f"{USERS}/login", json={"email": "ext@meetspace.io", "password": "secret123"}
        )

        assert response.status_code == 200
        assert response.json()["user"] is None


class TestPasswordReset:

    @pytest.mark.asyncio
    async def test_request_returns_link(self, test_client):
        await _register(test_client)

        response = await test_client.post(
            f"{USERS}/request-password-reset", json={"email": "ada@meetspace.io"}
        )

        assert response.status_code == 200
        assert "oobCode=" in response.json()["link"]

    @pytest.mark.asyncio
    async def test_request_without_email_is_400(self, test_client):
        response = await test_client.post(f"{USERS}/request-password-reset", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Email is required"

    @pytest.mark.asyncio
    async def test_reset_password_is_always_400(self, test_client):
        response = await test_client.post(f"{USERS}/reset-password", json={"password": "x"})

        assert response.status_code == 400
        assert "email link" in response.json()["message"]


class TestProfile:

    @pytest.mark.asyncio
    async def test_profile_requires_token(self, test_client):
        response = await test_client.get(f"{USERS}/profile")

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "No token provided"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_registered_user_is_what_profile_returns(self, test_client, user_repo):
        registered = await _register(test_client, username="ada", birthdate="1815-12-10")

        first = await test_client.get(f"{USERS}/profile", headers=bearer(registered["id"]))
        second = await test_client.get(f"{USERS}/profile", headers=bearer(registered["id"]))

        assert first.status_code == 200
        assert first.json() == registered
        assert second.json() == registered
        assert len(await user_repo.query_by_field("email", "ada@meetspace.io")) == 1

    @pytest.mark.asyncio
    async def test_first_access_provisions_profile(self, test_client, identity, user_repo):
        identity.add_account("uid-ext", "grace@meetspace.io", display_name="Grace")

        response = await test_client.get(f"{USERS}/profile", headers=bearer("uid-ext"))

        assert response.status_code == 200
        assert response.json()["username"] == "Grace"
        assert (await user_repo.get_by_id("uid-ext")).email == "grace@meetspace.io"

    @pytest.mark.asyncio
    async def test_update_profile_only_touches_profile_fields(self, test_client):
        await _register(test_client, username="ada")

        response = await test_client.put(
            f"{USERS}/profile",
            headers=bearer("uid-1"),
            json={"lastname": "Lovelace", "email": "evil@meetspace.io"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["lastname"] == "Lovelace"
        assert body["username"] == "ada"
        assert body["email"] == "ada@meetspace.io"
        assert body["updatedAt"] >= body["createdAt"]

    @pytest.mark.asyncio
    async def test_update_email(self, test_client, identity):
        await _register(test_client)

        response = await test_client.put(
            f"{USERS}/email", headers=bearer("uid-1"), json={"email": "ada@lovelace.io"}
        )

        assert response.status_code == 200
        assert response.json()["email"] == "ada@lovelace.io"
        assert identity.accounts["uid-1"]["email"] == "ada@lovelace.io"

    @pytest.mark.asyncio
    async def test_update_email_taken_is_409(self, test_client):
        await _register(test_client)
        await _register(test_client, email="grace@meetspace.io")

        response = await test_client.put(
            f"{USERS}/email", headers=bearer("uid-1"), json={"email": "grace@meetspace.io"}
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Email already in use"

    @pytest.mark.asyncio
    async def test_delete_profile_removes_document_and_account(
        self, test_client, identity, user_repo
    ):
        await _register(test_client)

        response = await test_client.delete(f"{USERS}/profile", headers=bearer("uid-1"))

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted"}
        assert await user_repo.get_by_id("uid-1") is None
        assert "uid-1" not in identity.accounts


class TestMeetings:

    @pytest.fixture(autouse=True)
    def _accounts(self, identity):
        identity.add_account("alice", "alice@meetspace.io")
        identity.add_account("bob", "bob@meetspace.io")

    async def _create(self, client, uid="alice", **overrides):
        response = await client.post(MEETINGS, headers=bearer(uid), json={**STANDUP, **overrides})
        assert response.status_code == 201, response.text
        return response.json()

    @pytest.mark.asyncio
    async def test_create_is_owned_by_caller(self, test_client):
        body = await self._create(test_client, ownerId="bob")

        assert body["id"]
        assert body["ownerId"] == "alice"
        assert body["title"] == "Standup"
        assert body["description"] == ""
        assert body["createdAt"] == body["updatedAt"]

    @pytest.mark.asyncio
    async def test_create_requires_token(self, test_client):
        response = await test_client.post(MEETINGS, json=STANDUP)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_with_bad_token(self, test_client):
        response = await test_client.post(
            MEETINGS, headers={"Authorization": "Bearer forged"}, json=STANDUP
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Token invalid or expired"

    @pytest.mark.asyncio
    async def test_create_missing_title_is_400_with_details(self, test_client):
        payload = {k: v for k, v in STANDUP.items() if k != "title"}

        response = await test_client.post(MEETINGS, headers=bearer("alice"), json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_argument"
        assert body["details"]["field"] == "title"

    @pytest.mark.asyncio
    async def test_string_duration_is_400(self, test_client):
        response = await test_client.post(
            MEETINGS, headers=bearer("alice"), json={**STANDUP, "duration": "30"}
        )

        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "duration"

    @pytest.mark.asyncio
    async def test_list_only_returns_own_meetings(self, test_client):
        await self._create(test_client)
        await self._create(test_client, uid="bob", title="Bob's sync")

        response = await test_client.get(MEETINGS, headers=bearer("alice"))

        assert response.status_code == 200
        assert [m["title"] for m in response.json()] == ["Standup"]

    @pytest.mark.asyncio
    async def test_get_update_delete_round(self, test_client):
        meeting = await self._create(test_client)
        url = f"{MEETINGS}/{meeting['id']}"

        fetched = await test_client.get(url, headers=bearer("alice"))
        assert fetched.json() == meeting

        updated = await test_client.put(url, headers=bearer("alice"), json={"duration": 45})
        assert updated.status_code == 200
        assert updated.json()["duration"] == 45
        assert updated.json()["title"] == "Standup"
        assert updated.json()["updatedAt"] >= meeting["updatedAt"]

        deleted = await test_client.delete(url, headers=bearer("alice"))
        assert deleted.json() == {"message": "Meeting deleted"}

        missing = await test_client.get(url, headers=bearer("alice"))
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_sequential_updates_never_move_updated_at_backwards(self, test_client):
        meeting = await self._create(test_client)
        url = f"{MEETINGS}/{meeting['id']}"

        first = await test_client.put(url, headers=bearer("alice"), json={"title": "A"})
        second = await test_client.put(url, headers=bearer("alice"), json={"title": "B"})

        assert first.status_code == second.status_code == 200
        assert first.json()["updatedAt"] >= meeting["updatedAt"]
        assert second.json()["updatedAt"] >= first.json()["updatedAt"]
        assert second.json()["createdAt"] == meeting["createdAt"]

    @pytest.mark.asyncio
    async def test_non_owner_can_read_by_id(self, test_client):
        """Ownership of reads by id is not checked unless enforcement is enabled."""
        meeting = await self._create(test_client)

        response = await test_client.get(f"{MEETINGS}/{meeting['id']}", headers=bearer("bob"))

        assert response.status_code == 200
        assert response.json()["ownerId"] == "alice"

    @pytest.mark.asyncio
    async def test_delete_unknown_meeting_is_404(self, test_client):
        response = await test_client.delete(f"{MEETINGS}/does-not-exist", headers=bearer("alice"))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_with_bad_time_is_400(self, test_client):
        meeting = await self._create(test_client)

        response = await test_client.put(
            f"{MEETINGS}/{meeting['id']}", headers=bearer("alice"), json={"time": "25:00"}
        )

        assert response.status_code == 400


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["document_store"] == "memory:ok"
        assert body["identity_provider"] == "available"

    @pytest.mark.asyncio
    async def test_identity_down_is_degraded(self, test_client, identity):
        identity.healthy = False

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_response_carries_request_id(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"
