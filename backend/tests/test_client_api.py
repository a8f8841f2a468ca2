"""
Jotter Client: API and Session Client Tests
============================================

What:  JotterClient against the real app (ASGITransport) and SessionClient
       against a mocked GoTrue (MockTransport).
"""

import json

import httpx
import pytest
from httpx import ASGITransport

from jotter.client.api import ApiError, JotterClient, error_message
from jotter.client.forms import validate_note_draft
from jotter.client.session import SessionClient

from conftest import ALICE_TOKEN, ANON_KEY, BOB_TOKEN


def api_for(app, token=None):
    return JotterClient(
        "http://test",
        access_token=token,
        anon_key=ANON_KEY,
        transport=ASGITransport(app=app),
    )


class TestJotterClient:

    @pytest.mark.asyncio
    async def test_note_lifecycle(self, app):
        async with api_for(app, ALICE_TOKEN) as api:
            created = await api.create_note(
                validate_note_draft("Pay rent", "2025-01-01", text=" monthly ", tags=["bills"])
            )
            assert created.deadline == "2025-01-01T23:59:59.999Z"
            assert created.text == "monthly"

            updated = await api.update_note(
                created.id,
                validate_note_draft("Pay rent (Jan)", created.deadline, tags=["bills", "home"]),
            )
            assert updated.title == "Pay rent (Jan)"
            assert updated.created_at == created.created_at

            notes = await api.list_notes()
            assert [note.id for note in notes] == [created.id]
            assert notes[0].tags == ["bills", "home"]

            assert await api.delete_note(created.id) == "Note deleted successfully"
            assert await api.list_notes() == []

    @pytest.mark.asyncio
    async def test_errors_carry_server_message(self, app):
        async with api_for(app, BOB_TOKEN) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.delete_note("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Note not found"

    @pytest.mark.asyncio
    async def test_authenticated_call_without_token(self, app, kv_store):
        async with api_for(app) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.list_notes()

        assert exc_info.value.status_code == 401
        assert kv_store.calls == 0

    @pytest.mark.asyncio
    async def test_sign_up_and_profile(self, app, auth_provider):
        async with api_for(app) as api:
            result = await api.sign_up("dave@example.com", "secret1", "dave")
            assert result.username == "dave"

            auth_provider.tokens["token-dave"] = result.user_id
            api.access_token = "token-dave"
            profile = await api.get_profile()
            message = await api.update_password("another-secret")

        assert profile.email == "dave@example.com"
        assert message == "Password updated successfully"
        assert auth_provider.passwords[result.user_id] == "another-secret"

    @pytest.mark.asyncio
    async def test_health(self, app):
        async with api_for(app) as api:
            assert (await api.health())["status"] == "ok"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        async with JotterClient("http://test", access_token="t", transport=httpx.MockTransport(handler)) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.list_notes()

        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_list_drops_unparseable_entries(self):
        payload = {
            "notes": [
                {"id": "n1", "userId": "u", "title": "ok", "createdAt": "2025-01-01T00:00:00.000Z"},
                {"id": "n2"},
                None,
            ]
        }
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))

        async with JotterClient("http://test", access_token="t", transport=transport) as api:
            notes = await api.list_notes()

        assert [note.id for note in notes] == ["n1"]

    def test_error_message_prefers_human_text(self):
        response = httpx.Response(400, json={"error": "validation_error", "message": "Title is required"})
        assert error_message(response) == "Title is required"


def gotrue_session(username="alice", email="alice@example.com"):
    return {
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "expires_in": 3600,
        "token_type": "bearer",
        "user": {
            "id": "u-alice",
            "email": email,
            "user_metadata": {"username": username} if username else {},
        },
    }


class TestSessionClient:

    @pytest.mark.asyncio
    async def test_sign_in_with_password(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["grant_type"] = request.url.params["grant_type"]
            seen["apikey"] = request.headers["apikey"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gotrue_session())

        async with SessionClient("https://project.supabase.test", "anon-key", transport=httpx.MockTransport(handler)) as auth:
            session = await auth.sign_in_with_password("alice@example.com", "secret1")

        assert session.access_token == "access-1"
        assert session.refresh_token == "refresh-1"
        assert session.user_id == "u-alice"
        assert session.username == "alice"
        assert seen == {
            "path": "/auth/v1/token",
            "grant_type": "password",
            "apikey": "anon-key",
            "body": {"email": "alice@example.com", "password": "secret1"},
        }

    @pytest.mark.asyncio
    async def test_username_falls_back_to_email(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json=gotrue_session(username=None, email="eve@example.com"))
        )
        async with SessionClient("https://project.supabase.test", "anon-key", transport=transport) as auth:
            session = await auth.sign_in_with_password("eve@example.com", "secret1")

        assert session.username == "eve"

    @pytest.mark.asyncio
    async def test_invalid_credentials(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"}
            )
        )
        async with SessionClient("https://project.supabase.test", "anon-key", transport=transport) as auth:
            with pytest.raises(ApiError) as exc_info:
                await auth.sign_in_with_password("alice@example.com", "wrong")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid login credentials"

    @pytest.mark.asyncio
    async def test_refresh_and_sign_out(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path.endswith("/logout"):
                return httpx.Response(204)
            return httpx.Response(200, json=gotrue_session())

        async with SessionClient("https://project.supabase.test", "anon-key", transport=httpx.MockTransport(handler)) as auth:
            session = await auth.refresh_session("refresh-0")
            await auth.sign_out(session.access_token)

        refresh, logout = requests
        assert refresh.url.params["grant_type"] == "refresh_token"
        assert json.loads(refresh.content) == {"refresh_token": "refresh-0"}
        assert logout.url.path == "/auth/v1/logout"
        assert logout.headers["Authorization"] == "Bearer access-1"
