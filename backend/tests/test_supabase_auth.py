"""
Jotter Backend: Supabase Auth Provider Tests
=============================================

What:  Request shapes and error translation of SupabaseAuthProvider.
How:   httpx.MockTransport answers in place of GoTrue; no network access.

Error translation under test:
    ✅ rejected token             → AuthError
    ✅ refused signup / password  → ValidationError with the provider message
    ✅ 5xx / transport failure    → AuthProviderError
    ✅ delete of a missing user   → tolerated
"""

import json

import httpx
import pytest

from jotter.exceptions import AuthError, AuthProviderError, ValidationError
from jotter.services.supabase_auth import SupabaseAuthProvider, provider_message

BASE_URL = "https://project.supabase.test"

USER_PAYLOAD = {
    "id": "11111111-2222-3333-4444-555555555555",
    "email": "alice@example.com",
    "user_metadata": {"username": "alice"},
}


def make_provider(handler):
    return SupabaseAuthProvider(
        base_url=BASE_URL,
        service_role_key="service-key",
        anon_key="anon-key",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestGetUser:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["authorization"] = request.headers["Authorization"]
            seen["apikey"] = request.headers["apikey"]
            return httpx.Response(200, json=USER_PAYLOAD)

        user = await make_provider(handler).get_user("user-token")

        assert user.id == USER_PAYLOAD["id"]
        assert user.email == "alice@example.com"
        assert user.username == "alice"
        assert seen == {
            "url": f"{BASE_URL}/auth/v1/user",
            "authorization": "Bearer user-token",
            "apikey": "anon-key",
        }

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        provider = make_provider(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))
        with pytest.raises(AuthError):
            await provider.get_user("expired")

    @pytest.mark.asyncio
    async def test_empty_token_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(AuthError, match="No token provided"):
            await make_provider(handler).get_user("")

    @pytest.mark.asyncio
    async def test_provider_down(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AuthProviderError):
            await make_provider(handler).get_user("token")

    @pytest.mark.asyncio
    async def test_provider_5xx(self):
        provider = make_provider(lambda request: httpx.Response(503, text="upstream unavailable"))
        with pytest.raises(AuthProviderError):
            await provider.get_user("token")


class TestAdminCalls:

    @pytest.mark.asyncio
    async def test_create_user_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["authorization"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=USER_PAYLOAD)

        user = await make_provider(handler).create_user("alice@example.com", "secret1", "alice")

        assert user.id == USER_PAYLOAD["id"]
        assert seen["method"] == "POST"
        assert seen["path"] == "/auth/v1/admin/users"
        assert seen["authorization"] == "Bearer service-key"
        assert seen["body"] == {
            "email": "alice@example.com",
            "password": "secret1",
            "user_metadata": {"username": "alice"},
            "email_confirm": True,
        }

    @pytest.mark.asyncio
    async def test_create_user_wrapped_payload(self):
        provider = make_provider(lambda request: httpx.Response(200, json={"user": USER_PAYLOAD}))
        user = await provider.create_user("alice@example.com", "secret1", "alice")
        assert user.id == USER_PAYLOAD["id"]

    @pytest.mark.asyncio
    async def test_create_user_refused(self):
        provider = make_provider(
            lambda request: httpx.Response(
                422, json={"msg": "A user with this email address has already been registered"}
            )
        )
        with pytest.raises(ValidationError, match="already been registered"):
            await provider.create_user("alice@example.com", "secret1", "alice")

    @pytest.mark.asyncio
    async def test_update_password(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=USER_PAYLOAD)

        await make_provider(handler).update_password("u1", "brand-new")

        assert seen == {
            "method": "PUT",
            "path": "/auth/v1/admin/users/u1",
            "body": {"password": "brand-new"},
        }

    @pytest.mark.asyncio
    async def test_update_password_refused(self):
        provider = make_provider(
            lambda request: httpx.Response(422, json={"msg": "Password should be at least 6 characters"})
        )
        with pytest.raises(ValidationError) as exc_info:
            await provider.update_password("u1", "short")
        assert exc_info.value.field == "newPassword"

    @pytest.mark.asyncio
    async def test_delete_missing_user_is_tolerated(self):
        provider = make_provider(lambda request: httpx.Response(404, json={"msg": "User not found"}))
        await provider.delete_user("gone")

    @pytest.mark.asyncio
    async def test_admin_call_without_service_key(self):
        provider = SupabaseAuthProvider(
            base_url=BASE_URL,
            service_role_key="",
            anon_key="anon-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=USER_PAYLOAD)),
        )
        with pytest.raises(AuthProviderError):
            await provider.create_user("alice@example.com", "secret1", "alice")


class TestProviderMessage:

    @pytest.mark.parametrize(
        "body, expected",
        [
            ({"msg": "from msg"}, "from msg"),
            ({"error": "invalid_grant", "error_description": "Invalid login credentials"}, "Invalid login credentials"),
            ({"message": "from message"}, "from message"),
            ({"code": 400}, "HTTP 400"),
        ],
    )
    def test_message_fields(self, body, expected):
        assert provider_message(httpx.Response(400, json=body)) == expected

    def test_non_json_body(self):
        assert provider_message(httpx.Response(502, text="Bad gateway")) == "Bad gateway"
