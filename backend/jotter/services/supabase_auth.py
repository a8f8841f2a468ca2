"""
Jotter Backend: Supabase Auth Provider
=======================================

What:  AuthProvider implementation backed by the Supabase GoTrue REST API.
How:   Async httpx calls against `<SUPABASE_URL>/auth/v1`:

           GET    /user                  → resolve a user access token
           POST   /admin/users           → create a pre-confirmed identity
           PUT    /admin/users/{id}      → change the password
           DELETE /admin/users/{id}      → remove an identity

       Admin calls authenticate with the service-role key; token lookups send
       the anon key as `apikey` and the user's token as bearer.
Who:   Wired into the app by jotter.dependencies.get_auth_provider.

Error Translation:
    Response                      → Exception
    ─────────────────────────────────────────────────────────
    401/403 on /user              → AuthError
    other 4xx on /user            → AuthError
    4xx on admin endpoints        → ValidationError (provider's message)
    5xx, timeout, transport error → AuthProviderError

    No retries: a failed call fails the request.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from jotter.config import settings
from jotter.exceptions import AuthError, AuthProviderError, ValidationError
from jotter.services.auth_base import AuthProvider, AuthUser

logger = logging.getLogger(__name__)


def provider_message(response: httpx.Response) -> str:
    """Extract GoTrue's human-readable error message from a response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for name in ("msg", "message", "error_description", "error"):
            value = body.get(name)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {response.status_code}"


def user_from_payload(payload: Dict[str, Any]) -> AuthUser:
    """Build an AuthUser from a GoTrue user object."""
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=str(payload["id"]),
        email=payload.get("email") or "",
        username=str(metadata.get("username") or ""),
        metadata=dict(metadata),
    )


class SupabaseAuthProvider(AuthProvider):
    """
    GoTrue client.

    Args:
        base_url:          Project URL; defaults to settings.supabase_url
        service_role_key:  Admin key; defaults to settings.supabase_service_role_key
        anon_key:          Public key; defaults to settings.supabase_anon_key
        timeout:           Seconds per call; defaults to settings.auth_timeout_seconds
        transport:         Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.supabase_url).rstrip("/")
        self.service_role_key = (
            service_role_key if service_role_key is not None else settings.supabase_service_role_key
        )
        self.anon_key = anon_key if anon_key is not None else settings.supabase_anon_key
        self.timeout = timeout or settings.auth_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.base_url:
            raise AuthProviderError(context={"reason": "SUPABASE_URL not configured"})
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1",
            timeout=self.timeout,
            transport=self._transport,
        )

    def _admin_headers(self) -> Dict[str, str]:
        if not self.service_role_key:
            raise AuthProviderError(context={"reason": "SUPABASE_SERVICE_ROLE_KEY not configured"})
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request, converting transport failures and 5xx into AuthProviderError."""
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Auth provider %s %s failed: %s", method, path, type(e).__name__)
            raise AuthProviderError(context={"method": method, "path": path, "error": type(e).__name__})

        if response.status_code >= 500:
            logger.error(
                "Auth provider %s %s returned %d: %s",
                method,
                path,
                response.status_code,
                provider_message(response),
            )
            raise AuthProviderError(context={"method": method, "path": path, "status": response.status_code})
        return response

    async def get_user(self, access_token: str) -> AuthUser:
        if not access_token:
            raise AuthError("Unauthorized: No token provided")

        response = await self._request(
            "GET",
            "/user",
            headers={
                "apikey": self.anon_key or self.service_role_key,
                "Authorization": f"Bearer {access_token}",
            },
        )
        if response.status_code != 200:
            logger.info("Token rejected by auth provider: %s", provider_message(response))
            raise AuthError(context={"status": response.status_code})

        payload = response.json()
        if not isinstance(payload, dict) or not payload.get("id"):
            raise AuthError(context={"reason": "user payload without id"})
        return user_from_payload(payload)

    async def create_user(self, email: str, password: str, username: str) -> AuthUser:
        response = await self._request(
            "POST",
            "/admin/users",
            headers=self._admin_headers(),
            json={
                "email": email,
                "password": password,
                "user_metadata": {"username": username},
                "email_confirm": True,
            },
        )
        if response.status_code >= 400:
            message = provider_message(response)
            logger.warning("Auth provider refused signup: %s", message)
            raise ValidationError(message=message, context={"status": response.status_code})

        payload = response.json()
        # Older GoTrue versions wrap the user object
        if isinstance(payload, dict) and isinstance(payload.get("user"), dict):
            payload = payload["user"]
        if not isinstance(payload, dict) or not payload.get("id"):
            raise AuthProviderError(message="Failed to create user")
        return user_from_payload(payload)

    async def update_password(self, user_id: str, new_password: str) -> None:
        response = await self._request(
            "PUT",
            f"/admin/users/{user_id}",
            headers=self._admin_headers(),
            json={"password": new_password},
        )
        if response.status_code >= 400:
            message = provider_message(response)
            logger.warning("Auth provider refused password update for %s: %s", user_id, message)
            raise ValidationError(message=message, field="newPassword")

    async def delete_user(self, user_id: str) -> None:
        response = await self._request(
            "DELETE",
            f"/admin/users/{user_id}",
            headers=self._admin_headers(),
        )
        if response.status_code >= 400 and response.status_code != 404:
            raise AuthProviderError(
                message="Failed to delete user",
                context={"user_id": user_id, "status": response.status_code},
            )
