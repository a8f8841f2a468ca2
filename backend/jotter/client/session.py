"""
Jotter Client: GoTrue Session Client
=====================================

What:  Password sign-in, token refresh and sign-out against Supabase GoTrue.
How:   httpx calls with the project's anon key as `apikey`:

           POST /auth/v1/token?grant_type=password       → Session
           POST /auth/v1/token?grant_type=refresh_token  → Session
           POST /auth/v1/logout                          → 204

Who:   Used by the UI to obtain the access token JotterClient sends.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from jotter.client.api import ApiError, send
from jotter.services.supabase_auth import user_from_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    access_token: str
    refresh_token: str
    user_id: str
    email: str
    username: str
    expires_in: Optional[int] = None


def session_from_payload(payload: Dict[str, Any]) -> Session:
    """
    Build a Session from a GoTrue token response.

    The username comes from user metadata and falls back to the local part
    of the email for accounts created without one.
    """
    if not isinstance(payload, dict) or not payload.get("access_token") or not isinstance(payload.get("user"), dict):
        raise ApiError(500, "Login failed")

    user = user_from_payload(payload["user"])
    return Session(
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token") or "",
        user_id=user.id,
        email=user.email,
        username=user.username or user.email.split("@")[0],
        expires_in=payload.get("expires_in"),
    )


class SessionClient:
    """
    Args:
        supabase_url:  Project URL (the part before /auth/v1)
        anon_key:      Project anon key
        timeout:       Seconds per call
        transport:     Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        supabase_url: str,
        anon_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.anon_key = anon_key
        self._client = httpx.AsyncClient(
            base_url=f"{supabase_url.rstrip('/')}/auth/v1",
            headers={"apikey": anon_key},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _token(self, grant_type: str, body: Dict[str, str]) -> Session:
        response = await send(
            self._client,
            "POST",
            "/token",
            params={"grant_type": grant_type},
            json=body,
        )
        return session_from_payload(response.json())

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        session = await self._token("password", {"email": email, "password": password})
        logger.info("Signed in as %s", session.user_id)
        return session

    async def refresh_session(self, refresh_token: str) -> Session:
        """Exchange a refresh token for a new session (e.g. after a password change)."""
        return await self._token("refresh_token", {"refresh_token": refresh_token})

    async def sign_out(self, access_token: str) -> None:
        await send(
            self._client,
            "POST",
            "/logout",
            headers={"Authorization": f"Bearer {access_token}"},
        )
