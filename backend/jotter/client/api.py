"""
Jotter Client: HTTP API Client
===============================

What:  Async client for the Jotter HTTP API.
How:   One httpx.AsyncClient per JotterClient. Authenticated calls send the
       user's access token as bearer; /signup sends the project's anon key.
       Responses are parsed into the same Pydantic models the server returns.
Who:   Used by the UI layer after SessionClient produced an access token.

Error Handling:
    Non-2xx response           → ApiError(status, server message)
    Timeout / transport error  → ApiError(0, "Network error: ...")
    Authenticated call, no token → ApiError(401) without sending anything

Usage:
    async with JotterClient(base_url, anon_key=key) as api:
        api.access_token = session.access_token
        notes = await api.list_notes()
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as SchemaError

from jotter.schemas.note import Note, NoteDraft
from jotter.schemas.profile import Profile, SignupResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    A failed API call.

    Attributes:
        status_code:  HTTP status, or 0 when no response was received
        message:      Single user-facing string (the server's `message`)
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


def error_message(response: httpx.Response) -> str:
    """
    Pull the human-readable message out of an error response.

    Understands both the Jotter error body ({error, message}) and GoTrue's
    ({msg} / {error, error_description}).
    """
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for name in ("message", "msg", "error_description", "error"):
            value = body.get(name)
            if isinstance(value, str) and value:
                return value
    return "API request failed"


async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Send a request and raise ApiError for transport failures and non-2xx statuses."""
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        logger.warning("%s %s failed: %s", method, url, type(e).__name__)
        raise ApiError(0, f"Network error: {type(e).__name__}")

    if response.is_error:
        message = error_message(response)
        logger.info("%s %s → %d: %s", method, url, response.status_code, message)
        raise ApiError(response.status_code, message)
    return response


class JotterClient:
    """
    Args:
        base_url:      Server root including any API prefix, e.g. https://host/api
        access_token:  User token for authenticated calls; may be set later
        anon_key:      Project anon key sent on /signup
        timeout:       Seconds per call
        transport:     Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        anon_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.anon_key = anon_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "JotterClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(
        self,
        method: str,
        path: str,
        authenticated: bool = True,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if authenticated:
            if not self.access_token:
                raise ApiError(401, "Unauthorized: No token provided")
            token = self.access_token
        else:
            token = self.anon_key

        headers = {"Authorization": f"Bearer {token}"} if token else {}
        response = await send(self._client, method, path, headers=headers, json=json)
        return response.json()

    # ── Public endpoints ──────────────────────────────────────────────────

    async def health(self) -> Dict[str, Any]:
        return await self._call("GET", "/health", authenticated=False)

    async def sign_up(self, email: str, password: str, username: str) -> SignupResponse:
        data = await self._call(
            "POST",
            "/signup",
            authenticated=False,
            json={"email": email, "password": password, "username": username},
        )
        return SignupResponse.model_validate(data)

    # ── Profile ───────────────────────────────────────────────────────────

    async def get_profile(self) -> Profile:
        data = await self._call("GET", "/profile")
        return Profile.model_validate(data["profile"])

    async def update_password(self, new_password: str) -> str:
        data = await self._call("POST", "/profile/password", json={"newPassword": new_password})
        return data.get("message", "")

    # ── Notes ─────────────────────────────────────────────────────────────

    async def list_notes(self) -> List[Note]:
        """Entries that do not parse as a Note are dropped, not raised."""
        data = await self._call("GET", "/notes")
        notes = []
        for raw in data.get("notes") or []:
            try:
                notes.append(Note.model_validate(raw))
            except SchemaError:
                logger.debug("Skipping malformed note in listing: %r", raw)
        return notes

    async def create_note(self, draft: NoteDraft) -> Note:
        data = await self._call("POST", "/notes", json=draft.model_dump(by_alias=True, exclude_none=True))
        return Note.model_validate(data["note"])

    async def update_note(self, note_id: str, draft: NoteDraft) -> Note:
        data = await self._call(
            "PUT",
            f"/notes/{note_id}",
            json=draft.model_dump(by_alias=True, exclude_none=True),
        )
        return Note.model_validate(data["note"])

    async def delete_note(self, note_id: str) -> str:
        data = await self._call("DELETE", f"/notes/{note_id}")
        return data.get("message", "")
