"""
Jotter Backend: FastAPI Dependencies
=====================================

What:  Bearer-token authentication and service wiring for the route handlers.
How:   `get_current_user` resolves `Authorization: Bearer <token>` through the
       auth provider and raises AuthError before any storage is touched.
       Service factories build a fresh service per request around shared,
       stateless adapters.
Who:   Used via Depends() in jotter.routes.*; tests replace get_kv_store and
       get_auth_provider through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.dependencies.models import Dependant

from jotter.config import settings
from jotter.exceptions import AuthError
from jotter.repositories.notes_repository import NotesRepository
from jotter.repositories.profile_repository import ProfileRepository
from jotter.services.auth_base import AuthProvider, AuthUser
from jotter.services.note_service import NoteService
from jotter.services.profile_service import ProfileService
from jotter.services.signup_service import SignupService
from jotter.services.supabase_auth import SupabaseAuthProvider
from jotter.storage.kv_store import KeyValueStore, SqlKeyValueStore


@lru_cache
def get_kv_store() -> KeyValueStore:
    return SqlKeyValueStore()


@lru_cache
def get_auth_provider() -> AuthProvider:
    return SupabaseAuthProvider()


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` value, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthError("Unauthorized: No token provided")
    return token


async def get_current_user(
    token: str = Depends(get_bearer_token),
    auth_provider: AuthProvider = Depends(get_auth_provider),
) -> AuthUser:
    """Resolve the caller's identity; every protected route depends on this first."""
    return await auth_provider.get_user(token)


def require_anon_key(authorization: Optional[str] = Header(default=None)) -> None:
    """
    Guard for /signup: the caller must present the project's anon key.

    Skipped when SUPABASE_ANON_KEY is not configured (local development).
    """
    if not settings.supabase_anon_key:
        return
    if extract_bearer_token(authorization) != settings.supabase_anon_key:
        raise AuthError("Unauthorized: Invalid API key")


def depends_on(dependant: Dependant, call) -> bool:
    return any(sub.call is call or depends_on(sub, call) for sub in dependant.dependencies)


async def check_route_guard(request: Request) -> None:
    """
    Run the matched route's auth guard outside dependency resolution.

    FastAPI decodes the JSON body before resolving dependencies, so a
    malformed body would otherwise answer 400 to an unauthenticated caller.
    Raises AuthError exactly as the route's own dependencies would.
    """
    dependant = getattr(request.scope.get("route"), "dependant", None)
    if dependant is None:
        return

    authorization = request.headers.get("Authorization")
    if depends_on(dependant, get_current_user):
        overrides = request.app.dependency_overrides
        auth_provider = overrides.get(get_auth_provider, get_auth_provider)()
        await auth_provider.get_user(get_bearer_token(authorization))
    elif depends_on(dependant, require_anon_key):
        require_anon_key(authorization)


def get_note_service(store: KeyValueStore = Depends(get_kv_store)) -> NoteService:
    return NoteService(NotesRepository(store))


def get_profile_service(
    store: KeyValueStore = Depends(get_kv_store),
    auth_provider: AuthProvider = Depends(get_auth_provider),
) -> ProfileService:
    return ProfileService(ProfileRepository(store), auth_provider)


def get_signup_service(
    store: KeyValueStore = Depends(get_kv_store),
    auth_provider: AuthProvider = Depends(get_auth_provider),
) -> SignupService:
    return SignupService(ProfileRepository(store), auth_provider)
