"""
Jotter Backend: Signup Service Unit Tests
==========================================

What:  Identity + profile creation, including rollback of the identity when
       the profile write fails.
"""

import pytest

from jotter.exceptions import AuthProviderError, InternalError, StorageError, ValidationError
from jotter.repositories.keys import profile_key
from jotter.repositories.profile_repository import ProfileRepository
from jotter.services.signup_service import SignupService

from conftest import FakeAuthProvider, InMemoryKeyValueStore


class BrokenStore(InMemoryKeyValueStore):
    """Every write fails the way the SQL store reports database errors."""

    async def set(self, key, value):
        raise StorageError(context={"operation": "set", "key": key})


class UndeletableAuthProvider(FakeAuthProvider):
    async def delete_user(self, user_id):
        raise AuthProviderError(message="Failed to delete user")


class TestSignup:

    def setup_method(self):
        self.store = InMemoryKeyValueStore()
        self.auth = FakeAuthProvider()
        self.service = SignupService(ProfileRepository(self.store), self.auth)

    @pytest.mark.asyncio
    async def test_signup_creates_identity_and_profile(self):
        profile = await self.service.sign_up("new@example.com", "secret1", "newbie")

        assert profile.username == "newbie"
        assert profile.email == "new@example.com"
        assert profile.user_id in self.auth.users
        assert self.store.data[profile_key(profile.user_id)]["username"] == "newbie"

    @pytest.mark.asyncio
    async def test_signup_trims_email_and_username(self):
        profile = await self.service.sign_up("  new@example.com ", "secret1", " newbie ")
        assert profile.email == "new@example.com"
        assert profile.username == "newbie"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password, username",
        [
            (None, "secret1", "name"),
            ("a@example.com", None, "name"),
            ("a@example.com", "secret1", None),
            ("a@example.com", "secret1", "   "),
            ("a@example.com", "   ", "name"),
            ("  ", "secret1", "name"),
        ],
    )
    async def test_missing_fields_rejected(self, email, password, username):
        with pytest.raises(ValidationError, match="Email, password, and username are required"):
            await self.service.sign_up(email, password, username)
        assert self.auth.users == {}

    @pytest.mark.asyncio
    async def test_duplicate_email_surfaces_provider_message(self):
        await self.service.sign_up("dup@example.com", "secret1", "first")
        with pytest.raises(ValidationError, match="already been registered"):
            await self.service.sign_up("dup@example.com", "secret1", "second")


class TestSignupCompensation:

    @pytest.mark.asyncio
    async def test_failed_profile_write_deletes_identity(self):
        auth = FakeAuthProvider()
        service = SignupService(ProfileRepository(BrokenStore()), auth)

        with pytest.raises(InternalError):
            await service.sign_up("new@example.com", "secret1", "newbie")

        assert auth.users == {}
        assert len(auth.deleted) == 1

    @pytest.mark.asyncio
    async def test_failed_rollback_still_fails_request(self):
        auth = UndeletableAuthProvider()
        service = SignupService(ProfileRepository(BrokenStore()), auth)

        with pytest.raises(StorageError):
            await service.sign_up("new@example.com", "secret1", "newbie")

        # The orphaned identity is left behind and only logged
        assert len(auth.users) == 1
