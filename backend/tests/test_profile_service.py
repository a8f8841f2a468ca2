"""
Jotter Backend: Profile Service Unit Tests
===========================================

What:  Profile lookup and password change rules.
How:   InMemoryKeyValueStore + FakeAuthProvider.
"""

import pytest

from jotter.exceptions import NotFoundError, ValidationError
from jotter.repositories.keys import profile_key
from jotter.repositories.profile_repository import ProfileRepository
from jotter.services.profile_service import ProfileService

from conftest import FakeAuthProvider, InMemoryKeyValueStore


class TestProfileService:

    def setup_method(self):
        self.store = InMemoryKeyValueStore()
        self.auth = FakeAuthProvider()
        self.auth.register("u1", "u1@example.com", "u1name")
        self.service = ProfileService(ProfileRepository(self.store), self.auth)

    @pytest.mark.asyncio
    async def test_get_profile(self):
        await ProfileRepository(self.store).create("u1", username="u1name", email="u1@example.com")

        profile = await self.service.get_profile("u1")

        assert profile.user_id == "u1"
        assert profile.username == "u1name"
        assert self.store.data[profile_key("u1")]["userId"] == "u1"

    @pytest.mark.asyncio
    async def test_missing_profile_is_not_found(self):
        with pytest.raises(NotFoundError, match="Profile not found"):
            await self.service.get_profile("u1")

    @pytest.mark.asyncio
    async def test_malformed_profile_is_not_found(self):
        self.store.data[profile_key("u1")] = {"userId": "u1"}
        with pytest.raises(NotFoundError):
            await self.service.get_profile("u1")

    @pytest.mark.asyncio
    async def test_change_password(self):
        await self.service.change_password("u1", "longenough")
        assert self.auth.passwords["u1"] == "longenough"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["", "12345"])
    async def test_short_password_rejected(self, password):
        with pytest.raises(ValidationError, match="at least 6 characters") as exc_info:
            await self.service.change_password("u1", password)

        assert exc_info.value.field == "newPassword"
        assert "u1" not in self.auth.passwords

    @pytest.mark.asyncio
    async def test_six_characters_is_enough(self):
        await self.service.change_password("u1", "123456")
        assert self.auth.passwords["u1"] == "123456"
