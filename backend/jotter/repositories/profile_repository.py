"""Profile persistence under `user:<userId>:profile`."""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from jotter.clock import iso_millis
from jotter.repositories.keys import profile_key
from jotter.schemas.profile import Profile
from jotter.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class ProfileRepository:

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get(self, user_id: str) -> Optional[Profile]:
        raw = await self.store.get(profile_key(user_id))
        if raw is None:
            return None
        try:
            return Profile.model_validate(raw)
        except PydanticValidationError:
            logger.warning("Stored profile for user %s is malformed", user_id)
            return None

    async def create(self, user_id: str, username: str, email: str) -> Profile:
        profile = Profile(
            user_id=user_id,
            username=username,
            email=email,
            created_at=iso_millis(),
        )
        await self.store.set(profile_key(user_id), profile.model_dump(by_alias=True))
        return profile
