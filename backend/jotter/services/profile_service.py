"""
Jotter Backend: Profile Service
================================

What:  Profile lookup and password changes for the authenticated user.
How:   Profiles come from ProfileRepository; passwords live only in the auth
       provider and are never persisted locally.
"""

import logging

from jotter.config import settings
from jotter.exceptions import NotFoundError, ValidationError
from jotter.repositories.profile_repository import ProfileRepository
from jotter.schemas.profile import Profile
from jotter.services.auth_base import AuthProvider

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, repository: ProfileRepository, auth_provider: AuthProvider):
        self.repository = repository
        self.auth_provider = auth_provider

    async def get_profile(self, user_id: str) -> Profile:
        """
        Raises:
            NotFoundError: no profile record exists for this user
        """
        profile = await self.repository.get(user_id)
        if profile is None:
            logger.warning("Profile missing for authenticated user %s", user_id)
            raise NotFoundError(resource="profile", resource_id=user_id)
        return profile

    async def change_password(self, user_id: str, new_password: str) -> None:
        """
        Delegate a password change to the auth provider.

        The caller's existing session may stop working afterwards; clients
        refresh or re-establish it.

        Raises:
            ValidationError: password missing or shorter than the minimum,
                             or refused by the provider
        """
        minimum = settings.min_password_length
        if not new_password or len(new_password) < minimum:
            raise ValidationError(
                message=f"Password must be at least {minimum} characters",
                field="newPassword",
            )
        await self.auth_provider.update_password(user_id, new_password)
        logger.info("Password updated for user %s", user_id)
