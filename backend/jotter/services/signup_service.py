"""
Jotter Backend: Signup Service
===============================

What:  Creates an identity in the auth provider, then the matching profile record.
How:   Two writes to two systems. They cannot share a transaction, so a failed
       profile write is compensated by deleting the identity just created.

Workflow:
    ┌────────────┐    ┌──────────────────┐    ┌──────────────────┐
    │  Validate  │───▶│ Auth Provider    │───▶│ Profile record   │
    │  fields    │    │ create_user()    │    │ (key-value set)  │
    └────────────┘    └──────────────────┘    └──────────────────┘
                                                       │ fails
                                                       ▼
                                              ┌──────────────────┐
                                              │ delete_user()    │
                                              │ then InternalError│
                                              └──────────────────┘

    A failed compensation is logged with the orphaned user id; the request
    still fails with InternalError.
"""

import logging
from typing import Optional

from jotter.exceptions import InternalError, JotterError, ValidationError
from jotter.repositories.profile_repository import ProfileRepository
from jotter.schemas.profile import Profile
from jotter.services.auth_base import AuthProvider

logger = logging.getLogger(__name__)


class SignupService:

    def __init__(self, repository: ProfileRepository, auth_provider: AuthProvider):
        self.repository = repository
        self.auth_provider = auth_provider

    async def sign_up(
        self,
        email: Optional[str],
        password: Optional[str],
        username: Optional[str],
    ) -> Profile:
        """
        Register a new user.

        Raises:
            ValidationError: a field is missing, or the provider refused the identity
            InternalError: the profile could not be written (identity rolled back)
        """
        if any(not value or not value.strip() for value in (email, password, username)):
            raise ValidationError(message="Email, password, and username are required")

        email = email.strip()
        username = username.strip()

        user = await self.auth_provider.create_user(email, password, username)
        logger.info("Identity %s created", user.id)

        try:
            profile = await self.repository.create(user.id, username=username, email=email)
        except Exception as e:
            logger.error("Profile write failed for new user %s: %s", user.id, str(e))
            await self._compensate(user.id)
            if isinstance(e, InternalError):
                raise
            raise InternalError(context={"user_id": user.id, "error_type": type(e).__name__})

        logger.info("User %s signed up as '%s'", user.id, username)
        return profile

    async def _compensate(self, user_id: str) -> None:
        try:
            await self.auth_provider.delete_user(user_id)
            logger.info("Rolled back identity %s after failed profile write", user_id)
        except JotterError as e:
            logger.error(
                "Could not roll back identity %s; auth provider and profile store are out of sync: %s",
                user_id,
                e.message,
            )
