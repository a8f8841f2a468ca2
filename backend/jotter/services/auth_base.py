"""
Jotter Backend: Abstract Auth Provider Interface
=================================================

What:  Abstract base class for the managed identity provider.
How:   Concrete implementations inherit from AuthProvider and implement token
       resolution and the admin user operations used by signup and
       password changes.
Who:   Called by the bearer-token dependency, SignupService and ProfileService.

Design Decision:
    The services only see this interface, so the Supabase adapter can be
    replaced (or faked in tests) without touching business rules.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class AuthUser:
    """
    Identity resolved from a bearer token or returned by user creation.

    Attributes:
        id:        Provider user id; prefixes every storage key of this user
        email:     Login email (may be empty for providers without one)
        username:  From user metadata; empty when the provider has none
        metadata:  Raw user metadata as returned by the provider
    """
    id: str
    email: str = ""
    username: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


class AuthProvider(ABC):
    """
    Abstract interface for token validation and user administration.

    Contract:
        - get_user() raises AuthError for missing/invalid/expired tokens
        - create_user() and update_password() raise ValidationError when the
          provider refuses the input (duplicate email, weak password, ...)
        - Transport failures and provider 5xx responses raise AuthProviderError
    """

    @abstractmethod
    async def get_user(self, access_token: str) -> AuthUser:
        """
        Resolve a bearer token to the user it was issued for.

        Raises:
            AuthError: Token rejected by the provider.
            AuthProviderError: Provider unreachable.
        """
        ...

    @abstractmethod
    async def create_user(self, email: str, password: str, username: str) -> AuthUser:
        """
        Create an identity with the email already confirmed (no verification
        mail) and `username` stored in the user metadata.
        """
        ...

    @abstractmethod
    async def update_password(self, user_id: str, new_password: str) -> None:
        ...

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Remove an identity. Used to undo a signup whose profile write failed."""
        ...
