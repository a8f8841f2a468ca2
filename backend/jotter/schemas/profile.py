"""
Jotter Backend: Profile & Signup Schemas
=========================================

What:  Request/response models for /signup, /profile and /profile/password.
"""

from typing import Optional

from pydantic import BaseModel, Field

from jotter.schemas.note import CAMEL_CONFIG


class Profile(BaseModel):
    """
    What:  User profile stored under `user:<userId>:profile`.
    When:  Written once at signup; never modified afterwards.
    """
    model_config = CAMEL_CONFIG

    user_id: str
    username: str
    email: str
    created_at: str


class ProfileEnvelope(BaseModel):
    profile: Profile


class SignupRequest(BaseModel):
    """
    Body of POST /signup. Fields are optional at the schema level so that a
    missing field produces the service's single validation message.
    """
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = None


class SignupResponse(BaseModel):
    model_config = CAMEL_CONFIG

    message: str
    user_id: str
    username: str


class PasswordChangeRequest(BaseModel):
    model_config = CAMEL_CONFIG

    new_password: Optional[str] = Field(default=None, description="At least 6 characters")
