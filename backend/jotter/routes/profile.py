"""
Jotter Backend: Profile Route Handlers
=======================================

What:  GET /profile and POST /profile/password for the authenticated user.
"""

import logging

from fastapi import APIRouter, Depends

from jotter.dependencies import get_current_user, get_profile_service
from jotter.schemas.common import ErrorResponse, MessageResponse
from jotter.schemas.profile import PasswordChangeRequest, ProfileEnvelope
from jotter.services.auth_base import AuthUser
from jotter.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get(
    "",
    response_model=ProfileEnvelope,
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        404: {"description": "No profile stored for this user", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get the caller's profile",
)
async def get_profile(
    user: AuthUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileEnvelope:
    profile = await service.get_profile(user.id)
    return ProfileEnvelope(profile=profile)


@router.post(
    "/password",
    response_model=MessageResponse,
    responses={
        400: {"description": "Password too short or refused", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Change the caller's password",
    description=(
        "Delegates to the auth provider. Clients should refresh or re-establish "
        "their session afterwards."
    ),
)
async def change_password(
    body: PasswordChangeRequest,
    user: AuthUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    await service.change_password(user.id, body.new_password or "")
    return MessageResponse(message="Password updated successfully")
