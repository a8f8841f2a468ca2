"""
Jotter Backend: Signup Route Handler
=====================================

What:  POST /signup, authorized with the project's anon key.
How:   Delegates to SignupService, which creates the identity and the profile
       and rolls the identity back if the profile cannot be written.
"""

import logging

from fastapi import APIRouter, Depends

from jotter.dependencies import get_signup_service, require_anon_key
from jotter.schemas.common import ErrorResponse
from jotter.schemas.profile import SignupRequest, SignupResponse
from jotter.services.signup_service import SignupService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    dependencies=[Depends(require_anon_key)],
    responses={
        400: {"description": "Missing field or refused by the auth provider", "model": ErrorResponse},
        401: {"description": "Missing or wrong anon key", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def sign_up(
    body: SignupRequest,
    service: SignupService = Depends(get_signup_service),
) -> SignupResponse:
    profile = await service.sign_up(body.email, body.password, body.username)
    return SignupResponse(
        message="User created successfully",
        user_id=profile.user_id,
        username=profile.username,
    )
