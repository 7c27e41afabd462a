"""
MeetSpace Backend: User Route Handlers
========================================

What:  Registration, login, password reset and the caller's own profile.
How:   Unauthenticated routes call UserService directly; profile routes take
       the subject id from the access gate, so a caller can only ever reach
       their own profile and account.
"""

import logging

from fastapi import APIRouter, Depends, status

from meetspace.config import settings
from meetspace.middleware.auth_gate import require_subject
from meetspace.models.user import User
from meetspace.schemas.common import ErrorResponse, MessageResponse
from meetspace.schemas.user import (
    LoginRequest,
    LoginResponse,
    PasswordResetLinkResponse,
    PasswordResetRequest,
    RegisterRequest,
    UpdateEmailRequest,
    UpdateProfileRequest,
)
from meetspace.services.user_service import UserService, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/users", tags=["Users"])

_AUTH_ERRORS = {
    401: {"description": "Missing, invalid or expired bearer token", "model": ErrorResponse},
    500: {"description": "Provider or store failure", "model": ErrorResponse},
}


# ── Unauthenticated ───────────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Email or password missing, or invalid", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
        500: {"description": "Account or profile write failed", "model": ErrorResponse},
    },
    summary="Create an account and its profile",
)
async def register_user(
    body: RegisterRequest,
    service: UserService = Depends(get_user_service),
) -> User:
    outcome = await service.register(
        body.email,
        body.password,
        body.model_dump(include={"username", "lastname", "birthdate"}),
    )
    return outcome.unwrap()


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        500: {"description": "Sign-in not configured", "model": ErrorResponse},
    },
    summary="Exchange email and password for session tokens",
)
async def login_user(
    body: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> LoginResponse:
    result = await service.login(body.email, body.password)
    return LoginResponse(
        id_token=result.tokens.id_token,
        refresh_token=result.tokens.refresh_token,
        expires_in=result.tokens.expires_in,
        user=result.user,
    )


@router.post(
    "/request-password-reset",
    response_model=PasswordResetLinkResponse,
    responses={
        400: {"description": "Email missing or invalid", "model": ErrorResponse},
        500: {"description": "Provider failure", "model": ErrorResponse},
    },
    summary="Generate a password reset link",
)
async def request_password_reset(
    body: PasswordResetRequest,
    service: UserService = Depends(get_user_service),
) -> PasswordResetLinkResponse:
    link = await service.request_password_reset(body.email)
    return PasswordResetLinkResponse(link=link)


@router.post(
    "/reset-password",
    responses={400: {"description": "Always; reset happens via the emailed link", "model": ErrorResponse}},
    summary="Not supported; see request-password-reset",
)
async def reset_password(service: UserService = Depends(get_user_service)) -> None:
    await service.reset_password()


# ── Caller's Profile ──────────────────────────────────────────────────────

@router.get(
    "/profile",
    response_model=User,
    responses=_AUTH_ERRORS,
    summary="Get the caller's profile (created on first access)",
)
async def get_profile(
    subject_id: str = Depends(require_subject),
    service: UserService = Depends(get_user_service),
) -> User:
    return await service.get_profile(subject_id)


@router.put(
    "/profile",
    response_model=User,
    responses={**_AUTH_ERRORS, 404: {"description": "No profile document", "model": ErrorResponse}},
    summary="Update username, lastname or birthdate",
)
async def update_profile(
    body: UpdateProfileRequest,
    subject_id: str = Depends(require_subject),
    service: UserService = Depends(get_user_service),
) -> User:
    return await service.update_profile(subject_id, body.model_dump(exclude_unset=True))


@router.put(
    "/email",
    response_model=User,
    responses={
        **_AUTH_ERRORS,
        400: {"description": "Email missing or invalid", "model": ErrorResponse},
        409: {"description": "Email already in use", "model": ErrorResponse},
    },
    summary="Change the caller's email",
)
async def update_email(
    body: UpdateEmailRequest,
    subject_id: str = Depends(require_subject),
    service: UserService = Depends(get_user_service),
) -> User:
    return await service.update_email(subject_id, body.email)


@router.delete(
    "/profile",
    response_model=MessageResponse,
    responses=_AUTH_ERRORS,
    summary="Delete the caller's profile and account",
)
async def delete_profile(
    subject_id: str = Depends(require_subject),
    service: UserService = Depends(get_user_service),
) -> MessageResponse:
    outcome = await service.delete_profile(subject_id)
    outcome.unwrap()
    return MessageResponse(message="User deleted")
