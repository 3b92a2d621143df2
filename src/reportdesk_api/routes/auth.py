"""Authentication routes: login, registration, password reset and JWKS."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import (
    CurrentUser,
    get_current_user_optional,
    get_jwks,
    get_token_manager,
)
from reportdesk_api.db import get_db
from reportdesk_api.models import User
from reportdesk_api.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SessionResponse,
    UserResponse,
)
from reportdesk_api.services.activity import record_activity
from reportdesk_api.services.invitations import (
    accept_invitation,
    request_password_reset,
    reset_password,
)
from reportdesk_api.services.users import authenticate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent"


@router.get("/.well-known/jwks.json")
async def get_jwks_endpoint():
    """Get JSON Web Key Set for validating access tokens.

    This endpoint serves the public key used to verify access tokens.
    Clients can use this to validate tokens without calling the API.
    """
    return get_jwks()


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Exchange email and password for an access token."""
    user = await authenticate(db, data.email, data.password)

    if user.organization_id:
        await record_activity(
            db,
            user_id=user.id,
            organization_id=user.organization_id,
            action="login",
            resource="auth",
            metadata={
                "ip": request.client.host if request.client else None,
                "userAgent": request.headers.get("user-agent"),
            },
        )
    await db.commit()

    token_manager = get_token_manager()
    logger.info("User %s logged in", user.id)
    return LoginResponse(
        user=UserResponse.model_validate(user),
        token=token_manager.create_access_token(user.id),
        expires_in=token_manager.expires_in,
    )


@router.get("/auth/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get the authenticated user."""
    return current_user


@router.get("/auth/session", response_model=SessionResponse)
async def get_session(
    current_user: Annotated[User | None, Depends(get_current_user_optional)],
):
    """Report whether the request is authenticated, without failing if not."""
    if current_user is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True, user=UserResponse.model_validate(current_user)
    )


@router.post(
    "/auth/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Accept an invitation and create the invited account."""
    user = await accept_invitation(db, data.token, data.password, data.name)
    await db.commit()
    return RegisterResponse(
        user=UserResponse.model_validate(user),
        message="Account created successfully",
    )


@router.post("/auth/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Request a password reset.

    The response is identical whether or not the email has an account.
    """
    await request_password_reset(db, data.email)
    await db.commit()
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/auth/reset-password", response_model=MessageResponse)
async def reset_password_endpoint(
    data: ResetPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Set a new password using a reset token."""
    await reset_password(db, data.token, data.password)
    await db.commit()
    return MessageResponse(message="Password reset successfully")
