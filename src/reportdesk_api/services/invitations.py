"""Invitation service: invitations, registration and password resets.

Both flows use single-use tokens stored as UserInvitation rows. A token is
generated server-side, redeemable once, and dead forever after expiry.
"""

import logging
import secrets
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.config import settings
from reportdesk_api.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from reportdesk_api.models import (
    InvitationKind,
    Organization,
    User,
    UserInvitation,
    UserRole,
)
from reportdesk_api.models.base import utc_now
from reportdesk_api.services.activity import record_activity
from reportdesk_api.services.users import (
    generate_unique_username,
    get_user_by_email,
    insert_user,
    set_password,
)

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class InvalidTokenError(ValidationError):
    """Token does not exist or is of the wrong kind."""


class TokenAlreadyUsedError(ValidationError):
    """Token has already been redeemed."""


class TokenExpiredError(ValidationError):
    """Token is past its expiry."""


def generate_token() -> str:
    """Generate an unguessable URL-safe token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


async def get_pending_invitation(
    db: AsyncSession, email: str, now: datetime
) -> UserInvitation | None:
    """Get an unaccepted, unexpired invitation for an email."""
    result = await db.execute(
        select(UserInvitation).where(
            UserInvitation.email == email,
            UserInvitation.kind == InvitationKind.INVITATION,
            UserInvitation.is_accepted.is_(False),
        )
    )
    for invitation in result.scalars().all():
        if not invitation.is_expired(now):
            return invitation
    return None


async def create_invitation(
    db: AsyncSession,
    actor: User,
    organization_id: str,
    email: str,
    role: UserRole,
) -> UserInvitation:
    """Invite an email address into an organization.

    Raises:
        ForbiddenError: Role is superadmin
        NotFoundError: Organization does not exist
        ConflictError: Email already has an account or a pending invitation
    """
    if role == UserRole.SUPERADMIN:
        logger.warning("User %s attempted to invite a superadmin", actor.id)
        raise ForbiddenError("Cannot invite superadmin users")

    if await db.get(Organization, organization_id) is None:
        raise NotFoundError("Organization not found")

    if await get_user_by_email(db, email) is not None:
        raise ConflictError("User already exists")

    now = utc_now()
    if await get_pending_invitation(db, email, now) is not None:
        raise ConflictError("Invitation already sent")

    invitation = UserInvitation(
        email=email,
        kind=InvitationKind.INVITATION,
        role=role,
        organization_id=organization_id,
        invited_by=actor.id,
        token=generate_token(),
        is_accepted=False,
        expires_at=now + timedelta(days=settings.invitation_ttl_days),
    )
    db.add(invitation)
    await db.flush()

    await record_activity(
        db,
        user_id=actor.id,
        organization_id=organization_id,
        action="user_invited",
        resource="invitation",
        resource_id=invitation.id,
        metadata={"email": email, "role": role.value},
    )
    logger.info("User %s invited %s to organization %s", actor.id, invitation.id, organization_id)
    return invitation


async def list_pending_invitations(
    db: AsyncSession, organization_id: str
) -> list[UserInvitation]:
    now = utc_now()
    result = await db.execute(
        select(UserInvitation)
        .where(
            UserInvitation.organization_id == organization_id,
            UserInvitation.kind == InvitationKind.INVITATION,
            UserInvitation.is_accepted.is_(False),
        )
        .order_by(UserInvitation.created_at.desc())
    )
    return [inv for inv in result.scalars().all() if not inv.is_expired(now)]


async def _redeemable(
    db: AsyncSession,
    token: str,
    kind: InvitationKind,
    invalid_message: str,
    used_message: str,
    expired_message: str,
) -> UserInvitation:
    result = await db.execute(
        select(UserInvitation).where(
            UserInvitation.token == token,
            UserInvitation.kind == kind,
        )
    )
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise InvalidTokenError(invalid_message)
    if invitation.is_accepted:
        raise TokenAlreadyUsedError(used_message)
    if invitation.is_expired(utc_now()):
        raise TokenExpiredError(expired_message)
    return invitation


async def _claim(db: AsyncSession, record: UserInvitation, used_message: str) -> None:
    """Mark a validated token used, unless a concurrent request got there first.

    The conditional UPDATE serializes racing redemptions on the row: only one
    of them sees a matched row.
    """
    result = await db.execute(
        update(UserInvitation)
        .where(UserInvitation.id == record.id, UserInvitation.is_accepted.is_(False))
        .values(is_accepted=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.warning("Token %s was redeemed concurrently", record.id)
        raise TokenAlreadyUsedError(used_message)
    record.is_accepted = True


async def accept_invitation(
    db: AsyncSession,
    token: str,
    password: str,
    name: str,
) -> User:
    """Redeem an invitation and create the invited account.

    Checks, in order: the token exists, is not yet accepted, has not
    expired, and no account exists for its email.
    """
    invitation = await _redeemable(
        db,
        token,
        InvitationKind.INVITATION,
        "Invalid invitation token",
        "Invitation already accepted",
        "Invitation expired",
    )

    if await get_user_by_email(db, invitation.email) is not None:
        raise ValidationError("User already exists")
    await _claim(db, invitation, "Invitation already accepted")

    user = await insert_user(
        db,
        username=await generate_unique_username(db, invitation.email),
        email=invitation.email,
        password=password,
        name=name,
        role=invitation.role or UserRole.USER,
        organization_id=invitation.organization_id,
    )
    await db.flush()

    await record_activity(
        db,
        user_id=user.id,
        organization_id=invitation.organization_id,
        action="register",
        resource="user",
        resource_id=user.id,
    )
    return user


async def request_password_reset(db: AsyncSession, email: str) -> UserInvitation | None:
    """Issue a password reset token if an active account has this email.

    Returns None, without any observable difference to the client, when
    there is no such account.
    """
    user = await get_user_by_email(db, email)
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown or inactive account")
        return None

    reset = UserInvitation(
        email=user.email,
        kind=InvitationKind.PASSWORD_RESET,
        role=None if user.role == UserRole.SUPERADMIN else user.role,
        organization_id=user.organization_id,
        invited_by=user.id,
        token=generate_token(),
        is_accepted=False,
        expires_at=utc_now() + timedelta(minutes=settings.password_reset_ttl_minutes),
    )
    db.add(reset)
    await db.flush()
    # Delivery is out of scope; the token stays in the database only
    logger.info("Issued password reset %s for user %s", reset.id, user.id)
    return reset


async def reset_password(db: AsyncSession, token: str, password: str) -> User:
    """Redeem a password reset token and set the new password."""
    reset = await _redeemable(
        db,
        token,
        InvitationKind.PASSWORD_RESET,
        "Invalid reset token",
        "Reset token already used",
        "Reset token expired",
    )

    user = await get_user_by_email(db, reset.email)
    if user is None:
        raise ValidationError("User not found")
    await _claim(db, reset, "Reset token already used")

    await set_password(db, user, password)
    await db.flush()

    if user.organization_id:
        await record_activity(
            db,
            user_id=user.id,
            organization_id=user.organization_id,
            action="password_reset",
            resource="auth",
        )
    logger.info("Password reset for user %s", user.id)
    return user
