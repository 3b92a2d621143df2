"""User service: account creation, updates and credential checks."""

import logging
import re
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
)
from reportdesk_api.models import Organization, User, UserRole
from reportdesk_api.models.base import utc_now
from reportdesk_api.schemas import UserCreate, UserUpdate
from reportdesk_api.services.passwords import (
    hash_password,
    validate_password,
    verify_password,
)

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def ensure_unique_identity(db: AsyncSession, email: str, username: str) -> None:
    """Raise ConflictError if the email or username is already taken."""
    result = await db.execute(
        select(User).where(or_(User.email == email, User.username == username))
    )
    existing = result.scalars().first()
    if existing is None:
        return
    if existing.email == email:
        raise ConflictError("Email already exists")
    raise ConflictError("Username already exists")


async def generate_unique_username(db: AsyncSession, email: str) -> str:
    """Derive a username from an email's local part, suffixed if taken."""
    base = re.sub(r"[^a-z0-9._-]+", "-", email.split("@")[0].lower()).strip("-")
    base = base or "user"
    result = await db.execute(select(User.id).where(User.username == base))
    if result.scalar_one_or_none() is None:
        return base
    return f"{base}-{uuid.uuid4().hex[:6]}"


async def insert_user(
    db: AsyncSession,
    *,
    username: str,
    email: str,
    password: str,
    name: str,
    role: UserRole,
    organization_id: str | None,
) -> User:
    """Validate and insert a user row.

    Enforces the password policy, unique email/username, and that only
    superadmins may exist without an organization.
    """
    if role != UserRole.SUPERADMIN and organization_id is None:
        raise BadRequestError("Organization ID required for non-superadmin users")

    validate_password(password)
    await ensure_unique_identity(db, email, username)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        organization_id=organization_id,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    logger.info("Created %s user %s", role.value, user.id)
    return user


async def create_user(db: AsyncSession, actor: User, data: UserCreate) -> User:
    """Create a user on behalf of an admin or superadmin.

    Admins always create into their own organization and can never create a
    superadmin. Superadmins choose the organization, which is required unless
    the new user is itself a superadmin.
    """
    if actor.role != UserRole.SUPERADMIN and data.role == UserRole.SUPERADMIN:
        logger.warning("User %s attempted to create a superadmin", actor.id)
        raise ForbiddenError("Cannot create superadmin users")

    if actor.role == UserRole.SUPERADMIN:
        if data.role == UserRole.SUPERADMIN:
            organization_id = None
        else:
            if not data.organization_id:
                raise BadRequestError("organizationId is required for superadmin")
            if await db.get(Organization, data.organization_id) is None:
                raise NotFoundError("Organization not found")
            organization_id = data.organization_id
    else:
        if not actor.organization_id:
            raise ForbiddenError("No organization access")
        organization_id = actor.organization_id

    return await insert_user(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        name=data.name,
        role=data.role,
        organization_id=organization_id,
    )


async def list_users(db: AsyncSession, organization_id: str) -> list[User]:
    result = await db.execute(
        select(User)
        .where(User.organization_id == organization_id)
        .order_by(User.created_at)
    )
    return list(result.scalars().all())


async def get_user_for(db: AsyncSession, actor: User, user_id: str) -> User:
    """Get a user visible to ``actor``.

    Users of other organizations are reported as not found to non-superadmins.
    """
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if actor.role != UserRole.SUPERADMIN and user.organization_id != actor.organization_id:
        raise NotFoundError("User not found")
    return user


async def update_user(
    db: AsyncSession, actor: User, user: User, data: UserUpdate
) -> User:
    """Update a user's name, role or active flag."""
    if actor.role != UserRole.SUPERADMIN:
        if user.role == UserRole.SUPERADMIN:
            raise ForbiddenError("Cannot modify superadmin users")
        if data.role == UserRole.SUPERADMIN:
            logger.warning("User %s attempted to promote %s to superadmin", actor.id, user.id)
            raise ForbiddenError("Cannot create superadmin users")

    if data.role is not None and data.role != user.role:
        if data.role == UserRole.SUPERADMIN:
            user.organization_id = None
        elif user.organization_id is None:
            raise BadRequestError("Superadmins cannot be demoted without an organization")
        user.role = data.role
    if data.name is not None:
        user.name = data.name
    if data.is_active is not None:
        user.is_active = data.is_active

    await db.flush()
    logger.info("Updated user %s", user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Check credentials and stamp ``last_active_at``.

    Raises:
        UnauthenticatedError: Unknown email, wrong password or inactive account
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise UnauthenticatedError("Invalid credentials")
    if not user.is_active:
        raise UnauthenticatedError("Account is inactive")

    user.last_active_at = utc_now()
    await db.flush()
    return user


async def set_password(db: AsyncSession, user: User, password: str) -> None:
    validate_password(password)
    user.password_hash = hash_password(password)
    await db.flush()
