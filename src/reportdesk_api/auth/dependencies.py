"""FastAPI dependencies for the request gate chain.

Every protected route runs, in order: identity resolution, the role gate,
tenant scope resolution and (for report routes) the permission evaluator in
``reportdesk_api.auth.permissions``.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth.tokens import TokenError, TokenPayload, get_token_manager
from reportdesk_api.db import get_db
from reportdesk_api.exceptions import (
    BadRequestError,
    ForbiddenError,
    UnauthenticatedError,
)
from reportdesk_api.models import User, UserRole

logger = logging.getLogger(__name__)

# auto_error=False so a missing header maps to our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPERADMIN})


async def get_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenPayload:
    """Get and validate the bearer token (required).

    Raises UnauthenticatedError if no token is provided or it fails verification.
    """
    if credentials is None:
        raise UnauthenticatedError("Access token required")

    try:
        return get_token_manager().validate_token(credentials.credentials)
    except TokenError as e:
        logger.warning("Token validation failed: %s", e)
        raise UnauthenticatedError("Invalid access token") from e


async def resolve_user(db: AsyncSession, token: TokenPayload) -> User:
    """Load the live user record named by a verified token."""
    user = await db.get(User, token.sub)
    if user is None or not user.is_active:
        logger.warning("Token subject %s is unknown or inactive", token.sub)
        raise UnauthenticatedError("Invalid or inactive user")
    return user


async def get_current_user(
    token: Annotated[TokenPayload, Depends(get_token)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user (required)."""
    return await resolve_user(db, token)


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Get the current user if the request carries a usable credential.

    Any authentication failure yields None instead of an error.
    """
    try:
        token = await get_token(credentials)
        return await resolve_user(db, token)
    except UnauthenticatedError:
        return None


def authorize(user: User | None, allowed_roles: frozenset[UserRole] | set[UserRole]) -> None:
    """Role gate: require ``user.role`` to be one of ``allowed_roles``."""
    if user is None:
        raise UnauthenticatedError("Authentication required")
    if user.role not in allowed_roles:
        logger.warning(
            "User %s with role %s denied, requires one of %s",
            user.id,
            user.role.value,
            sorted(r.value for r in allowed_roles),
        )
        raise ForbiddenError("Insufficient permissions")


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[User]]:
    """Build a dependency that resolves the caller and applies the role gate."""
    allowed = frozenset(roles)

    async def dependency(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        authorize(current_user, allowed)
        return current_user

    return dependency


def resolve_scope(user: User, requested_org_id: str | None) -> str:
    """Determine the one organization a request may operate against.

    Superadmins must name the organization explicitly. For everyone else the
    requested id is ignored and their own organization is used.
    """
    if user.role == UserRole.SUPERADMIN:
        if not requested_org_id:
            raise BadRequestError("organizationId is required for superadmin")
        return requested_org_id

    if not user.organization_id:
        raise ForbiddenError("No organization access")
    return user.organization_id


async def get_tenant_scope(
    current_user: Annotated[User, Depends(get_current_user)],
    organization_id: Annotated[str | None, Query(alias="organizationId")] = None,
) -> str:
    """Resolve the tenant scope from the ``organizationId`` query parameter."""
    return resolve_scope(current_user, organization_id)


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN, UserRole.SUPERADMIN))]
SuperAdminUser = Annotated[User, Depends(require_roles(UserRole.SUPERADMIN))]
TenantScope = Annotated[str, Depends(get_tenant_scope)]
