"""User management routes (admin and superadmin)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import AdminUser, TenantScope
from reportdesk_api.db import get_db
from reportdesk_api.schemas import UserCreate, UserResponse, UserUpdate
from reportdesk_api.services.users import (
    create_user,
    get_user_for,
    list_users,
    update_user,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users_endpoint(
    current_user: AdminUser,
    organization_id: TenantScope,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List the users of the caller's organization.

    Superadmins must pass ``organizationId``; for everyone else it is ignored.
    """
    return await list_users(db, organization_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user_endpoint(
    data: UserCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    user = await create_user(db, current_user, data)
    await db.commit()
    return user


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user_endpoint(
    user_id: str,
    data: UserUpdate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a user's name, role or active flag.

    Deactivation takes effect on the user's next request.
    """
    user = await get_user_for(db, current_user, user_id)
    user = await update_user(db, current_user, user, data)
    await db.commit()
    return user
