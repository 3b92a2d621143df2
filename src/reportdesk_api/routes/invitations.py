"""Invitation routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import AdminUser, TenantScope, resolve_scope
from reportdesk_api.db import get_db
from reportdesk_api.schemas import (
    InvitationCreate,
    InvitationCreatedResponse,
    InvitationResponse,
)
from reportdesk_api.services.invitations import (
    create_invitation,
    list_pending_invitations,
)

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get("", response_model=list[InvitationResponse])
async def list_invitations_endpoint(
    current_user: AdminUser,
    organization_id: TenantScope,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List pending, unexpired invitations of an organization."""
    return await list_pending_invitations(db, organization_id)


@router.post(
    "",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitation_endpoint(
    data: InvitationCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Invite an email address.

    Admins always invite into their own organization. The token is returned
    only in this response.
    """
    organization_id = resolve_scope(current_user, data.organization_id)
    invitation = await create_invitation(
        db, current_user, organization_id, data.email, data.role
    )
    await db.commit()
    return invitation
