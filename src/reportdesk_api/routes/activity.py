"""Organization activity (audit trail) routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import AdminUser, TenantScope
from reportdesk_api.config import settings
from reportdesk_api.db import get_db
from reportdesk_api.schemas import ActivityResponse
from reportdesk_api.services.activity import list_activity

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=list[ActivityResponse])
async def list_activity_endpoint(
    current_user: AdminUser,
    organization_id: TenantScope,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
):
    """List an organization's activity, newest first."""
    return await list_activity(
        db, organization_id, limit or settings.activity_default_limit
    )
