"""Cross-tenant system routes (superadmin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import SuperAdminUser
from reportdesk_api.config import settings
from reportdesk_api.db import get_db
from reportdesk_api.schemas import SystemActivityResponse, SystemMetricsResponse
from reportdesk_api.services.activity import list_system_activity
from reportdesk_api.services.system import get_system_metrics

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/metrics", response_model=SystemMetricsResponse)
async def get_system_metrics_endpoint(
    current_user: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await get_system_metrics(db)


@router.get("/activity", response_model=list[SystemActivityResponse])
async def list_system_activity_endpoint(
    current_user: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
):
    """List recent activity across all organizations."""
    entries = await list_system_activity(
        db, limit or settings.system_activity_default_limit
    )
    return [
        SystemActivityResponse(
            id=entry.id,
            user_id=entry.user_id,
            organization_id=entry.organization_id,
            action=entry.action,
            resource=entry.resource,
            resource_id=entry.resource_id,
            activity_metadata=entry.activity_metadata,
            created_at=entry.created_at,
            organization_name=organization_name,
        )
        for entry, organization_name in entries
    ]
