"""Analytics routes feeding the chart builder."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import TenantScope
from reportdesk_api.db import get_db
from reportdesk_api.schemas import ReportResponse
from reportdesk_api.services.reports import list_data_sources

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/data-sources", response_model=list[ReportResponse])
async def list_data_sources_endpoint(
    organization_id: TenantScope,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List the organization's tabular reports (CSV and XLSX)."""
    return await list_data_sources(db, organization_id)
