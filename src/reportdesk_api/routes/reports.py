"""Report routes.

Single-report routes run the permission evaluator before touching the
report: viewer level for reads, editor level for changes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import (
    AdminUser,
    CurrentUser,
    get_report_or_404,
    load_report_for,
    resolve_scope,
)
from reportdesk_api.db import get_db
from reportdesk_api.models import ReportPermissionLevel
from reportdesk_api.schemas import (
    PermissionGrant,
    PermissionResponse,
    ReportCreate,
    ReportResponse,
    ReportStarRequest,
    ReportUpdate,
)
from reportdesk_api.services.permissions import grant_permission, list_permissions
from reportdesk_api.services.reports import (
    create_report,
    list_reports,
    list_starred_reports,
    record_view,
    set_starred,
    update_report,
)
from reportdesk_api.services.storage import FileStorage, get_file_storage

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=list[ReportResponse])
async def list_reports_endpoint(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    organization_id: Annotated[str | None, Query(alias="organizationId")] = None,
    starred: bool = False,
):
    """List reports of the caller's organization.

    With ``starred=true`` only the caller's own starred reports are returned.
    """
    if starred:
        return await list_starred_reports(db, current_user)
    return await list_reports(db, resolve_scope(current_user, organization_id))


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report_endpoint(
    data: ReportCreate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a report; the caller becomes its owner."""
    organization_id = resolve_scope(current_user, data.organization_id)
    report = await create_report(db, current_user, organization_id, data)
    await db.commit()
    return report


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report_endpoint(
    report_id: str,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a report. Each successful read counts one view."""
    report = await load_report_for(
        db, current_user, report_id, ReportPermissionLevel.VIEWER
    )
    report = await record_view(db, report)
    await db.commit()
    return report


@router.patch("/{report_id}", response_model=ReportResponse)
async def update_report_endpoint(
    report_id: str,
    data: ReportUpdate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    report = await load_report_for(
        db, current_user, report_id, ReportPermissionLevel.EDITOR
    )
    report = await update_report(db, current_user, report, data)
    await db.commit()
    return report


@router.patch("/{report_id}/star", response_model=ReportResponse)
async def star_report_endpoint(
    report_id: str,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    data: ReportStarRequest | None = None,
):
    """Set the star flag, or toggle it when no value is given."""
    report = await load_report_for(
        db, current_user, report_id, ReportPermissionLevel.VIEWER
    )
    report = await set_starred(db, report, data.starred if data else None)
    await db.commit()
    return report


@router.get("/{report_id}/download")
async def download_report_endpoint(
    report_id: str,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[FileStorage, Depends(get_file_storage)],
):
    report = await load_report_for(
        db, current_user, report_id, ReportPermissionLevel.VIEWER
    )
    path = storage.resolve(report.file_path or "")
    return FileResponse(
        path,
        filename=f"{report.name}.{report.file_type.value}",
    )


@router.get("/{report_id}/permissions", response_model=list[PermissionResponse])
async def list_permissions_endpoint(
    report_id: str,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    report = await get_report_or_404(db, report_id)
    return await list_permissions(db, current_user, report)


@router.post(
    "/{report_id}/permissions",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def grant_permission_endpoint(
    report_id: str,
    data: PermissionGrant,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Grant a user editor, commenter or viewer access to a report."""
    report = await get_report_or_404(db, report_id)
    grant = await grant_permission(
        db, current_user, report, data.user_id, data.permission
    )
    await db.commit()
    return grant
