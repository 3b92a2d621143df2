"""Report service: report lifecycle and its owner grant."""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.exceptions import NotFoundError
from reportdesk_api.models import (
    FileType,
    Organization,
    Report,
    ReportPermission,
    ReportPermissionLevel,
    User,
)
from reportdesk_api.schemas import ReportCreate, ReportUpdate
from reportdesk_api.services.activity import record_activity
from reportdesk_api.services.folders import get_folder_in_org

logger = logging.getLogger(__name__)

DATA_SOURCE_TYPES = (FileType.CSV, FileType.XLSX)


async def list_reports(db: AsyncSession, organization_id: str) -> list[Report]:
    result = await db.execute(
        select(Report)
        .where(Report.organization_id == organization_id)
        .order_by(Report.created_at.desc())
    )
    return list(result.scalars().all())


async def list_starred_reports(db: AsyncSession, user: User) -> list[Report]:
    """List starred reports created by ``user``."""
    result = await db.execute(
        select(Report)
        .where(Report.created_by == user.id, Report.is_starred.is_(True))
        .order_by(Report.updated_at.desc())
    )
    return list(result.scalars().all())


async def list_data_sources(db: AsyncSession, organization_id: str) -> list[Report]:
    """List tabular reports (csv, xlsx) usable as chart builder inputs."""
    result = await db.execute(
        select(Report)
        .where(
            Report.organization_id == organization_id,
            Report.file_type.in_(DATA_SOURCE_TYPES),
        )
        .order_by(Report.created_at.desc())
    )
    return list(result.scalars().all())


async def create_report(
    db: AsyncSession,
    actor: User,
    organization_id: str,
    data: ReportCreate,
) -> Report:
    """Create a report together with its owner permission.

    Both rows are flushed in the caller's transaction and committed together.
    """
    if await db.get(Organization, organization_id) is None:
        raise NotFoundError("Organization not found")
    if data.folder_id is not None:
        await get_folder_in_org(db, data.folder_id, organization_id)

    report = Report(
        name=data.name,
        file_type=data.file_type,
        file_size=data.file_size,
        file_path=data.file_path,
        folder_id=data.folder_id,
        organization_id=organization_id,
        created_by=actor.id,
        is_starred=False,
        view_count=0,
    )
    db.add(report)
    await db.flush()

    owner = ReportPermission(
        report_id=report.id,
        user_id=actor.id,
        permission=ReportPermissionLevel.OWNER,
        granted_by=actor.id,
    )
    db.add(owner)
    await db.flush()

    await record_activity(
        db,
        user_id=actor.id,
        organization_id=organization_id,
        action="report_created",
        resource="report",
        resource_id=report.id,
        metadata={"name": report.name, "fileType": report.file_type.value},
    )
    logger.info("Created report %s in organization %s", report.id, organization_id)
    return report


async def record_view(db: AsyncSession, report: Report) -> Report:
    """Count one successful read.

    The increment is a single SQL UPDATE, so concurrent reads are each
    counted exactly once.
    """
    await db.execute(
        update(Report)
        .where(Report.id == report.id)
        .values(
            view_count=Report.view_count + 1,
            # A view is not an edit
            updated_at=Report.updated_at,
        )
        .execution_options(synchronize_session=False)
    )
    await db.refresh(report)
    return report


async def set_starred(
    db: AsyncSession, report: Report, starred: bool | None
) -> Report:
    """Set the star flag, or toggle it when ``starred`` is None."""
    report.is_starred = (not report.is_starred) if starred is None else starred
    await db.flush()
    await db.refresh(report)
    return report


async def update_report(
    db: AsyncSession,
    actor: User,
    report: Report,
    data: ReportUpdate,
) -> Report:
    if data.name is not None:
        report.name = data.name
    if "folder_id" in data.model_fields_set:
        if data.folder_id is not None:
            await get_folder_in_org(db, data.folder_id, report.organization_id)
        report.folder_id = data.folder_id

    await db.flush()
    await db.refresh(report)

    await record_activity(
        db,
        user_id=actor.id,
        organization_id=report.organization_id,
        action="report_updated",
        resource="report",
        resource_id=report.id,
        metadata={"name": report.name, "folderId": report.folder_id},
    )
    return report
