"""System-wide metrics for the superadmin console."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.models import Organization, Report, User, UserRole
from reportdesk_api.schemas import OrganizationMetrics, SystemMetricsResponse


async def _count_by_org(db: AsyncSession, stmt) -> dict[str, int]:
    result = await db.execute(stmt)
    return {org_id: count for org_id, count in result.all() if org_id is not None}


async def get_system_metrics(db: AsyncSession) -> SystemMetricsResponse:
    """Aggregate organization, user and report counts."""
    organizations = list(
        (
            await db.execute(select(Organization).order_by(Organization.created_at.desc()))
        ).scalars()
    )

    users = await _count_by_org(
        db,
        select(User.organization_id, func.count(User.id)).group_by(User.organization_id),
    )
    admins = await _count_by_org(
        db,
        select(User.organization_id, func.count(User.id))
        .where(User.role == UserRole.ADMIN)
        .group_by(User.organization_id),
    )
    reports = await _count_by_org(
        db,
        select(Report.organization_id, func.count(Report.id)).group_by(
            Report.organization_id
        ),
    )

    total_users = await db.scalar(select(func.count(User.id)))
    total_reports = await db.scalar(select(func.count(Report.id)))

    return SystemMetricsResponse(
        total_organizations=len(organizations),
        active_organizations=sum(1 for org in organizations if not org.is_deleted),
        total_users=total_users or 0,
        total_reports=total_reports or 0,
        organizations=[
            OrganizationMetrics(
                id=org.id,
                name=org.name,
                domain=org.domain,
                industry=org.industry,
                size=org.size,
                is_deleted=org.is_deleted,
                user_count=users.get(org.id, 0),
                admin_count=admins.get(org.id, 0),
                report_count=reports.get(org.id, 0),
                created_at=org.created_at,
            )
            for org in organizations
        ],
    )
