"""Per-report access evaluation.

Access to a single report is decided by a fixed precedence chain, first match
wins:

1. superadmin role: allowed
2. report belongs to another organization: forbidden (before any grant
   lookup, so grant existence never leaks across tenants)
3. caller created the report: allowed, even without an owner grant row
4. caller holds a grant: allowed if the grant satisfies the required level
5. otherwise: forbidden
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.exceptions import ForbiddenError, NotFoundError
from reportdesk_api.models import (
    Report,
    ReportPermission,
    ReportPermissionLevel,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)


def can_access(
    user: User,
    report: Report,
    required_level: ReportPermissionLevel,
    grant: ReportPermission | None,
) -> None:
    """Raise ForbiddenError unless ``user`` may act on ``report`` at ``required_level``.

    Args:
        user: The resolved caller
        report: The target report
        required_level: Weakest permission that allows the operation
        grant: The caller's ReportPermission row for this report, if any
    """
    if user.role == UserRole.SUPERADMIN:
        return

    if user.organization_id != report.organization_id:
        logger.warning(
            "User %s denied cross-tenant access to report %s", user.id, report.id
        )
        raise ForbiddenError("Access denied to this report")

    if user.id == report.created_by:
        return

    if grant is not None and grant.permission.satisfies(required_level):
        return

    logger.warning(
        "User %s lacks %s permission on report %s",
        user.id,
        required_level.value,
        report.id,
    )
    raise ForbiddenError("No permission to access this report")


async def get_user_grant(
    db: AsyncSession, report_id: str, user_id: str
) -> ReportPermission | None:
    """Get a user's permission row for a report."""
    result = await db.execute(
        select(ReportPermission).where(
            ReportPermission.report_id == report_id,
            ReportPermission.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def get_report_or_404(db: AsyncSession, report_id: str) -> Report:
    report = await db.get(Report, report_id)
    if report is None:
        raise NotFoundError("Report not found")
    return report


async def load_report_for(
    db: AsyncSession,
    user: User,
    report_id: str,
    required_level: ReportPermissionLevel,
) -> Report:
    """Fetch a report and evaluate the caller's access to it.

    Raises:
        NotFoundError: If the report does not exist
        ForbiddenError: If the precedence chain denies access
    """
    report = await get_report_or_404(db, report_id)

    grant = None
    # The grant lookup only happens once the tenant check can pass
    if (
        user.role != UserRole.SUPERADMIN
        and user.organization_id == report.organization_id
        and user.id != report.created_by
    ):
        grant = await get_user_grant(db, report.id, user.id)

    can_access(user, report, required_level, grant)
    return report
