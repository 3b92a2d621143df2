"""Report permission service: listing and granting per-report access."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth.dependencies import ADMIN_ROLES, authorize
from reportdesk_api.auth.permissions import get_user_grant
from reportdesk_api.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from reportdesk_api.models import (
    Report,
    ReportPermission,
    ReportPermissionLevel,
    User,
    UserRole,
)
from reportdesk_api.services.activity import record_activity

logger = logging.getLogger(__name__)


def _require_same_tenant(actor: User, report: Report) -> None:
    if actor.role != UserRole.SUPERADMIN and actor.organization_id != report.organization_id:
        logger.warning(
            "User %s denied cross-tenant access to report %s", actor.id, report.id
        )
        raise ForbiddenError("Access denied to this report")


async def list_permissions(
    db: AsyncSession, actor: User, report: Report
) -> list[ReportPermission]:
    """List a report's grants.

    Allowed for the report's creator, an owner-level grantee, and admins or
    superadmins with access to the report's organization.
    """
    _require_same_tenant(actor, report)

    if actor.role not in ADMIN_ROLES and actor.id != report.created_by:
        grant = await get_user_grant(db, report.id, actor.id)
        if grant is None or grant.permission != ReportPermissionLevel.OWNER:
            raise ForbiddenError("No permission to view report permissions")

    result = await db.execute(
        select(ReportPermission)
        .where(ReportPermission.report_id == report.id)
        .order_by(ReportPermission.created_at)
    )
    return list(result.scalars().all())


async def grant_permission(
    db: AsyncSession,
    actor: User,
    report: Report,
    user_id: str,
    level: ReportPermissionLevel,
) -> ReportPermission:
    """Grant (or change) a user's permission on a report.

    Raises:
        ForbiddenError: Caller is not admin+, the report is in another
            tenant, or the grantee is outside the caller's (or, for a
            superadmin, the report's) organization
        NotFoundError: The grantee does not exist
        ValidationError: Ownership was requested; it is fixed at creation
        ConflictError: The grantee is the report owner
    """
    authorize(actor, ADMIN_ROLES)
    _require_same_tenant(actor, report)

    grantee = await db.get(User, user_id)
    if actor.role != UserRole.SUPERADMIN:
        if grantee is None or grantee.organization_id != actor.organization_id:
            logger.warning(
                "User %s attempted to grant report %s outside their organization",
                actor.id,
                report.id,
            )
            raise ForbiddenError(
                "Cannot grant permissions to users outside your organization"
            )
    else:
        if grantee is None:
            raise NotFoundError("User not found")
        # The grantee must belong to the report's organization
        if grantee.organization_id != report.organization_id:
            raise ForbiddenError(
                "Cannot grant permissions to users outside the report's organization"
            )

    if level == ReportPermissionLevel.OWNER:
        raise ValidationError("Ownership cannot be granted")

    grant = await get_user_grant(db, report.id, grantee.id)
    if grant is not None:
        if grant.permission == ReportPermissionLevel.OWNER:
            raise ConflictError("User already owns this report")
        grant.permission = level
        grant.granted_by = actor.id
    else:
        grant = ReportPermission(
            report_id=report.id,
            user_id=grantee.id,
            permission=level,
            granted_by=actor.id,
        )
        db.add(grant)
    await db.flush()

    await record_activity(
        db,
        user_id=actor.id,
        organization_id=report.organization_id,
        action="permission_granted",
        resource="report",
        resource_id=report.id,
        metadata={"permission": level.value, "userId": grantee.id},
    )
    logger.info(
        "User %s granted %s on report %s to %s",
        actor.id,
        level.value,
        report.id,
        grantee.id,
    )
    return grant
