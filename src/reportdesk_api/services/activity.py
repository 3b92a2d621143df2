"""Activity recorder: append-only audit trail.

Entries are written in a SAVEPOINT so a failed insert rolls back only the
audit row and never the operation being audited.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.models import ActivityLog, Organization

logger = logging.getLogger(__name__)


async def record_activity(
    db: AsyncSession,
    *,
    user_id: str,
    organization_id: str,
    action: str,
    resource: str | None = None,
    resource_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ActivityLog | None:
    """Append an audit entry.

    Returns:
        The new ActivityLog, or None if it could not be written. A failure
        here is logged and never propagates to the caller.
    """
    try:
        async with db.begin_nested():
            entry = ActivityLog(
                user_id=user_id,
                organization_id=organization_id,
                action=action,
                resource=resource,
                resource_id=resource_id,
                activity_metadata=metadata or {},
            )
            db.add(entry)
            await db.flush()
    except SQLAlchemyError:
        logger.exception(
            "Failed to record activity %s for user %s in organization %s",
            action,
            user_id,
            organization_id,
        )
        return None

    return entry


async def list_activity(
    db: AsyncSession,
    organization_id: str,
    limit: int,
) -> list[ActivityLog]:
    """List an organization's activity, newest first."""
    result = await db.execute(
        select(ActivityLog)
        .where(ActivityLog.organization_id == organization_id)
        .order_by(ActivityLog.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_system_activity(
    db: AsyncSession,
    limit: int,
) -> list[tuple[ActivityLog, str]]:
    """List activity across all organizations, newest first.

    Returns:
        List of (ActivityLog, organization name) tuples
    """
    result = await db.execute(
        select(ActivityLog, Organization.name)
        .join(Organization, ActivityLog.organization_id == Organization.id)
        .order_by(ActivityLog.created_at.desc())
        .limit(limit)
    )
    return [(entry, org_name) for entry, org_name in result.all()]
