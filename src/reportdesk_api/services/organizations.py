"""Organization service: tenant lifecycle."""

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.exceptions import ConflictError, NotFoundError
from reportdesk_api.models import Organization, User, UserRole
from reportdesk_api.models.base import utc_now
from reportdesk_api.schemas import OrganizationCreate, OrganizationUpdate
from reportdesk_api.services.activity import record_activity
from reportdesk_api.services.passwords import generate_temporary_password
from reportdesk_api.services.users import insert_user

logger = logging.getLogger(__name__)


@dataclass
class CreatedOrganization:
    """Result of creating an organization."""

    organization: Organization
    admin: User | None = None
    # Shown once; never stored in plain text
    temp_password: str | None = None


async def list_organizations(db: AsyncSession) -> list[Organization]:
    result = await db.execute(select(Organization).order_by(Organization.created_at))
    return list(result.scalars().all())


async def get_organization(db: AsyncSession, organization_id: str) -> Organization:
    organization = await db.get(Organization, organization_id)
    if organization is None:
        raise NotFoundError("Organization not found")
    return organization


async def create_organization(
    db: AsyncSession,
    actor: User,
    data: OrganizationCreate,
) -> CreatedOrganization:
    """Create an organization, optionally with its first admin.

    The organization and admin are flushed in the caller's transaction, so
    a failure creating the admin leaves nothing behind once the caller
    rolls back.
    """
    organization = Organization(
        name=data.name,
        domain=data.domain,
        industry=data.industry,
        size=data.size,
        settings=dict(data.settings),
    )
    db.add(organization)
    await db.flush()

    created = CreatedOrganization(organization=organization)

    if data.admin is not None:
        temp_password = generate_temporary_password()
        admin = await insert_user(
            db,
            username=data.admin.username,
            email=data.admin.email,
            password=temp_password,
            name=data.admin.name,
            role=UserRole.ADMIN,
            organization_id=organization.id,
        )
        created.admin = admin
        created.temp_password = temp_password

    await record_activity(
        db,
        user_id=created.admin.id if created.admin else actor.id,
        organization_id=organization.id,
        action="organization_created",
        resource="organization",
        resource_id=organization.id,
        metadata={"createdBy": actor.id},
    )

    logger.info("Created organization %s", organization.id)
    return created


async def update_organization(
    db: AsyncSession,
    organization: Organization,
    data: OrganizationUpdate,
) -> Organization:
    if data.name is not None:
        organization.name = data.name
    if data.domain is not None:
        organization.domain = data.domain
    if data.industry is not None:
        organization.industry = data.industry
    if data.size is not None:
        organization.size = data.size
    if data.settings is not None:
        # Keep the soft-delete marker out of client control
        new_settings = dict(data.settings)
        for key in ("deleted", "deletedAt"):
            new_settings.pop(key, None)
            if key in organization.settings:
                new_settings[key] = organization.settings[key]
        organization.settings = new_settings

    await db.flush()
    return organization


async def count_users(db: AsyncSession, organization_id: str) -> int:
    result = await db.execute(
        select(func.count(User.id)).where(User.organization_id == organization_id)
    )
    return result.scalar() or 0


async def delete_organization(
    db: AsyncSession, organization: Organization
) -> Organization:
    """Soft-delete an organization that no longer has users.

    Raises:
        ConflictError: If any user still belongs to it, or it is already deleted
    """
    if organization.is_deleted:
        raise ConflictError("Organization is already deleted")

    if await count_users(db, organization.id) > 0:
        raise ConflictError(
            "Cannot delete organization with existing users. "
            "Please remove all users first."
        )

    # Assign a new dict so the JSON column change is detected
    organization.settings = {
        **organization.settings,
        "deleted": True,
        "deletedAt": utc_now().isoformat(),
    }
    organization.name = f"{organization.name}{Organization.DELETED_SUFFIX}"
    await db.flush()
    logger.info("Soft-deleted organization %s", organization.id)
    return organization
