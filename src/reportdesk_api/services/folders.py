"""Folder service."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.exceptions import NotFoundError, ValidationError
from reportdesk_api.models import Folder, Organization, User, UserRole
from reportdesk_api.schemas import FolderUpdate
from reportdesk_api.services.activity import record_activity

logger = logging.getLogger(__name__)


async def list_folders(db: AsyncSession, organization_id: str) -> list[Folder]:
    result = await db.execute(
        select(Folder)
        .where(Folder.organization_id == organization_id)
        .order_by(Folder.name)
    )
    return list(result.scalars().all())


async def get_folder_in_org(
    db: AsyncSession, folder_id: str, organization_id: str
) -> Folder:
    """Get a folder, treating folders of other organizations as missing."""
    folder = await db.get(Folder, folder_id)
    if folder is None or folder.organization_id != organization_id:
        raise NotFoundError("Folder not found")
    return folder


async def get_folder_for(db: AsyncSession, actor: User, folder_id: str) -> Folder:
    folder = await db.get(Folder, folder_id)
    if folder is None:
        raise NotFoundError("Folder not found")
    if actor.role != UserRole.SUPERADMIN and folder.organization_id != actor.organization_id:
        raise NotFoundError("Folder not found")
    return folder


async def create_folder(
    db: AsyncSession,
    actor: User,
    organization_id: str,
    name: str,
    parent_id: str | None = None,
) -> Folder:
    if await db.get(Organization, organization_id) is None:
        raise NotFoundError("Organization not found")
    if parent_id is not None:
        await get_folder_in_org(db, parent_id, organization_id)

    folder = Folder(
        name=name,
        parent_id=parent_id,
        organization_id=organization_id,
        created_by=actor.id,
    )
    db.add(folder)
    await db.flush()

    await record_activity(
        db,
        user_id=actor.id,
        organization_id=organization_id,
        action="folder_created",
        resource="folder",
        resource_id=folder.id,
        metadata={"name": folder.name},
    )
    return folder


async def is_descendant(db: AsyncSession, folder_id: str, ancestor_id: str) -> bool:
    """Check whether ``folder_id`` is ``ancestor_id`` or lies beneath it."""
    seen: set[str] = set()
    current: str | None = folder_id
    while current is not None and current not in seen:
        if current == ancestor_id:
            return True
        seen.add(current)
        result = await db.execute(select(Folder.parent_id).where(Folder.id == current))
        current = result.scalar_one_or_none()
    return False


async def update_folder(
    db: AsyncSession,
    actor: User,
    folder: Folder,
    data: FolderUpdate,
) -> Folder:
    """Rename or move a folder.

    Raises:
        NotFoundError: If the new parent is not a folder of the same organization
        ValidationError: If the move would make the folder its own ancestor
    """
    if data.name is not None:
        folder.name = data.name

    if "parent_id" in data.model_fields_set:
        new_parent_id = data.parent_id
        if new_parent_id is not None:
            await get_folder_in_org(db, new_parent_id, folder.organization_id)
            if await is_descendant(db, new_parent_id, folder.id):
                raise ValidationError(
                    "Folder cannot be moved into itself or one of its subfolders"
                )
        folder.parent_id = new_parent_id

    await db.flush()
    await record_activity(
        db,
        user_id=actor.id,
        organization_id=folder.organization_id,
        action="folder_updated",
        resource="folder",
        resource_id=folder.id,
        metadata={"name": folder.name, "parentId": folder.parent_id},
    )
    return folder
