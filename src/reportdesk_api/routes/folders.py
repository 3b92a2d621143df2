"""Folder routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import AdminUser, TenantScope, resolve_scope
from reportdesk_api.db import get_db
from reportdesk_api.schemas import FolderCreate, FolderResponse, FolderUpdate
from reportdesk_api.services.folders import (
    create_folder,
    get_folder_for,
    list_folders,
    update_folder,
)

router = APIRouter(prefix="/folders", tags=["folders"])


@router.get("", response_model=list[FolderResponse])
async def list_folders_endpoint(
    organization_id: TenantScope,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await list_folders(db, organization_id)


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder_endpoint(
    data: FolderCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    organization_id = resolve_scope(current_user, data.organization_id)
    folder = await create_folder(
        db, current_user, organization_id, data.name, data.parent_id
    )
    await db.commit()
    return folder


@router.patch("/{folder_id}", response_model=FolderResponse)
async def update_folder_endpoint(
    folder_id: str,
    data: FolderUpdate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Rename a folder or move it under another folder of the same organization."""
    folder = await get_folder_for(db, current_user, folder_id)
    folder = await update_folder(db, current_user, folder, data)
    await db.commit()
    return folder
