"""Organization management routes (superadmin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.auth import SuperAdminUser
from reportdesk_api.db import get_db
from reportdesk_api.schemas import (
    BootstrapAdminResponse,
    OrganizationCreate,
    OrganizationCreateResponse,
    OrganizationDeleteResponse,
    OrganizationResponse,
    OrganizationUpdate,
    UserResponse,
)
from reportdesk_api.services.organizations import (
    create_organization,
    delete_organization,
    get_organization,
    list_organizations,
    update_organization,
)

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.get("", response_model=list[OrganizationResponse])
async def list_organizations_endpoint(
    current_user: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List all organizations, including soft-deleted ones."""
    return await list_organizations(db)


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization_endpoint(
    organization_id: str,
    current_user: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await get_organization(db, organization_id)


@router.post(
    "",
    response_model=OrganizationCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_organization_endpoint(
    data: OrganizationCreate,
    current_user: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create an organization, optionally with its first admin.

    The admin's temporary password is returned once in this response.
    """
    created = await create_organization(db, current_user, data)
    await db.commit()

    admin = None
    if created.admin is not None:
        admin = BootstrapAdminResponse(
            **UserResponse.model_validate(created.admin).model_dump(),
            temp_password=created.temp_password,
        )
    return OrganizationCreateResponse(
        organization=OrganizationResponse.model_validate(created.organization),
        admin=admin,
        message="Organization created successfully",
    )


@router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization_endpoint(
    organization_id: str,
    data: OrganizationUpdate,
    current_user: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    organization = await get_organization(db, organization_id)
    organization = await update_organization(db, organization, data)
    await db.commit()
    return organization


@router.delete("/{organization_id}", response_model=OrganizationDeleteResponse)
async def delete_organization_endpoint(
    organization_id: str,
    current_user: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Soft-delete an organization that has no users left."""
    organization = await get_organization(db, organization_id)
    organization = await delete_organization(db, organization)
    await db.commit()
    return OrganizationDeleteResponse(
        organization=OrganizationResponse.model_validate(organization),
        message="Organization deleted successfully",
    )
