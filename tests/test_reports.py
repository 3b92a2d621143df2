"""Tests for report routes, view counting and per-report permissions."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk_api.models import (
    Organization,
    Report,
    ReportPermission,
    ReportPermissionLevel,
    User,
)
from reportdesk_api.services.reports import record_view

from .conftest import auth_headers


async def _create_report(
    client: AsyncClient, owner: User, name: str = "Q3 Results", file_type: str = "pdf"
) -> dict:
    response = await client.post(
        "/api/v1/reports",
        json={"name": name, "file_type": file_type, "file_size": 1024},
        headers=auth_headers(owner),
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_report_creates_owner_permission(
    client: AsyncClient, async_session: AsyncSession, user_a: User, org_a: Organization
):
    report = await _create_report(client, user_a)

    assert report["organization_id"] == org_a.id
    assert report["created_by"] == user_a.id
    assert report["view_count"] == 0

    result = await async_session.execute(
        select(ReportPermission).where(ReportPermission.report_id == report["id"])
    )
    grants = result.scalars().all()
    assert len(grants) == 1
    assert grants[0].user_id == user_a.id
    assert grants[0].permission == ReportPermissionLevel.OWNER


@pytest.mark.asyncio
async def test_report_in_foreign_folder_rejected(
    client: AsyncClient, user_a: User, admin_b: User
):
    folder = await client.post(
        "/api/v1/folders", json={"name": "B-only"}, headers=auth_headers(admin_b)
    )
    response = await client.post(
        "/api/v1/reports",
        json={"name": "Sneaky", "file_type": "pdf", "folder_id": folder.json()["id"]},
        headers=auth_headers(user_a),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_reports_is_tenant_isolated(
    client: AsyncClient, user_a: User, user_b: User, org_a: Organization
):
    await _create_report(client, user_a)

    response = await client.get(
        "/api/v1/reports",
        params={"organizationId": org_a.id},
        headers=auth_headers(user_b),
    )
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_superadmin_list_reports_requires_org(
    client: AsyncClient, superadmin: User, user_a: User, org_a: Organization
):
    await _create_report(client, user_a)
    headers = auth_headers(superadmin)

    response = await client.get("/api/v1/reports", headers=headers)
    assert response.status_code == 400

    response = await client.get(
        "/api/v1/reports", params={"organizationId": org_a.id}, headers=headers
    )
    assert response.status_code == 200
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_cross_tenant_read_forbidden(
    client: AsyncClient, user_a: User, admin_b: User
):
    report = await _create_report(client, user_a)

    response = await client.get(
        f"/api/v1/reports/{report['id']}", headers=auth_headers(admin_b)
    )
    assert response.status_code == 403
    assert response.json() == {"message": "Access denied to this report"}


@pytest.mark.asyncio
async def test_missing_report_is_404(client: AsyncClient, user_a: User):
    response = await client.get("/api/v1/reports/missing", headers=auth_headers(user_a))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_same_tenant_user_without_grant_forbidden(
    client: AsyncClient, user_a: User, user_a2: User
):
    report = await _create_report(client, user_a)

    response = await client.get(
        f"/api/v1/reports/{report['id']}", headers=auth_headers(user_a2)
    )
    assert response.status_code == 403
    assert response.json() == {"message": "No permission to access this report"}


@pytest.mark.asyncio
async def test_view_count_increments_once_per_read(
    client: AsyncClient, user_a: User, superadmin: User
):
    report = await _create_report(client, user_a)

    for expected in (1, 2, 3):
        response = await client.get(
            f"/api/v1/reports/{report['id']}", headers=auth_headers(user_a)
        )
        assert response.json()["view_count"] == expected

    # Superadmin reads count too
    response = await client.get(
        f"/api/v1/reports/{report['id']}", headers=auth_headers(superadmin)
    )
    assert response.json()["view_count"] == 4


@pytest.mark.asyncio
async def test_view_count_exact_with_stale_copy(
    client: AsyncClient, async_session: AsyncSession, user_a: User
):
    """An out-of-date in-memory report never loses a concurrent view."""
    created = await _create_report(client, user_a)
    stale = await async_session.get(Report, created["id"])
    assert stale.view_count == 0

    await client.get(f"/api/v1/reports/{created['id']}", headers=auth_headers(user_a))

    # The stale copy still says 0; the increment happens in SQL
    updated = await record_view(async_session, stale)
    await async_session.commit()
    assert updated.view_count == 2


@pytest.mark.asyncio
async def test_star_toggle_and_starred_listing(client: AsyncClient, user_a: User):
    report = await _create_report(client, user_a)
    await _create_report(client, user_a, name="Unstarred")
    headers = auth_headers(user_a)

    response = await client.patch(f"/api/v1/reports/{report['id']}/star", headers=headers)
    assert response.status_code == 200
    assert response.json()["is_starred"] is True

    starred = await client.get("/api/v1/reports", params={"starred": "true"}, headers=headers)
    assert [r["id"] for r in starred.json()] == [report["id"]]

    response = await client.patch(
        f"/api/v1/reports/{report['id']}/star", json={"starred": False}, headers=headers
    )
    assert response.json()["is_starred"] is False

    response = await client.patch(f"/api/v1/reports/{report['id']}/star", headers=headers)
    assert response.json()["is_starred"] is True


@pytest.mark.asyncio
async def test_viewer_can_read_but_not_edit_until_upgraded(
    client: AsyncClient, admin_a: User, user_a: User, user_a2: User
):
    report = await _create_report(client, user_a)
    admin_headers = auth_headers(admin_a)
    viewer_headers = auth_headers(user_a2)

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_a2.id, "permission": "viewer"},
        headers=admin_headers,
    )
    assert response.status_code == 201

    read = await client.get(f"/api/v1/reports/{report['id']}", headers=viewer_headers)
    assert read.status_code == 200

    edit = await client.patch(
        f"/api/v1/reports/{report['id']}", json={"name": "Mine now"}, headers=viewer_headers
    )
    assert edit.status_code == 403

    # Granting again updates the existing row
    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_a2.id, "permission": "editor"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["permission"] == "editor"

    edit = await client.patch(
        f"/api/v1/reports/{report['id']}", json={"name": "Edited"}, headers=viewer_headers
    )
    assert edit.status_code == 200
    assert edit.json()["name"] == "Edited"

    listed = await client.get(
        f"/api/v1/reports/{report['id']}/permissions", headers=admin_headers
    )
    assert {(p["user_id"], p["permission"]) for p in listed.json()} == {
        (user_a.id, "owner"),
        (user_a2.id, "editor"),
    }


@pytest.mark.asyncio
async def test_user_role_cannot_grant(client: AsyncClient, user_a: User, user_a2: User):
    report = await _create_report(client, user_a)

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_a2.id, "permission": "viewer"},
        headers=auth_headers(user_a),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_grant_to_user_in_other_org_forbidden(
    client: AsyncClient, admin_a: User, user_a: User, user_b: User
):
    report = await _create_report(client, user_a)

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_b.id, "permission": "viewer"},
        headers=auth_headers(admin_a),
    )
    assert response.status_code == 403
    assert response.json() == {
        "message": "Cannot grant permissions to users outside your organization"
    }

    # user_b still has no access
    read = await client.get(f"/api/v1/reports/{report['id']}", headers=auth_headers(user_b))
    assert read.status_code == 403


@pytest.mark.asyncio
async def test_foreign_admin_cannot_grant_on_report(
    client: AsyncClient, admin_b: User, user_a: User, user_b: User
):
    report = await _create_report(client, user_a)

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_b.id, "permission": "editor"},
        headers=auth_headers(admin_b),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_owner_cannot_be_granted(
    client: AsyncClient, admin_a: User, user_a: User, user_a2: User
):
    report = await _create_report(client, user_a)

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_a2.id, "permission": "owner"},
        headers=auth_headers(admin_a),
    )
    assert response.status_code == 400

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_a.id, "permission": "viewer"},
        headers=auth_headers(admin_a),
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_permission_listing_restricted(
    client: AsyncClient, admin_a: User, user_a: User, user_a2: User
):
    report = await _create_report(client, user_a)
    await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_a2.id, "permission": "viewer"},
        headers=auth_headers(admin_a),
    )

    owner = await client.get(
        f"/api/v1/reports/{report['id']}/permissions", headers=auth_headers(user_a)
    )
    assert owner.status_code == 200

    viewer = await client.get(
        f"/api/v1/reports/{report['id']}/permissions", headers=auth_headers(user_a2)
    )
    assert viewer.status_code == 403


@pytest.mark.asyncio
async def test_data_sources_only_tabular(client: AsyncClient, user_a: User):
    await _create_report(client, user_a, name="Deck", file_type="pptx")
    await _create_report(client, user_a, name="Sales", file_type="csv")
    await _create_report(client, user_a, name="Budget", file_type="xlsx")

    response = await client.get(
        "/api/v1/analytics/data-sources", headers=auth_headers(user_a)
    )
    assert response.status_code == 200
    assert {r["name"] for r in response.json()} == {"Sales", "Budget"}


@pytest.mark.asyncio
async def test_superadmin_create_report_in_unknown_org(
    client: AsyncClient, async_session: AsyncSession, superadmin: User
):
    response = await client.post(
        "/api/v1/reports",
        json={
            "name": "Orphan",
            "file_type": "pdf",
            "file_size": 10,
            "organization_id": "does-not-exist",
        },
        headers=auth_headers(superadmin),
    )

    assert response.status_code == 404
    assert response.json() == {"message": "Organization not found"}
    result = await async_session.execute(select(Report))
    assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_superadmin_cannot_grant_outside_report_org(
    client: AsyncClient, superadmin: User, user_a: User, user_a2: User, user_b: User
):
    report = await _create_report(client, user_a)
    headers = auth_headers(superadmin)

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_b.id, "permission": "viewer"},
        headers=headers,
    )
    assert response.status_code == 403

    response = await client.post(
        f"/api/v1/reports/{report['id']}/permissions",
        json={"user_id": user_a2.id, "permission": "viewer"},
        headers=headers,
    )
    assert response.status_code == 201
