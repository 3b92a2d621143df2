"""Tests for the role gate, tenant scope resolution and report permission evaluator."""

import pytest

from reportdesk_api.auth import authorize, can_access, resolve_scope
from reportdesk_api.auth.dependencies import ADMIN_ROLES
from reportdesk_api.exceptions import (
    BadRequestError,
    ForbiddenError,
    UnauthenticatedError,
)
from reportdesk_api.models import (
    Report,
    ReportPermission,
    ReportPermissionLevel,
    User,
    UserRole,
)


def _user(user_id: str, role: UserRole, org_id: str | None) -> User:
    return User(id=user_id, role=role, organization_id=org_id)


def _report(org_id: str = "org-a", created_by: str = "creator") -> Report:
    return Report(id="report-1", organization_id=org_id, created_by=created_by)


def _grant(user_id: str, level: ReportPermissionLevel) -> ReportPermission:
    return ReportPermission(report_id="report-1", user_id=user_id, permission=level)


# --- Role gate ---


def test_authorize_allows_listed_role():
    authorize(_user("u", UserRole.ADMIN, "org-a"), ADMIN_ROLES)


def test_authorize_rejects_unlisted_role():
    with pytest.raises(ForbiddenError) as exc_info:
        authorize(_user("u", UserRole.USER, "org-a"), ADMIN_ROLES)
    assert exc_info.value.message == "Insufficient permissions"


def test_authorize_without_user_is_unauthenticated():
    with pytest.raises(UnauthenticatedError):
        authorize(None, ADMIN_ROLES)


# --- Tenant scope ---


def test_scope_ignores_requested_org_for_non_superadmin():
    """A non-superadmin asking for another tenant silently gets their own."""
    user = _user("u", UserRole.ADMIN, "org-a")
    assert resolve_scope(user, "org-b") == "org-a"
    assert resolve_scope(user, None) == "org-a"


def test_scope_superadmin_uses_requested_org():
    assert resolve_scope(_user("s", UserRole.SUPERADMIN, None), "org-b") == "org-b"


def test_scope_superadmin_requires_org():
    with pytest.raises(BadRequestError) as exc_info:
        resolve_scope(_user("s", UserRole.SUPERADMIN, None), None)
    assert exc_info.value.status_code == 400


def test_scope_user_without_org_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        resolve_scope(_user("u", UserRole.USER, None), "org-a")
    assert exc_info.value.message == "No organization access"


# --- Permission evaluator ---


def test_permission_levels_are_ordered():
    assert ReportPermissionLevel.OWNER.satisfies(ReportPermissionLevel.EDITOR)
    assert ReportPermissionLevel.EDITOR.satisfies(ReportPermissionLevel.COMMENTER)
    assert ReportPermissionLevel.COMMENTER.satisfies(ReportPermissionLevel.VIEWER)
    assert not ReportPermissionLevel.VIEWER.satisfies(ReportPermissionLevel.EDITOR)
    assert not ReportPermissionLevel.EDITOR.satisfies(ReportPermissionLevel.OWNER)


def test_superadmin_always_allowed():
    superadmin = _user("s", UserRole.SUPERADMIN, None)
    can_access(superadmin, _report(), ReportPermissionLevel.OWNER, None)


def test_cross_tenant_denied_even_with_grant():
    """Tenant check happens before any grant is considered."""
    outsider = _user("x", UserRole.ADMIN, "org-b")
    grant = _grant("x", ReportPermissionLevel.OWNER)

    with pytest.raises(ForbiddenError) as exc_info:
        can_access(outsider, _report(), ReportPermissionLevel.VIEWER, grant)
    assert exc_info.value.message == "Access denied to this report"


def test_creator_allowed_without_permission_row():
    creator = _user("creator", UserRole.USER, "org-a")
    can_access(creator, _report(), ReportPermissionLevel.OWNER, None)


def test_viewer_grant_allows_read_but_not_edit():
    viewer = _user("v", UserRole.USER, "org-a")
    grant = _grant("v", ReportPermissionLevel.VIEWER)

    can_access(viewer, _report(), ReportPermissionLevel.VIEWER, grant)
    with pytest.raises(ForbiddenError) as exc_info:
        can_access(viewer, _report(), ReportPermissionLevel.EDITOR, grant)
    assert exc_info.value.message == "No permission to access this report"


def test_editor_grant_allows_edit():
    editor = _user("e", UserRole.USER, "org-a")
    can_access(
        editor,
        _report(),
        ReportPermissionLevel.EDITOR,
        _grant("e", ReportPermissionLevel.EDITOR),
    )


def test_same_tenant_admin_without_grant_denied():
    """Admin role grants no implicit access to individual reports."""
    admin = _user("a", UserRole.ADMIN, "org-a")
    with pytest.raises(ForbiddenError):
        can_access(admin, _report(), ReportPermissionLevel.VIEWER, None)
