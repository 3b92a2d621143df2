"""Access control for ReportDesk API.

Gate chain, in request order:
- Identity resolution: bearer token to live, active user
- Role gate: user role within the route's allowed set
- Tenant scope: the single organization the request may touch
- Report permission: ownership, explicit grant or superadmin override
"""

from reportdesk_api.auth.dependencies import (
    ADMIN_ROLES,
    AdminUser,
    CurrentUser,
    SuperAdminUser,
    TenantScope,
    authorize,
    get_current_user,
    get_current_user_optional,
    get_tenant_scope,
    get_token,
    require_roles,
    resolve_scope,
    resolve_user,
)
from reportdesk_api.auth.permissions import (
    can_access,
    get_report_or_404,
    get_user_grant,
    load_report_for,
)
from reportdesk_api.auth.tokens import (
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    TokenManager,
    TokenPayload,
    create_access_token,
    get_jwks,
    get_token_manager,
    validate_token,
)

__all__ = [
    # Dependencies
    "ADMIN_ROLES",
    "AdminUser",
    "CurrentUser",
    "SuperAdminUser",
    "TenantScope",
    "authorize",
    "get_current_user",
    "get_current_user_optional",
    "get_tenant_scope",
    "get_token",
    "require_roles",
    "resolve_scope",
    "resolve_user",
    # Report permission evaluation
    "can_access",
    "get_report_or_404",
    "get_user_grant",
    "load_report_for",
    # Tokens
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenManager",
    "TokenPayload",
    "create_access_token",
    "get_jwks",
    "get_token_manager",
    "validate_token",
]
