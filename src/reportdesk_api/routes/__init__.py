from reportdesk_api.routes.activity import router as activity_router
from reportdesk_api.routes.analytics import router as analytics_router
from reportdesk_api.routes.auth import router as auth_router
from reportdesk_api.routes.folders import router as folders_router
from reportdesk_api.routes.invitations import router as invitations_router
from reportdesk_api.routes.organizations import router as organizations_router
from reportdesk_api.routes.reports import router as reports_router
from reportdesk_api.routes.system import router as system_router
from reportdesk_api.routes.uploads import router as uploads_router
from reportdesk_api.routes.users import router as users_router

__all__ = [
    "activity_router",
    "analytics_router",
    "auth_router",
    "folders_router",
    "invitations_router",
    "organizations_router",
    "reports_router",
    "system_router",
    "uploads_router",
    "users_router",
]
