"""Database models."""

from reportdesk_api.models.activity_log import ActivityLog
from reportdesk_api.models.base import Base, TimestampMixin
from reportdesk_api.models.enums import (
    FileType,
    InvitationKind,
    ReportPermissionLevel,
    UserRole,
)
from reportdesk_api.models.folder import Folder
from reportdesk_api.models.invitation import UserInvitation
from reportdesk_api.models.organization import Organization
from reportdesk_api.models.report import Report
from reportdesk_api.models.report_permission import ReportPermission
from reportdesk_api.models.user import User

__all__ = [
    "ActivityLog",
    "Base",
    "FileType",
    "Folder",
    "InvitationKind",
    "Organization",
    "Report",
    "ReportPermission",
    "ReportPermissionLevel",
    "TimestampMixin",
    "User",
    "UserInvitation",
    "UserRole",
]
