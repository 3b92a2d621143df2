"""Enumeration types for database models."""

import enum


class UserRole(str, enum.Enum):
    """System-wide role of a user."""

    SUPERADMIN = "superadmin"  # Cross-tenant, not bound to an organization
    ADMIN = "admin"  # Manages users, folders and sharing within one organization
    USER = "user"  # Self-service within one organization


class ReportPermissionLevel(str, enum.Enum):
    """Per-report grant, ordered owner > editor > commenter > viewer."""

    OWNER = "owner"
    EDITOR = "editor"
    COMMENTER = "commenter"
    VIEWER = "viewer"

    @property
    def rank(self) -> int:
        return _PERMISSION_RANK[self]

    def satisfies(self, required: "ReportPermissionLevel") -> bool:
        """Check whether this grant is at least as strong as ``required``."""
        return self.rank >= required.rank


_PERMISSION_RANK = {
    ReportPermissionLevel.VIEWER: 0,
    ReportPermissionLevel.COMMENTER: 1,
    ReportPermissionLevel.EDITOR: 2,
    ReportPermissionLevel.OWNER: 3,
}


class FileType(str, enum.Enum):
    """Accepted report file formats."""

    PDF = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"
    CSV = "csv"
    PPTX = "pptx"


class InvitationKind(str, enum.Enum):
    """What a user invitation token may be redeemed for."""

    INVITATION = "invitation"
    PASSWORD_RESET = "password_reset"
