"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum columns store member names
user_role = sa.Enum("SUPERADMIN", "ADMIN", "USER", name="userrole")
permission_level = sa.Enum(
    "OWNER", "EDITOR", "COMMENTER", "VIEWER", name="reportpermissionlevel"
)
file_type = sa.Enum("PDF", "DOCX", "XLSX", "CSV", "PPTX", name="filetype")
invitation_kind = sa.Enum("INVITATION", "PASSWORD_RESET", name="invitationkind")
# Second use of the role type, already created with the users table
existing_user_role = postgresql.ENUM(
    "SUPERADMIN", "ADMIN", "USER", name="userrole", create_type=False
)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("domain", sa.String(255), nullable=True),
        sa.Column("industry", sa.String(255), nullable=True),
        sa.Column("size", sa.String(64), nullable=True),
        sa.Column("settings", sa.JSON(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_organizations_name", "organizations", ["name"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column(
            "organization_id",
            sa.String(36),
            sa.ForeignKey("organizations.id"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_organization_id", "users", ["organization_id"])

    op.create_table(
        "folders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "parent_id",
            sa.String(36),
            sa.ForeignKey("folders.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "organization_id",
            sa.String(36),
            sa.ForeignKey("organizations.id"),
            nullable=False,
        ),
        sa.Column(
            "created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        _created_at(),
    )
    op.create_index("ix_folders_parent_id", "folders", ["parent_id"])
    op.create_index("ix_folders_organization_id", "folders", ["organization_id"])

    op.create_table(
        "reports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("file_type", file_type, nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("file_path", sa.String(1024), nullable=True),
        sa.Column(
            "folder_id",
            sa.String(36),
            sa.ForeignKey("folders.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "organization_id",
            sa.String(36),
            sa.ForeignKey("organizations.id"),
            nullable=False,
        ),
        sa.Column(
            "created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("is_starred", sa.Boolean(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_reports_folder_id", "reports", ["folder_id"])
    op.create_index("ix_reports_organization_id", "reports", ["organization_id"])
    op.create_index("ix_reports_created_by", "reports", ["created_by"])

    op.create_table(
        "report_permissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "report_id",
            sa.String(36),
            sa.ForeignKey("reports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("permission", permission_level, nullable=False),
        sa.Column(
            "granted_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        _created_at(),
        sa.UniqueConstraint("report_id", "user_id", name="uq_report_permission_user"),
    )
    op.create_index(
        "ix_report_permissions_report_id", "report_permissions", ["report_id"]
    )
    op.create_index("ix_report_permissions_user_id", "report_permissions", ["user_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "organization_id",
            sa.String(36),
            sa.ForeignKey("organizations.id"),
            nullable=False,
        ),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("resource", sa.String(64), nullable=True),
        sa.Column("resource_id", sa.String(36), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"])
    op.create_index(
        "ix_activity_logs_organization_id", "activity_logs", ["organization_id"]
    )
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index(
        "ix_activity_logs_org_created",
        "activity_logs",
        ["organization_id", "created_at"],
    )

    op.create_table(
        "user_invitations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("kind", invitation_kind, nullable=False),
        sa.Column("role", existing_user_role, nullable=True),
        sa.Column(
            "organization_id",
            sa.String(36),
            sa.ForeignKey("organizations.id"),
            nullable=True,
        ),
        sa.Column(
            "invited_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("is_accepted", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index("ix_user_invitations_email", "user_invitations", ["email"])
    op.create_index(
        "ix_user_invitations_token", "user_invitations", ["token"], unique=True
    )
    op.create_index(
        "ix_user_invitations_organization_id",
        "user_invitations",
        ["organization_id"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("user_invitations")
    op.drop_table("activity_logs")
    op.drop_table("report_permissions")
    op.drop_table("reports")
    op.drop_table("folders")
    op.drop_table("users")
    op.drop_table("organizations")

    bind = op.get_bind()
    for enum_type in (invitation_kind, file_type, permission_level, user_role):
        enum_type.drop(bind, checkfirst=True)
