"""ReportPermission model for per-report sharing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reportdesk_api.models.base import Base, TimestampMixin, generate_uuid
from reportdesk_api.models.enums import ReportPermissionLevel

if TYPE_CHECKING:
    from reportdesk_api.models.report import Report


class ReportPermission(Base, TimestampMixin):
    """Grant of one permission level on one report to one user.

    Each report has exactly one owner row, created with the report.
    """

    __tablename__ = "report_permissions"
    __table_args__ = (
        UniqueConstraint("report_id", "user_id", name="uq_report_permission_user"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )
    report_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    permission: Mapped[ReportPermissionLevel] = mapped_column(
        Enum(ReportPermissionLevel),
        nullable=False,
    )
    granted_by: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )

    # Relationships
    report: Mapped[Report] = relationship(back_populates="permissions")
