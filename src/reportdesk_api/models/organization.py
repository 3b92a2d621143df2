"""Organization model for multi-tenancy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reportdesk_api.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from reportdesk_api.models.user import User


class Organization(Base, TimestampMixin):
    """Multi-tenancy root entity.

    Every non-superadmin user and every folder, report, activity entry and
    invitation belongs to exactly one organization. Organizations are never
    hard-deleted; see ``is_deleted``.
    """

    __tablename__ = "organizations"

    DELETED_SUFFIX = " (Deleted)"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    domain: Mapped[str | None] = mapped_column(String(255))
    industry: Mapped[str | None] = mapped_column(String(255))
    size: Mapped[str | None] = mapped_column(String(64))
    settings: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    # Relationships
    users: Mapped[list[User]] = relationship(back_populates="organization")

    @property
    def is_deleted(self) -> bool:
        """Check if the organization has been soft-deleted."""
        return bool((self.settings or {}).get("deleted"))
