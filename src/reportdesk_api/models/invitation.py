"""UserInvitation model for invitations and password resets."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from reportdesk_api.models.base import Base, TimestampMixin, as_utc, generate_uuid
from reportdesk_api.models.enums import InvitationKind, UserRole


class UserInvitation(Base, TimestampMixin):
    """Single-use token bound to an email address.

    ``kind=invitation`` rows let a new user register into an organization
    with a fixed role (never superadmin). ``kind=password_reset`` rows let an
    existing user set a new password. Once accepted, or once past
    ``expires_at``, a token is permanently unusable.
    """

    __tablename__ = "user_invitations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    kind: Mapped[InvitationKind] = mapped_column(
        Enum(InvitationKind),
        nullable=False,
        default=InvitationKind.INVITATION,
    )
    # Both are always set for invitations; a superadmin's reset row has neither
    role: Mapped[UserRole | None] = mapped_column(Enum(UserRole), nullable=True)
    organization_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    invited_by: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )
    token: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
    )
    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def is_expired(self, now: datetime) -> bool:
        return as_utc(self.expires_at) <= now
