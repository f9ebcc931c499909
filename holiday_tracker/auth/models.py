"""Auth ORM models: RoleAssignment."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from holiday_tracker.common.constants import UserRole
from holiday_tracker.database import Base


class RoleAssignment(Base):
    """Role granted to an identity-provider account.

    Accounts without a row are treated as staff.
    """

    __tablename__ = "role_assignments"

    user_id: Mapped[str] = mapped_column(sa.String(255), primary_key=True)
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(UserRole, name="user_role", create_type=False),
        nullable=False,
        default=UserRole.staff,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
