from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base, JSONType
from helpdesk.rbac.permissions import PermissionMatrix


class Role(Base):
    """
    Named permission bundle assigned to employees (or matched by token role name).

    Attributes:
        role_name: Machine name, lowercase letters and underscores only
        permissions: Stored ``PermissionMatrix`` as JSON
        is_system_role: Seeded role shipped with the helpdesk
        is_unrestricted: Holders bypass the matrix entirely
        is_active: Soft-delete flag
        created_by_ref: Identity id of the creator, when known
    """

    __tablename__ = "ticket_roles"

    id: Mapped[int] = mapped_column(primary_key=True)
    role_name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    is_system_role: Mapped[bool] = mapped_column(Boolean, default=False)
    is_unrestricted: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_by_ref: Mapped[int | None] = mapped_column(
        ForeignKey("rbac_users.id", ondelete="SET NULL"), nullable=True, default=None
    )

    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)

    @property
    def matrix(self) -> PermissionMatrix:
        return PermissionMatrix.from_stored(self.permissions)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, role_name={self.role_name})>"
