import enum
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base, JSONType

if TYPE_CHECKING:
    from helpdesk.tickets.models.ticket import Ticket


class EmployeeKind(str, enum.Enum):
    MANAGER = "manager"
    WORKER = "worker"


class Employee(Base):
    """
    Anyone entitled to work tickets.

    One table holds both kinds; ``role`` is the discriminator and SQLAlchemy
    loads rows as ``Manager`` or ``Worker``. Employees are never hard deleted,
    assignments and history keep pointing at deactivated rows.
    """

    __tablename__ = "ticket_employees"
    __table_args__ = (Index("ix_ticket_employees_role_active", "role", "is_active"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    role: Mapped[str] = mapped_column(String(20))

    identity_ref: Mapped[int | None] = mapped_column(
        ForeignKey("rbac_users.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    custom_role_id: Mapped[int | None] = mapped_column(
        ForeignKey("ticket_roles.id", ondelete="SET NULL"), nullable=True, default=None
    )
    assigned_category_ids: Mapped[list[int]] = mapped_column(JSONType, default=list)
    assigned_sub_category_ids: Mapped[list[int]] = mapped_column(JSONType, default=list)
    permission_overrides: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType, nullable=True, default=None
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # standalone worker profile
    name: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    username: Mapped[str | None] = mapped_column(
        String(100), unique=True, nullable=True, default=None
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)

    created_by_ref: Mapped[int | None] = mapped_column(nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)

    identity = relationship("Identity", lazy="joined")
    custom_role = relationship("Role", lazy="joined")

    __mapper_args__ = {"polymorphic_on": "role", "polymorphic_abstract": True}

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    @property
    def account_username(self) -> str | None:
        raise NotImplementedError

    def can_handle(self, ticket: "Ticket") -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, active={self.is_active})>"


class Manager(Employee):
    """Wraps an identity-store account; eligibility limited by category scope."""

    __mapper_args__ = {"polymorphic_identity": EmployeeKind.MANAGER.value}

    @property
    def display_name(self) -> str:
        return self.identity.name if self.identity else f"Employee #{self.id}"

    @property
    def account_username(self) -> str | None:
        return self.identity.username if self.identity else None

    @property
    def is_scoped(self) -> bool:
        return bool(self.assigned_category_ids or self.assigned_sub_category_ids)

    def can_handle(self, ticket: "Ticket") -> bool:
        if not self.is_scoped:
            return True
        if ticket.category_id in (self.assigned_category_ids or []):
            return True
        return (
            ticket.sub_category_id is not None
            and ticket.sub_category_id in (self.assigned_sub_category_ids or [])
        )


class Worker(Employee):
    """Standalone account with its own credentials; eligible for any ticket."""

    __mapper_args__ = {"polymorphic_identity": EmployeeKind.WORKER.value}

    @property
    def display_name(self) -> str:
        return self.name or f"Worker #{self.id}"

    @property
    def account_username(self) -> str | None:
        return self.username

    def can_handle(self, ticket: "Ticket") -> bool:
        return True
