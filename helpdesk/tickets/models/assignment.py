from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base


class Assignment(Base):
    """One employee's responsibility for a ticket within one assignment batch."""

    __tablename__ = "ticket_assignments"
    __table_args__ = (Index("ix_ticket_assignments_ticket_active", "ticket_id", "is_active"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    ticket_id: Mapped[int] = mapped_column(ForeignKey("tickets.id", ondelete="CASCADE"))
    employee_ref: Mapped[int] = mapped_column(
        ForeignKey("ticket_employees.id", ondelete="RESTRICT"), index=True
    )
    assigned_by_ref: Mapped[int] = mapped_column()
    notes: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    assigned_at: Mapped[datetime] = mapped_column(default=utc_now)

    ticket = relationship("Ticket", back_populates="assignments")
    employee = relationship("Employee", lazy="joined")
