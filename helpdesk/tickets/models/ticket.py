import enum
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.core.constants import TICKET_TITLE_MAX_LENGTH
from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base


class TicketStatus(str, enum.Enum):
    PENDING = "pending"
    APPROACHING = "approaching"
    RESOLVING = "resolving"
    COMPLETED = "completed"
    CLOSED = "closed"


class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (
        Index("ix_tickets_student_created", "student_ref", "created_at"),
        Index("ix_tickets_status_created", "status", "created_at"),
        Index("ix_tickets_category", "category_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    ticket_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    student_ref: Mapped[int] = mapped_column(ForeignKey("students.id", ondelete="RESTRICT"))
    admission_number: Mapped[str] = mapped_column(String(50), index=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("complaint_categories.id", ondelete="RESTRICT")
    )
    sub_category_id: Mapped[int | None] = mapped_column(
        ForeignKey("complaint_categories.id", ondelete="RESTRICT"), nullable=True, default=None
    )
    title: Mapped[str] = mapped_column(String(TICKET_TITLE_MAX_LENGTH))
    description: Mapped[str] = mapped_column(Text)
    photo_ref: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    status: Mapped[str] = mapped_column(String(20), default=TicketStatus.PENDING.value)

    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=None)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=None)

    category = relationship("Category", foreign_keys=[category_id], lazy="joined")
    sub_category = relationship("Category", foreign_keys=[sub_category_id], lazy="joined")
    student = relationship("Student", lazy="joined")
    assignments = relationship(
        "Assignment", back_populates="ticket", order_by="Assignment.assigned_at"
    )
    history = relationship(
        "StatusHistoryEntry",
        back_populates="ticket",
        order_by="[StatusHistoryEntry.created_at.desc(), StatusHistoryEntry.id.desc()]",
    )
    comments = relationship(
        "Comment", back_populates="ticket", order_by="[Comment.created_at, Comment.id]"
    )
    feedback = relationship("Feedback", back_populates="ticket", uselist=False)

    def is_owned_by(self, admission_number: str | None) -> bool:
        return bool(admission_number) and self.admission_number == admission_number

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, number={self.ticket_number}, status={self.status})>"
