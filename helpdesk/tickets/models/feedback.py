from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base


class Feedback(Base):
    __tablename__ = "ticket_feedback"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ticket_feedback_rating"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        ForeignKey("tickets.id", ondelete="CASCADE"), unique=True
    )
    student_ref: Mapped[int] = mapped_column(ForeignKey("students.id", ondelete="RESTRICT"))
    rating: Mapped[int] = mapped_column(Integer)
    text: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)

    ticket = relationship("Ticket", back_populates="feedback")
