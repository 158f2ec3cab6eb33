from datetime import datetime

from sqlalchemy import ForeignKey, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.core.datetime_utils import utc_now
from helpdesk.db.session import Base


class StatusHistoryEntry(Base):
    """Append-only audit row, one per status transition."""

    __tablename__ = "ticket_status_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    ticket_id: Mapped[int] = mapped_column(
        ForeignKey("tickets.id", ondelete="CASCADE"), index=True
    )
    old_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    new_status: Mapped[str] = mapped_column(String(20))
    changed_by_ref: Mapped[int] = mapped_column()
    notes: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)

    ticket = relationship("Ticket", back_populates="history")


@event.listens_for(StatusHistoryEntry, "before_update")
def _reject_history_update(mapper, connection, target: StatusHistoryEntry) -> None:
    raise RuntimeError(f"Status history entry {target.id} is append-only")
