from sqlalchemy.orm import Session

from helpdesk.core.datetime_utils import utc_now
from helpdesk.core.exceptions import NotFoundError
from helpdesk.core.repository import BaseRepository
from helpdesk.tickets.models.assignment import Assignment
from helpdesk.tickets.models.status_history import StatusHistoryEntry
from helpdesk.tickets.models.ticket import Ticket, TicketStatus


class TicketRepository(BaseRepository[Ticket]):
    def __init__(self, db: Session):
        super().__init__(db, Ticket)

    def get_or_404(self, ticket_id: int, *, for_update: bool = False) -> Ticket:
        ticket = self.get_by_id(ticket_id, for_update=for_update)
        if not ticket:
            raise NotFoundError("Ticket not found", resource="ticket", error_code="TICKET_NOT_FOUND")
        return ticket

    def active_assignments(self, ticket_id: int) -> list[Assignment]:
        return (
            self.db.query(Assignment)
            .filter(Assignment.ticket_id == ticket_id, Assignment.is_active == True)  # noqa: E712
            .order_by(Assignment.assigned_at.desc(), Assignment.id.desc())
            .all()
        )

    def record_status_change(
        self,
        ticket: Ticket,
        new_status: str,
        changed_by: int,
        notes: str | None = None,
    ) -> StatusHistoryEntry:
        """Stage the status update, its timestamps and the history row."""
        old_status = ticket.status
        ticket.status = new_status
        if new_status == TicketStatus.COMPLETED.value:
            ticket.resolved_at = utc_now()
        elif new_status == TicketStatus.CLOSED.value:
            ticket.closed_at = utc_now()

        entry = StatusHistoryEntry(
            ticket_id=ticket.id,
            old_status=old_status,
            new_status=new_status,
            changed_by_ref=changed_by,
            notes=notes,
        )
        self.db.add(entry)
        return entry
