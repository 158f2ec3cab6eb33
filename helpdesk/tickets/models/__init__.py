from helpdesk.tickets.models.assignment import Assignment
from helpdesk.tickets.models.comment import AuthorKind, Comment
from helpdesk.tickets.models.feedback import Feedback
from helpdesk.tickets.models.status_history import StatusHistoryEntry
from helpdesk.tickets.models.ticket import Ticket, TicketStatus

__all__ = [
    "Assignment",
    "AuthorKind",
    "Comment",
    "Feedback",
    "StatusHistoryEntry",
    "Ticket",
    "TicketStatus",
]
