import logging

from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.core.constants import FEEDBACK_MAX_RATING, FEEDBACK_MIN_RATING
from helpdesk.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    UnauthorizedError,
    ValidationError,
)
from helpdesk.db.session import commit_or_rollback
from helpdesk.tickets.models.feedback import Feedback
from helpdesk.tickets.models.ticket import TicketStatus
from helpdesk.tickets.repository import TicketRepository

logger = logging.getLogger(__name__)


def _duplicate_feedback() -> ConflictError:
    return ConflictError(
        "Feedback already submitted for this ticket",
        resource="feedback",
        error_code="DUPLICATE_FEEDBACK",
    )


class FeedbackService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.tickets = TicketRepository(db)

    def submit_feedback(
        self, ticket_id: int, actor: Actor, rating: int, text: str | None = None
    ) -> Feedback:
        if not actor.is_student or not actor.admission_number:
            raise UnauthorizedError("Student authentication required")

        ticket = self.tickets.get_or_404(ticket_id)

        if not FEEDBACK_MIN_RATING <= rating <= FEEDBACK_MAX_RATING:
            raise ValidationError(
                f"Rating must be between {FEEDBACK_MIN_RATING} and {FEEDBACK_MAX_RATING}",
                field="rating",
                error_code="RATING_OUT_OF_RANGE",
            )
        if not ticket.is_owned_by(actor.admission_number):
            raise AccessDeniedError(
                "You can only give feedback on your own tickets", error_code="NOT_OWNER"
            )
        if ticket.status != TicketStatus.COMPLETED.value:
            raise ConflictError(
                "Feedback can only be submitted for completed tickets",
                resource="ticket",
                error_code="TICKET_NOT_COMPLETED",
            )
        if self.db.query(Feedback.id).filter(Feedback.ticket_id == ticket.id).first():
            raise _duplicate_feedback()

        feedback = Feedback(
            ticket_id=ticket.id,
            student_ref=ticket.student_ref,
            rating=rating,
            text=text.strip() if text and text.strip() else None,
        )
        self.db.add(feedback)
        commit_or_rollback(self.db, "submit_feedback", on_integrity_error=_duplicate_feedback())
        self.db.refresh(feedback)
        logger.info("Feedback %s submitted for ticket %s", feedback.id, ticket.ticket_number)
        return feedback
