import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.core.exceptions import AccessDeniedError, ValidationError
from helpdesk.db.session import commit_or_rollback
from helpdesk.rbac.permissions import Module, Operation
from helpdesk.rbac.services.permission_service import PermissionService
from helpdesk.tickets.models.comment import AuthorKind, Comment
from helpdesk.tickets.repository import TicketRepository

logger = logging.getLogger(__name__)


def visible_comments(comments: Iterable[Comment], for_student: bool) -> list[Comment]:
    """Drop internal remarks from anything rendered for a student."""
    if for_student:
        return [c for c in comments if not c.is_internal]
    return list(comments)


class CommentService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.tickets = TicketRepository(db)

    def add_comment(
        self, ticket_id: int, actor: Actor, text: str, is_internal: bool = False
    ) -> Comment:
        body = (text or "").strip()
        if not body:
            raise ValidationError(
                "Comment text is required", field="text", error_code="EMPTY_COMMENT"
            )

        ticket = self.tickets.get_or_404(ticket_id)

        if actor.is_student:
            if not ticket.is_owned_by(actor.admission_number):
                raise AccessDeniedError(
                    "You can only comment on your own tickets", error_code="NOT_OWNER"
                )
            author_ref = ticket.student_ref
            author_kind = AuthorKind.STUDENT
            is_internal = False
        else:
            PermissionService(self.db).require(actor, Module.TICKET_MANAGEMENT, Operation.UPDATE)
            author_ref = actor.id
            author_kind = AuthorKind.STAFF

        comment = Comment(
            ticket_id=ticket.id,
            author_ref=author_ref,
            author_kind=author_kind.value,
            text=body,
            is_internal=is_internal,
        )
        self.db.add(comment)
        commit_or_rollback(self.db, "add_comment")
        self.db.refresh(comment)
        logger.info(
            "Comment %s added to ticket %s by %s %s (internal=%s)",
            comment.id,
            ticket.ticket_number,
            author_kind.value,
            author_ref,
            is_internal,
        )
        return comment
