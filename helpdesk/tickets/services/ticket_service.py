import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.categories.models.category import Category
from helpdesk.core.constants import STATS_TOP_CATEGORIES_LIMIT
from helpdesk.core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    TransientStorageError,
    UnauthorizedError,
    ValidationError,
)
from helpdesk.db.session import commit_or_rollback
from helpdesk.directory.models.student import Student
from helpdesk.directory.services.student_directory import StudentDirectory
from helpdesk.rbac.permissions import Module, Operation
from helpdesk.rbac.services.permission_service import PermissionService
from helpdesk.tickets.models.assignment import Assignment
from helpdesk.tickets.models.comment import Comment
from helpdesk.tickets.models.feedback import Feedback
from helpdesk.tickets.models.status_history import StatusHistoryEntry
from helpdesk.tickets.models.ticket import Ticket, TicketStatus
from helpdesk.tickets.schemas.ticket import (
    AssignmentResponse,
    CategoryTicketCount,
    CommentResponse,
    FeedbackResponse,
    StatusHistoryResponse,
    TicketCreate,
    TicketDetailResponse,
    TicketListItem,
    TicketStatsResponse,
)
from helpdesk.tickets.repository import TicketRepository
from helpdesk.tickets.services.comment_service import visible_comments
from helpdesk.tickets.utils.ticket_number import generate_ticket_number

logger = logging.getLogger(__name__)

VALID_STATUSES: tuple[str, ...] = tuple(s.value for s in TicketStatus)


class TicketService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.tickets = TicketRepository(db)
        self.permissions = PermissionService(db)

    # ------------------------------------------------------------------
    # creation
    # ------------------------------------------------------------------

    def _resolve_filing_student(self, actor: Actor, data: TicketCreate) -> Student:
        directory = StudentDirectory(self.db)
        if actor.is_student:
            if not actor.admission_number:
                raise UnauthorizedError("Student authentication required")
            admission_number = actor.admission_number
        else:
            self.permissions.require(actor, Module.TICKET_MANAGEMENT, Operation.WRITE)
            if not data.admission_number:
                raise ValidationError(
                    "admission_number is required when filing for a student",
                    field="admission_number",
                    error_code="EMPTY_FIELD",
                )
            admission_number = data.admission_number

        student = directory.resolve(admission_number)
        if student is None:
            raise NotFoundError(
                "Student not found. Please contact admin.",
                resource="student",
                error_code="STUDENT_NOT_FOUND",
            )
        return student

    def _validate_categories(self, category_id: int, sub_category_id: int | None) -> None:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise NotFoundError(
                "Category not found", resource="category", error_code="CATEGORY_NOT_FOUND"
            )
        if category.parent_id is not None:
            raise ValidationError(
                "Tickets must be filed against a main category",
                field="category_id",
                error_code="INVALID_CATEGORY",
            )
        if not category.is_active:
            raise ValidationError(
                "This complaint category is not available",
                field="category_id",
                error_code="INACTIVE_CATEGORY",
            )

        if sub_category_id is None:
            return
        sub_category = (
            self.db.query(Category)
            .filter(Category.id == sub_category_id, Category.parent_id == category_id)
            .first()
        )
        if sub_category is None:
            raise ValidationError(
                "Invalid sub-category for selected category",
                field="sub_category_id",
                error_code="INVALID_SUB_CATEGORY",
            )
        if not sub_category.is_active:
            raise ValidationError(
                "This sub-category is not available",
                field="sub_category_id",
                error_code="INACTIVE_CATEGORY",
            )

    def create_ticket(self, actor: Actor, data: TicketCreate) -> Ticket:
        student = self._resolve_filing_student(actor, data)

        title = data.title.strip()
        description = data.description.strip()
        if not title or not description:
            raise ValidationError(
                "Title and description are required",
                field="title" if not title else "description",
                error_code="EMPTY_FIELD",
            )
        self._validate_categories(data.category_id, data.sub_category_id)

        ticket = Ticket(
            ticket_number=generate_ticket_number(),
            student_ref=student.id,
            admission_number=student.admission_number,
            category_id=data.category_id,
            sub_category_id=data.sub_category_id,
            title=title,
            description=description,
            photo_ref=data.photo_ref,
            status=TicketStatus.PENDING.value,
        )
        self.db.add(ticket)
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Ticket number collision on %s", ticket.ticket_number)
            raise TransientStorageError(
                "Ticket number collision, please retry", error_code="TICKET_NUMBER_COLLISION"
            ) from exc
        commit_or_rollback(self.db, "create_ticket")
        self.db.refresh(ticket)
        logger.info(
            "Ticket created: %s (id=%s) for student %s",
            ticket.ticket_number,
            ticket.id,
            ticket.student_ref,
        )
        return ticket

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def get_ticket(self, ticket_id: int, actor: Actor) -> Ticket:
        ticket = self.tickets.get_or_404(ticket_id)
        if actor.is_student:
            if not ticket.is_owned_by(actor.admission_number):
                raise AccessDeniedError(
                    "Access denied. You can only view your own tickets."
                )
        else:
            self.permissions.require(actor, Module.TICKET_MANAGEMENT, Operation.READ)
        return ticket

    def get_student_tickets(
        self, actor: Actor, page: int = 1, limit: int = 50
    ) -> tuple[list[Ticket], int]:
        if not actor.is_student or not actor.admission_number:
            raise UnauthorizedError("Student authentication required")
        query = self.db.query(Ticket).filter(Ticket.admission_number == actor.admission_number)
        total = query.count()
        tickets = (
            query.order_by(Ticket.created_at.desc(), Ticket.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return tickets, total

    def list_tickets(
        self,
        actor: Actor,
        status_filter: str | None = None,
        category_id: int | None = None,
        assigned_to: int | None = None,
        student_id: int | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[Ticket], int]:
        if actor.is_student:
            return self.get_student_tickets(actor, page=page, limit=limit)

        self.permissions.require(actor, Module.TICKET_MANAGEMENT, Operation.READ)

        query = self.db.query(Ticket)
        if status_filter:
            query = query.filter(Ticket.status == status_filter)
        if category_id:
            query = query.filter(Ticket.category_id == category_id)
        if student_id:
            query = query.filter(Ticket.student_ref == student_id)
        if assigned_to:
            assigned_ids = self.db.query(Assignment.ticket_id).filter(
                Assignment.employee_ref == assigned_to,
                Assignment.is_active == True,  # noqa: E712
            )
            query = query.filter(Ticket.id.in_(assigned_ids))

        total = query.count()
        tickets = (
            query.order_by(Ticket.created_at.desc(), Ticket.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return tickets, total

    # ------------------------------------------------------------------
    # status
    # ------------------------------------------------------------------

    def change_status(
        self, ticket_id: int, new_status: str, actor: Actor, notes: str | None = None
    ) -> Ticket:
        self.permissions.require(actor, Module.TICKET_MANAGEMENT, Operation.UPDATE)
        if new_status not in VALID_STATUSES:
            raise ValidationError(
                f"Status must be one of: {', '.join(VALID_STATUSES)}",
                field="status",
                error_code="INVALID_STATUS",
            )

        ticket = self.tickets.get_or_404(ticket_id, for_update=True)
        old_status = ticket.status
        self.tickets.record_status_change(ticket, new_status, actor.id, notes)
        commit_or_rollback(self.db, "change_status")
        self.db.refresh(ticket)
        logger.info(
            "Ticket %s status changed %s -> %s by actor %s",
            ticket.ticket_number,
            old_status,
            new_status,
            actor.id,
        )
        return ticket

    # ------------------------------------------------------------------
    # reporting
    # ------------------------------------------------------------------

    def ticket_stats(self, actor: Actor) -> TicketStatsResponse:
        self.permissions.require(actor, Module.TICKET_REPORTS, Operation.READ)

        status_counts = {status: 0 for status in VALID_STATUSES}
        rows = self.db.query(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status).all()
        for status, count in rows:
            status_counts[status] = count

        ticket_count = func.count(Ticket.id).label("ticket_count")
        category_rows = (
            self.db.query(Category.id, Category.name, ticket_count)
            .outerjoin(Ticket, Ticket.category_id == Category.id)
            .filter(Category.parent_id.is_(None))
            .group_by(Category.id, Category.name)
            .order_by(ticket_count.desc(), Category.name.asc())
            .limit(STATS_TOP_CATEGORIES_LIMIT)
            .all()
        )
        return TicketStatsResponse(
            total=sum(status_counts.values()),
            status_counts=status_counts,
            top_categories=[
                CategoryTicketCount(category_id=cid, category_name=name, count=count)
                for cid, name, count in category_rows
            ],
        )

    # ------------------------------------------------------------------
    # response builders
    # ------------------------------------------------------------------

    def _summary_fields(self, ticket: Ticket, assignments: list[Assignment]) -> dict:
        return {
            "id": ticket.id,
            "ticket_number": ticket.ticket_number,
            "student_ref": ticket.student_ref,
            "admission_number": ticket.admission_number,
            "student_name": ticket.student.student_name if ticket.student else None,
            "category_id": ticket.category_id,
            "category_name": ticket.category.name if ticket.category else None,
            "sub_category_id": ticket.sub_category_id,
            "sub_category_name": ticket.sub_category.name if ticket.sub_category else None,
            "title": ticket.title,
            "status": ticket.status,
            "assigned_to": [a.employee.display_name for a in assignments],
            "created_at": ticket.created_at,
            "updated_at": ticket.updated_at,
            "resolved_at": ticket.resolved_at,
            "closed_at": ticket.closed_at,
        }

    def build_list_item(self, ticket: Ticket) -> TicketListItem:
        assignments = self.tickets.active_assignments(ticket.id)
        return TicketListItem(**self._summary_fields(ticket, assignments))

    def build_detail_response(self, ticket: Ticket, actor: Actor) -> TicketDetailResponse:
        assignments = self.tickets.active_assignments(ticket.id)
        history = (
            self.db.query(StatusHistoryEntry)
            .filter(StatusHistoryEntry.ticket_id == ticket.id)
            .order_by(StatusHistoryEntry.created_at.desc(), StatusHistoryEntry.id.desc())
            .all()
        )
        comments = (
            self.db.query(Comment)
            .filter(Comment.ticket_id == ticket.id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )
        feedback = self.db.query(Feedback).filter(Feedback.ticket_id == ticket.id).first()
        return TicketDetailResponse(
            **self._summary_fields(ticket, assignments),
            description=ticket.description,
            photo_ref=ticket.photo_ref,
            assignments=[AssignmentResponse.from_assignment(a) for a in assignments],
            status_history=[StatusHistoryResponse.model_validate(h) for h in history],
            comments=[
                CommentResponse.model_validate(c)
                for c in visible_comments(comments, for_student=actor.is_student)
            ],
            feedback=FeedbackResponse.model_validate(feedback) if feedback else None,
        )
